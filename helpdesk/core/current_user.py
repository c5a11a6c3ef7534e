from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from ..db import get_session
from ..services.profile_service import ProfileService
from ..services.repository import TicketRepository
from .errors import AuthError
from .identity import Identity, authenticate
from .roles import Actor, Role, parse_role

bearer = HTTPBearer(auto_error=False)

def get_current_identity(
    creds: HTTPAuthorizationCredentials = Depends(bearer),
) -> Identity:
    if not creds:
        raise AuthError("Not authenticated")
    return authenticate(creds.credentials)

def get_current_actor(
    identity: Identity = Depends(get_current_identity),
    session: Session = Depends(get_session),
) -> Actor:
    profile = ProfileService(TicketRepository(session)).ensure_profile(identity)
    return Actor(id=profile.id, role=parse_role(profile.role, Role.reporter))
