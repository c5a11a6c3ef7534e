from fastapi import APIRouter, Depends, Query

from ..core.current_user import get_current_actor
from ..core.roles import Actor
from ..deps import get_profile_service
from ..schemas.user import ProfileCreateIn, ProfileOut, RoleUpdateIn
from ..services.profile_service import ProfileService

router = APIRouter(prefix="/users", tags=["users"])

@router.get("", response_model=list[ProfileOut])
def list_users(
    role: str | None = Query(default=None),
    service: ProfileService = Depends(get_profile_service),
    actor: Actor = Depends(get_current_actor),
):
    return service.list_profiles(actor, role)

@router.post("", response_model=ProfileOut, status_code=201)
def provision_user(
    payload: ProfileCreateIn,
    service: ProfileService = Depends(get_profile_service),
    actor: Actor = Depends(get_current_actor),
):
    return service.provision_profile(
        actor,
        payload.id,
        payload.email,
        payload.full_name,
        payload.role,
        department=payload.department,
    )

@router.patch("/{profile_id}/role", response_model=ProfileOut)
def set_role(
    profile_id: str,
    payload: RoleUpdateIn,
    service: ProfileService = Depends(get_profile_service),
    actor: Actor = Depends(get_current_actor),
):
    return service.set_role(actor, profile_id, payload.role)
