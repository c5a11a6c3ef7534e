from datetime import datetime, timedelta, timezone
import jwt
from .config import settings

def create_access_token(sub: str, **claims) -> str:
    """Mint a token shaped like the identity provider's; used by tests and local tooling."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": sub,
        "aud": settings.jwt_audience,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=settings.jwt_expires_min)).timestamp()),
        **claims,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm="HS256")

def decode_token(token: str) -> dict:
    return jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=["HS256"],
        audience=settings.jwt_audience,
    )
