from fastapi import APIRouter, Depends

from ..core.current_user import get_current_actor
from ..core.roles import Actor
from ..deps import get_profile_service
from ..schemas.user import ProfileOut, ProfileUpdateIn
from ..services.profile_service import ProfileService

router = APIRouter(tags=["me"])

@router.get("/me", response_model=ProfileOut)
def me(
    service: ProfileService = Depends(get_profile_service),
    actor: Actor = Depends(get_current_actor),
):
    return service.get_profile(actor.id)

@router.patch("/me", response_model=ProfileOut)
def update_me(
    payload: ProfileUpdateIn,
    service: ProfileService = Depends(get_profile_service),
    actor: Actor = Depends(get_current_actor),
):
    return service.update_own_profile(
        actor,
        full_name=payload.full_name,
        department=payload.department,
        phone=payload.phone,
    )
