from fastapi import APIRouter, Depends

from ..core.current_user import get_current_actor
from ..core.roles import Actor
from ..deps import get_category_service
from ..schemas.category import CategoryOut, CategoryCreateIn
from ..services.category_service import CategoryService


router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=list[CategoryOut])
def list_categories(
    service: CategoryService = Depends(get_category_service),
    actor: Actor = Depends(get_current_actor),
):
    return service.list_categories()


@router.post("", response_model=CategoryOut, status_code=201)
def create_category(
    payload: CategoryCreateIn,
    service: CategoryService = Depends(get_category_service),
    actor: Actor = Depends(get_current_actor),
):
    return service.create_category(actor, payload.name, payload.description, payload.color)
