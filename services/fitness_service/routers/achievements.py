"""Achievement catalog endpoint."""

from fastapi import APIRouter, Depends
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.fitness_service.schemas import AchievementResponse
from services.fitness_service.services.records import list_achievement_catalog
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/achievements", tags=["achievements"])


@router.get("", response_model=list[AchievementResponse])
async def read_achievement_catalog(
    _user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await list_achievement_catalog(db)
