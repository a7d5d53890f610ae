"""Показатели для дашборда менеджера."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from kanban_tracker.api.auth import RequireAnyAuth, UserInfo
from kanban_tracker.core.database import get_db
from kanban_tracker.schemas.base import camelize
from kanban_tracker.schemas.stats import DelayOntime, ProgressTrack
from kanban_tracker.services import stats_service

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("/progress-track", response_model=ProgressTrack)
async def get_progress_track(
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireAnyAuth),
):
    return ProgressTrack(**await stats_service.progress_track(db))


@router.get("/delay-ontime", response_model=DelayOntime)
async def get_delay_ontime(
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireAnyAuth),
):
    return DelayOntime(**await stats_service.delay_ontime(db))


@router.get("/production-progress")
async def get_production_progress(
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireAnyAuth),
):
    return camelize(await stats_service.production_progress(db))
