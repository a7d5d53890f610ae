"""Канбан: чтение карты по QR и подтверждение следующего шага."""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from kanban_tracker.api.auth import RequireAnyAuth, UserInfo
from kanban_tracker.core.database import get_db
from kanban_tracker.core.permissions import can_access_station
from kanban_tracker.schemas.base import camelize
from kanban_tracker.schemas.kanban import KanbanConfirm, KanbanStatusResponse
from kanban_tracker.services import kanban_service

router = APIRouter(prefix="/kanban", tags=["kanban"])


@router.put("/confirm", response_model=KanbanStatusResponse)
async def confirm_kanban(
    body: KanbanConfirm,
    db: AsyncSession = Depends(get_db),
    user: UserInfo = Depends(RequireAnyAuth),
):
    """Подтвердить карту может оператор станции, где она выставлена, или станции заказа."""
    kanban = await kanban_service.get_kanban_record(db, body.id)
    order_station = await kanban_service.station_of(db, body.id)
    if not (can_access_station(user.role, kanban.station_id) or can_access_station(user.role, order_station)):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Нет доступа к станции канбана")
    kanban = await kanban_service.update_status(db, body.id, body.status)
    return KanbanStatusResponse(
        id=kanban.id,
        status=kanban.status.value,
        order_id=kanban.order_id,
        finish_date=kanban.finish_date,
    )


@router.get("/{kanban_id}")
async def get_kanban(
    kanban_id: str,
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireAnyAuth),
):
    return camelize(await kanban_service.get_kanban(db, kanban_id))
