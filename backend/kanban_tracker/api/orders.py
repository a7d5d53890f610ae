"""Чтение заказа целиком: дочерняя запись станции, цех и канбан."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from kanban_tracker.api.auth import RequireAnyAuth, UserInfo
from kanban_tracker.core.database import get_db
from kanban_tracker.models import Order
from kanban_tracker.schemas.base import camelize
from kanban_tracker.schemas.order import OrderResponse
from kanban_tracker.services import order_service

router = APIRouter(prefix="/orders", tags=["orders"])


async def order_response(db: AsyncSession, order: Order) -> OrderResponse:
    """Ответ на создание заказа: сам заказ и id выпущенной карты."""
    info = await order_service.get_order(db, order.id)
    return OrderResponse(
        id=order.id,
        station_id=order.station_id,
        created_by=order.created_by,
        created_at=order.created_at,
        kanban_id=info["kanban"]["id"] if info["kanban"] else None,
    )


@router.get("/{order_id}")
async def get_order(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireAnyAuth),
):
    return camelize(await order_service.get_order(db, order_id))
