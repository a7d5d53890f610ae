"""Склад сборки: заказы линии, передача в цех, выдача на линию, приёмка из цеха."""
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from kanban_tracker.api.auth import RequireAssemblyStore, UserInfo
from kanban_tracker.api.orders import order_response
from kanban_tracker.core.database import get_db
from kanban_tracker.core.errors import InvalidRequestError
from kanban_tracker.models import OrderStoreStatus, PartStore
from kanban_tracker.schemas.base import camelize
from kanban_tracker.schemas.order import OrderStoreStatusUpdate, StoreOrderResponse
from kanban_tracker.schemas.part import PartStoreStatusUpdate, ReceiveResponse
from kanban_tracker.services import order_service, part_store

router = APIRouter(prefix="/assembly-store", tags=["assembly-store"])


@router.get("/orders")
async def get_orders(
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireAssemblyStore),
):
    return camelize(await order_service.list_store_orders(db))


@router.post("/orders/status")
async def update_order_status(
    body: OrderStoreStatusUpdate,
    response: Response,
    db: AsyncSession = Depends(get_db),
    user: UserInfo = Depends(RequireAssemblyStore),
):
    """production — заказать изготовление в цехе (201), deliver — выдать на линию."""
    if body.status == OrderStoreStatus.PRODUCTION:
        order = await order_service.advance_to_fabrication(db, body.id, user.id, body.request_host)
        response.status_code = status.HTTP_201_CREATED
        return await order_response(db, order)
    if body.status == OrderStoreStatus.DELIVER:
        order_store = await order_service.deliver_store_order(db, body.id)
        return StoreOrderResponse(
            id=order_store.id,
            order_id=order_store.order_id,
            part_id=order_store.part_id,
            quantity=order_store.quantity,
            status=order_store.status.value,
        )
    raise InvalidRequestError(f"Недопустимый статус {body.status.value}")


@router.get("/parts")
async def get_parts(
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireAssemblyStore),
):
    return camelize(await part_store.list_part_stores(db))


@router.put("/parts/status", response_model=ReceiveResponse)
async def receive_parts(
    body: PartStoreStatusUpdate,
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireAssemblyStore),
):
    """Принять на склад отгруженное цехом (receive → idle)."""
    received = await part_store.receive_delivery(db, body.id, body.status)
    store = await db.get(PartStore, body.id)
    return ReceiveResponse(id=store.id, status=store.status.value, stock=store.stock, received=received)
