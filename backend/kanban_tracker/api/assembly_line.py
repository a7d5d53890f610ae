"""Сборочная линия: остатки деталей, заказ на склад, запуск сборки, доска канбанов."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from kanban_tracker.api.auth import RequireAssemblyLine, UserInfo
from kanban_tracker.api.orders import order_response
from kanban_tracker.core.database import get_db
from kanban_tracker.models import StationId
from kanban_tracker.schemas.base import camelize
from kanban_tracker.schemas.order import OrderCreate, OrderResponse, StartAssemblyBody
from kanban_tracker.schemas.part import PartQuantityUpdate, PartResponse, PartsResponse
from kanban_tracker.services import kanban_service, order_service, part_ledger

router = APIRouter(prefix="/assembly-line", tags=["assembly-line"])


@router.get("/parts", response_model=PartsResponse)
async def get_parts(
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireAssemblyLine),
):
    parts = await part_ledger.list_parts(db)
    return PartsResponse(
        status=part_ledger.completeness_of(parts).value,
        parts=[PartResponse.model_validate(p) for p in parts],
    )


@router.get("/parts/{part_id}", response_model=PartResponse)
async def get_part(
    part_id: int,
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireAssemblyLine),
):
    return PartResponse.model_validate(await part_ledger.get_part(db, part_id))


@router.put("/parts", response_model=PartResponse)
async def update_part_quantity(
    body: PartQuantityUpdate,
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireAssemblyLine),
):
    """Ручная корректировка остатка детали на линии."""
    part = await part_ledger.set_quantity(db, body.id, body.quantity)
    return PartResponse.model_validate(part)


@router.post("/orders", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def post_store_order(
    data: OrderCreate,
    db: AsyncSession = Depends(get_db),
    user: UserInfo = Depends(RequireAssemblyLine),
):
    """Заказ детали со склада сборки; карта выставляется на линии."""
    order = await order_service.create_order(db, StationId.ASSEMBLY_STORE, user.id, data)
    return await order_response(db, order)


@router.delete("/orders/{order_id}")
async def delete_order(
    order_id: int,
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireAssemblyLine),
):
    await order_service.delete_order(db, order_id)
    return {"ok": True}


@router.post("/start", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def post_start_assembly(
    body: StartAssemblyBody,
    db: AsyncSession = Depends(get_db),
    user: UserInfo = Depends(RequireAssemblyLine),
):
    order = await order_service.start_assembly(db, user.id, body.component_id, body.request_host)
    return await order_response(db, order)


@router.get("/kanbans")
async def get_kanbans(
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireAssemblyLine),
):
    return camelize(await kanban_service.list_kanbans(db, StationId.ASSEMBLY_LINE))
