"""Цех изготовления: заказы, план и статус изготовления, отгрузка на склад."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from kanban_tracker.api.auth import RequireFabrication, UserInfo
from kanban_tracker.api.orders import order_response
from kanban_tracker.core.database import get_db
from kanban_tracker.models import PartShopFloor, StationId
from kanban_tracker.schemas.base import camelize
from kanban_tracker.schemas.order import DeliverFabricationResponse, OrderCreate, OrderResponse
from kanban_tracker.schemas.shop_floor import (
    ShopFloorPlanUpdate,
    ShopFloorResponse,
    ShopFloorStatusUpdate,
)
from kanban_tracker.services import kanban_service, order_service
from kanban_tracker.services import shop_floor as shop_floor_service

router = APIRouter(prefix="/fabrication", tags=["fabrication"])


def _shop_floor_response(sf: PartShopFloor) -> ShopFloorResponse:
    return ShopFloorResponse(
        id=sf.id,
        order_id=sf.order_id,
        part_id=sf.part_id,
        status=sf.status.value,
        plan_start=sf.plan_start,
        plan_finish=sf.plan_finish,
        actual_start=sf.actual_start,
        actual_finish=sf.actual_finish,
    )


@router.get("/orders")
async def get_orders(
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireFabrication),
):
    return camelize(await order_service.list_fabrication_orders(db))


@router.post("/orders", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def post_order(
    data: OrderCreate,
    db: AsyncSession = Depends(get_db),
    user: UserInfo = Depends(RequireFabrication),
):
    order = await order_service.create_order(db, StationId.FABRICATION, user.id, data)
    return await order_response(db, order)


@router.get("/orders/deliver/{order_fabrication_id}", response_model=DeliverFabricationResponse)
async def deliver_order(
    order_fabrication_id: int,
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireFabrication),
):
    """Отгрузить изготовленное на склад сборки."""
    receipt = await order_service.deliver_fabrication(db, order_fabrication_id)
    return DeliverFabricationResponse(
        id=receipt.id,
        order_id=receipt.order_id,
        order_fabrication_id=receipt.order_fabrication_id,
        part_id=receipt.part_id,
        status=receipt.status.value,
    )


@router.get("/shop-floors")
async def get_shop_floors(
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireFabrication),
):
    return camelize(await shop_floor_service.list_shop_floors(db))


@router.get("/shop-floors/{shop_floor_id}")
async def get_shop_floor(
    shop_floor_id: int,
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireFabrication),
):
    return camelize(await shop_floor_service.get_shop_floor_detail(db, shop_floor_id))


@router.put("/shop-floors/plan", response_model=ShopFloorResponse)
async def update_plan(
    body: ShopFloorPlanUpdate,
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireFabrication),
):
    sf = await shop_floor_service.set_plan(db, body.id, body.plan_start, body.plan_finish)
    return _shop_floor_response(sf)


@router.put("/shop-floors/status", response_model=ShopFloorResponse)
async def update_status(
    body: ShopFloorStatusUpdate,
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireFabrication),
):
    sf = await shop_floor_service.advance_status(db, body.id, body.status)
    return _shop_floor_response(sf)


@router.get("/kanbans")
async def get_kanbans(
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireFabrication),
):
    return camelize(await kanban_service.list_kanbans(db, StationId.FABRICATION))
