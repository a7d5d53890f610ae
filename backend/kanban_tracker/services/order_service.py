"""
Заказы по станциям: создание вместе с канбаном, передача склада в цех,
поставка из цеха на склад и выдача на линию, удаление каскадом.
Все шаги одной операции идут в транзакции запроса (get_db).
"""
from typing import Optional

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from kanban_tracker.core.errors import (
    InvalidQuantityError,
    InvalidRequestError,
    InvalidTransitionError,
    NotFoundError,
    OrderLockedError,
    OrderNotFoundError,
)
from kanban_tracker.core.logging_config import get_logger
from kanban_tracker.models import (
    Component,
    DeliverOrderFabrication,
    DeliverStatus,
    Kanban,
    KanbanStatus,
    KanbanType,
    KanbanWithdrawal,
    Order,
    OrderFabrication,
    OrderFabricationStatus,
    OrderLine,
    OrderLineStatus,
    OrderStore,
    OrderStoreStatus,
    Part,
    PartComponent,
    PartShopFloor,
    PartStore,
    ShopFloorStatus,
    StationId,
)
from kanban_tracker.schemas.order import OrderCreate
from kanban_tracker.services import kanban_service, part_ledger, part_store
from kanban_tracker.services import shop_floor as shop_floor_service

logger = get_logger(__name__)

# Заказ с такими статусами цеха уже нельзя отменить
_LOCKED_SHOP_FLOOR = (ShopFloorStatus.IN_PROGRESS, ShopFloorStatus.FINISH)


def _check_quantity(quantity: Optional[int]) -> int:
    if quantity is None or quantity <= 0:
        raise InvalidQuantityError("Количество должно быть больше нуля")
    return quantity


async def _new_order(db: AsyncSession, station_id: StationId, created_by: int) -> Order:
    order = Order(station_id=station_id, created_by=created_by)
    db.add(order)
    await db.flush()
    return order


async def _open_fabrication(
    db: AsyncSession,
    created_by: int,
    part_id: int,
    quantity: int,
    base_url: Optional[str],
) -> tuple[Order, OrderFabrication]:
    """Заказ цеха: заказ на станции изготовления, строка цеха и канбан в очереди."""
    order = await _new_order(db, StationId.FABRICATION, created_by)
    order_fab = OrderFabrication(
        order_id=order.id,
        part_id=part_id,
        quantity=quantity,
        status=OrderFabricationStatus.PENDING,
    )
    db.add(order_fab)
    db.add(
        PartShopFloor(
            order_id=order.id,
            part_id=part_id,
            status=ShopFloorStatus.PENDING,
            station="shop_floor",
        )
    )
    await db.flush()
    await kanban_service.issue_kanban(
        db, order.id, StationId.FABRICATION, KanbanType.PRODUCTION, base_url=base_url
    )
    return order, order_fab


async def create_store_order(
    db: AsyncSession,
    created_by: int,
    part_number: Optional[str],
    quantity: Optional[int],
    base_url: Optional[str] = None,
) -> Order:
    """Заказ линии на склад сборки. Карта выставляется на сборочной линии."""
    quantity = _check_quantity(quantity)
    if not part_number:
        raise InvalidRequestError("Не указан номер детали")
    part = await part_ledger.get_part_by_number(db, part_number)

    order = await _new_order(db, StationId.ASSEMBLY_STORE, created_by)
    await part_store.ensure_exists(db, part.id)
    db.add(
        OrderStore(
            order_id=order.id,
            part_id=part.id,
            quantity=quantity,
            status=OrderStoreStatus.PENDING,
        )
    )
    await db.flush()
    await kanban_service.issue_kanban(
        db, order.id, StationId.ASSEMBLY_LINE, KanbanType.PRODUCTION, base_url=base_url
    )
    logger.info("Создан заказ склада id=%s: деталь %s x%s", order.id, part.part_number, quantity)
    return order


async def create_fabrication_order(
    db: AsyncSession,
    created_by: int,
    part_number: Optional[str],
    quantity: Optional[int],
    base_url: Optional[str] = None,
) -> Order:
    quantity = _check_quantity(quantity)
    if not part_number:
        raise InvalidRequestError("Не указан номер детали")
    part = await part_ledger.get_part_by_number(db, part_number)
    await part_store.ensure_exists(db, part.id)
    order, _ = await _open_fabrication(db, created_by, part.id, quantity, base_url)
    logger.info("Создан заказ цеха id=%s: деталь %s x%s", order.id, part.part_number, quantity)
    return order


async def start_assembly(
    db: AsyncSession,
    created_by: int,
    component_id: Optional[int],
    base_url: Optional[str] = None,
) -> Order:
    """
    Запуск сборки компонента: списать потребность по всем деталям одной операцией,
    создать заказ линии и карту отбора (склад сборки → линия) сразу в работе.
    """
    if not component_id:
        raise InvalidRequestError("Не указан компонент")
    component = await db.get(Component, component_id)
    if component is None:
        raise NotFoundError("Компонент не найден")

    r = await db.execute(select(Part).order_by(Part.id))
    parts = r.scalars().all()
    # В состав входят все детали, списывается только ненулевая потребность
    await part_ledger.apply_consumption(db, {p.id: p.quantity_req for p in parts if p.quantity_req > 0})

    r = await db.execute(select(PartComponent.id).where(PartComponent.component_id == component.id).limit(1))
    if r.scalar_one_or_none() is None:
        for p in parts:
            db.add(PartComponent(component_id=component.id, part_id=p.id))

    order = await _new_order(db, StationId.ASSEMBLY_LINE, created_by)
    db.add(
        OrderLine(
            order_id=order.id,
            component_id=component.id,
            quantity=1,
            status=OrderLineStatus.PROGRESS,
        )
    )
    await db.flush()
    kanban = await kanban_service.issue_kanban(
        db,
        order.id,
        StationId.ASSEMBLY_LINE,
        KanbanType.WITHDRAWAL,
        status=KanbanStatus.PROGRESS,
        base_url=base_url,
    )
    db.add(
        KanbanWithdrawal(
            kanban_id=kanban.id,
            prev_station_id=StationId.ASSEMBLY_STORE,
            next_station_id=StationId.ASSEMBLY_LINE,
        )
    )
    await db.flush()
    logger.info("Запущена сборка компонента %s, заказ id=%s", component.name, order.id)
    return order


async def create_order(db: AsyncSession, station_id: int, created_by: int, data: OrderCreate) -> Order:
    """Создать заказ на станции вместе с дочерней записью и канбаном."""
    if station_id == StationId.ASSEMBLY_STORE:
        return await create_store_order(db, created_by, data.part_number, data.quantity, data.request_host)
    if station_id == StationId.FABRICATION:
        return await create_fabrication_order(db, created_by, data.part_number, data.quantity, data.request_host)
    if station_id == StationId.ASSEMBLY_LINE:
        return await start_assembly(db, created_by, data.component_id, data.request_host)
    raise InvalidRequestError(f"Неизвестная станция {station_id}")


async def _get_order_store(db: AsyncSession, order_store_id: int) -> OrderStore:
    order_store = await db.get(OrderStore, order_store_id)
    if order_store is None:
        raise OrderNotFoundError("Заказ склада не найден")
    return order_store


async def advance_to_fabrication(
    db: AsyncSession,
    order_store_id: int,
    created_by: int,
    base_url: Optional[str] = None,
) -> Order:
    """Заказ склада уходит в производство: отдельный заказ цеха со своим канбаном."""
    order_store = await _get_order_store(db, order_store_id)
    if order_store.status != OrderStoreStatus.PENDING:
        raise InvalidTransitionError(
            f"Заказ склада в статусе {order_store.status.value}, передать в цех нельзя"
        )
    order_store.status = OrderStoreStatus.PRODUCTION
    order, _ = await _open_fabrication(
        db, created_by, order_store.part_id, order_store.quantity, base_url
    )
    await part_store.mark_awaiting_fabrication(db, order_store.part_id)
    logger.info("Заказ склада id=%s передан в цех, заказ цеха id=%s", order_store.id, order.id)
    return order


async def deliver_store_order(db: AsyncSession, order_store_id: int) -> OrderStore:
    """Выдача со склада на линию: остаток склада уменьшается, остаток линии растёт."""
    order_store = await _get_order_store(db, order_store_id)
    if order_store.status != OrderStoreStatus.DELIVER:
        raise InvalidTransitionError(
            f"Заказ склада в статусе {order_store.status.value}, выдать нельзя"
        )
    await part_store.take_stock(db, order_store.part_id, order_store.quantity)
    await part_ledger.replenish(db, order_store.part_id, order_store.quantity)
    order_store.status = OrderStoreStatus.FINISH
    await db.flush()
    logger.info("Заказ склада id=%s выдан на линию", order_store.id)
    return order_store


async def deliver_fabrication(db: AsyncSession, order_fabrication_id: int) -> DeliverOrderFabrication:
    """Цех отгружает заказ на склад сборки; склад ждёт приёмки (receive)."""
    order_fab = await db.get(OrderFabrication, order_fabrication_id)
    if order_fab is None:
        raise OrderNotFoundError("Заказ цеха не найден")
    if order_fab.status == OrderFabricationStatus.FINISH:
        raise InvalidTransitionError("Заказ цеха уже отгружен")
    r = await db.execute(
        select(DeliverOrderFabrication.id)
        .where(DeliverOrderFabrication.order_fabrication_id == order_fab.id)
        .limit(1)
    )
    if r.scalar_one_or_none() is not None:
        raise InvalidTransitionError("Поставка по заказу цеха уже оформлена")
    order = await db.get(Order, order_fab.order_id)
    if order is None:
        raise OrderNotFoundError("Заказ не найден")

    order.station_id = StationId.ASSEMBLY_STORE
    order_fab.status = OrderFabricationStatus.FINISH
    receipt = DeliverOrderFabrication(
        order_id=order_fab.order_id,
        order_fabrication_id=order_fab.id,
        part_id=order_fab.part_id,
        status=DeliverStatus.DELIVER,
    )
    db.add(receipt)
    await db.flush()
    await part_store.mark_receive(db, order_fab.part_id)
    logger.info("Заказ цеха id=%s отгружен на склад", order_fab.id)
    return receipt


async def delete_order(db: AsyncSession, order_id: int) -> None:
    """Удалить заказ со всеми дочерними записями. Начатое в цехе отменить нельзя."""
    order = await db.get(Order, order_id)
    if order is None:
        raise OrderNotFoundError("Заказ не найден")

    sf = await shop_floor_service.get_by_order(db, order_id)
    if sf is not None and sf.status in _LOCKED_SHOP_FLOOR:
        if sf.status == ShopFloorStatus.IN_PROGRESS:
            raise OrderLockedError("Нельзя удалить заказ: изготовление уже идёт")
        raise OrderLockedError("Нельзя удалить заказ: изготовление уже завершено")

    fab_ids = select(OrderFabrication.id).where(OrderFabrication.order_id == order_id)
    kanban_ids = select(Kanban.id).where(Kanban.order_id == order_id)

    await db.execute(delete(OrderLine).where(OrderLine.order_id == order_id))
    await db.execute(delete(OrderStore).where(OrderStore.order_id == order_id))
    await db.execute(
        delete(DeliverOrderFabrication).where(
            or_(
                DeliverOrderFabrication.order_id == order_id,
                DeliverOrderFabrication.order_fabrication_id.in_(fab_ids),
            )
        )
    )
    await db.execute(delete(OrderFabrication).where(OrderFabrication.order_id == order_id))
    await db.execute(delete(PartShopFloor).where(PartShopFloor.order_id == order_id))
    await db.execute(delete(KanbanWithdrawal).where(KanbanWithdrawal.kanban_id.in_(kanban_ids)))
    await db.execute(delete(Kanban).where(Kanban.order_id == order_id))
    await db.execute(delete(Order).where(Order.id == order_id))
    await db.flush()
    logger.info("Заказ id=%s удалён", order_id)


async def get_order(db: AsyncSession, order_id: int) -> dict:
    """Заказ с дочерней записью своей станции, строкой цеха и канбаном."""
    order = await db.get(Order, order_id)
    if order is None:
        raise OrderNotFoundError("Заказ не найден")
    out = {
        "id": order.id,
        "station_id": order.station_id,
        "created_by": order.created_by,
        "created_at": order.created_at,
        "store": None,
        "fabrication": None,
        "line": None,
        "shop_floor": None,
        "kanban": None,
    }
    r = await db.execute(select(OrderStore).where(OrderStore.order_id == order_id))
    store = r.scalar_one_or_none()
    if store is not None:
        out["store"] = {"id": store.id, "part_id": store.part_id, "quantity": store.quantity, "status": store.status.value}
    r = await db.execute(select(OrderFabrication).where(OrderFabrication.order_id == order_id))
    fab = r.scalar_one_or_none()
    if fab is not None:
        out["fabrication"] = {"id": fab.id, "part_id": fab.part_id, "quantity": fab.quantity, "status": fab.status.value}
    r = await db.execute(select(OrderLine).where(OrderLine.order_id == order_id))
    line = r.scalar_one_or_none()
    if line is not None:
        out["line"] = {"id": line.id, "component_id": line.component_id, "quantity": line.quantity, "status": line.status.value}
    sf = await shop_floor_service.get_by_order(db, order_id)
    if sf is not None:
        out["shop_floor"] = {"id": sf.id, "status": sf.status.value}
    r = await db.execute(select(Kanban).where(Kanban.order_id == order_id))
    kanban = r.scalar_one_or_none()
    if kanban is not None:
        out["kanban"] = {"id": kanban.id, "type": kanban.type.value, "status": kanban.status.value}
    return out


async def list_store_orders(db: AsyncSession) -> list[dict]:
    """Заказы склада с деталью и текущим остатком склада по ней."""
    r = await db.execute(
        select(OrderStore, Part, PartStore.stock, Kanban.id)
        .join(Part, Part.id == OrderStore.part_id)
        .outerjoin(PartStore, PartStore.part_id == OrderStore.part_id)
        .outerjoin(Kanban, Kanban.order_id == OrderStore.order_id)
        .order_by(OrderStore.created_at.desc(), OrderStore.id.desc())
    )
    return [
        {
            "id": o.id,
            "order_id": o.order_id,
            "part_id": o.part_id,
            "quantity": o.quantity,
            "status": o.status.value,
            "part_number": part.part_number,
            "part_name": part.part_name,
            "stock": stock,
            "kanban_id": kanban_id,
        }
        for o, part, stock, kanban_id in r.all()
    ]


async def list_fabrication_orders(db: AsyncSession) -> list[dict]:
    r = await db.execute(
        select(OrderFabrication, Part, Kanban.id)
        .join(Part, Part.id == OrderFabrication.part_id)
        .outerjoin(Kanban, Kanban.order_id == OrderFabrication.order_id)
        .order_by(OrderFabrication.created_at.desc(), OrderFabrication.id.desc())
    )
    return [
        {
            "id": o.id,
            "order_id": o.order_id,
            "part_id": o.part_id,
            "quantity": o.quantity,
            "status": o.status.value,
            "part_number": part.part_number,
            "part_name": part.part_name,
            "kanban_id": kanban_id,
        }
        for o, part, kanban_id in r.all()
    ]
