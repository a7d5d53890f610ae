"""Склад сборки: промежуточный остаток детали между цехом и линией."""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from kanban_tracker.core.errors import (
    InsufficientStockError,
    InvalidRequestError,
    InvalidTransitionError,
    NotFoundError,
)
from kanban_tracker.core.logging_config import get_logger
from kanban_tracker.models import (
    DeliverOrderFabrication,
    DeliverStatus,
    OrderFabrication,
    OrderStore,
    OrderStoreStatus,
    Part,
    PartStore,
    PartStoreStatus,
)

logger = get_logger(__name__)

# Заказы, которые ещё ждут деталей со склада
_AWAITING_STOCK = (OrderStoreStatus.PENDING, OrderStoreStatus.PRODUCTION)


async def get_by_part(db: AsyncSession, part_id: int) -> PartStore | None:
    r = await db.execute(select(PartStore).where(PartStore.part_id == part_id))
    return r.scalar_one_or_none()


async def ensure_exists(db: AsyncSession, part_id: int) -> PartStore:
    """Строка склада для детали; создаётся пустой (stock=0, idle), если её ещё нет."""
    row = await get_by_part(db, part_id)
    if row is None:
        row = PartStore(part_id=part_id, stock=0, status=PartStoreStatus.IDLE)
        db.add(row)
        await db.flush()
        logger.info("Создана строка склада для детали id=%s", part_id)
    return row


async def mark_awaiting_fabrication(db: AsyncSession, part_id: int) -> PartStore:
    row = await ensure_exists(db, part_id)
    row.status = PartStoreStatus.ORDER_TO_FABRICATION
    await db.flush()
    return row


async def mark_receive(db: AsyncSession, part_id: int) -> PartStore:
    row = await ensure_exists(db, part_id)
    row.status = PartStoreStatus.RECEIVE
    await db.flush()
    return row


async def _reserved_stock(db: AsyncSession, part_id: int) -> int:
    """Сколько остатка уже обещано заказам в статусе deliver."""
    r = await db.execute(
        select(OrderStore.quantity).where(
            OrderStore.part_id == part_id,
            OrderStore.status == OrderStoreStatus.DELIVER,
        )
    )
    return sum(r.scalars().all())


async def release_ready_orders(db: AsyncSession, store: PartStore) -> list[OrderStore]:
    """
    Перевести в deliver заказы, которые покрывает свободный остаток склада.
    Свободный остаток = stock минус уже зарезервированное, заказы — по очереди создания.
    """
    available = store.stock - await _reserved_stock(db, store.part_id)
    r = await db.execute(
        select(OrderStore)
        .where(OrderStore.part_id == store.part_id, OrderStore.status.in_(_AWAITING_STOCK))
        .order_by(OrderStore.created_at, OrderStore.id)
    )
    released = []
    for order_store in r.scalars().all():
        if order_store.quantity > available:
            continue
        order_store.status = OrderStoreStatus.DELIVER
        available -= order_store.quantity
        released.append(order_store)
    await db.flush()
    return released


async def receive_delivery(
    db: AsyncSession,
    part_store_id: int,
    target: PartStoreStatus = PartStoreStatus.IDLE,
) -> int:
    """
    Принять на склад всё, что цех отгрузил по детали. Возвращает принятое количество.
    Допустимо только из статуса receive и только с переходом в idle.
    """
    store = await db.get(PartStore, part_store_id)
    if store is None:
        raise NotFoundError("Деталь на складе не найдена")
    if store.status != PartStoreStatus.RECEIVE:
        raise InvalidTransitionError(f"Статус детали {store.status.value}, ожидается receive")
    if target != PartStoreStatus.IDLE:
        raise InvalidRequestError(f"Недопустимый статус {target.value}")

    r = await db.execute(
        select(DeliverOrderFabrication, OrderFabrication.quantity)
        .join(OrderFabrication, OrderFabrication.id == DeliverOrderFabrication.order_fabrication_id)
        .where(
            DeliverOrderFabrication.part_id == store.part_id,
            DeliverOrderFabrication.status == DeliverStatus.DELIVER,
        )
    )
    receipts = r.all()
    if not receipts:
        raise NotFoundError("Нет поставок из цеха для приёмки")

    delivered = sum(quantity for _, quantity in receipts)
    store.stock += delivered
    store.status = target
    for receipt, _ in receipts:
        receipt.status = DeliverStatus.FINISH
    await db.flush()

    released = await release_ready_orders(db, store)
    logger.info(
        "Приёмка на склад: деталь id=%s +%s, остаток %s, готово к выдаче заказов: %s",
        store.part_id, delivered, store.stock, len(released),
    )
    return delivered


async def take_stock(db: AsyncSession, part_id: int, amount: int) -> PartStore:
    """Выдать со склада на линию."""
    store = await ensure_exists(db, part_id)
    if store.stock < amount:
        raise InsufficientStockError(
            f"На складе недостаточно детали: есть {store.stock}, нужно {amount}"
        )
    store.stock -= amount
    await db.flush()
    return store


async def list_part_stores(db: AsyncSession) -> list[dict]:
    r = await db.execute(
        select(PartStore, Part)
        .join(Part, Part.id == PartStore.part_id)
        .order_by(PartStore.created_at.desc())
    )
    return [
        {
            "id": store.id,
            "part_id": store.part_id,
            "stock": store.stock,
            "status": store.status.value,
            "part_number": part.part_number,
            "part_name": part.part_name,
            "created_at": store.created_at.isoformat() if store.created_at else "",
        }
        for store, part in r.all()
    ]
