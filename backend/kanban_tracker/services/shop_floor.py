"""План и факт изготовления в цехе. Статус цеха всегда двигается вместе с канбаном заказа."""
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from kanban_tracker.core.errors import (
    InvalidDateError,
    InvalidRangeError,
    InvalidTransitionError,
    NoOpError,
    NotFoundError,
    NotInProgressError,
    OrderNotFoundError,
    PlanRequiredError,
)
from kanban_tracker.core.logging_config import get_logger
from kanban_tracker.models import (
    Kanban,
    KanbanStatus,
    OrderFabrication,
    OrderFabricationStatus,
    Part,
    PartShopFloor,
    ShopFloorStatus,
)
from kanban_tracker.services.kanban_status import KANBAN_FOR_SHOP_FLOOR

logger = get_logger(__name__)


def parse_datetime(value, field: str) -> datetime:
    """ISO-строка или datetime → naive UTC. Непарсящееся значение — InvalidDate."""
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value.strip():
        try:
            dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            raise InvalidDateError(f"Неверный формат даты в поле {field}: {value!r}")
    else:
        raise InvalidDateError(f"Не задана дата в поле {field}")
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def time_remaining(shop_floor: PartShopFloor) -> Optional[float]:
    """plan_finish - actual_finish в секундах; отрицательное — опоздание."""
    if shop_floor.plan_finish is None or shop_floor.actual_finish is None:
        return None
    return (shop_floor.plan_finish - shop_floor.actual_finish).total_seconds()


async def get_shop_floor(db: AsyncSession, shop_floor_id: int) -> PartShopFloor:
    sf = await db.get(PartShopFloor, shop_floor_id)
    if sf is None:
        raise NotFoundError("Запись цеха не найдена")
    return sf


async def get_by_order(db: AsyncSession, order_id: int) -> Optional[PartShopFloor]:
    r = await db.execute(select(PartShopFloor).where(PartShopFloor.order_id == order_id))
    return r.scalar_one_or_none()


async def set_plan(db: AsyncSession, shop_floor_id: int, plan_start, plan_finish) -> PartShopFloor:
    start = parse_datetime(plan_start, "planStart")
    finish = parse_datetime(plan_finish, "planFinish")
    if start >= finish:
        raise InvalidRangeError("Начало плана должно быть раньше окончания")
    sf = await get_shop_floor(db, shop_floor_id)
    sf.plan_start = start
    sf.plan_finish = finish
    await db.flush()
    logger.info("План цеха id=%s: %s — %s", sf.id, start.isoformat(), finish.isoformat())
    return sf


async def start(db: AsyncSession, sf: PartShopFloor, now: datetime) -> None:
    """pending → in_progress, фиксирует фактическое начало."""
    if not sf.has_plan:
        raise PlanRequiredError("Сначала задайте план: начало и окончание")
    sf.status = ShopFloorStatus.IN_PROGRESS
    sf.actual_start = now
    await db.flush()


async def finish(db: AsyncSession, sf: PartShopFloor, now: datetime) -> None:
    """in_progress → finish, фиксирует окончание; ещё не отгруженный заказ цеха переходит в deliver."""
    if sf.status != ShopFloorStatus.IN_PROGRESS:
        raise NotInProgressError(f"Изготовление не в работе (статус {sf.status.value})")
    sf.status = ShopFloorStatus.FINISH
    sf.actual_finish = now
    r = await db.execute(select(OrderFabrication).where(OrderFabrication.order_id == sf.order_id))
    order_fabs = r.scalars().all()
    if not order_fabs:
        raise OrderNotFoundError("Заказ цеха не найден")
    for order_fab in order_fabs:
        # Отгруженный досрочно (finish) остаётся отгруженным
        if order_fab.status == OrderFabricationStatus.PENDING:
            order_fab.status = OrderFabricationStatus.DELIVER
    await db.flush()


async def advance_status(db: AsyncSession, shop_floor_id: int, target: ShopFloorStatus) -> PartShopFloor:
    """
    Ручной перевод статуса цеха (pending → in_progress → finish).
    Канбан этого заказа переводится в соответствующий статус в той же транзакции.
    """
    sf = await get_shop_floor(db, shop_floor_id)
    if target == ShopFloorStatus.IN_PROGRESS and not sf.has_plan:
        raise PlanRequiredError("Сначала задайте план: начало и окончание")
    if target == sf.status:
        raise NoOpError(f"Статус уже {target.value}")

    now = datetime.utcnow()
    if sf.status == ShopFloorStatus.PENDING and target == ShopFloorStatus.IN_PROGRESS:
        await start(db, sf, now)
    elif target == ShopFloorStatus.FINISH:
        await finish(db, sf, now)
    else:
        raise InvalidTransitionError(f"Переход из {sf.status.value} в {target.value} невозможен")

    r = await db.execute(select(Kanban).where(Kanban.order_id == sf.order_id))
    kanban = r.scalar_one_or_none()
    if kanban is not None:
        kanban.status = KANBAN_FOR_SHOP_FLOOR[target]
        if kanban.status == KanbanStatus.DONE:
            kanban.finish_date = now
        await db.flush()
    logger.info("Цех id=%s → %s", sf.id, target.value)
    return sf


def _shop_floor_row(sf: PartShopFloor, part: Part) -> dict:
    return {
        "id": sf.id,
        "order_id": sf.order_id,
        "part_id": sf.part_id,
        "part_number": part.part_number,
        "part_name": part.part_name,
        "status": sf.status.value,
        "station": sf.station,
        "plan_start": sf.plan_start,
        "plan_finish": sf.plan_finish,
        "actual_start": sf.actual_start,
        "actual_finish": sf.actual_finish,
        "time_remaining": time_remaining(sf),
    }


async def list_shop_floors(db: AsyncSession) -> list[dict]:
    r = await db.execute(
        select(PartShopFloor, Part)
        .join(Part, Part.id == PartShopFloor.part_id)
        .order_by(PartShopFloor.created_at.desc(), PartShopFloor.id.desc())
    )
    return [_shop_floor_row(sf, part) for sf, part in r.all()]


async def get_shop_floor_detail(db: AsyncSession, shop_floor_id: int) -> dict:
    sf = await get_shop_floor(db, shop_floor_id)
    part = await db.get(Part, sf.part_id)
    return _shop_floor_row(sf, part)
