"""Остатки деталей у сборочной линии: списание в сборку, пополнение со склада."""
import enum
from typing import Mapping

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from kanban_tracker.core.errors import (
    InsufficientStockError,
    InvalidQuantityError,
    PartNotFoundError,
)
from kanban_tracker.core.logging_config import get_logger
from kanban_tracker.models import Part

logger = get_logger(__name__)


class Completeness(str, enum.Enum):
    COMPLETE = "Complete"
    INCOMPLETE = "Incomplete"


async def get_part(db: AsyncSession, part_id: int) -> Part:
    part = await db.get(Part, part_id)
    if part is None:
        raise PartNotFoundError(f"Деталь {part_id} не найдена")
    return part


async def get_part_by_number(db: AsyncSession, part_number: str) -> Part:
    r = await db.execute(select(Part).where(Part.part_number == part_number))
    part = r.scalar_one_or_none()
    if part is None:
        raise PartNotFoundError(f"Деталь {part_number} не найдена")
    return part


async def list_parts(db: AsyncSession) -> list[Part]:
    r = await db.execute(select(Part).order_by(Part.id))
    return list(r.scalars().all())


def completeness_of(parts: list[Part]) -> Completeness:
    if all(p.quantity >= p.quantity_req for p in parts):
        return Completeness.COMPLETE
    return Completeness.INCOMPLETE


async def completeness_status(db: AsyncSession) -> Completeness:
    """COMPLETE, если каждой детали хватает на цикл сборки. Только для отображения."""
    return completeness_of(await list_parts(db))


async def apply_consumption(db: AsyncSession, deltas: Mapping[int, int]) -> list[Part]:
    """
    Списать сразу несколько деталей: сначала считаем все новые остатки и
    проверяем, что ни один не уходит в минус, и только потом пишем.
    При любой ошибке ни одна строка не меняется.
    """
    if not deltas:
        return []
    for part_id, amount in deltas.items():
        if amount < 0:
            raise InvalidQuantityError(f"Отрицательное списание для детали {part_id}: {amount}")

    r = await db.execute(select(Part).where(Part.id.in_(list(deltas))).order_by(Part.id))
    parts = {p.id: p for p in r.scalars().all()}
    missing = [pid for pid in deltas if pid not in parts]
    if missing:
        raise PartNotFoundError(f"Детали не найдены: {', '.join(str(m) for m in missing)}")

    new_quantities = {pid: parts[pid].quantity - amount for pid, amount in deltas.items()}
    for pid, qty in new_quantities.items():
        if qty < 0:
            part = parts[pid]
            raise InsufficientStockError(
                f"Недостаточно детали {part.part_number}: есть {part.quantity}, нужно {deltas[pid]}"
            )

    for pid, qty in new_quantities.items():
        parts[pid].quantity = qty
    await db.flush()
    logger.info("Списание деталей: %s", dict(deltas))
    return [parts[pid] for pid in deltas]


async def consume(db: AsyncSession, part_id: int, amount: int) -> Part:
    (part,) = await apply_consumption(db, {part_id: amount})
    return part


async def replenish(db: AsyncSession, part_id: int, amount: int) -> Part:
    if amount <= 0:
        raise InvalidQuantityError("Количество должно быть больше нуля")
    part = await get_part(db, part_id)
    part.quantity += amount
    await db.flush()
    logger.info("Пополнение детали %s на %s, остаток %s", part.part_number, amount, part.quantity)
    return part


async def set_quantity(db: AsyncSession, part_id: int, quantity: int) -> Part:
    """Ручная корректировка остатка оператором линии."""
    if quantity <= 0:
        raise InvalidQuantityError("Количество должно быть больше нуля")
    part = await get_part(db, part_id)
    part.quantity = quantity
    await db.flush()
    return part
