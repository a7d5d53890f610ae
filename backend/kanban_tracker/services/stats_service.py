"""Сводные показатели по станциям: прогресс, опоздания, что сейчас в цехе."""
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from kanban_tracker.models import (
    OrderFabrication,
    OrderLine,
    OrderLineStatus,
    OrderStore,
    OrderStoreStatus,
    Part,
    PartShopFloor,
    ShopFloorStatus,
)
from kanban_tracker.services.shop_floor import time_remaining


def _percent(part: int, total: int) -> int:
    if not total:
        return 0
    return (part * 100) // total


async def _sum_quantity(db: AsyncSession, column, *where) -> int:
    stmt = select(func.coalesce(func.sum(column), 0))
    if where:
        stmt = stmt.where(*where)
    r = await db.execute(stmt)
    return int(r.scalar_one() or 0)


async def progress_track(db: AsyncSession) -> dict:
    """Доля количества по станциям в процентах (целое, с округлением вниз)."""
    store_total = await _sum_quantity(db, OrderStore.quantity)
    store_moved = await _sum_quantity(
        db, OrderStore.quantity, OrderStore.status != OrderStoreStatus.PENDING
    )

    fab_total = await _sum_quantity(db, OrderFabrication.quantity)
    r = await db.execute(
        select(func.coalesce(func.sum(OrderFabrication.quantity), 0))
        .join(PartShopFloor, PartShopFloor.order_id == OrderFabrication.order_id)
        .where(PartShopFloor.status == ShopFloorStatus.IN_PROGRESS)
    )
    fab_in_progress = int(r.scalar_one() or 0)

    line_total = await _sum_quantity(db, OrderLine.quantity)
    line_done = await _sum_quantity(db, OrderLine.quantity, OrderLine.status == OrderLineStatus.DONE)

    return {
        "assembly_line": _percent(line_done, line_total),
        "assembly_store": _percent(store_moved, store_total),
        "fabrication": _percent(fab_in_progress, fab_total),
    }


async def delay_ontime(db: AsyncSession) -> dict:
    """Завершённые в цехе заказы: сколько в срок и сколько с опозданием."""
    r = await db.execute(
        select(PartShopFloor, OrderFabrication.quantity)
        .join(OrderFabrication, OrderFabrication.order_id == PartShopFloor.order_id)
        .where(PartShopFloor.status == ShopFloorStatus.FINISH)
    )
    out = {
        "delay_count": 0,
        "ontime_count": 0,
        "delay_quantity": 0,
        "ontime_quantity": 0,
        "total_quantity": 0,
    }
    for sf, quantity in r.all():
        remaining = time_remaining(sf)
        if remaining is not None and remaining < 0:
            out["delay_count"] += 1
            out["delay_quantity"] += quantity
        else:
            out["ontime_count"] += 1
            out["ontime_quantity"] += quantity
        out["total_quantity"] += quantity
    return out


async def production_progress(db: AsyncSession) -> list[dict]:
    r = await db.execute(
        select(PartShopFloor, Part)
        .join(Part, Part.id == PartShopFloor.part_id)
        .where(PartShopFloor.status == ShopFloorStatus.IN_PROGRESS)
        .order_by(PartShopFloor.actual_start)
    )
    return [
        {
            "id": sf.id,
            "order_id": sf.order_id,
            "part_number": part.part_number,
            "part_name": part.part_name,
            "plan_start": sf.plan_start,
            "plan_finish": sf.plan_finish,
            "actual_start": sf.actual_start,
        }
        for sf, part in r.all()
    ]
