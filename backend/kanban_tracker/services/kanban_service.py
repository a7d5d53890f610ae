"""Канбан-карты: выпуск, чтение с подробностями, подтверждение перехода статуса."""
import secrets
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from kanban_tracker.core.errors import (
    InvalidTargetError,
    NoOpError,
    NotFoundError,
    OrderNotFoundError,
    TerminalStateError,
)
from kanban_tracker.core.logging_config import get_logger
from kanban_tracker.models import (
    Component,
    Kanban,
    KanbanStatus,
    KanbanType,
    KanbanWithdrawal,
    Order,
    OrderFabrication,
    OrderLine,
    OrderStore,
    Part,
    PartComponent,
    Station,
    StationId,
)
from kanban_tracker.services import shop_floor as shop_floor_service
from kanban_tracker.services.kanban_status import can_transition, is_terminal
from kanban_tracker.services.qr_code import confirm_url, generate_qr
from kanban_tracker.services.station_workflow import TransitionContext, workflow_for

logger = get_logger(__name__)

CARD_IDS = {
    KanbanType.PRODUCTION: "RYIN001",
    KanbanType.WITHDRAWAL: "RYIN002",
}


def new_kanban_id() -> str:
    return f"{secrets.token_hex(4)}-{secrets.randbelow(10**7)}"


async def issue_kanban(
    db: AsyncSession,
    order_id: int,
    station_id: int,
    kanban_type: KanbanType,
    status: KanbanStatus = KanbanStatus.QUEUE,
    base_url: Optional[str] = None,
) -> Kanban:
    kanban_id = new_kanban_id()
    now = datetime.utcnow()
    kanban = Kanban(
        id=kanban_id,
        type=kanban_type,
        card_id=CARD_IDS[kanban_type],
        status=status,
        qr_code=generate_qr(confirm_url(kanban_id, base_url)),
        order_id=order_id,
        station_id=station_id,
        order_date=now,
        plan_start=now,
    )
    db.add(kanban)
    await db.flush()
    logger.info("Выпущен канбан %s (%s) для заказа id=%s", kanban.id, kanban_type.value, order_id)
    return kanban


async def get_kanban_record(db: AsyncSession, kanban_id: str) -> Kanban:
    kanban = await db.get(Kanban, kanban_id)
    if kanban is None:
        raise NotFoundError("Канбан не найден")
    return kanban


async def station_of(db: AsyncSession, kanban_id: str) -> int:
    """Станция заказа, к которому привязана карта (для проверки доступа оператора)."""
    kanban = await get_kanban_record(db, kanban_id)
    order = await db.get(Order, kanban.order_id)
    if order is None:
        raise OrderNotFoundError("Заказ канбана не найден")
    return order.station_id


async def update_status(db: AsyncSession, kanban_id: str, target: KanbanStatus) -> Kanban:
    """
    Подтвердить следующий шаг карты. Побочные эффекты станции выполняются первыми,
    статус карты меняется последним.
    """
    kanban = await get_kanban_record(db, kanban_id)
    order = await db.get(Order, kanban.order_id)
    if order is None:
        raise OrderNotFoundError("Заказ канбана не найден")

    workflow = workflow_for(order.station_id)
    ctx = TransitionContext(db=db, kanban=kanban, order=order, now=datetime.utcnow())
    await workflow.check_sync(ctx)

    current = kanban.status
    if target == current:
        raise NoOpError(f"Канбан уже в статусе {current.value}")
    if is_terminal(current):
        raise TerminalStateError("Канбан уже завершён")
    if not can_transition(current, target):
        raise InvalidTargetError(f"Переход из {current.value} в {target.value} невозможен")

    if current == KanbanStatus.QUEUE:
        await workflow.on_advance_queue(ctx)
    else:
        await workflow.on_advance_progress(ctx)

    kanban.status = target
    await db.flush()
    logger.info("Канбан %s: %s → %s", kanban.id, current.value, target.value)
    return kanban


async def _station_names(db: AsyncSession) -> dict[int, str]:
    r = await db.execute(select(Station.id, Station.name))
    return {sid: name for sid, name in r.all()}


async def _production_details(db: AsyncSession, order: Order) -> dict:
    r = await db.execute(
        select(OrderStore, Part)
        .join(Part, Part.id == OrderStore.part_id)
        .where(OrderStore.order_id == order.id)
    )
    row = r.first()
    if row is None:
        r = await db.execute(
            select(OrderFabrication, Part)
            .join(Part, Part.id == OrderFabrication.part_id)
            .where(OrderFabrication.order_id == order.id)
        )
        row = r.first()
    if row is None:
        return {}
    child, part = row
    details = {
        "part_id": part.id,
        "part_number": part.part_number,
        "part_name": part.part_name,
        "quantity": child.quantity,
        "order_status": child.status.value,
    }
    if order.station_id != StationId.ASSEMBLY_LINE:
        sf = await shop_floor_service.get_by_order(db, order.id)
        if sf is not None:
            details["shop_floor"] = {
                "id": sf.id,
                "status": sf.status.value,
                "plan_start": sf.plan_start,
                "plan_finish": sf.plan_finish,
                "actual_start": sf.actual_start,
                "actual_finish": sf.actual_finish,
            }
    return details


async def _withdrawal_details(db: AsyncSession, kanban: Kanban, order: Order, names: dict[int, str]) -> dict:
    r = await db.execute(select(KanbanWithdrawal).where(KanbanWithdrawal.kanban_id == kanban.id))
    withdrawal = r.scalar_one_or_none()
    if withdrawal is None:
        raise NotFoundError("Маршрут карты отбора не найден")
    details = {
        "withdrawal": {
            "prev_station_id": withdrawal.prev_station_id,
            "prev_station_name": names.get(withdrawal.prev_station_id),
            "next_station_id": withdrawal.next_station_id,
            "next_station_name": names.get(withdrawal.next_station_id),
        }
    }
    r = await db.execute(
        select(OrderLine, Component)
        .join(Component, Component.id == OrderLine.component_id)
        .where(OrderLine.order_id == order.id)
    )
    row = r.first()
    if row is not None:
        line, component = row
        r = await db.execute(
            select(Part.part_number)
            .join(PartComponent, PartComponent.part_id == Part.id)
            .where(PartComponent.component_id == component.id)
            .order_by(Part.part_number)
        )
        details.update(
            component_id=component.id,
            component_name=component.name,
            part_name=component.name,
            quantity=line.quantity,
            order_status=line.status.value,
            part_numbers=list(r.scalars().all()),
        )
    return details


async def get_kanban(db: AsyncSession, kanban_id: str) -> dict:
    """Карта с данными заказа: деталь и цех для производственной, маршрут и состав для отбора."""
    kanban = await get_kanban_record(db, kanban_id)
    order = await db.get(Order, kanban.order_id)
    if order is None:
        raise OrderNotFoundError("Заказ канбана не найден")
    names = await _station_names(db)
    data = {
        "id": kanban.id,
        "type": kanban.type.value,
        "card_id": kanban.card_id,
        "status": kanban.status.value,
        "qr_code": kanban.qr_code,
        "order_id": kanban.order_id,
        "station_id": kanban.station_id,
        "station_name": names.get(kanban.station_id),
        "order_station_id": order.station_id,
        "order_date": kanban.order_date,
        "plan_start": kanban.plan_start,
        "finish_date": kanban.finish_date,
    }
    if kanban.type == KanbanType.WITHDRAWAL:
        data.update(await _withdrawal_details(db, kanban, order, names))
    else:
        data.update(await _production_details(db, order))
    return data


async def list_kanbans(db: AsyncSession, station_id: int) -> dict[str, list[dict]]:
    """Доска станции: карты, выставленные на станции, по колонкам queue / progress / done."""
    r = await db.execute(
        select(Kanban.id)
        .where(Kanban.station_id == station_id)
        .order_by(Kanban.created_at.desc())
    )
    board: dict[str, list[dict]] = {s.value: [] for s in KanbanStatus}
    for kanban_id in r.scalars().all():
        card = await get_kanban(db, kanban_id)
        card.pop("qr_code", None)
        board[card["status"]].append(card)
    return board
