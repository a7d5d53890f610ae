"""
Правила перехода канбана по станциям. Выбор по станции заказа:
сборочная линия живёт без цеха, склад сборки и изготовление сверяются с цехом.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from kanban_tracker.core.errors import (
    InvalidRequestError,
    NotFoundError,
    OutOfSyncError,
    WorkflowUndefinedError,
)
from kanban_tracker.models import (
    Kanban,
    Order,
    OrderLine,
    OrderLineStatus,
    PartShopFloor,
    StationId,
)
from kanban_tracker.services import shop_floor as shop_floor_service
from kanban_tracker.services.kanban_status import SHOP_FLOOR_FOR_KANBAN, in_sync


@dataclass
class TransitionContext:
    db: AsyncSession
    kanban: Kanban
    order: Order
    now: datetime
    shop_floor: Optional[PartShopFloor] = None


class StationWorkflow(ABC):
    station: StationId

    async def check_sync(self, ctx: TransitionContext) -> None:
        """Проверить, что карта и её запись-источник согласованы. По умолчанию сверять не с чем."""

    @abstractmethod
    async def on_advance_queue(self, ctx: TransitionContext) -> None:
        """queue → progress: побочные эффекты станции."""

    @abstractmethod
    async def on_advance_progress(self, ctx: TransitionContext) -> None:
        """progress → done: побочные эффекты станции."""


class AssemblyLineWorkflow(StationWorkflow):
    station = StationId.ASSEMBLY_LINE

    async def on_advance_queue(self, ctx: TransitionContext) -> None:
        # Правила старта сборки с линии не определены
        raise WorkflowUndefinedError("Переход queue → progress для сборочной линии не определён")

    async def on_advance_progress(self, ctx: TransitionContext) -> None:
        ctx.kanban.finish_date = ctx.now
        r = await ctx.db.execute(select(OrderLine).where(OrderLine.order_id == ctx.order.id))
        for line in r.scalars().all():
            line.status = OrderLineStatus.DONE
        await ctx.db.flush()


class ShopFloorWorkflow(StationWorkflow):
    """Карта повторяет статус цеха: queue↔pending, progress↔in_progress, done↔finish."""

    async def _shop_floor(self, ctx: TransitionContext) -> PartShopFloor:
        if ctx.shop_floor is None:
            ctx.shop_floor = await shop_floor_service.get_by_order(ctx.db, ctx.order.id)
        if ctx.shop_floor is None:
            raise NotFoundError("Запись цеха для заказа не найдена")
        return ctx.shop_floor

    async def check_sync(self, ctx: TransitionContext) -> None:
        sf = await self._shop_floor(ctx)
        if not in_sync(ctx.kanban.status, sf.status):
            raise OutOfSyncError(
                f"Канбан {ctx.kanban.status.value} не согласован с цехом {sf.status.value} "
                f"(ожидается {SHOP_FLOOR_FOR_KANBAN[ctx.kanban.status].value})"
            )

    async def on_advance_queue(self, ctx: TransitionContext) -> None:
        await shop_floor_service.start(ctx.db, await self._shop_floor(ctx), ctx.now)

    async def on_advance_progress(self, ctx: TransitionContext) -> None:
        await shop_floor_service.finish(ctx.db, await self._shop_floor(ctx), ctx.now)
        ctx.kanban.finish_date = ctx.now


class FabricationWorkflow(ShopFloorWorkflow):
    station = StationId.FABRICATION


class AssemblyStoreWorkflow(ShopFloorWorkflow):
    station = StationId.ASSEMBLY_STORE


WORKFLOWS: dict[StationId, StationWorkflow] = {
    wf.station: wf
    for wf in (AssemblyLineWorkflow(), FabricationWorkflow(), AssemblyStoreWorkflow())
}


def workflow_for(station_id: int) -> StationWorkflow:
    try:
        return WORKFLOWS[StationId(station_id)]
    except ValueError:
        raise InvalidRequestError(f"Неизвестная станция {station_id}")
