from datetime import datetime
from typing import Optional

from kanban_tracker.models import ShopFloorStatus
from kanban_tracker.schemas.base import ApiModel


class ShopFloorPlanUpdate(ApiModel):
    """Даты плана — ISO-строки (planStart, planFinish); разбор и проверка в сервисе."""
    id: int
    plan_start: Optional[str] = None
    plan_finish: Optional[str] = None


class ShopFloorStatusUpdate(ApiModel):
    id: int
    status: ShopFloorStatus


class ShopFloorResponse(ApiModel):
    id: int
    order_id: int
    part_id: int
    status: str
    plan_start: Optional[datetime] = None
    plan_finish: Optional[datetime] = None
    actual_start: Optional[datetime] = None
    actual_finish: Optional[datetime] = None
