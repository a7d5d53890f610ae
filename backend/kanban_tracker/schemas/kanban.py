from datetime import datetime
from typing import Optional

from kanban_tracker.models import KanbanStatus
from kanban_tracker.schemas.base import ApiModel


class KanbanConfirm(ApiModel):
    """Подтверждение следующего шага карты (сканирование QR)."""
    id: str
    status: KanbanStatus


class KanbanStatusResponse(ApiModel):
    id: str
    status: str
    order_id: int
    finish_date: Optional[datetime] = None
