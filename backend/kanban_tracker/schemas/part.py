from typing import List

from kanban_tracker.models import PartStoreStatus
from kanban_tracker.schemas.base import ApiModel


class PartResponse(ApiModel):
    id: int
    part_number: str
    part_name: str
    quantity: int
    quantity_req: int


class PartsResponse(ApiModel):
    """Детали линии и хватает ли их на цикл сборки (Complete / Incomplete)."""
    status: str
    parts: List[PartResponse]


class PartQuantityUpdate(ApiModel):
    id: int
    quantity: int


class PartStoreStatusUpdate(ApiModel):
    id: int
    status: PartStoreStatus


class ReceiveResponse(ApiModel):
    id: int
    status: str
    stock: int
    received: int
