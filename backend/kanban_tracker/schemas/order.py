from datetime import datetime
from typing import Optional

from kanban_tracker.models import OrderStoreStatus
from kanban_tracker.schemas.base import ApiModel


class OrderCreate(ApiModel):
    """Заказ от станции: деталь и количество (склад, цех) или компонент (линия)."""
    part_number: Optional[str] = None
    quantity: Optional[int] = None
    component_id: Optional[int] = None
    # Адрес фронтенда для ссылки в QR-коде; пусто — из настроек
    request_host: Optional[str] = None


class StartAssemblyBody(ApiModel):
    component_id: Optional[int] = None
    request_host: Optional[str] = None


class OrderStoreStatusUpdate(ApiModel):
    id: int
    status: OrderStoreStatus
    request_host: Optional[str] = None


class OrderResponse(ApiModel):
    id: int
    station_id: int
    created_by: int
    created_at: Optional[datetime] = None
    kanban_id: Optional[str] = None


class StoreOrderResponse(ApiModel):
    id: int
    order_id: int
    part_id: int
    quantity: int
    status: str


class DeliverFabricationResponse(ApiModel):
    id: int
    order_id: int
    order_fabrication_id: int
    part_id: int
    status: str
