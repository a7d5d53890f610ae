from kanban_tracker.core.database import Base
from kanban_tracker.models.station import Station, StationId, STATION_NAMES
from kanban_tracker.models.user import User, UserRole
from kanban_tracker.models.part import (
    Component,
    Part,
    PartComponent,
    PartShopFloor,
    PartStore,
    PartStoreStatus,
    ShopFloorStatus,
)
from kanban_tracker.models.order import (
    DeliverOrderFabrication,
    DeliverStatus,
    Order,
    OrderFabrication,
    OrderFabricationStatus,
    OrderLine,
    OrderLineStatus,
    OrderStore,
    OrderStoreStatus,
)
from kanban_tracker.models.kanban import Kanban, KanbanStatus, KanbanType, KanbanWithdrawal

__all__ = [
    "Base",
    "Component",
    "DeliverOrderFabrication",
    "DeliverStatus",
    "Kanban",
    "KanbanStatus",
    "KanbanType",
    "KanbanWithdrawal",
    "Order",
    "OrderFabrication",
    "OrderFabricationStatus",
    "OrderLine",
    "OrderLineStatus",
    "OrderStore",
    "OrderStoreStatus",
    "Part",
    "PartComponent",
    "PartShopFloor",
    "PartStore",
    "PartStoreStatus",
    "ShopFloorStatus",
    "Station",
    "StationId",
    "STATION_NAMES",
    "User",
    "UserRole",
]
