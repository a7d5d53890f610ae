from typing import Optional

from kanban_tracker.models import KanbanStatus, ShopFloorStatus

# queue → progress → done, без пропусков и возвратов
NEXT_STATUS: dict[KanbanStatus, Optional[KanbanStatus]] = {
    KanbanStatus.QUEUE: KanbanStatus.PROGRESS,
    KanbanStatus.PROGRESS: KanbanStatus.DONE,
    KanbanStatus.DONE: None,
}

# Статус карты ↔ статус цеха (для всех станций, кроме сборочной линии)
SHOP_FLOOR_FOR_KANBAN: dict[KanbanStatus, ShopFloorStatus] = {
    KanbanStatus.QUEUE: ShopFloorStatus.PENDING,
    KanbanStatus.PROGRESS: ShopFloorStatus.IN_PROGRESS,
    KanbanStatus.DONE: ShopFloorStatus.FINISH,
}

KANBAN_FOR_SHOP_FLOOR: dict[ShopFloorStatus, KanbanStatus] = {
    v: k for k, v in SHOP_FLOOR_FOR_KANBAN.items()
}


def can_transition(current: KanbanStatus, new: KanbanStatus) -> bool:
    return NEXT_STATUS.get(current) == new


def is_terminal(status: KanbanStatus) -> bool:
    return NEXT_STATUS.get(status) is None


def in_sync(kanban_status: KanbanStatus, shop_floor_status: ShopFloorStatus) -> bool:
    return SHOP_FLOOR_FOR_KANBAN[kanban_status] == shop_floor_status
