"""Общие шаги сценариев для сервисных тестов."""
from types import SimpleNamespace

from kanban_tracker.services import order_service

TEST_PASSWORD = "secret123"

PLAN_START = "2026-03-01T08:00:00"
PLAN_FINISH = "2026-03-01T17:00:00"


async def open_fabrication(db, user_id, part_number="1001.2001.3001", quantity=5):
    """Заказ цеха и id всех связанных записей."""
    order = await order_service.create_fabrication_order(db, user_id, part_number, quantity)
    info = await order_service.get_order(db, order.id)
    return SimpleNamespace(
        order_id=order.id,
        order_fabrication_id=info["fabrication"]["id"],
        shop_floor_id=info["shop_floor"]["id"],
        kanban_id=info["kanban"]["id"],
    )
