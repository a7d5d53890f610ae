"""Цех: план, линейные переходы статуса, синхронизация с канбаном."""
from datetime import datetime

import pytest

from helpers import PLAN_FINISH, PLAN_START, open_fabrication
from kanban_tracker.core.errors import (
    InvalidDateError,
    InvalidRangeError,
    InvalidTransitionError,
    NoOpError,
    NotFoundError,
    NotInProgressError,
    PlanRequiredError,
)
from kanban_tracker.models import (
    Kanban,
    KanbanStatus,
    OrderFabrication,
    OrderFabricationStatus,
    PartShopFloor,
    ShopFloorStatus,
    UserRole,
)
from kanban_tracker.services import shop_floor


@pytest.fixture
def fab(run, seed):
    return run(open_fabrication, seed.users[UserRole.FABRICATION_OPERATOR])


def test_set_plan_stores_dates_only(run, fetch, fab):
    run(shop_floor.set_plan, fab.shop_floor_id, PLAN_START, PLAN_FINISH)
    sf = fetch(PartShopFloor, fab.shop_floor_id)
    assert sf.plan_start == datetime(2026, 3, 1, 8, 0)
    assert sf.plan_finish == datetime(2026, 3, 1, 17, 0)
    assert sf.actual_start is None
    assert sf.actual_finish is None
    assert sf.status == ShopFloorStatus.PENDING


def test_set_plan_converts_aware_to_utc(run, fetch, fab):
    run(shop_floor.set_plan, fab.shop_floor_id, "2026-03-01T10:00:00+02:00", "2026-03-01T12:00:00Z")
    sf = fetch(PartShopFloor, fab.shop_floor_id)
    assert sf.plan_start == datetime(2026, 3, 1, 8, 0)
    assert sf.plan_finish == datetime(2026, 3, 1, 12, 0)


@pytest.mark.parametrize("start,finish", [("not-a-date", PLAN_FINISH), (PLAN_START, None)])
def test_set_plan_invalid_date(run, fab, start, finish):
    with pytest.raises(InvalidDateError):
        run(shop_floor.set_plan, fab.shop_floor_id, start, finish)


@pytest.mark.parametrize("start,finish", [(PLAN_FINISH, PLAN_START), (PLAN_START, PLAN_START)])
def test_set_plan_invalid_range(run, fab, start, finish):
    with pytest.raises(InvalidRangeError):
        run(shop_floor.set_plan, fab.shop_floor_id, start, finish)


def test_set_plan_missing_shop_floor(run, seed):
    with pytest.raises(NotFoundError):
        run(shop_floor.set_plan, 9999, PLAN_START, PLAN_FINISH)


def test_start_without_plan(run, fab):
    with pytest.raises(PlanRequiredError):
        run(shop_floor.advance_status, fab.shop_floor_id, ShopFloorStatus.IN_PROGRESS)


def test_linear_progress_keeps_kanban_in_sync(run, fetch, fab):
    run(shop_floor.set_plan, fab.shop_floor_id, PLAN_START, PLAN_FINISH)

    run(shop_floor.advance_status, fab.shop_floor_id, ShopFloorStatus.IN_PROGRESS)
    sf = fetch(PartShopFloor, fab.shop_floor_id)
    assert sf.status == ShopFloorStatus.IN_PROGRESS
    assert sf.actual_start is not None
    assert fetch(Kanban, fab.kanban_id).status == KanbanStatus.PROGRESS

    run(shop_floor.advance_status, fab.shop_floor_id, ShopFloorStatus.FINISH)
    sf = fetch(PartShopFloor, fab.shop_floor_id)
    assert sf.status == ShopFloorStatus.FINISH
    assert sf.actual_finish is not None
    kanban = fetch(Kanban, fab.kanban_id)
    assert kanban.status == KanbanStatus.DONE
    assert kanban.finish_date is not None
    assert fetch(OrderFabrication, fab.order_fabrication_id).status == OrderFabricationStatus.DELIVER


def test_repeat_status_is_noop(run, fab):
    run(shop_floor.set_plan, fab.shop_floor_id, PLAN_START, PLAN_FINISH)
    run(shop_floor.advance_status, fab.shop_floor_id, ShopFloorStatus.IN_PROGRESS)
    with pytest.raises(NoOpError):
        run(shop_floor.advance_status, fab.shop_floor_id, ShopFloorStatus.IN_PROGRESS)


def test_finish_from_pending_is_rejected(run, fetch, fab):
    with pytest.raises(NotInProgressError):
        run(shop_floor.advance_status, fab.shop_floor_id, ShopFloorStatus.FINISH)
    assert fetch(Kanban, fab.kanban_id).status == KanbanStatus.QUEUE


def test_reverse_transition_is_rejected(run, fab):
    run(shop_floor.set_plan, fab.shop_floor_id, PLAN_START, PLAN_FINISH)
    run(shop_floor.advance_status, fab.shop_floor_id, ShopFloorStatus.IN_PROGRESS)
    with pytest.raises(InvalidTransitionError):
        run(shop_floor.advance_status, fab.shop_floor_id, ShopFloorStatus.PENDING)


def test_time_remaining():
    sf = PartShopFloor(plan_finish=datetime(2026, 3, 1, 17, 0))
    assert shop_floor.time_remaining(sf) is None
    sf.actual_finish = datetime(2026, 3, 1, 16, 0)
    assert shop_floor.time_remaining(sf) == 3600
    sf.actual_finish = datetime(2026, 3, 1, 18, 30)
    assert shop_floor.time_remaining(sf) == -5400


def test_list_and_detail(run, fab):
    rows = run(shop_floor.list_shop_floors)
    assert [r["id"] for r in rows] == [fab.shop_floor_id]
    detail = run(shop_floor.get_shop_floor_detail, fab.shop_floor_id)
    assert detail["part_number"] == "1001.2001.3001"
    assert detail["status"] == "pending"
    assert detail["time_remaining"] is None
