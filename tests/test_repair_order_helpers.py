from datetime import datetime, timedelta

from repairflow.models import RepairOrder
from repairflow.schemas.repair_order import WorkerRef
from repairflow.services.repair_orders import build_board, is_visible_to


def _order(**fields):
    defaults = {"stage": "pending_assignment", "worker_id": None, "lead_priority_until": None}
    defaults.update(fields)
    return RepairOrder(**defaults)


def test_visibility_rules():
    now = datetime(2026, 1, 1, 12, 0)
    reserved = _order(lead_priority_until=now + timedelta(minutes=5))
    expired = _order(lead_priority_until=now - timedelta(minutes=5))
    mine = _order(worker_id="w-1", lead_priority_until=now + timedelta(minutes=5))

    assert is_visible_to(_order(), "w-1", False, now) is True
    assert is_visible_to(reserved, "w-1", False, now) is False
    assert is_visible_to(reserved, "w-1", True, now) is True
    assert is_visible_to(expired, "w-1", False, now) is True
    assert is_visible_to(mine, "w-1", False, now) is True


def test_board_ignores_cancelled_and_unknown_stages():
    cancelled = _order(worker_id="w-1", stage="cancelled")
    garbage = _order(worker_id="w-1", stage="bogus")
    board = build_board([cancelled, garbage], "w-1")

    assert board.completed == []
    assert board.unassigned == []
    # unknown stored values read back as pending assignment, which is still open
    assert board.my_active == [garbage]


def test_worker_display_name():
    assert WorkerRef(worker_id="1", worker_email="a@b.c", worker_name="  ").display_name == "a@b.c"
    assert WorkerRef(worker_id="1", worker_email="a@b.c", worker_name="Ann").display_name == "Ann"
