from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from timebank.services.tasks import (
    InvalidTransitionError, TaskPermissionError, TaskRuleError,
    can_transition, check_can_apply, check_can_withdraw, check_status_change,
)

REQUESTER, OTHER = "requester", "other"


def make_task(status="open", deleted_at=None):
    return SimpleNamespace(requester_id=REQUESTER, status=status, deleted_at=deleted_at)


def move(task, new_status, user_id=REQUESTER):
    check_status_change(task, user_id, new_status)
    task.status = new_status


def test_completed_is_terminal():
    task = make_task("completed")
    for target in ("open", "in_progress", "cancelled"):
        with pytest.raises(InvalidTransitionError):
            check_status_change(task, REQUESTER, target)


def test_cancel_and_reopen():
    task = make_task()
    move(task, "cancelled")
    move(task, "open")
    assert task.status == "open"


def test_progress_then_complete():
    task = make_task()
    move(task, "in_progress")
    move(task, "completed")
    assert task.status == "completed"


@pytest.mark.parametrize("current,new", [
    ("in_progress", "open"),
    ("in_progress", "cancelled"),
    ("cancelled", "completed"),
    ("open", "open"),
])
def test_unlisted_transitions_rejected(current, new):
    assert not can_transition(current, new)


def test_only_requester_may_change_status():
    with pytest.raises(TaskPermissionError):
        check_status_change(make_task(), OTHER, "cancelled")


def test_apply_rules():
    check_can_apply(make_task(), OTHER)
    with pytest.raises(TaskPermissionError):
        check_can_apply(make_task(), REQUESTER)
    with pytest.raises(InvalidTransitionError):
        check_can_apply(make_task("in_progress"), OTHER)
    with pytest.raises(TaskRuleError):
        check_can_apply(make_task(deleted_at=datetime.now(timezone.utc)), OTHER)


def test_withdraw_rules():
    application = SimpleNamespace(applicant_id=OTHER, status="applied")
    check_can_withdraw(application, OTHER)
    with pytest.raises(TaskPermissionError):
        check_can_withdraw(application, REQUESTER)
    with pytest.raises(InvalidTransitionError):
        check_can_withdraw(SimpleNamespace(applicant_id=OTHER, status="withdrawn"), OTHER)
