"""Task request lifecycle rules, kept apart from storage so they can be checked directly."""
from typing import Dict, FrozenSet


# open → in_progress → completed, open ↔ cancelled; completed is terminal
ALLOWED_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    "open": frozenset({"in_progress", "completed", "cancelled"}),
    "in_progress": frozenset({"completed"}),
    "cancelled": frozenset({"open"}),
    "completed": frozenset(),
}


class TaskRuleError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TaskPermissionError(TaskRuleError):
    status_code = 403


class InvalidTransitionError(TaskRuleError):
    status_code = 409


def can_transition(current: str, new: str) -> bool:
    return new in ALLOWED_TRANSITIONS.get(current, frozenset())


def check_status_change(task, user_id: str, new_status: str) -> None:
    """Only the requester may move a task, and only along ALLOWED_TRANSITIONS"""
    if task.requester_id != user_id:
        raise TaskPermissionError("Permission denied (only the requester can update this task)")
    if not can_transition(task.status, new_status):
        raise InvalidTransitionError(f"Invalid status transition: {task.status} → {new_status}")


def check_can_delete(task, user_id: str) -> None:
    if task.requester_id != user_id:
        raise TaskPermissionError("Permission denied (only the requester can delete this task)")


def check_can_apply(task, user_id: str) -> None:
    if task.deleted_at is not None:
        raise TaskRuleError("This task has been deleted")
    if task.requester_id == user_id:
        raise TaskPermissionError("Requesters cannot apply to their own task")
    if task.status != "open":
        raise InvalidTransitionError("This task is not accepting applications")


def check_can_withdraw(application, user_id: str) -> None:
    if application.applicant_id != user_id:
        raise TaskPermissionError("Permission denied")
    if application.status != "applied":
        raise InvalidTransitionError("Application already withdrawn")
