import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from timebank.database import get_db
from timebank.core.auth import get_current_user
from timebank.models.profile import Profile
from timebank.models.task import Task, TaskApplication
from timebank.schemas.task import (
    TaskApplicationResponse, TaskCreate, TaskDetailResponse, TaskResponse, TaskStatus, TaskUpdateStatus,
)
from timebank.services.tasks import (
    TaskRuleError, check_can_apply, check_can_delete, check_can_withdraw, check_status_change,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["tasks"])


def _rule_error(e: TaskRuleError) -> HTTPException:
    return HTTPException(e.status_code, e.message)


async def _get_live_task_or_404(db: AsyncSession, task_id: str) -> Task:
    # Soft-deleted tasks are invisible to every read path
    result = await db.execute(
        select(Task)
        .where(Task.id == task_id)
        .where(Task.deleted_at.is_(None))
    )
    task = result.scalar_one_or_none()
    if not task:
        raise HTTPException(404, "Task not found")
    return task


@router.post("/tasks", response_model=TaskResponse)
async def create_task(
    task_in: TaskCreate,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    task = Task(
        title=task_in.title,
        description=task_in.description,
        tags=task_in.tags,
        estimated_hours=task_in.estimated_hours,
        requester_id=current_user.id,
        status="open"
    )
    db.add(task)
    await db.commit()
    await db.refresh(task)
    return task


@router.get("/tasks", response_model=List[TaskResponse])
async def list_tasks(
    status: Optional[TaskStatus] = None,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    query = select(Task).where(Task.deleted_at.is_(None))
    if status:
        query = query.where(Task.status == status)
    result = await db.execute(query.order_by(Task.created_at.desc()))
    return result.scalars().all()


@router.get("/tasks/{task_id}", response_model=TaskDetailResponse)
async def get_task(
    task_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    task = await _get_live_task_or_404(db, task_id)
    result = await db.execute(
        select(TaskApplication)
        .where(TaskApplication.task_id == task_id)
        .order_by(TaskApplication.created_at.desc())
    )
    applications = [TaskApplicationResponse.model_validate(a) for a in result.scalars().all()]

    detail = TaskDetailResponse.model_validate(task)
    detail.applications = applications
    detail.my_application = next(
        (a for a in applications if a.applicant_id == current_user.id and a.status == "applied"), None
    )
    detail.is_requester = task.requester_id == current_user.id
    return detail


@router.patch("/tasks/{task_id}/status", response_model=TaskResponse)
async def update_task_status(
    task_id: str,
    status_in: TaskUpdateStatus,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    task = await _get_live_task_or_404(db, task_id)
    try:
        check_status_change(task, current_user.id, status_in.status)
    except TaskRuleError as e:
        raise _rule_error(e)

    task.status = status_in.status
    db.add(task)
    await db.commit()
    await db.refresh(task)
    return task


@router.delete("/tasks/{task_id}")
async def delete_task(
    task_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    task = await _get_live_task_or_404(db, task_id)
    try:
        check_can_delete(task, current_user.id)
    except TaskRuleError as e:
        raise _rule_error(e)

    task.deleted_at = datetime.now(timezone.utc)
    db.add(task)
    await db.commit()
    return {"success": True}


@router.post("/tasks/{task_id}/apply", response_model=TaskApplicationResponse)
async def apply_to_task(
    task_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    task = await _get_live_task_or_404(db, task_id)
    try:
        check_can_apply(task, current_user.id)
    except TaskRuleError as e:
        raise _rule_error(e)

    application = TaskApplication(task_id=task_id, applicant_id=current_user.id, status="applied")
    try:
        db.add(application)
        await db.commit()
    except IntegrityError:
        # partial unique index on (task_id, applicant_id) WHERE status = 'applied'
        await db.rollback()
        raise HTTPException(409, "Already applied")
    await db.refresh(application)
    return application


@router.post("/applications/{application_id}/withdraw", response_model=TaskApplicationResponse)
async def withdraw_application(
    application_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    result = await db.execute(select(TaskApplication).where(TaskApplication.id == application_id))
    application = result.scalar_one_or_none()
    if not application:
        raise HTTPException(404, "Application not found")
    try:
        check_can_withdraw(application, current_user.id)
    except TaskRuleError as e:
        raise _rule_error(e)

    application.status = "withdrawn"
    db.add(application)
    await db.commit()
    await db.refresh(application)
    return application
