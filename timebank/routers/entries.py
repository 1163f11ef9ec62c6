import logging
from collections import defaultdict
from typing import Dict, List

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from timebank.database import get_db
from timebank.core.auth import get_current_user, is_owner_or_admin
from timebank.core.errors import UpstreamError
from timebank.models.entry import Entry, EntryHistory, EntryRecipient
from timebank.models.evaluation import DetailedEvaluation
from timebank.models.profile import Profile
from timebank.schemas.entry import (
    EntryFilter, EntryHistoryResponse, EntryMutationResponse, EntryResponse, EvaluationItem, RecipientItem,
)
from timebank.services.normalize import week_start_for
from timebank.services.validation import validate_entry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/entries", tags=["entries"])

HISTORY_LIMIT = 10


def _snapshot(entry: Entry) -> dict:
    return {
        "week_start": entry.week_start.isoformat(),
        "hours": entry.hours,
        "tags": list(entry.tags or []),
        "note": entry.note,
        "contributor_id": entry.contributor_id,
    }


async def _get_entry_or_404(db: AsyncSession, entry_id: str) -> Entry:
    result = await db.execute(select(Entry).where(Entry.id == entry_id))
    entry = result.scalar_one_or_none()
    if not entry:
        raise HTTPException(404, "Entry not found")
    return entry


async def _recipients_for(db: AsyncSession, entry_ids: List[str]) -> Dict[str, List[RecipientItem]]:
    grouped: Dict[str, List[RecipientItem]] = defaultdict(list)
    if not entry_ids:
        return grouped
    result = await db.execute(
        select(EntryRecipient)
        .where(EntryRecipient.entry_id.in_(entry_ids))
        .order_by(EntryRecipient.created_at, EntryRecipient.id)
    )
    for row in result.scalars().all():
        grouped[row.entry_id].append(RecipientItem.model_validate(row))
    return grouped


def _entry_response(entry: Entry, recipients: List[RecipientItem]) -> EntryResponse:
    response = EntryResponse.model_validate(entry)
    response.recipients = recipients
    return response


async def _ensure_contributor(db: AsyncSession, current_user: Profile, contributor_id: str) -> None:
    if contributor_id != current_user.id and current_user.role != "admin":
        raise HTTPException(403, "Permission denied (entries can only be recorded for yourself)")
    result = await db.execute(select(Profile.id).where(Profile.id == contributor_id))
    if not result.scalar_one_or_none():
        raise HTTPException(400, "Contributor not found")


async def _save_recipients(db: AsyncSession, entry_id: str, recipients: List[RecipientItem]) -> bool:
    """Secondary write: a failure is logged and reported, the entry stays saved."""
    if not recipients:
        return True
    try:
        db.add_all([
            EntryRecipient(entry_id=entry_id, recipient_id=r.recipient_id, recipient_type=r.recipient_type)
            for r in recipients
        ])
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Failed to insert recipients for entry %s", entry_id)
        return False
    return True


async def _save_evaluations(
    db: AsyncSession,
    entry_id: str,
    contributor_id: str,
    recipients: List[RecipientItem],
    evaluations: List[EvaluationItem],
) -> bool:
    # Each user recipient other than the contributor rates them on every submitted axis
    user_recipients = [r for r in recipients if r.recipient_type == "user" and r.recipient_id != contributor_id]
    if not evaluations or not user_recipients:
        return True
    try:
        db.add_all([
            DetailedEvaluation(
                entry_id=entry_id,
                evaluator_id=recipient.recipient_id,
                evaluated_id=contributor_id,
                axis_key=ev.axis_key,
                score=ev.score,
                comment=ev.comment or "",
            )
            for recipient in user_recipients
            for ev in evaluations
        ])
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Failed to insert evaluations for entry %s", entry_id)
        return False
    return True


async def _record_history(db: AsyncSession, entry_id: str, actor_id: str, action: str, snapshot: dict) -> None:
    try:
        db.add(EntryHistory(entry_id=entry_id, actor_id=actor_id, action=action, snapshot=snapshot))
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Failed to record %s history for entry %s", action, entry_id)


@router.post("", response_model=EntryMutationResponse)
async def create_entry(
    payload: dict = Body(...),
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    entry_in = validate_entry(payload, contributor_id=current_user.id)
    contributor_id = entry_in.contributor_id
    await _ensure_contributor(db, current_user, contributor_id)

    entry = Entry(
        week_start=entry_in.week_start,
        hours=entry_in.hours,
        tags=entry_in.tags,
        note=entry_in.note,
        contributor_id=contributor_id,
    )
    try:
        db.add(entry)
        await db.commit()
        await db.refresh(entry)
    except SQLAlchemyError as e:
        await db.rollback()
        raise UpstreamError(f"Failed to save entry: {e.__class__.__name__}")

    # a failed secondary write rolls back and expires every loaded object
    entry_id, snapshot, response = entry.id, _snapshot(entry), EntryResponse.model_validate(entry)
    actor_id = current_user.id
    warnings = []
    if not await _save_recipients(db, entry_id, entry_in.recipients):
        warnings.append("recipients")
    elif not await _save_evaluations(db, entry_id, contributor_id, entry_in.recipients, entry_in.detailed_evaluations):
        warnings.append("detailed_evaluations")
    await _record_history(db, entry_id, actor_id, "insert", snapshot)

    recipients = await _recipients_for(db, [entry_id])
    response.recipients = recipients[entry_id]
    return EntryMutationResponse(entry=response, warnings=warnings)


@router.get("", response_model=List[EntryResponse])
async def list_entries(
    filters: EntryFilter = Depends(),
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    query = select(Entry)
    if filters.week_start:
        query = query.where(Entry.week_start == week_start_for(filters.week_start))
    if filters.contributor_id:
        query = query.where(Entry.contributor_id == filters.contributor_id)

    result = await db.execute(query.order_by(Entry.week_start.desc(), Entry.created_at.desc()))
    entries = result.scalars().all()
    if filters.tag:
        tag = filters.tag.strip().lower()
        entries = [e for e in entries if tag in (e.tags or [])]

    recipients = await _recipients_for(db, [e.id for e in entries])
    return [_entry_response(e, recipients[e.id]) for e in entries]


@router.get("/tags", response_model=List[str])
async def list_tags(
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    result = await db.execute(select(Entry.tags))
    tags = set()
    for (entry_tags,) in result.all():
        tags.update(entry_tags or [])
    return sorted(tags)


@router.get("/{entry_id}", response_model=EntryResponse)
async def get_entry(
    entry_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    entry = await _get_entry_or_404(db, entry_id)
    recipients = await _recipients_for(db, [entry.id])
    return _entry_response(entry, recipients[entry.id])


@router.get("/{entry_id}/recipients", response_model=List[RecipientItem])
async def get_entry_recipients(
    entry_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    await _get_entry_or_404(db, entry_id)
    recipients = await _recipients_for(db, [entry_id])
    return recipients[entry_id]


@router.get("/{entry_id}/history", response_model=List[EntryHistoryResponse])
async def get_entry_history(
    entry_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    result = await db.execute(
        select(EntryHistory, Profile.display_name)
        .join(Profile, Profile.id == EntryHistory.actor_id, isouter=True)
        .where(EntryHistory.entry_id == entry_id)
        .order_by(EntryHistory.acted_at.desc(), EntryHistory.id.desc())
        .limit(HISTORY_LIMIT)
    )
    history = []
    for row, actor_name in result.all():
        item = EntryHistoryResponse.model_validate(row)
        item.actor_name = actor_name
        history.append(item)
    return history


@router.put("/{entry_id}", response_model=EntryMutationResponse)
async def update_entry(
    entry_id: str,
    payload: dict = Body(...),
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    entry_in = validate_entry(payload, partial=True)
    entry = await _get_entry_or_404(db, entry_id)
    if not is_owner_or_admin(current_user, entry.contributor_id):
        raise HTTPException(403, "Permission denied (only the contributor or an admin can edit)")
    if entry_in.contributor_id and entry_in.contributor_id != entry.contributor_id:
        await _ensure_contributor(db, current_user, entry_in.contributor_id)

    entry.week_start = entry_in.week_start
    entry.hours = entry_in.hours
    if entry_in.tags is not None:
        entry.tags = entry_in.tags
    if entry_in.note is not None:
        entry.note = entry_in.note
    if entry_in.contributor_id:
        entry.contributor_id = entry_in.contributor_id
    try:
        db.add(entry)
        await db.commit()
        await db.refresh(entry)
    except SQLAlchemyError as e:
        await db.rollback()
        raise UpstreamError(f"Failed to update entry: {e.__class__.__name__}")

    entry_id, snapshot, response = entry.id, _snapshot(entry), EntryResponse.model_validate(entry)
    actor_id = current_user.id
    warnings = []
    if entry_in.recipients is not None:
        # Replace wholesale: delete, then reinsert. No rollback if the reinsert fails.
        await db.execute(delete(EntryRecipient).where(EntryRecipient.entry_id == entry_id))
        await db.commit()
        if not await _save_recipients(db, entry_id, entry_in.recipients):
            warnings.append("recipients")
    await _record_history(db, entry_id, actor_id, "update", snapshot)

    recipients = await _recipients_for(db, [entry_id])
    response.recipients = recipients[entry_id]
    return EntryMutationResponse(entry=response, warnings=warnings)


@router.delete("/{entry_id}")
async def delete_entry(
    entry_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    entry = await _get_entry_or_404(db, entry_id)
    if not is_owner_or_admin(current_user, entry.contributor_id):
        raise HTTPException(403, "Permission denied (only the contributor or an admin can delete)")

    snapshot = _snapshot(entry)
    await db.execute(delete(DetailedEvaluation).where(DetailedEvaluation.entry_id == entry_id))
    await db.execute(delete(EntryRecipient).where(EntryRecipient.entry_id == entry_id))
    await db.delete(entry)
    await db.commit()
    await _record_history(db, entry_id, current_user.id, "delete", snapshot)
    return {"success": True}
