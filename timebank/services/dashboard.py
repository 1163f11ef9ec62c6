from datetime import date
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from timebank.constants import EVALUATION_AXES
from timebank.models.entry import Entry, EntryRecipient
from timebank.models.evaluation import DetailedEvaluation, EvaluationAxis
from timebank.models.performance import MonthlyValueScore
from timebank.models.profile import Profile
from timebank.models.quarterly import QuarterlyAction, QuarterlyReflection
from timebank.schemas.dashboard import (
    EvaluationAxisScore, KPIStats, RecentActivity, TagData, UserRanking, ValueScoreStats, WeeklyData,
)
from timebank.schemas.quarterly import QuarterlyActionResponse, QuarterlySummary
from timebank.services.aggregations import (
    DEFAULT_TOP_K, DEFAULT_WEEKS, EntryRow, EvaluationRow, RecipientRow, ValueScoreRow,
    compute_kpi_stats, evaluation_trends, rank_value_scores, tag_distribution, weekly_series,
)

QUARTERLY_ACTION_LIMIT = 3


def to_entry_row(entry: Entry) -> EntryRow:
    return EntryRow(
        id=entry.id,
        week_start=entry.week_start,
        hours=float(entry.hours),
        contributor_id=entry.contributor_id,
        tags=tuple(entry.tags or ()),
        recipient_id=entry.recipient_id,
    )


async def get_kpi_stats(db: AsyncSession, user_id: str) -> KPIStats:
    linked = select(EntryRecipient.entry_id).where(EntryRecipient.recipient_id == user_id)
    result = await db.execute(
        select(Entry).where(or_(
            Entry.contributor_id == user_id,
            Entry.recipient_id == user_id,
            Entry.id.in_(linked),
        ))
    )
    entries = [to_entry_row(e) for e in result.scalars().all()]

    recipients = []
    if entries:
        result = await db.execute(
            select(EntryRecipient).where(EntryRecipient.entry_id.in_([e.id for e in entries]))
        )
        recipients = [
            RecipientRow(entry_id=r.entry_id, recipient_id=r.recipient_id, recipient_type=r.recipient_type)
            for r in result.scalars().all()
        ]

    result = await db.execute(select(DetailedEvaluation).where(DetailedEvaluation.evaluated_id == user_id))
    evaluations = [
        EvaluationRow(evaluated_id=ev.evaluated_id, axis_key=ev.axis_key, score=ev.score)
        for ev in result.scalars().all()
    ]
    return compute_kpi_stats(user_id, entries, recipients, evaluations)


async def get_user_weekly_data(db: AsyncSession, user_id: str, limit: int = DEFAULT_WEEKS) -> List[WeeklyData]:
    result = await db.execute(select(Entry).where(Entry.contributor_id == user_id))
    return weekly_series(user_id, [to_entry_row(e) for e in result.scalars().all()], limit)


async def get_tag_distribution(db: AsyncSession, limit: int = DEFAULT_TOP_K) -> List[TagData]:
    result = await db.execute(select(Entry).order_by(Entry.created_at, Entry.id))
    return tag_distribution([to_entry_row(e) for e in result.scalars().all()], limit)


async def _value_score_rows(db: AsyncSession, month: date) -> List[ValueScoreRow]:
    result = await db.execute(
        select(MonthlyValueScore)
        .where(MonthlyValueScore.month == month)
        .order_by(MonthlyValueScore.user_id)
    )
    return [
        ValueScoreRow(
            user_id=row.user_id,
            display_name=row.display_name,
            month=row.month,
            total_hours=row.total_hours or 0.0,
            avg_rating=row.avg_rating or 0.0,
            feedback_count=row.feedback_count or 0,
            value_score=row.value_score or 0.0,
        )
        for row in result.scalars().all()
    ]


async def get_top_contributors(db: AsyncSession, month: date, limit: int = DEFAULT_TOP_K) -> List[UserRanking]:
    return rank_value_scores(await _value_score_rows(db, month), month, "total_hours", limit)


async def get_top_by_value_score(db: AsyncSession, month: date, limit: int = DEFAULT_TOP_K) -> List[UserRanking]:
    return rank_value_scores(await _value_score_rows(db, month), month, "value_score", limit)


async def get_user_value_score(db: AsyncSession, user_id: str, month: date) -> ValueScoreStats:
    result = await db.execute(
        select(MonthlyValueScore)
        .where(MonthlyValueScore.user_id == user_id)
        .where(MonthlyValueScore.month == month)
    )
    row = result.scalar_one_or_none()
    if not row:
        return ValueScoreStats()
    return ValueScoreStats(
        total_hours=row.total_hours or 0.0,
        avg_rating=row.avg_rating or 0.0,
        feedback_count=row.feedback_count or 0,
        value_score=row.value_score or 0.0,
    )


async def get_evaluation_axes(db: AsyncSession) -> Sequence[Tuple[str, str]]:
    result = await db.execute(select(EvaluationAxis).order_by(EvaluationAxis.display_order))
    axes = [(axis.axis_key, axis.axis_label) for axis in result.scalars().all()]
    return axes or EVALUATION_AXES


async def get_evaluation_trends(db: AsyncSession, user_id: str) -> List[EvaluationAxisScore]:
    result = await db.execute(select(DetailedEvaluation).where(DetailedEvaluation.evaluated_id == user_id))
    evaluations = [
        EvaluationRow(evaluated_id=ev.evaluated_id, axis_key=ev.axis_key, score=ev.score)
        for ev in result.scalars().all()
    ]
    return evaluation_trends(user_id, evaluations, await get_evaluation_axes(db))


async def get_recent_activities(db: AsyncSession, limit: int = 5) -> List[RecentActivity]:
    result = await db.execute(
        select(Entry, Profile.display_name)
        .join(Profile, Profile.id == Entry.contributor_id, isouter=True)
        .order_by(Entry.created_at.desc(), Entry.id)
        .limit(limit)
    )
    return [
        RecentActivity(
            id=entry.id,
            week_start=entry.week_start,
            hours=entry.hours,
            tags=entry.tags or [],
            note=entry.note,
            contributor_id=entry.contributor_id,
            contributor_name=name or "Unknown",
            created_at=entry.created_at,
        )
        for entry, name in result.all()
    ]


async def get_latest_quarterly_summary(db: AsyncSession, user_id: str) -> Optional[QuarterlySummary]:
    result = await db.execute(
        select(QuarterlyReflection)
        .where(QuarterlyReflection.user_id == user_id)
        .order_by(QuarterlyReflection.quarter_start.desc())
        .limit(1)
    )
    reflection = result.scalar_one_or_none()
    if not reflection:
        return None

    result = await db.execute(
        select(QuarterlyAction)
        .where(QuarterlyAction.quarterly_reflection_id == reflection.id)
        .order_by(QuarterlyAction.deadline.is_(None), QuarterlyAction.deadline, QuarterlyAction.created_at)
        .limit(QUARTERLY_ACTION_LIMIT)
    )
    summary = QuarterlySummary.model_validate(reflection)
    summary.actions = [QuarterlyActionResponse.model_validate(a) for a in result.scalars().all()]
    return summary
