"""
Dashboard arithmetic over rows already fetched from storage.

Every function here is pure: same rows in, same numbers out. The caller
supplies the subject user and, where it matters, the month.
"""
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from timebank.schemas.dashboard import EvaluationAxisScore, KPIStats, TagData, UserRanking, WeeklyData

DEFAULT_TOP_K = 10
DEFAULT_WEEKS = 12


@dataclass(frozen=True)
class EntryRow:
    id: str
    week_start: date
    hours: float
    contributor_id: str
    tags: Tuple[str, ...] = ()
    recipient_id: Optional[str] = None  # legacy single-recipient column


@dataclass(frozen=True)
class RecipientRow:
    entry_id: str
    recipient_id: str
    recipient_type: str = "user"


@dataclass(frozen=True)
class EvaluationRow:
    evaluated_id: str
    axis_key: str
    score: int
    evaluator_id: str = ""


@dataclass(frozen=True)
class ValueScoreRow:
    user_id: str
    display_name: str
    month: date
    total_hours: float = 0.0
    avg_rating: float = 0.0
    feedback_count: int = 0
    value_score: float = 0.0


def value_score(total_hours: float, avg_rating: float) -> float:
    return total_hours * 1.0 + avg_rating * 2.0


def balance_label(balance_hours: float) -> str:
    if balance_hours > 0:
        return "surplus provided"
    if balance_hours < 0:
        return "surplus received"
    return "balanced"


def _recipients_by_entry(entries: Sequence[EntryRow], recipients: Iterable[RecipientRow]) -> Dict[str, Set[str]]:
    """entry id → recipient ids, unioning the link table with the legacy column"""
    by_entry: Dict[str, Set[str]] = defaultdict(set)
    for row in recipients:
        by_entry[row.entry_id].add(row.recipient_id)
    for entry in entries:
        if entry.recipient_id:
            by_entry[entry.id].add(entry.recipient_id)
    return by_entry


def compute_kpi_stats(
    user_id: str,
    entries: Sequence[EntryRow],
    recipients: Iterable[RecipientRow],
    evaluations: Iterable[EvaluationRow],
) -> KPIStats:
    by_entry = _recipients_by_entry(entries, recipients)

    provided = 0.0
    received = 0.0
    collaborators: Set[str] = set()
    for entry in entries:
        entry_recipients = by_entry.get(entry.id, set())
        if entry.contributor_id == user_id:
            provided += entry.hours
            collaborators.update(entry_recipients)
        if user_id in entry_recipients:
            received += entry.hours
            collaborators.add(entry.contributor_id)
    collaborators.discard(user_id)

    scores = [ev.score for ev in evaluations if ev.evaluated_id == user_id]
    avg_rating = sum(scores) / len(scores) if scores else 0.0

    balance = provided - received
    return KPIStats(
        provided_hours=provided,
        received_hours=received,
        balance_hours=balance,
        balance_label=balance_label(balance),
        avg_rating=avg_rating,
        collaborator_count=len(collaborators),
    )


def tag_distribution(entries: Iterable[EntryRow], limit: int = DEFAULT_TOP_K) -> List[TagData]:
    """Hours per tag. A multi-tag entry counts its full hours in every one of its tags."""
    totals: Dict[str, float] = {}
    for entry in entries:
        for tag in entry.tags:
            totals[tag] = totals.get(tag, 0.0) + entry.hours
    # sorted() is stable: equal totals keep first-seen order
    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return [TagData(tag=tag, hours=hours) for tag, hours in ranked[:limit]]


def weekly_series(user_id: str, entries: Iterable[EntryRow], limit: int = DEFAULT_WEEKS) -> List[WeeklyData]:
    """The user's most recent `limit` weeks that have entries, newest first"""
    totals: Dict[date, float] = defaultdict(float)
    for entry in entries:
        if entry.contributor_id == user_id:
            totals[entry.week_start] += entry.hours
    weeks = sorted(totals, reverse=True)[:limit]
    return [WeeklyData(week=week, hours=totals[week]) for week in weeks]


def rank_value_scores(
    rows: Iterable[ValueScoreRow],
    month: date,
    key: str = "total_hours",
    limit: int = DEFAULT_TOP_K,
) -> List[UserRanking]:
    """Monthly leaderboard by `total_hours` or `value_score`. Ties keep input order."""
    if key not in ("total_hours", "value_score"):
        raise ValueError(f"Unsupported ranking key: {key}")
    in_month = [row for row in rows if row.month == month]
    ranked = sorted(in_month, key=lambda row: getattr(row, key) or 0.0, reverse=True)
    return [
        UserRanking(
            user_id=row.user_id,
            display_name=row.display_name,
            total_hours=row.total_hours or 0.0,
            avg_rating=row.avg_rating or 0.0,
            feedback_count=row.feedback_count or 0,
            value_score=row.value_score or 0.0,
        )
        for row in ranked[:limit]
    ]


def evaluation_trends(
    user_id: str,
    evaluations: Iterable[EvaluationRow],
    axes: Sequence[Tuple[str, str]],
) -> List[EvaluationAxisScore]:
    """Mean score and count per axis, in axis order. Axes nobody rated report 0/0."""
    scores: Dict[str, List[int]] = defaultdict(list)
    for ev in evaluations:
        if ev.evaluated_id == user_id:
            scores[ev.axis_key].append(ev.score)

    trends = []
    for axis_key, axis_label in axes:
        axis_scores = scores.get(axis_key, [])
        trends.append(EvaluationAxisScore(
            axis_key=axis_key,
            axis_label=axis_label,
            avg_score=sum(axis_scores) / len(axis_scores) if axis_scores else 0.0,
            count=len(axis_scores),
        ))
    return trends
