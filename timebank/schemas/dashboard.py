from pydantic import BaseModel
from datetime import date, datetime
from typing import List, Optional

from timebank.schemas.quarterly import QuarterlySummary

class WeeklyData(BaseModel):
    week: date
    hours: float

class TagData(BaseModel):
    tag: str
    hours: float

class UserRanking(BaseModel):
    user_id: str
    display_name: str
    total_hours: float
    avg_rating: float
    feedback_count: int
    value_score: float

class ValueScoreStats(BaseModel):
    total_hours: float = 0.0
    avg_rating: float = 0.0
    feedback_count: int = 0
    value_score: float = 0.0

class KPIStats(BaseModel):
    provided_hours: float
    received_hours: float
    balance_hours: float
    balance_label: str  # surplus provided, surplus received, balanced
    avg_rating: float
    collaborator_count: int

class EvaluationAxisScore(BaseModel):
    axis_key: str
    axis_label: str
    avg_score: float
    count: int

class RecentActivity(BaseModel):
    id: str
    week_start: date
    hours: float
    tags: List[str]
    note: str
    contributor_id: str
    contributor_name: str
    created_at: Optional[datetime]

class RankingsResponse(BaseModel):
    month: date
    top_contributors: List[UserRanking]
    top_by_value_score: List[UserRanking]

class DashboardResponse(BaseModel):
    month: date
    kpi: KPIStats
    weekly: List[WeeklyData]
    tags: List[TagData]
    top_contributors: List[UserRanking]
    top_by_value_score: List[UserRanking]
    my_value_score: ValueScoreStats
    quarterly_summary: Optional[QuarterlySummary]
    evaluation_trends: List[EvaluationAxisScore]
    recent_activities: List[RecentActivity]
