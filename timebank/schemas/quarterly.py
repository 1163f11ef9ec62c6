from pydantic import BaseModel, Field, model_validator
from datetime import date, datetime
from typing import List, Optional

class QuarterlyActionCreate(BaseModel):
    action_text: str = Field(..., min_length=1, max_length=500)
    deadline: Optional[date] = None

class QuarterlyReflectionCreate(BaseModel):
    quarter_start: date
    quarter_end: date
    achievement_rate: float = Field(0.0, ge=0, le=100)
    avg_peer_rating: float = Field(0.0, ge=0, le=5)
    avg_goal_rating: float = Field(0.0, ge=0, le=5)
    actions: List[QuarterlyActionCreate] = []

    @model_validator(mode="after")
    def quarter_in_order(self):
        if self.quarter_end < self.quarter_start:
            raise ValueError("quarter_end must not be before quarter_start")
        return self

class QuarterlyActionResponse(BaseModel):
    id: str
    action_text: str
    deadline: Optional[date]

    model_config = {"from_attributes": True}

class QuarterlySummary(BaseModel):
    id: str
    user_id: str
    quarter_start: date
    quarter_end: date
    achievement_rate: float
    avg_peer_rating: float
    avg_goal_rating: float
    created_at: Optional[datetime] = None
    actions: List[QuarterlyActionResponse] = []

    model_config = {"from_attributes": True}
