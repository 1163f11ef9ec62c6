from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import List, Literal, Optional

from timebank.constants import MAX_TAGS
from timebank.services.normalize import normalize_tags

TaskStatus = Literal["open", "in_progress", "completed", "cancelled"]

class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    tags: List[str] = Field(default_factory=list, max_length=MAX_TAGS)
    estimated_hours: Optional[float] = Field(None, gt=0)

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, value: List[str]) -> List[str]:
        return normalize_tags(value)

class TaskUpdateStatus(BaseModel):
    status: TaskStatus

class TaskResponse(BaseModel):
    id: str
    title: str
    description: str
    tags: List[str]
    estimated_hours: Optional[float]
    requester_id: str
    assignee_id: Optional[str]
    status: str
    created_at: Optional[datetime]
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

class TaskApplicationResponse(BaseModel):
    id: str
    task_id: str
    applicant_id: str
    status: str
    created_at: Optional[datetime]

    model_config = {"from_attributes": True}

class TaskDetailResponse(TaskResponse):
    applications: List[TaskApplicationResponse] = []
    my_application: Optional[TaskApplicationResponse] = None
    is_requester: bool = False
