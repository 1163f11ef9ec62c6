from pydantic import BaseModel, Field, field_validator
from datetime import date, datetime
from typing import List, Literal, Optional

from timebank.constants import EVALUATION_AXIS_KEYS, MAX_COMMENT_LENGTH, MAX_HOURS, MAX_NOTE_LENGTH, MAX_TAGS
from timebank.schemas.common import Identifier
from timebank.services.normalize import DATE_PATTERN, normalize_tags, week_start_for


class RecipientItem(BaseModel):
    recipient_id: Identifier
    recipient_type: Literal["user", "guild"]

    model_config = {"from_attributes": True}


class EvaluationItem(BaseModel):
    axis_key: str
    score: int = Field(..., ge=1, le=5)
    comment: str = Field("", max_length=MAX_COMMENT_LENGTH)

    @field_validator("axis_key")
    @classmethod
    def known_axis(cls, value: str) -> str:
        if value not in EVALUATION_AXIS_KEYS:
            raise ValueError("Unknown evaluation axis")
        return value


class EntryFields(BaseModel):
    """Shared rules for create and update. week_start is snapped to its Monday here and nowhere else."""

    week_start: date
    hours: float = Field(..., gt=0, le=MAX_HOURS, allow_inf_nan=False)

    @field_validator("week_start", mode="before")
    @classmethod
    def snap_to_monday(cls, value):
        if isinstance(value, str) and not DATE_PATTERN.match(value):
            raise ValueError("Invalid date format (YYYY-MM-DD required)")
        if isinstance(value, (str, date)):
            return week_start_for(value)
        raise ValueError("Invalid date format (YYYY-MM-DD required)")

    @field_validator("hours", mode="before")
    @classmethod
    def hours_is_number(cls, value):
        # JSON numbers only: no booleans, no numeric strings
        if isinstance(value, (bool, str)):
            raise ValueError("Hours must be a number")
        return value

    @field_validator("recipients", check_fields=False)
    @classmethod
    def unique_recipients(cls, value):
        if value is None:
            return value
        ids = [r.recipient_id for r in value]
        if len(ids) != len(set(ids)):
            raise ValueError("Each recipient may appear only once")
        return value

    @field_validator("tags", mode="after", check_fields=False)
    @classmethod
    def clean_tags(cls, value):
        return normalize_tags(value) if value is not None else None


class EntryCreate(EntryFields):
    tags: List[str] = Field(default_factory=list, max_length=MAX_TAGS)
    note: str = Field("", max_length=MAX_NOTE_LENGTH)
    contributor_id: Optional[Identifier] = None  # defaults to the caller
    recipients: List[RecipientItem] = Field(default_factory=list)
    detailed_evaluations: List[EvaluationItem] = Field(default_factory=list)

    @field_validator("detailed_evaluations")
    @classmethod
    def one_score_per_axis(cls, value: List[EvaluationItem]) -> List[EvaluationItem]:
        keys = [ev.axis_key for ev in value]
        if len(keys) != len(set(keys)):
            raise ValueError("Each evaluation axis may be scored only once")
        return value


class EntryUpdate(EntryFields):
    tags: Optional[List[str]] = Field(None, max_length=MAX_TAGS)
    note: Optional[str] = Field(None, max_length=MAX_NOTE_LENGTH)
    contributor_id: Optional[Identifier] = None
    # None keeps the stored list; [] clears it
    recipients: Optional[List[RecipientItem]] = None


class EntryFilter(BaseModel):
    week_start: Optional[date] = None
    tag: Optional[str] = None
    contributor_id: Optional[str] = None


class EntryResponse(BaseModel):
    id: str
    week_start: date
    hours: float
    tags: List[str]
    note: str
    contributor_id: str
    recipient_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    recipients: List[RecipientItem] = []

    model_config = {"from_attributes": True}


class EntryHistoryResponse(BaseModel):
    id: int
    entry_id: str
    actor_id: Optional[str]
    actor_name: Optional[str] = None
    action: str
    snapshot: dict
    acted_at: Optional[datetime]

    model_config = {"from_attributes": True}


class RecipientOption(BaseModel):
    id: str
    name: str
    type: Literal["user", "guild"]


class EntryMutationResponse(BaseModel):
    success: bool = True
    entry: EntryResponse
    # secondary writes that failed after the entry itself was saved
    warnings: List[str] = []
