from pydantic import BaseModel, Field
from datetime import date
from typing import List, Optional

class AsanaTaskCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Task name is required")
    notes: Optional[str] = None
    due_on: Optional[date] = None

class IntegrationStatus(BaseModel):
    name: str
    configured: bool
    missing: List[str] = []
