from pydantic import BaseModel, EmailStr, Field
from typing import Literal, Optional
from datetime import datetime

class OtpRequest(BaseModel):
    email: EmailStr

class OtpVerify(BaseModel):
    email: EmailStr
    code: str = Field(..., pattern=r"^\d{6}$")

class RefreshRequest(BaseModel):
    refresh_token: str

class ProfileResponse(BaseModel):
    id: str
    email: EmailStr
    display_name: str
    active: bool
    role: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

class ProfileUpdate(BaseModel):
    active: Optional[bool] = None
    role: Optional[Literal["member", "admin"]] = None

class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str
    user: ProfileResponse

class GuildCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = ""

class GuildResponse(BaseModel):
    id: str
    name: str
    description: str

    model_config = {"from_attributes": True}
