from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=72)


class ProfileResponse(BaseModel):
    id: str
    email: str
    username: Optional[str] = None
    full_name: str
    position: Optional[str] = None
    department: Optional[str] = None
    avatar_url: Optional[str] = None
    allow_public_view: bool = True
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class MeResponse(ProfileResponse):
    role: str


class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str
    user: MeResponse


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=2, max_length=100)
    username: Optional[str] = None
    position: Optional[str] = None
    department: Optional[str] = None
    avatar_url: Optional[str] = None
    allow_public_view: Optional[bool] = None


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=8, max_length=72)


class UserCreate(BaseModel):
    email: EmailStr
    full_name: str = Field(..., min_length=2, max_length=100)
    password: str = Field(..., min_length=8, max_length=72)
    role: str = "user"
    username: Optional[str] = None
    position: Optional[str] = None
    department: Optional[str] = None


class UserUpdate(ProfileUpdate):
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=8, max_length=72)


class RoleUpdate(BaseModel):
    role: str  # "user", "supervisor" or "admin"


class UserWithRole(BaseModel):
    profile: ProfileResponse
    role: str


class AdminStats(BaseModel):
    total_users: int
    total_periods: int
    total_assignments: int
    completed_assignments: int
    pending_assignments: int
    completion_rate: int
    active_period_id: Optional[str] = None
