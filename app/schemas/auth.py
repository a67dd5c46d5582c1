from pydantic import BaseModel, EmailStr, ConfigDict, Field
from typing import Optional
from app.models.user import UserRole
from datetime import datetime

class UserBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    role: UserRole = UserRole.EMPLOYEE
    department: Optional[str] = None
    position: Optional[str] = None
    avatar: Optional[str] = None
    supervisor_id: Optional[int] = None

class UserCreate(UserBase):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)

class UserResponse(UserBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    # Plain str: the bootstrap admin address need not be deliverable
    email: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class LoginRequest(BaseModel):
    email: str
    password: str

class Token(BaseModel):
    access_token: str
    token_type: str
    user: UserResponse

class TokenData(BaseModel):
    user_id: int

class UserUpdate(BaseModel):
    """Partial update. Password changes go through the dedicated endpoint."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    role: Optional[UserRole] = None
    department: Optional[str] = None
    position: Optional[str] = None
    avatar: Optional[str] = None
    supervisor_id: Optional[int] = None

class AvatarUpdate(BaseModel):
    avatar: str = Field(..., min_length=1)

class PasswordChange(BaseModel):
    password: str = Field(..., min_length=6, max_length=72)
