from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime


class DepartmentBase(BaseModel):
    """Base schema for department data."""
    name: str = Field(..., min_length=1, max_length=100)
    head: Optional[str] = None
    description: Optional[str] = None


class DepartmentCreate(DepartmentBase):
    """Schema for creating a new department."""
    pass


class DepartmentUpdate(BaseModel):
    """Schema for updating a department."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    head: Optional[str] = None
    description: Optional[str] = None


class DepartmentResponse(DepartmentBase):
    """Schema for department response."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # Computed at read time
    member_count: int = 0
