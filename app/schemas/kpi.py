from pydantic import BaseModel, Field, ConfigDict
from datetime import date, datetime
from typing import Optional
from app.models.kpi import KPIType


class KPIBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    type: KPIType
    target_value: float = Field(100, ge=0)
    current_value: float = 0
    unit: str = "%"
    weight: int = Field(1, ge=1, le=10)
    department: str = Field(..., min_length=1)
    assigned_to: Optional[int] = None
    assigned_to_name: Optional[str] = None
    assigned_to_department: Optional[str] = None
    linked_okr_id: Optional[int] = None
    linked_kr_id: Optional[int] = None
    linked_kr_title: Optional[str] = None
    linked_task_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    quarter: str = Field(..., min_length=1)
    year: int


class KPICreate(KPIBase):
    pass


class KPIUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    target_value: Optional[float] = Field(None, ge=0)
    current_value: Optional[float] = None
    unit: Optional[str] = None
    weight: Optional[int] = Field(None, ge=1, le=10)
    department: Optional[str] = Field(None, min_length=1)
    assigned_to: Optional[int] = None
    assigned_to_name: Optional[str] = None
    assigned_to_department: Optional[str] = None
    linked_okr_id: Optional[int] = None
    linked_kr_id: Optional[int] = None
    linked_kr_title: Optional[str] = None
    linked_task_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    quarter: Optional[str] = Field(None, min_length=1)
    year: Optional[int] = None


class KPIProgressUpdate(BaseModel):
    current_value: float


class KPIResponse(KPIBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    type: str
    progress: int
    status: str
    assigned_by: Optional[int] = None
    assigned_by_name: Optional[str] = None
    linked_okr_title: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
