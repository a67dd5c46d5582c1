from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional
from datetime import date, datetime
from app.models.objective import ObjectiveStatus, ObjectiveType, Priority, KeyResultSource


class KeyResultIn(BaseModel):
    """Key result as submitted inside an objective payload; checked by the service."""
    id: Optional[int] = None
    title: str = ""
    unit: str = ""
    target_value: Optional[float] = None
    current_value: float = 0
    weight: int = Field(1, ge=1, le=10)
    progress: Optional[int] = Field(None, ge=0, le=100)
    source: KeyResultSource = KeyResultSource.MANUAL
    linked_id: Optional[str] = None
    confidence_score: int = Field(10, ge=1, le=10)


class KeyResultCreate(BaseModel):
    title: str = Field(..., min_length=1)
    target_value: float = Field(..., gt=0)
    unit: str = Field(..., min_length=1)
    weight: int = Field(1, ge=1, le=10)


class KeyResultUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    target_value: Optional[float] = Field(None, gt=0)
    unit: Optional[str] = Field(None, min_length=1)
    current_value: Optional[float] = None
    weight: Optional[int] = Field(None, ge=1, le=10)
    confidence_score: Optional[int] = Field(None, ge=1, le=10)


class KeyResultResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    current_value: float
    target_value: float
    unit: str
    weight: int
    progress: int
    source: str
    linked_id: Optional[str] = None
    confidence_score: int


class ObjectiveBase(BaseModel):
    title: str
    description: Optional[str] = None
    type: ObjectiveType = ObjectiveType.DEPARTMENT
    parent_id: Optional[int] = None
    priority: Priority = Priority.MEDIUM
    tags: List[str] = []
    owner_id: Optional[int] = None
    owner_name: Optional[str] = None
    department: Optional[str] = None
    quarter: str
    year: int
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class ObjectiveCreate(ObjectiveBase):
    status: ObjectiveStatus = ObjectiveStatus.DRAFT
    key_results: List[KeyResultIn] = []


class ObjectiveUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    type: Optional[ObjectiveType] = None
    parent_id: Optional[int] = None
    priority: Optional[Priority] = None
    tags: Optional[List[str]] = None
    owner_id: Optional[int] = None
    owner_name: Optional[str] = None
    department: Optional[str] = None
    quarter: Optional[str] = None
    year: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[ObjectiveStatus] = None
    key_results: Optional[List[KeyResultIn]] = None


class ObjectiveStatusUpdate(BaseModel):
    status: ObjectiveStatus


class ObjectiveResponse(ObjectiveBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    is_personal: bool = False
    tags: Optional[List[str]] = None
    status: str
    progress: int
    key_results: List[KeyResultResponse] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
