from pydantic import BaseModel, Field, ConfigDict
from datetime import date, datetime
from typing import Optional
from app.models.task import TaskStatus
from app.models.objective import Priority

class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.TODO
    priority: Priority = Priority.MEDIUM
    assignee_id: Optional[int] = None
    assignee_name: Optional[str] = None
    kr_id: Optional[int] = None
    kr_title: Optional[str] = None
    kpi_id: Optional[int] = None
    due_date: Optional[date] = None

class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[Priority] = None
    assignee_id: Optional[int] = None
    assignee_name: Optional[str] = None
    kr_id: Optional[int] = None
    kr_title: Optional[str] = None
    kpi_id: Optional[int] = None
    due_date: Optional[date] = None

class TaskStatusUpdate(BaseModel):
    status: TaskStatus

class TaskAssign(BaseModel):
    assignee_id: int
    assignee_name: Optional[str] = None

class TaskResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    status: str
    priority: str
    assignee_id: Optional[int] = None
    assignee_name: Optional[str] = None
    kr_id: Optional[int] = None
    kr_title: Optional[str] = None
    kpi_id: Optional[int] = None
    due_date: Optional[date] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
