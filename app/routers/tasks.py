from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional

from app.database import get_db
from app.models.task import TaskStatus
from app.routers.auth_deps import get_current_user
from app.schemas.task import TaskAssign, TaskCreate, TaskResponse, TaskStatusUpdate, TaskUpdate
from app.services.task_service import TaskService

router = APIRouter(
    prefix="/tasks",
    tags=["Tasks"],
    dependencies=[Depends(get_current_user)]
)


@router.get("/", response_model=List[TaskResponse])
def list_tasks(
    assignee_id: Optional[int] = None,
    kr_id: Optional[int] = None,
    status: Optional[TaskStatus] = None,
    db: Session = Depends(get_db)
):
    return TaskService(db).list_tasks(assignee_id=assignee_id, kr_id=kr_id, status=status)


@router.post("/", response_model=TaskResponse)
def create_task(data: TaskCreate, db: Session = Depends(get_db)):
    return TaskService(db).create_task(data)


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(task_id: int, db: Session = Depends(get_db)):
    return TaskService(db).get_task(task_id)


@router.put("/{task_id}", response_model=TaskResponse)
def update_task(task_id: int, data: TaskUpdate, db: Session = Depends(get_db)):
    return TaskService(db).update_task(task_id, data)


@router.delete("/{task_id}")
def delete_task(task_id: int, db: Session = Depends(get_db)):
    TaskService(db).delete_task(task_id)
    return {"message": "Deleted"}


@router.patch("/{task_id}/status", response_model=TaskResponse)
def update_task_status(task_id: int, data: TaskStatusUpdate, db: Session = Depends(get_db)):
    return TaskService(db).set_status(task_id, data.status)


@router.patch("/{task_id}/assign", response_model=TaskResponse)
def assign_task(task_id: int, data: TaskAssign, db: Session = Depends(get_db)):
    return TaskService(db).assign(task_id, data.assignee_id, data.assignee_name)
