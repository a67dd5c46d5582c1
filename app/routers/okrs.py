from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional

from app.database import get_db
from app.models.user import User
from app.routers.auth_deps import get_current_user
from app.schemas.objective import (
    KeyResultCreate,
    KeyResultUpdate,
    ObjectiveCreate,
    ObjectiveResponse,
    ObjectiveStatusUpdate,
    ObjectiveUpdate,
)
from app.services.objective_service import ObjectiveService

router = APIRouter(
    prefix="/okrs",
    tags=["OKRs"],
    dependencies=[Depends(get_current_user)]
)


@router.get("/", response_model=List[ObjectiveResponse])
def list_okrs(
    quarter: Optional[str] = None,
    year: Optional[int] = None,
    department: Optional[str] = None,
    db: Session = Depends(get_db)
):
    return ObjectiveService(db).list_objectives(quarter=quarter, year=year, department=department)


@router.post("/", response_model=ObjectiveResponse)
def create_okr(data: ObjectiveCreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    if data.owner_id is None:
        data = data.model_copy(update={
            "owner_id": current_user.id,
            "owner_name": data.owner_name or current_user.name,
            "department": data.department or current_user.department,
        })
    return ObjectiveService(db).create_objective(data)


@router.get("/{objective_id}", response_model=ObjectiveResponse)
def get_okr(objective_id: int, db: Session = Depends(get_db)):
    return ObjectiveService(db).get_objective(objective_id)


@router.put("/{objective_id}", response_model=ObjectiveResponse)
def update_okr(objective_id: int, data: ObjectiveUpdate, db: Session = Depends(get_db)):
    return ObjectiveService(db).update_objective(objective_id, data)


@router.delete("/{objective_id}")
def delete_okr(objective_id: int, db: Session = Depends(get_db)):
    ObjectiveService(db).delete_objective(objective_id)
    return {"message": "Deleted"}


@router.patch("/{objective_id}/status", response_model=ObjectiveResponse)
def update_okr_status(objective_id: int, data: ObjectiveStatusUpdate, db: Session = Depends(get_db)):
    """Approve, reject or otherwise move an objective through its lifecycle."""
    return ObjectiveService(db).set_status(objective_id, data.status)


# --- Key Results ---

@router.post("/{objective_id}/keyresults", response_model=ObjectiveResponse)
def add_key_result(objective_id: int, data: KeyResultCreate, db: Session = Depends(get_db)):
    return ObjectiveService(db).add_key_result(objective_id, data)


@router.put("/{objective_id}/keyresults/{kr_id}", response_model=ObjectiveResponse)
def update_key_result(objective_id: int, kr_id: int, data: KeyResultUpdate, db: Session = Depends(get_db)):
    return ObjectiveService(db).update_key_result(objective_id, kr_id, data)


@router.delete("/{objective_id}/keyresults/{kr_id}", response_model=ObjectiveResponse)
def delete_key_result(objective_id: int, kr_id: int, db: Session = Depends(get_db)):
    return ObjectiveService(db).delete_key_result(objective_id, kr_id)
