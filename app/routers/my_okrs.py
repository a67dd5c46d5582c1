from fastapi import APIRouter, Depends, status
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

# Personal OKRs: every route is scoped to objectives the caller owns
router = APIRouter(
    prefix="/my-okrs",
    tags=["My OKRs"],
)


def get_personal_service(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ObjectiveService:
    return ObjectiveService(db, owner=current_user)


@router.get("/", response_model=List[ObjectiveResponse])
def list_my_okrs(
    quarter: Optional[str] = None,
    year: Optional[int] = None,
    service: ObjectiveService = Depends(get_personal_service),
):
    return service.list_objectives(quarter=quarter, year=year)


@router.post("/", response_model=ObjectiveResponse, status_code=status.HTTP_201_CREATED)
def create_my_okr(data: ObjectiveCreate, service: ObjectiveService = Depends(get_personal_service)):
    return service.create_objective(data)


@router.get("/{objective_id}", response_model=ObjectiveResponse)
def get_my_okr(objective_id: int, service: ObjectiveService = Depends(get_personal_service)):
    return service.get_objective(objective_id)


@router.put("/{objective_id}", response_model=ObjectiveResponse)
def update_my_okr(objective_id: int, data: ObjectiveUpdate, service: ObjectiveService = Depends(get_personal_service)):
    return service.update_objective(objective_id, data)


@router.delete("/{objective_id}")
def delete_my_okr(objective_id: int, service: ObjectiveService = Depends(get_personal_service)):
    service.delete_objective(objective_id)
    return {"message": "OKR deleted"}


@router.patch("/{objective_id}/status", response_model=ObjectiveResponse)
def update_my_okr_status(
    objective_id: int,
    data: ObjectiveStatusUpdate,
    service: ObjectiveService = Depends(get_personal_service),
):
    return service.set_status(objective_id, data.status)


# --- Key Results ---

@router.post("/{objective_id}/keyresults", response_model=ObjectiveResponse)
def add_my_key_result(
    objective_id: int,
    data: KeyResultCreate,
    service: ObjectiveService = Depends(get_personal_service),
):
    return service.add_key_result(objective_id, data)


@router.put("/{objective_id}/keyresults/{kr_id}", response_model=ObjectiveResponse)
def update_my_key_result(
    objective_id: int,
    kr_id: int,
    data: KeyResultUpdate,
    service: ObjectiveService = Depends(get_personal_service),
):
    return service.update_key_result(objective_id, kr_id, data)


@router.delete("/{objective_id}/keyresults/{kr_id}", response_model=ObjectiveResponse)
def delete_my_key_result(objective_id: int, kr_id: int, service: ObjectiveService = Depends(get_personal_service)):
    return service.delete_key_result(objective_id, kr_id)
