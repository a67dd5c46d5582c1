from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import List
import logging

from app.core.exceptions import BusinessRuleError, ConflictError, NotFoundError
from app.database import get_db
from app.models.department import Department
from app.models.kpi import KPI
from app.models.objective import Objective
from app.models.user import User
from app.routers.auth_deps import get_current_user, require_manager
from app.schemas.department import DepartmentCreate, DepartmentResponse, DepartmentUpdate

router = APIRouter(prefix="/departments", tags=["Departments"])
logger = logging.getLogger(__name__)


def _member_count(db: Session, name: str) -> int:
    return db.query(func.count(User.id)).filter(User.department == name).scalar() or 0


def _to_response(db: Session, dept: Department) -> DepartmentResponse:
    response = DepartmentResponse.model_validate(dept)
    response.member_count = _member_count(db, dept.name)
    return response


def _get_or_404(db: Session, department_id: int) -> Department:
    dept = db.get(Department, department_id)
    if not dept:
        raise NotFoundError("Department")
    return dept


def _ensure_unique_name(db: Session, name: str, exclude_id: int = None):
    query = db.query(Department).filter(Department.name == name)
    if exclude_id is not None:
        query = query.filter(Department.id != exclude_id)
    if query.first():
        raise ConflictError("Department name already exists")


@router.get("/", response_model=List[DepartmentResponse])
def list_departments(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    counts = dict(
        db.query(User.department, func.count(User.id))
        .filter(User.department.isnot(None))
        .group_by(User.department)
        .all()
    )
    result = []
    for dept in db.query(Department).order_by(Department.name).all():
        response = DepartmentResponse.model_validate(dept)
        response.member_count = counts.get(dept.name, 0)
        result.append(response)
    return result


@router.post("/", response_model=DepartmentResponse)
def create_department(
    data: DepartmentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager())
):
    _ensure_unique_name(db, data.name)
    dept = Department(**data.model_dump(), created_by=str(current_user.id))
    db.add(dept)
    db.commit()
    db.refresh(dept)
    logger.info(f"Department '{dept.name}' created by user {current_user.id}")
    return _to_response(db, dept)


@router.get("/{department_id}", response_model=DepartmentResponse)
def get_department(department_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return _to_response(db, _get_or_404(db, department_id))


def _rename_references(db: Session, old_name: str, new_name: str):
    # Users, KPIs and objectives refer to departments by name
    db.query(User).filter(User.department == old_name).update({User.department: new_name}, synchronize_session=False)
    db.query(KPI).filter(KPI.department == old_name).update({KPI.department: new_name}, synchronize_session=False)
    db.query(KPI).filter(KPI.assigned_to_department == old_name).update(
        {KPI.assigned_to_department: new_name}, synchronize_session=False
    )
    db.query(Objective).filter(Objective.department == old_name).update(
        {Objective.department: new_name}, synchronize_session=False
    )


@router.put("/{department_id}", response_model=DepartmentResponse)
def update_department(
    department_id: int,
    data: DepartmentUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager())
):
    dept = _get_or_404(db, department_id)
    updates = data.model_dump(exclude_unset=True)
    if "name" in updates and updates["name"] is None:
        raise BusinessRuleError("name cannot be null", details={"fields": ["name"]})
    old_name = dept.name
    if "name" in updates and updates["name"] != old_name:
        _ensure_unique_name(db, updates["name"], exclude_id=dept.id)
    for field, value in updates.items():
        setattr(dept, field, value)
    if dept.name != old_name:
        _rename_references(db, old_name, dept.name)
        logger.info(f"Department '{old_name}' renamed to '{dept.name}' by user {current_user.id}")
    db.commit()
    db.refresh(dept)
    return _to_response(db, dept)


@router.delete("/{department_id}")
def delete_department(
    department_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager())
):
    dept = _get_or_404(db, department_id)
    db.delete(dept)
    db.commit()
    logger.info(f"Department {department_id} deleted by user {current_user.id}")
    return {"message": "Deleted"}
