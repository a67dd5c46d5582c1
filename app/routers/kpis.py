from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional

from app.database import get_db
from app.models.kpi import KPIType
from app.models.user import User
from app.routers.auth_deps import get_current_user
from app.schemas.kpi import KPICreate, KPIProgressUpdate, KPIResponse, KPIUpdate
from app.services.kpi_service import KPIService

router = APIRouter(prefix="/kpis", tags=["KPIs"])


@router.get("/", response_model=List[KPIResponse])
def list_kpis(
    type: Optional[KPIType] = None,
    department: Optional[str] = None,
    quarter: Optional[str] = None,
    year: Optional[int] = None,
    user_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Filterable KPI list. Non-admins are limited to their own department."""
    return KPIService(db).list_kpis(
        current_user, type=type, department=department, quarter=quarter, year=year, user_id=user_id
    )


@router.get("/department/{department}", response_model=List[KPIResponse])
def department_kpis(department: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return KPIService(db).department_kpis(department)


@router.get("/personal/{user_id}", response_model=List[KPIResponse])
def personal_kpis(user_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return KPIService(db).personal_kpis(user_id, current_user)


@router.post("/", response_model=KPIResponse)
def create_kpi(data: KPICreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return KPIService(db).create_kpi(data, current_user)


@router.get("/{kpi_id}", response_model=KPIResponse)
def get_kpi(kpi_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return KPIService(db).get_kpi(kpi_id)


@router.put("/{kpi_id}", response_model=KPIResponse)
def update_kpi(
    kpi_id: int,
    data: KPIUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return KPIService(db).update_kpi(kpi_id, data, current_user)


@router.patch("/{kpi_id}/progress", response_model=KPIResponse)
def update_kpi_progress(
    kpi_id: int,
    data: KPIProgressUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Records a new current value; the linked OKR is updated as a side effect."""
    return KPIService(db).update_progress(kpi_id, data.current_value)


@router.delete("/{kpi_id}")
def delete_kpi(kpi_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    KPIService(db).delete_kpi(kpi_id, current_user)
    return {"message": "KPI deleted successfully"}
