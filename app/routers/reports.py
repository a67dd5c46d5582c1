from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional

from app.database import get_db
from app.routers.auth_deps import get_current_user
from app.schemas.report import ReportSummary
from app.services.report_service import ReportService

router = APIRouter(
    prefix="/reports",
    tags=["Reports"],
    dependencies=[Depends(get_current_user)]
)


@router.get("/summary", response_model=ReportSummary)
def get_summary(quarter: Optional[str] = None, year: Optional[int] = None, db: Session = Depends(get_db)):
    """OKR totals and averages for a period, plus task status counts."""
    return ReportService(db).summary(quarter=quarter, year=year)
