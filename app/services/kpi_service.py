from typing import List, Optional

from app.core.exceptions import AccessDeniedError, NotFoundError
from app.models.kpi import KPI, KPIType
from app.models.objective import KeyResult, Objective
from app.models.task import Task
from app.models.user import User, UserRole
from app.schemas.kpi import KPICreate, KPIUpdate
from app.services.base import BaseService
from app.services.progress import ProgressService

KPI_REQUIRED_FIELDS = ("title", "department", "quarter", "year", "target_value", "current_value", "unit", "weight")


class KPIService(BaseService):
    """Departmental and personal KPIs, with progress pushed into linked OKRs."""

    def __init__(self, db):
        super().__init__(db)
        self.progress = ProgressService(db)

    def list_kpis(
        self,
        actor: User,
        type: Optional[KPIType] = None,
        department: Optional[str] = None,
        quarter: Optional[str] = None,
        year: Optional[int] = None,
        user_id: Optional[int] = None,
    ) -> List[KPI]:
        query = self.db.query(KPI)
        if type:
            query = query.filter(KPI.type == type.value)
        # Non-admin users only see their own department
        if actor.role != UserRole.ADMIN:
            department = actor.department
        if department:
            query = query.filter(KPI.department == department)
        elif actor.role != UserRole.ADMIN:
            return []
        if quarter:
            query = query.filter(KPI.quarter == quarter)
        if year:
            query = query.filter(KPI.year == year)
        if user_id:
            query = query.filter(KPI.assigned_to == user_id)
        return query.order_by(KPI.created_at.desc(), KPI.id.desc()).all()

    def department_kpis(self, department: str) -> List[KPI]:
        return (
            self.db.query(KPI)
            .filter(KPI.type == KPIType.DEPARTMENT.value, KPI.department == department)
            .order_by(KPI.created_at.desc(), KPI.id.desc())
            .all()
        )

    def personal_kpis(self, user_id: int, actor: User) -> List[KPI]:
        if actor.role == UserRole.EMPLOYEE and actor.id != user_id:
            raise AccessDeniedError("Forbidden")
        return (
            self.db.query(KPI)
            .filter(KPI.type == KPIType.PERSONAL.value, KPI.assigned_to == user_id)
            .order_by(KPI.created_at.desc(), KPI.id.desc())
            .all()
        )

    def get_kpi(self, kpi_id: int) -> KPI:
        kpi = self.db.get(KPI, kpi_id)
        if kpi is None:
            raise NotFoundError("KPI")
        return kpi

    def create_kpi(self, data: KPICreate, actor: User) -> KPI:
        if data.type == KPIType.PERSONAL and actor.role == UserRole.EMPLOYEE:
            raise AccessDeniedError("Only managers can assign personal KPIs")

        fields = data.model_dump(exclude_none=True)
        fields["type"] = data.type.value
        kpi = KPI(**fields)
        if data.type == KPIType.PERSONAL:
            kpi.assigned_by = actor.id
            kpi.assigned_by_name = actor.name
        self._fill_snapshots(kpi)

        self.progress.apply_kpi_values(kpi)
        self.db.add(kpi)
        self.db.flush()
        self.progress.sync_objective_from_kpi(kpi)
        self.commit()
        self.db.refresh(kpi)
        self.log_info(f"Created {kpi.type} KPI {kpi.id} for {kpi.department}")
        return kpi

    def update_kpi(self, kpi_id: int, data: KPIUpdate, actor: User) -> KPI:
        kpi = self.get_kpi(kpi_id)
        if kpi.type == KPIType.PERSONAL.value and actor.role == UserRole.EMPLOYEE:
            if actor.id not in (kpi.assigned_by, kpi.assigned_to):
                raise AccessDeniedError("Forbidden")

        updates = self.reject_nulls(data.model_dump(exclude_unset=True), KPI_REQUIRED_FIELDS)
        for field, value in updates.items():
            setattr(kpi, field, value)
        if "linked_okr_id" in updates:
            kpi.linked_okr_title = None
        self._fill_snapshots(kpi)

        self.progress.apply_kpi_values(kpi)
        self.progress.sync_objective_from_kpi(kpi)
        self.commit()
        self.db.refresh(kpi)
        return kpi

    def update_progress(self, kpi_id: int, current_value: float) -> KPI:
        kpi = self.get_kpi(kpi_id)
        kpi.current_value = current_value
        self.progress.apply_kpi_values(kpi)
        self.progress.sync_objective_from_kpi(kpi)
        self.commit()
        self.db.refresh(kpi)
        return kpi

    def delete_kpi(self, kpi_id: int, actor: User):
        kpi = self.get_kpi(kpi_id)
        # Only the assigner (or a manager/admin) may delete
        if actor.role == UserRole.EMPLOYEE and kpi.assigned_by != actor.id:
            raise AccessDeniedError("Forbidden")
        self.db.query(Task).filter(Task.kpi_id == kpi.id).update({Task.kpi_id: None}, synchronize_session=False)
        self.db.delete(kpi)
        self.commit()

    def _fill_snapshots(self, kpi: KPI):
        if kpi.linked_okr_id and not kpi.linked_okr_title:
            okr = self.db.get(Objective, kpi.linked_okr_id)
            if okr:
                kpi.linked_okr_title = okr.title
        if kpi.linked_kr_id and not kpi.linked_kr_title:
            kr = self.db.get(KeyResult, kpi.linked_kr_id)
            if kr:
                kpi.linked_kr_title = kr.title
        if kpi.assigned_to and not kpi.assigned_to_name:
            assignee = self.db.get(User, kpi.assigned_to)
            if assignee:
                kpi.assigned_to_name = assignee.name
                kpi.assigned_to_department = kpi.assigned_to_department or assignee.department
