from sqlalchemy import Column, Integer, String, Float, Text, Date, DateTime, ForeignKey
from sqlalchemy.sql import func
from app.database import Base
import enum


class KPIType(str, enum.Enum):
    DEPARTMENT = "DEPARTMENT"
    PERSONAL = "PERSONAL"


class KPIStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    OVERDUE = "OVERDUE"


class KPI(Base):
    __tablename__ = "kpis"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    type = Column(String, nullable=False, index=True)

    # Metrics
    target_value = Column(Float, default=100, nullable=False)
    current_value = Column(Float, default=0, nullable=False)
    unit = Column(String, default="%", nullable=False)
    weight = Column(Integer, default=1, nullable=False)  # 1-10
    progress = Column(Integer, default=0, nullable=False)  # 0-100
    status = Column(String, default=KPIStatus.ACTIVE.value, nullable=False)

    # Assignment (names are display snapshots)
    department = Column(String, nullable=False, index=True)
    assigned_to = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    assigned_to_name = Column(String, nullable=True)
    assigned_to_department = Column(String, nullable=True)
    assigned_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    assigned_by_name = Column(String, nullable=True)

    # OKR integration
    linked_okr_id = Column(Integer, ForeignKey("objectives.id", ondelete="SET NULL"), nullable=True, index=True)
    linked_okr_title = Column(String, nullable=True)
    linked_kr_id = Column(Integer, ForeignKey("key_results.id", ondelete="SET NULL"), nullable=True, index=True)
    linked_kr_title = Column(String, nullable=True)
    linked_task_id = Column(Integer, ForeignKey("tasks.id", ondelete="SET NULL", use_alter=True, name="fk_kpi_linked_task_id"), nullable=True)

    # Time tracking
    start_date = Column(Date, server_default=func.current_date())
    end_date = Column(Date, nullable=True)
    quarter = Column(String, nullable=False)
    year = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<KPI {self.id}: {self.title} [{self.type}] {self.progress}%>"
