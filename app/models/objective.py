"""
Objective and Key Result models.
An objective owns an ordered list of key results; its progress is the
weighted mean of theirs (see app.services.progress).
"""
from sqlalchemy import Boolean, Column, Integer, String, Float, Date, DateTime, Text, JSON, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from sqlalchemy.ext.orderinglist import ordering_list
import enum
from app.database import Base


class ObjectiveStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    ON_TRACK = "ON_TRACK"
    AT_RISK = "AT_RISK"
    BEHIND = "BEHIND"


class ObjectiveType(str, enum.Enum):
    COMPANY = "COMPANY"
    DEPARTMENT = "DEPARTMENT"
    PERSONAL = "PERSONAL"


class Priority(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class KeyResultSource(str, enum.Enum):
    MANUAL = "MANUAL"
    KPI = "KPI"
    TASK = "TASK"


class Objective(Base):
    __tablename__ = "objectives"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    type = Column(String, default=ObjectiveType.DEPARTMENT.value, nullable=False)
    parent_id = Column(Integer, ForeignKey("objectives.id"), nullable=True, index=True)
    priority = Column(String, default=Priority.MEDIUM.value, nullable=False)
    tags = Column(JSON, default=list)

    # Snapshot of the owner at write time
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    owner_name = Column(String, nullable=True)
    department = Column(String, nullable=True, index=True)
    # Personal objectives are private to their owner and kept out of team listings
    is_personal = Column(Boolean, default=False, nullable=False, index=True)

    quarter = Column(String, nullable=False, index=True)
    year = Column(Integer, nullable=False, index=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)

    status = Column(String, default=ObjectiveStatus.DRAFT.value, nullable=False, index=True)
    progress = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    key_results = relationship(
        "KeyResult",
        back_populates="objective",
        order_by="KeyResult.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
    )
    parent = relationship("Objective", remote_side=[id])

    def __repr__(self):
        return f"<Objective {self.id}: {self.title} ({self.quarter}/{self.year})>"


class KeyResult(Base):
    __tablename__ = "key_results"

    id = Column(Integer, primary_key=True, index=True)
    objective_id = Column(Integer, ForeignKey("objectives.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)

    title = Column(String, nullable=False)
    current_value = Column(Float, default=0, nullable=False)
    target_value = Column(Float, default=100, nullable=False)
    unit = Column(String, default="%", nullable=False)
    weight = Column(Integer, default=1, nullable=False)  # 1-10
    progress = Column(Integer, default=0, nullable=False)  # 0-100
    source = Column(String, default=KeyResultSource.MANUAL.value, nullable=False)
    linked_id = Column(String, nullable=True)  # KPI or Task id depending on source
    confidence_score = Column(Integer, default=10, nullable=False)  # 1-10

    objective = relationship("Objective", back_populates="key_results")

    def __repr__(self):
        return f"<KeyResult {self.id}: {self.title} {self.current_value}/{self.target_value}{self.unit}>"
