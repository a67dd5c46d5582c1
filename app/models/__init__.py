# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import user, department, objective, task, kpi

# Explicit class exports for cleaner imports
from .user import User, UserRole
from .department import Department
from .objective import Objective, KeyResult, ObjectiveStatus
from .task import Task, TaskStatus
from .kpi import KPI, KPIType, KPIStatus

__all__ = [
    "User",
    "UserRole",
    "Department",
    "Objective",
    "KeyResult",
    "ObjectiveStatus",
    "Task",
    "TaskStatus",
    "KPI",
    "KPIType",
    "KPIStatus",
]
