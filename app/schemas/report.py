from pydantic import BaseModel
from typing import List


class DepartmentOKRSummary(BaseModel):
    department: str
    count: int
    avg_progress: int


class TaskStatusCounts(BaseModel):
    TODO: int = 0
    IN_PROGRESS: int = 0
    DONE: int = 0


class ReportSummary(BaseModel):
    total_okrs: int
    avg_progress: int
    okrs_by_department: List[DepartmentOKRSummary]
    task_status_counts: TaskStatusCounts
