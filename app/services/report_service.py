from collections import defaultdict
from typing import Any, Dict, Optional

from sqlalchemy import func

from app.models.objective import Objective
from app.models.task import Task, TaskStatus
from app.services.base import BaseService
from app.services.progress import round_half_up


class ReportService(BaseService):

    def summary(self, quarter: Optional[str] = None, year: Optional[int] = None) -> Dict[str, Any]:
        """Totals and averages across team objectives of a period, plus task status counts."""
        query = self.db.query(Objective.department, Objective.progress).filter(Objective.is_personal.is_(False))
        if quarter:
            query = query.filter(Objective.quarter == quarter)
        if year:
            query = query.filter(Objective.year == year)
        rows = query.all()

        total = len(rows)
        avg_progress = round_half_up(sum(p or 0 for _, p in rows) / total) if total else 0

        by_dept = defaultdict(lambda: {"count": 0, "progress_sum": 0})
        for department, progress in rows:
            by_dept[department or "Unassigned"]["count"] += 1
            by_dept[department or "Unassigned"]["progress_sum"] += progress or 0

        status_counts = {s.value: 0 for s in TaskStatus}
        for status, count in self.db.query(Task.status, func.count(Task.id)).group_by(Task.status).all():
            if status in status_counts:
                status_counts[status] = count

        return {
            "total_okrs": total,
            "avg_progress": avg_progress,
            "okrs_by_department": [
                {
                    "department": dept,
                    "count": v["count"],
                    "avg_progress": round_half_up(v["progress_sum"] / v["count"]),
                }
                for dept, v in by_dept.items()
            ],
            "task_status_counts": status_counts,
        }
