"""
Progress derivation for key results, objectives and KPIs.

The pure helpers at the top hold the arithmetic; ProgressService applies it
to persisted records and cascades changes along the links
Task -> KeyResult -> Objective, Task -> KPI and KPI -> KeyResult -> Objective.
Rounding is half-up so 62.5 becomes 63, as the front end displays it.
"""
import math
from datetime import date
from typing import Iterable, Optional, Tuple

from app.models.kpi import KPI, KPIStatus
from app.models.objective import KeyResult, Objective
from app.models.task import Task, TaskStatus
from app.services.base import BaseService

TASK_CONTRIBUTION = {
    TaskStatus.DONE.value: 100,
    TaskStatus.IN_PROGRESS.value: 50,
    TaskStatus.TODO.value: 0,
}


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def value_progress(current: Optional[float], target: Optional[float]) -> int:
    """Percentage of target reached, capped at 100. Zero when there is no target."""
    if not target or target <= 0:
        return 0
    return max(0, min(100, round_half_up((current or 0) / target * 100)))


def weighted_progress(items: Iterable[Tuple[Optional[int], Optional[int]]]) -> int:
    """Weighted mean over (progress, weight) pairs; missing weights count as 1."""
    total_weight = 0
    weighted_sum = 0
    for progress, weight in items:
        w = weight or 1
        total_weight += w
        weighted_sum += (progress or 0) * w
    return round_half_up(weighted_sum / total_weight) if total_weight > 0 else 0


def kpi_status(progress: int, end_date: Optional[date], today: Optional[date] = None) -> KPIStatus:
    if progress >= 100:
        return KPIStatus.COMPLETED
    if end_date and (today or date.today()) > end_date:
        return KPIStatus.OVERDUE
    return KPIStatus.ACTIVE


def task_contribution(status: str) -> int:
    return TASK_CONTRIBUTION.get(status, 0)


def scaled_current(progress: int, target: Optional[float]) -> int:
    return round_half_up(progress / 100 * (target or 100))


class ProgressService(BaseService):
    """Recomputes stored progress. Callers commit."""

    def refresh_objective(self, objective: Objective) -> int:
        if objective.key_results:
            objective.progress = weighted_progress((kr.progress, kr.weight) for kr in objective.key_results)
        return objective.progress

    def refresh_key_result_values(self, kr: KeyResult):
        kr.progress = value_progress(kr.current_value, kr.target_value)

    def apply_kpi_values(self, kpi: KPI, progress: Optional[int] = None):
        """Derives progress (unless given) and lifecycle status for a KPI."""
        if progress is not None:
            kpi.progress = progress
        elif (kpi.target_value or 0) > 0:
            kpi.progress = value_progress(kpi.current_value, kpi.target_value)
        kpi.status = kpi_status(kpi.progress or 0, kpi.end_date).value

    def recalc_key_result_from_tasks(self, kr_id: Optional[int]):
        """KR progress = share of its tasks that are DONE; untouched when it has none."""
        if not kr_id:
            return
        kr = self.db.get(KeyResult, kr_id)
        if kr is None:
            return
        self.db.flush()
        statuses = [s for (s,) in self.db.query(Task.status).filter(Task.kr_id == kr_id).all()]
        if statuses:
            done = sum(1 for s in statuses if s == TaskStatus.DONE.value)
            kr.progress = round_half_up(done / len(statuses) * 100)
        self.refresh_objective(kr.objective)

    def sync_kpis_for_task(self, task_id: int, kpi_id: Optional[int]):
        self.db.flush()
        task = self.db.get(Task, task_id)

        # KPIs pointing at this single task mirror its status
        for kpi in self.db.query(KPI).filter(KPI.linked_task_id == task_id).all():
            progress = task_contribution(task.status) if task else 0
            kpi.current_value = scaled_current(progress, kpi.target_value)
            self.apply_kpi_values(kpi, progress)

        # A KPI with many tasks takes the mean contribution. Once its last task
        # moves away it keeps the last derived progress, like a key result does.
        if kpi_id:
            kpi = self.db.get(KPI, kpi_id)
            if kpi is not None:
                statuses = [s for (s,) in self.db.query(Task.status).filter(Task.kpi_id == kpi_id).all()]
                if statuses:
                    avg = round_half_up(sum(task_contribution(s) for s in statuses) / len(statuses))
                    kpi.current_value = scaled_current(avg, kpi.target_value)
                    self.apply_kpi_values(kpi, avg)

    def sync_objective_from_kpi(self, kpi: KPI):
        """
        Pushes a KPI's progress into its linked key result and objective.
        The cascade runs in a savepoint; a failure is logged and rolled back
        so the KPI write itself still succeeds.
        """
        kpi_id, okr_id, kr_id = kpi.id, kpi.linked_okr_id, kpi.linked_kr_id
        if not okr_id:
            return
        self.db.flush()
        try:
            with self.db.begin_nested():
                self._cascade_kpi(kpi_id, okr_id, kr_id)
        except Exception as e:
            self.log_error(f"Error syncing objective {okr_id} from KPI {kpi_id}: {e}")

    def _cascade_kpi(self, kpi_id: int, okr_id: int, kr_id: Optional[int]):
        objective = self.db.get(Objective, okr_id)
        if objective is None:
            self.log_warning(f"KPI {kpi_id} links to missing objective {okr_id}")
            return
        if kr_id:
            linked = self.db.query(KPI).filter(KPI.linked_kr_id == kr_id).all()
            avg = weighted_progress((k.progress, k.weight) for k in linked)
            kr = next((k for k in objective.key_results if k.id == kr_id), None)
            if kr is not None:
                kr.progress = avg
                kr.current_value = scaled_current(avg, kr.target_value)

        if objective.key_results:
            self.refresh_objective(objective)
        else:
            linked = self.db.query(KPI).filter(KPI.linked_okr_id == objective.id).all()
            objective.progress = weighted_progress((k.progress, k.weight) for k in linked)
