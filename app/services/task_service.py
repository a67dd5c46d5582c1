from typing import List, Optional

from app.core.exceptions import NotFoundError
from app.models.objective import KeyResult
from app.models.task import Task, TaskStatus
from app.models.user import User
from app.schemas.task import TaskCreate, TaskUpdate
from app.services.base import BaseService
from app.services.progress import ProgressService

TASK_REQUIRED_FIELDS = ("title", "status", "priority")


class TaskService(BaseService):
    """
    Work items attached to key results and KPIs.
    Every write cascades progress to the key result and KPIs the task feeds.
    """

    def __init__(self, db):
        super().__init__(db)
        self.progress = ProgressService(db)

    def list_tasks(
        self,
        assignee_id: Optional[int] = None,
        kr_id: Optional[int] = None,
        status: Optional[TaskStatus] = None,
    ) -> List[Task]:
        query = self.db.query(Task)
        if assignee_id:
            query = query.filter(Task.assignee_id == assignee_id)
        if kr_id:
            query = query.filter(Task.kr_id == kr_id)
        if status:
            query = query.filter(Task.status == status.value)
        return query.order_by(Task.id).all()

    def get_task(self, task_id: int) -> Task:
        task = self.db.get(Task, task_id)
        if task is None:
            raise NotFoundError("Task")
        return task

    def create_task(self, data: TaskCreate) -> Task:
        fields = data.model_dump()
        fields["status"] = data.status.value
        fields["priority"] = data.priority.value
        task = Task(**fields)
        self._fill_snapshots(task)
        self.db.add(task)
        self.db.flush()

        self._cascade(task.id, task.kr_id, task.kpi_id)
        self.commit()
        self.db.refresh(task)
        self.log_info(f"Created task {task.id} (kr={task.kr_id}, kpi={task.kpi_id})")
        return task

    def update_task(self, task_id: int, data: TaskUpdate) -> Task:
        task = self.get_task(task_id)
        old_kr_id, old_kpi_id = task.kr_id, task.kpi_id
        updates = self.reject_nulls(data.model_dump(exclude_unset=True), TASK_REQUIRED_FIELDS)
        for field, value in updates.items():
            setattr(task, field, value.value if hasattr(value, "value") else value)
        self._fill_snapshots(task)

        self._cascade(task.id, task.kr_id, task.kpi_id)
        if old_kr_id and old_kr_id != task.kr_id:
            self.progress.recalc_key_result_from_tasks(old_kr_id)
        if old_kpi_id and old_kpi_id != task.kpi_id:
            self.progress.sync_kpis_for_task(task.id, old_kpi_id)
        self.commit()
        self.db.refresh(task)
        return task

    def set_status(self, task_id: int, status: TaskStatus) -> Task:
        task = self.get_task(task_id)
        task.status = status.value
        self._cascade(task.id, task.kr_id, task.kpi_id)
        self.commit()
        self.db.refresh(task)
        return task

    def assign(self, task_id: int, assignee_id: int, assignee_name: Optional[str] = None) -> Task:
        task = self.get_task(task_id)
        task.assignee_id = assignee_id
        task.assignee_name = assignee_name
        self._fill_snapshots(task)
        self.commit()
        self.db.refresh(task)
        return task

    def delete_task(self, task_id: int):
        task = self.get_task(task_id)
        kr_id, kpi_id = task.kr_id, task.kpi_id
        self.db.delete(task)
        self._cascade(task_id, kr_id, kpi_id)
        self.commit()

    def _cascade(self, task_id: int, kr_id: Optional[int], kpi_id: Optional[int]):
        self.progress.recalc_key_result_from_tasks(kr_id)
        self.progress.sync_kpis_for_task(task_id, kpi_id)

    def _fill_snapshots(self, task: Task):
        """Copies display names from the referenced records when the caller left them out."""
        if task.assignee_id and not task.assignee_name:
            assignee = self.db.get(User, task.assignee_id)
            if assignee:
                task.assignee_name = assignee.name
        if task.kr_id and not task.kr_title:
            kr = self.db.get(KeyResult, task.kr_id)
            if kr:
                task.kr_title = kr.title
