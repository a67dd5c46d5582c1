"""
Objective Service Layer

Validation and persistence for objectives and their key results. Progress is
recomputed through ProgressService on every write.
"""
from typing import Any, Dict, List, Optional

from app.core.exceptions import BusinessRuleError, NotFoundError
from app.models.kpi import KPI
from app.models.objective import KeyResult, Objective, ObjectiveStatus, ObjectiveType
from app.models.task import Task
from app.models.user import User
from app.schemas.objective import (
    KeyResultCreate,
    KeyResultIn,
    KeyResultUpdate,
    ObjectiveCreate,
    ObjectiveUpdate,
)
from app.services.base import BaseService
from app.services.progress import ProgressService, value_progress


def validate_key_results(key_results: Optional[List[KeyResultIn]]) -> List[Dict[str, Any]]:
    """
    Checks a submitted key-result list and returns cleaned field dicts.

    Raises:
        BusinessRuleError: empty list, or a KR without title/unit or with a
            non-positive target.
    """
    if key_results is None:
        raise BusinessRuleError("key_results must be a list")
    if len(key_results) == 0:
        raise BusinessRuleError("At least one Key Result is required")

    cleaned = []
    for idx, kr in enumerate(key_results):
        title = (kr.title or "").strip()
        unit = (kr.unit or "").strip()
        if not title:
            raise BusinessRuleError(f"KR at index {idx} is missing title")
        if not unit:
            raise BusinessRuleError(f"KR at index {idx} is missing unit")
        if kr.target_value is None or kr.target_value <= 0:
            raise BusinessRuleError(f"KR at index {idx} has invalid target_value")
        progress = kr.progress if kr.progress is not None else value_progress(kr.current_value, kr.target_value)
        cleaned.append({
            "id": kr.id,
            "title": title,
            "unit": unit,
            "target_value": kr.target_value,
            "current_value": kr.current_value or 0,
            "weight": kr.weight,
            "progress": progress,
            "source": kr.source.value,
            "linked_id": kr.linked_id,
            "confidence_score": kr.confidence_score,
        })
    return cleaned


class ObjectiveService(BaseService):
    """
    Team objectives by default. Built with an owner, the service is scoped to
    that user's personal objectives: lookups outside the scope are 404s and
    the owner fields cannot be reassigned.
    """

    def __init__(self, db, owner: Optional[User] = None):
        super().__init__(db)
        self.owner = owner
        self.progress = ProgressService(db)

    def _scoped(self):
        query = self.db.query(Objective)
        if self.owner is None:
            return query.filter(Objective.is_personal.is_(False))
        return query.filter(Objective.is_personal.is_(True), Objective.owner_id == self.owner.id)

    def list_objectives(
        self,
        quarter: Optional[str] = None,
        year: Optional[int] = None,
        department: Optional[str] = None,
    ) -> List[Objective]:
        query = self._scoped()
        if quarter:
            query = query.filter(Objective.quarter == quarter)
        if year:
            query = query.filter(Objective.year == year)
        if department:
            query = query.filter(Objective.department == department)
        return query.order_by(Objective.created_at.desc(), Objective.id.desc()).all()

    def get_objective(self, objective_id: int) -> Objective:
        objective = self._scoped().filter(Objective.id == objective_id).first()
        if objective is None:
            if self.owner is not None:
                raise NotFoundError(message="OKR not found or not owned by you")
            raise NotFoundError("Objective")
        return objective

    def create_objective(self, data: ObjectiveCreate) -> Objective:
        title = data.title.strip()
        if not title:
            raise BusinessRuleError("Missing title")
        if not data.quarter:
            raise BusinessRuleError("Missing quarter")
        key_results = validate_key_results(data.key_results)

        fields = data.model_dump(exclude={"key_results"})
        fields.update(
            title=title,
            type=data.type.value,
            priority=data.priority.value,
            status=data.status.value,
        )
        if self.owner is not None:
            fields.update(
                is_personal=True,
                owner_id=self.owner.id,
                owner_name=self.owner.name,
                department=data.department or self.owner.department,
            )
            if "type" not in data.model_fields_set:
                fields["type"] = ObjectiveType.PERSONAL.value
        objective = Objective(**fields)
        for kr in key_results:
            kr.pop("id")
            objective.key_results.append(KeyResult(**kr))
        self.progress.refresh_objective(objective)

        self.db.add(objective)
        self.commit()
        self.db.refresh(objective)
        self.log_info(f"Created objective {objective.id} with {len(key_results)} key result(s)")
        return objective

    def update_objective(self, objective_id: int, data: ObjectiveUpdate) -> Objective:
        """Applies a partial update; the merged record must still validate."""
        objective = self.get_objective(objective_id)
        exclude = {"key_results"}
        if self.owner is not None:
            exclude.update({"owner_id", "owner_name"})
        updates = self.reject_nulls(
            data.model_dump(exclude_unset=True, exclude=exclude),
            ("type", "priority", "status", "tags"),
        )

        title = updates.get("title", objective.title)
        if not title or not str(title).strip():
            raise BusinessRuleError("Missing title")
        if "quarter" in updates and not updates["quarter"]:
            raise BusinessRuleError("Missing quarter")
        if "year" in updates and updates["year"] is None:
            raise BusinessRuleError("Missing or invalid year")

        if data.key_results is not None:
            cleaned = validate_key_results(data.key_results)
        else:
            cleaned = None

        for field, value in updates.items():
            if field in ("owner_id", "owner_name", "department") and value is None:
                continue
            setattr(objective, field, value.value if hasattr(value, "value") else value)
        objective.title = str(title).strip()

        if cleaned is not None:
            self._replace_key_results(objective, cleaned)
        self.progress.refresh_objective(objective)
        self.commit()
        self.db.refresh(objective)
        return objective

    def _replace_key_results(self, objective: Objective, cleaned: List[Dict[str, Any]]):
        # Submitted KRs carrying an existing id are updated in place so task and KPI links survive
        existing = {kr.id: kr for kr in objective.key_results}
        new_list = []
        for fields in cleaned:
            kr_id = fields.pop("id")
            kr = existing.pop(kr_id, None) if kr_id is not None else None
            if kr is None:
                kr = KeyResult(**fields)
            else:
                for field, value in fields.items():
                    setattr(kr, field, value)
            new_list.append(kr)
        for orphan in existing.values():
            self._unlink_key_result(orphan.id)
        objective.key_results = new_list
        objective.key_results.reorder()

    def set_status(self, objective_id: int, status: ObjectiveStatus) -> Objective:
        objective = self.get_objective(objective_id)
        objective.status = status.value
        self.commit()
        self.db.refresh(objective)
        self.log_info(f"Objective {objective.id} status -> {objective.status}")
        return objective

    def delete_objective(self, objective_id: int):
        objective = self.get_objective(objective_id)
        for kr in objective.key_results:
            self._unlink_key_result(kr.id)
        self.db.query(KPI).filter(KPI.linked_okr_id == objective.id).update(
            {KPI.linked_okr_id: None}, synchronize_session=False
        )
        self.db.delete(objective)
        self.commit()

    # --- Key results -------------------------------------------------------

    def add_key_result(self, objective_id: int, data: KeyResultCreate) -> Objective:
        objective = self.get_objective(objective_id)
        objective.key_results.append(KeyResult(
            title=data.title,
            target_value=data.target_value,
            unit=data.unit,
            weight=data.weight,
            current_value=0,
            progress=0,
        ))
        self.progress.refresh_objective(objective)
        self.commit()
        self.db.refresh(objective)
        return objective

    def update_key_result(self, objective_id: int, kr_id: int, data: KeyResultUpdate) -> Objective:
        objective = self.get_objective(objective_id)
        kr = self._find_key_result(objective, kr_id)
        updates = data.model_dump(exclude_unset=True, exclude_none=True)
        for field, value in updates.items():
            setattr(kr, field, value)
        if "current_value" in updates or "target_value" in updates:
            self.progress.refresh_key_result_values(kr)
        self.progress.refresh_objective(objective)
        self.commit()
        self.db.refresh(objective)
        return objective

    def delete_key_result(self, objective_id: int, kr_id: int) -> Objective:
        objective = self.get_objective(objective_id)
        kr = self._find_key_result(objective, kr_id)
        self._unlink_key_result(kr.id)
        objective.key_results.remove(kr)
        if objective.key_results:
            self.progress.refresh_objective(objective)
        else:
            objective.progress = 0
        self.commit()
        self.db.refresh(objective)
        return objective

    @staticmethod
    def _find_key_result(objective: Objective, kr_id: int) -> KeyResult:
        kr = next((k for k in objective.key_results if k.id == kr_id), None)
        if kr is None:
            raise NotFoundError("KR")
        return kr

    def _unlink_key_result(self, kr_id: int):
        self.db.query(Task).filter(Task.kr_id == kr_id).update({Task.kr_id: None}, synchronize_session=False)
        self.db.query(KPI).filter(KPI.linked_kr_id == kr_id).update({KPI.linked_kr_id: None}, synchronize_session=False)
