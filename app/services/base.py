import logging
from typing import Any, Dict, Iterable

from sqlalchemy.orm import Session

from app.core.exceptions import BusinessRuleError


class BaseService:
    """
    Common plumbing for domain services: the request-scoped session and a
    module-named logger.
    """

    def __init__(self, db: Session):
        self.db = db
        self._logger = logging.getLogger(self.__class__.__module__)

    def commit(self):
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def reject_nulls(self, updates: Dict[str, Any], required: Iterable[str]) -> Dict[str, Any]:
        """Partial updates may omit a required field but never set it to null."""
        nulled = [field for field in required if field in updates and updates[field] is None]
        if nulled:
            raise BusinessRuleError(f"{', '.join(nulled)} cannot be null", details={"fields": nulled})
        return updates

    def log_info(self, message: str):
        self._logger.info(message)

    def log_warning(self, message: str):
        self._logger.warning(message)

    def log_error(self, message: str):
        self._logger.error(message, exc_info=True)
