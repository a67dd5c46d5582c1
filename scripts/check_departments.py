import sys
import os
import json
import logging

# Ensure we can import app modules
sys.path.append(os.getcwd())

from app.database import SessionLocal
from app.models.department import Department

# Configure logging
logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def list_departments(db):
    return [
        {
            "id": d.id,
            "name": d.name,
            "head": d.head,
            "description": d.description,
            "created_by": d.created_by,
            "created_at": d.created_at.isoformat() if d.created_at else None,
        }
        for d in db.query(Department).order_by(Department.name).all()
    ]


def check_departments() -> int:
    """Prints every department as JSON. Connection details come from DATABASE_URL."""
    try:
        with SessionLocal() as db:
            departments = list_departments(db)
    except Exception as e:
        logger.error(f"Could not read departments: {e}")
        return 1
    print("DEPARTMENTS_IN_DB:", json.dumps(departments))
    return 0


if __name__ == "__main__":
    sys.exit(check_departments())
