import logging
from app.core.config import settings
from app.database import SessionLocal
from app.models.user import User, UserRole
from app.services import auth as auth_service
from app.services.user_service import generate_avatar

logger = logging.getLogger(__name__)


def init_system_data():
    """
    Checks if the system needs initialization.
    If no user exists yet, creates the administrator configured in settings.admin.
    """
    db = SessionLocal()
    try:
        user_count = db.query(User).count()
        if user_count == 0:
            logger.info("Running startup initialization...")
            admin = settings.admin
            admin_user = User(
                name=admin.name,
                email=admin.email.lower(),
                hashed_password=auth_service.get_password_hash(admin.password),
                role=UserRole.ADMIN,
                avatar=generate_avatar(admin.email),
            )
            db.add(admin_user)
            db.commit()
            logger.info(f"Created default admin: {admin.email} (change the password immediately)")
        else:
            logger.info(f"System initialization check: {user_count} user(s) found.")

    except Exception as e:
        db.rollback()
        logger.error(f"Error during system initialization check: {str(e)}", exc_info=True)
    finally:
        db.close()
