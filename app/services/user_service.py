from typing import List, Optional
from urllib.parse import quote

from app.core.exceptions import AccessDeniedError, BusinessRuleError, NotFoundError
from app.models.department import Department
from app.models.user import User, UserRole
from app.schemas.auth import UserCreate, UserUpdate
from app.services import auth as auth_service
from app.services.base import BaseService


def generate_avatar(seed: Optional[str]) -> str:
    """Default avatar URL derived from the user's name or email."""
    return f"https://api.dicebear.com/7.x/avataaars/svg?seed={quote(str(seed or 'user'), safe='')}"


class UserService(BaseService):
    """User accounts: creation, profile updates, passwords."""

    def list_users(self) -> List[User]:
        return self.db.query(User).order_by(User.id).all()

    def get_user(self, user_id: int) -> User:
        user = self.db.get(User, user_id)
        if user is None:
            raise NotFoundError("User")
        return user

    def resolve_department(self, department: Optional[str]) -> Optional[str]:
        """Users store the department name; a numeric id is translated to it."""
        if department and department.isdigit():
            dept = self.db.get(Department, int(department))
            return dept.name if dept else department
        return department

    def create_user(self, data: UserCreate) -> User:
        if self.db.query(User).filter(User.email == data.email).first():
            raise BusinessRuleError("Email already exists")

        user = User(
            name=data.name,
            email=data.email,
            hashed_password=auth_service.get_password_hash(data.password),
            role=data.role,
            department=self.resolve_department(data.department),
            position=data.position,
            avatar=data.avatar or generate_avatar(data.name or data.email),
            supervisor_id=data.supervisor_id,
        )
        self.db.add(user)
        self.commit()
        self.db.refresh(user)
        self.log_info(f"Created user {user.email} ({user.role.value})")
        return user

    def update_user(self, user_id: int, data: UserUpdate, actor: User) -> User:
        self._ensure_self_or_admin(user_id, actor)
        user = self.get_user(user_id)
        updates = self.reject_nulls(data.model_dump(exclude_unset=True), ("name", "email", "role"))

        if "role" in updates and not actor.is_admin:
            raise AccessDeniedError("Only administrators can change roles")
        if updates.get("email") and updates["email"] != user.email:
            existing = self.db.query(User).filter(User.email == updates["email"]).first()
            if existing and existing.id != user.id:
                raise BusinessRuleError("Email already in use")
        if "department" in updates:
            updates["department"] = self.resolve_department(updates["department"])

        for field, value in updates.items():
            setattr(user, field, value)
        self.commit()
        self.db.refresh(user)
        return user

    def update_avatar(self, user_id: int, avatar: str, actor: User) -> User:
        self._ensure_self_or_admin(user_id, actor)
        user = self.get_user(user_id)
        user.avatar = avatar
        self.commit()
        self.db.refresh(user)
        return user

    def change_password(self, user_id: int, password: str, actor: User):
        self._ensure_self_or_admin(user_id, actor)
        user = self.get_user(user_id)
        user.hashed_password = auth_service.get_password_hash(password)
        self.commit()
        self.log_info(f"Password changed for user {user.id}")

    def delete_user(self, user_id: int):
        user = self.get_user(user_id)
        self.db.delete(user)
        self.commit()
        self.log_info(f"Deleted user {user_id}")

    @staticmethod
    def _ensure_self_or_admin(user_id: int, actor: User):
        if actor.role != UserRole.ADMIN and actor.id != user_id:
            raise AccessDeniedError("Forbidden")
