"""
User Model.
Roles are a closed set; department is stored by name, as the front end shows it.
"""
from sqlalchemy import Column, Integer, String, Enum, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship, validates
import enum
from app.database import Base


class UserRole(str, enum.Enum):
    """
    User roles, most to least permissions:
    - ADMIN: Manages users, departments and every OKR/KPI
    - MANAGER: Assigns personal KPIs and manages their department
    - EMPLOYEE: Self-service access (default)
    """
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    EMPLOYEE = "EMPLOYEE"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)

    role = Column(
        Enum(UserRole, name="user_role", create_constraint=True, validate_strings=True),
        default=UserRole.EMPLOYEE,
        nullable=False,
    )

    department = Column(String, nullable=True, index=True)
    position = Column(String, nullable=True)
    avatar = Column(String, nullable=True)
    supervisor_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    supervisor = relationship("User", remote_side=[id])

    def __repr__(self):
        role = self.role.value if isinstance(self.role, UserRole) else self.role
        return f"<User {self.email} ({role})>"

    @validates("role")
    def validate_role(self, key, value):
        if value is None:
            return value
        try:
            return UserRole(value)
        except ValueError:
            raise ValueError(
                f"Invalid role '{value}'. Allowed: {[r.value for r in UserRole]}"
            ) from None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_manager(self) -> bool:
        """Check if user can manage others (admin or manager)."""
        return self.role in [UserRole.ADMIN, UserRole.MANAGER]
