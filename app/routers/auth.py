from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session
import logging
from app.core.limiter import limiter
from app.database import get_db
from app.models.user import User, UserRole
from app.routers.auth_deps import get_current_user
from app.services import auth as auth_service
from app.services.user_service import UserService
from app.schemas.auth import LoginRequest, Token, UserCreate, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"]
)


@router.post("/register", response_model=Token)
def register(data: UserCreate, db: Session = Depends(get_db)):
    """Self-service sign-up. Returns a session for the new account."""
    # Elevated roles are granted by an administrator through /users
    user = UserService(db).create_user(data.model_copy(update={"role": UserRole.EMPLOYEE}))
    return {
        "access_token": auth_service.token_for_user(user),
        "token_type": "bearer",
        "user": user,
    }


@router.post("/login", response_model=Token)
@limiter.limit("10/minute")
def login(request: Request, login_data: LoginRequest, db: Session = Depends(get_db)):
    # JSON body rather than form-data for frontend compatibility
    user = auth_service.authenticate_user(db, login_data.email, login_data.password)
    if not user:
        logger.info(f"Failed login for {login_data.email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    logger.info(f"User {user.id} logged in")
    return {
        "access_token": auth_service.token_for_user(user),
        "token_type": "bearer",
        "user": user,
    }


@router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    return current_user
