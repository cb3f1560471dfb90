"""
Router for account endpoints.

Handles:
- Registration and login (JWT issuing)
- Reading and updating the current user's profile
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UpdateProfileRequest,
    UserResponse,
)
from ..models_db import User
from ..services.auth_service import (
    create_access_token,
    get_current_user,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _user_response(user: User) -> UserResponse:
    return UserResponse(
        id=str(user.id),
        name=user.name,
        email=user.email,
        business_name=user.business_name,
        address=user.address,
        phone=user.phone,
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register_user(
    request: RegisterRequest,
    db: Session = Depends(get_db),
) -> AuthResponse:
    """
    Create an account and return a token for it.

    Args:
        request: Name, email and password.
        db: Database session.

    Returns:
        Token plus the created user.
    """
    existing = db.query(User).filter(User.email == request.email).first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User already exists",
        )

    user = User(
        name=request.name,
        email=request.email,
        password_hash=hash_password(request.password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info("Registered user %s (id=%s)", user.email, user.id)

    return AuthResponse(token=create_access_token(user.id), user=_user_response(user))


@router.post("/login", response_model=AuthResponse)
async def login_user(
    request: LoginRequest,
    db: Session = Depends(get_db),
) -> AuthResponse:
    """
    Exchange email and password for a token.

    Args:
        request: Login credentials.
        db: Database session.

    Returns:
        Token plus the authenticated user.
    """
    user = db.query(User).filter(User.email == request.email.strip().lower()).first()
    if not user or not verify_password(request.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    return AuthResponse(token=create_access_token(user.id), user=_user_response(user))


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)) -> UserResponse:
    """Return the authenticated user's profile."""
    return _user_response(current_user)


@router.put("/me", response_model=UserResponse)
async def update_user_profile(
    request: UpdateProfileRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> UserResponse:
    """
    Update profile fields; omitted fields are left unchanged.

    Args:
        request: Fields to update.
        current_user: Authenticated user.
        db: Database session.

    Returns:
        The updated profile.
    """
    for field_name, value in request.model_dump(exclude_unset=True).items():
        setattr(current_user, field_name, value)

    db.commit()
    db.refresh(current_user)

    return _user_response(current_user)
