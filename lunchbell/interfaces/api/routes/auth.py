"""Endpoints for signing up and obtaining access tokens."""

import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from lunchbell.application.errors import NotificationError
from lunchbell.application.use_cases.users import (
    AuthenticationStatus,
    authenticate_user,
    create_user,
    record_login,
)
from lunchbell.config import get_settings
from lunchbell.infrastructure.database import get_db
from lunchbell.infrastructure.security import create_access_token, password_signature
from lunchbell.interfaces.api.routes_helpers import raise_http_error
from lunchbell.interfaces.api.schemas import SignupRequest, Token, UserRead

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


# The form keeps the field name ``username``; it carries the email address.
@router.post("/token", response_model=Token)
def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    """Authenticate by email and password and return a JWT."""

    user, auth_status = authenticate_user(db, form_data.username, form_data.password)

    if auth_status is AuthenticationStatus.INVALID_CREDENTIALS:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if auth_status is AuthenticationStatus.INACTIVE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user",
            headers={"WWW-Authenticate": "Bearer"},
        )

    settings = get_settings()
    access_token = create_access_token(
        data={
            "sub": user.email,
            "role": user.role,
            "pwd_sig": password_signature(user.password, user.is_active),
        },
        expires_delta=timedelta(minutes=settings.access_token_expire_minutes),
    )
    record_login(db, user.id)
    logger.info("User %s logged in", user.id)
    return {"access_token": access_token, "token_type": "bearer", "role": user.role}


@router.post("/signup", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def signup(payload: SignupRequest, db: Session = Depends(get_db)):
    """Register a regular user with default notification preferences."""

    try:
        user = create_user(
            db, name=payload.name, email=payload.email, password=payload.password
        )
    except NotificationError as exc:
        raise_http_error(exc)
    return UserRead.model_validate(user)
