# app/api/v1/endpoints/auth.py
# Authentication endpoints
#
# POST /auth/signup  -- email + password signup (student | tutor)
# POST /auth/login   -- returns an access token
# GET  /auth/me      -- current user

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import and_
from sqlalchemy.orm import Session

import app.db.base  # noqa: F401 -- registers all models so relationships resolve
from app.core.config import settings
from app.core.dependencies import require_login
from app.core.logging import get_logger
from app.core.security import create_access_token, hash_password, verify_password
from app.db.session import get_db
from app.models.tutor import TutorProfile
from app.models.user import User
from app.schemas.auth import LoginRequest, MeResponse, SignupRequest, TokenResponse

router = APIRouter()
logger = get_logger("auth")


# Helper
def _build_token_response(user: User) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token(user.id, user.role),
        expires_in=settings.access_token_expire_minutes * 60,
        user_id=user.id,
        role=user.role,
        full_name=user.full_name,
        tutor_id=user.tutor_profile.id if user.tutor_profile else None,
    )


def _create_role_profile(user: User, db: Session) -> None:
    if user.role == "tutor":
        db.add(TutorProfile(user_id=user.id))


# Signup
@router.post("/signup", response_model=TokenResponse, status_code=201, summary="Sign up with email and password")
def signup(payload: SignupRequest, db: Session = Depends(get_db)):
    if db.query(User).filter(User.email == payload.email).first():
        raise HTTPException(status_code=409, detail="An account with this email already exists.")
    user = User(
        email=payload.email,
        hashed_password=hash_password(payload.password),
        full_name=payload.full_name,
        role=payload.role,
        is_active=True,
    )
    db.add(user)
    db.flush()
    _create_role_profile(user, db)
    db.commit()
    db.refresh(user)
    logger.info(f"New {user.role} signed up: {user.email}")
    return _build_token_response(user)


# Login
@router.post("/login", response_model=TokenResponse, summary="Log in with email and password")
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(and_(User.email == payload.email, User.is_active == True)).first()  # noqa: E712
    if not user or not user.hashed_password:
        raise HTTPException(status_code=401, detail="Incorrect email or password.")
    if not verify_password(payload.password, user.hashed_password):
        raise HTTPException(status_code=401, detail="Incorrect email or password.")
    user.last_login_at = datetime.now(timezone.utc)
    db.commit()
    return _build_token_response(user)


@router.get("/me", response_model=MeResponse, summary="Current user")
def me(current_user: User = Depends(require_login)):
    return MeResponse(
        user_id=current_user.id,
        email=current_user.email,
        full_name=current_user.full_name,
        role=current_user.role,
        tutor_id=current_user.tutor_profile.id if current_user.tutor_profile else None,
    )
