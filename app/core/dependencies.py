# app/core/dependencies.py
# FastAPI dependency functions for authentication and role scoping
#
#   require_login    -- any authenticated, active user
#   require_student  -- role='student'
#   require_tutor    -- role='tutor'
#   require_admin    -- role='admin'
#
# Collaborator providers (payment gateway, question generator, CV matcher)
# are also exposed as dependencies so tests can override them.

from typing import Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.security import decode_token
from app.db.session import get_db
from app.models.user import User
from app.services.cv_matching import CVMatcher, get_cv_matcher
from app.services.payment_gateway import PaymentGateway, get_payment_gateway
from app.services.question_generator import QuestionGenerator, get_question_generator

# Bearer token extractor -- auto_error=False so we can handle 401 ourselves
bearer_scheme = HTTPBearer(auto_error=False)


# ── Token Extraction ──────────────────────────────────────────────────────────

def _extract_user_from_token(
    credentials: Optional[HTTPAuthorizationCredentials],
    db: Session,
) -> Optional[User]:
    """
    Decode Bearer token and load user from DB.
    Returns None if no token, invalid token, or user not found/inactive.
    """
    if not credentials:
        return None

    payload = decode_token(credentials.credentials)
    if not payload or payload.get("type") != "access":
        return None

    user_id = payload.get("sub")
    if not user_id:
        return None

    try:
        user_uuid = UUID(user_id)
    except ValueError:
        return None

    return db.query(User).filter(
        User.id == user_uuid, User.is_active == True  # noqa: E712
    ).first()


def _require_role(role: str, credentials, db: Session) -> User:
    user = _extract_user_from_token(credentials, db)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if user.role != role:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"{role.capitalize()} access required.",
        )
    return user


# ── Auth Dependencies ─────────────────────────────────────────────────────────

def require_login(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Requires a valid JWT token. Raises 401 if not authenticated."""
    user = _extract_user_from_token(credentials, db)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required. Please log in.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_student(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Use for: booking requests, cancellation, payment, submissions."""
    return _require_role("student", credentials, db)


def require_tutor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Use for: tutor profile, availability, course applications."""
    return _require_role("tutor", credentials, db)


def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Use for: catalog management, booking decisions, match decisions."""
    return _require_role("admin", credentials, db)


# ── Collaborators ─────────────────────────────────────────────────────────────

def payment_gateway() -> PaymentGateway:
    return get_payment_gateway()


def question_generator() -> QuestionGenerator:
    return get_question_generator()


def cv_matcher() -> CVMatcher:
    return get_cv_matcher()
