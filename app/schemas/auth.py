# app/schemas/auth.py
# Pydantic request/response models for authentication endpoints

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, field_validator


# ── Signup ────────────────────────────────────────────────────────────────────

class SignupRequest(BaseModel):
    email: EmailStr
    password: str
    full_name: str
    role: str = "student"  # student | tutor (admins are seeded)

    @field_validator("password")
    @classmethod
    def password_strength(cls, v: str) -> str:
        if len(v) < 8:
            raise ValueError("Password must be at least 8 characters")
        return v

    @field_validator("role")
    @classmethod
    def valid_role(cls, v: str) -> str:
        if v not in ("student", "tutor"):
            raise ValueError("Role must be 'student' or 'tutor'")
        return v

    @field_validator("full_name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Full name cannot be empty")
        return v


# ── Login ─────────────────────────────────────────────────────────────────────

class LoginRequest(BaseModel):
    email: EmailStr
    password: str


# ── Token Responses ───────────────────────────────────────────────────────────

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds until access token expiry

    # User info embedded so frontend doesn't need a second request
    user_id: UUID
    role: str
    full_name: str
    tutor_id: Optional[UUID] = None   # only for tutors


class MeResponse(BaseModel):
    user_id: UUID
    email: str
    full_name: str
    role: str
    tutor_id: Optional[UUID] = None


# ── Generic Message ───────────────────────────────────────────────────────────

class MessageResponse(BaseModel):
    message: str
