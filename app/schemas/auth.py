"""
app/schemas/auth.py

Purpose: Request and response schemas for the users API

- Credential validation (email format, non-empty password)
- Public user projections (never expose password or token hash)
"""

from pydantic import BaseModel, EmailStr, Field

from app.models.user import Subscription


class Credentials(BaseModel):
    """
    Body shared by signup and login.
    """
    email: EmailStr = Field(..., description="Account email address")
    password: str = Field(..., min_length=1, description="Plain-text password")

    class Config:
        json_schema_extra = {
            "example": {
                "email": "jane@example.com",
                "password": "s3cret-pass"
            }
        }


class PublicUser(BaseModel):
    email: str
    subscription: Subscription


class SignupUser(PublicUser):
    avatarURL: str


class SignupResponse(BaseModel):
    user: SignupUser


class LoginResponse(BaseModel):
    token: str
    user: PublicUser


class AvatarResponse(BaseModel):
    avatarURL: str
