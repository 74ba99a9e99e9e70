"""
Authentication schemas
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional

from pointage.models.user import Role


class LoginRequest(BaseModel):
    """Login request schema"""
    email: str = Field(..., min_length=3, description="Company e-mail address")
    password: str = Field(..., description="Password")


class TokenResponse(BaseModel):
    """Token response schema"""
    access_token: str
    token_type: str = "bearer"


class UserSession(BaseModel):
    """Authenticated identity passed explicitly into every attendance operation"""
    user_id: int
    email: str
    name: str
    role: Role
    picture: Optional[str] = None

    model_config = ConfigDict(frozen=True)
