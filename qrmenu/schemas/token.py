"""
Pydantic schemas for authentication and tokens
"""

from pydantic import BaseModel, Field, EmailStr
from datetime import datetime


class LoginRequest(BaseModel):
    """Admin login for one tenant"""
    email: EmailStr
    password: str
    slug: str = Field(..., description="Tenant the session is issued for")


class TokenPayload(BaseModel):
    """JWT token payload"""
    sub: str = Field(..., description="Admin email")
    slug: str = Field(..., description="Tenant slug")
    admin: bool = Field(True, description="Admin session flag")
    exp: datetime = Field(..., description="Expiration time")
    iat: datetime = Field(..., description="Issued at")


class TokenResponse(BaseModel):
    """Token response"""
    access_token: str
    token_type: str = "bearer"
    slug: str
