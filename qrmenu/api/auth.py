"""
Auth API endpoints - admin login
"""

from fastapi import APIRouter, HTTPException, status
import structlog

from qrmenu.core.auth import create_access_token, verify_password
from qrmenu.core.config import get_settings
from qrmenu.schemas.token import LoginRequest, TokenResponse
from qrmenu.services.slugs import is_valid_slug

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("/login", response_model=TokenResponse)
async def login(login_data: LoginRequest):
    """Exchange admin credentials for a session token on one tenant"""
    settings = get_settings()

    if not is_valid_slug(login_data.slug):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"detail": "Invalid slug", "field": "slug"}
        )

    if (
        login_data.email.lower() != settings.ADMIN_EMAIL.lower()
        or not verify_password(login_data.password, settings.ADMIN_PASSWORD_HASH)
    ):
        logger.warning(f"Failed admin login for {login_data.email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    logger.info(f"Admin logged in for {login_data.slug}")
    access_token = create_access_token(email=login_data.email, slug=login_data.slug)
    return TokenResponse(access_token=access_token, slug=login_data.slug)
