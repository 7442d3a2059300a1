"""
FastAPI dependencies for tenant lookup and admin authentication
"""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Dict
import structlog

from qrmenu.core.auth import verify_admin_token
from qrmenu.services.data_store import SnapshotSource
from qrmenu.services.registry import StoreRegistry, TenantContext

logger = structlog.get_logger(__name__)
security = HTTPBearer()


def get_registry(request: Request) -> StoreRegistry:
    """Store registry created at startup"""
    return request.app.state.registry


async def get_tenant(
    slug: str,
    registry: StoreRegistry = Depends(get_registry)
) -> TenantContext:
    """Public storefront tenant; unknown slugs and unsaved drafts are 404"""
    context = await registry.get(slug)
    if context.store.not_found or context.store.source == SnapshotSource.DRAFT:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Menu {slug} not found"
        )
    return context


async def require_admin(
    slug: str,
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> Dict:
    """Claims of a valid admin token issued for this slug"""
    payload = verify_admin_token(credentials.credentials, slug)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    logger.debug(f"Admin authenticated for {slug}: {payload.get('sub')}")
    return payload


async def get_admin_tenant(
    slug: str,
    claims: Dict = Depends(require_admin),
    registry: StoreRegistry = Depends(get_registry)
) -> TenantContext:
    """Admin tenant, an empty draft when the slug is unknown"""
    return await registry.get(slug, draft_on_miss=True)
