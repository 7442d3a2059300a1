"""
Admin API endpoints - business profile, menu editing, theme, inbox and QR
"""

from fastapi import APIRouter, Body, Depends, HTTPException, Response, status
from typing import Any, Dict, List
import structlog

from qrmenu.core.auth import create_access_token
from qrmenu.core.dependencies import get_admin_tenant, require_admin
from qrmenu.core.errors import NotFoundError, TransientNetworkError, ValidationError
from qrmenu.models.business import Business
from qrmenu.models.category import Category, CategoryCreate, CategoryUpdate
from qrmenu.models.feedback import Feedback
from qrmenu.models.product import Product, ProductCreate
from qrmenu.models.snapshot import MenuStats
from qrmenu.schemas.menu import (
    AdminStateResponse, CategoryDeleteResponse, FeedbackListResponse, PresetRequest,
    ReorderRequest, SlugRequest, SlugResponse, TagRequest, TagsResponse, ThemeResponse,
    ThemeUpdateRequest,
)
from qrmenu.api.menu import theme_response
from qrmenu.services.data_store import MutationRecord, SnapshotSource
from qrmenu.services.qr import DEFAULT_QR_PRESET, render_menu_qr
from qrmenu.services.registry import TenantContext
from qrmenu.services.theme import preset as theme_preset

logger = structlog.get_logger(__name__)
router = APIRouter()


def _validation_error(e: ValidationError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.to_dict())


def _not_found(e: NotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


def _state(context: TenantContext) -> AdminStateResponse:
    store = context.store
    return AdminStateResponse(
        business=store.require_business(),
        categories=store.categories,
        products=store.products,
        tags=store.tags,
        source=store.source.value,
        is_draft=store.source == SnapshotSource.DRAFT,
        stats=store.get_stats(),
        pending_writes=store.pending_count,
    )


# State

@router.get("/{slug}", response_model=AdminStateResponse)
async def get_state(context: TenantContext = Depends(get_admin_tenant)):
    """Editor view of the tenant"""
    return _state(context)


@router.get("/{slug}/stats", response_model=MenuStats)
async def get_stats(context: TenantContext = Depends(get_admin_tenant)):
    return context.store.get_stats()


@router.get("/{slug}/mutations", response_model=List[MutationRecord])
async def list_mutations(context: TenantContext = Depends(get_admin_tenant)):
    """Forwarded remote writes, oldest first"""
    return list(context.store.mutations)


@router.post("/{slug}/reload", response_model=AdminStateResponse)
async def reload_tenant(context: TenantContext = Depends(get_admin_tenant)):
    """Discard the cached snapshot and load from the remote store again"""
    try:
        await context.store.reload()
        return _state(context)
    except Exception as e:
        logger.error(f"Error reloading {context.slug}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to reload tenant"
        )


# Business

@router.patch("/{slug}/business", response_model=Business)
async def update_business(
    partial: Dict[str, Any] = Body(...),
    context: TenantContext = Depends(get_admin_tenant)
):
    """Replace top-level business fields; the slug moves through PUT /business/slug"""
    if "slug" in partial and partial["slug"] != context.slug:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"detail": "Change the slug with PUT /business/slug", "field": "slug"}
        )
    try:
        return context.store.update_business(partial)
    except ValidationError as e:
        raise _validation_error(e)
    except NotFoundError as e:
        raise _not_found(e)
    except Exception as e:
        logger.error(f"Error updating business {context.slug}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update business"
        )


@router.put("/{slug}/business/slug", response_model=SlugResponse)
async def rename_slug(
    slug_data: SlugRequest,
    claims: Dict = Depends(require_admin),
    context: TenantContext = Depends(get_admin_tenant)
):
    """Move the public menu to a new slug; returns a session for it"""
    try:
        business = await context.store.rename_slug(slug_data.slug)
    except ValidationError as e:
        raise _validation_error(e)
    except TransientNetworkError as e:
        logger.warning(f"Cannot verify slug {slug_data.slug}: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Slug availability could not be checked"
        )
    access_token = create_access_token(email=claims["sub"], slug=business.slug)
    return SlugResponse(business=business, access_token=access_token)


# Categories

@router.post("/{slug}/categories", response_model=Category, status_code=status.HTTP_201_CREATED)
async def create_category(
    category_data: CategoryCreate,
    context: TenantContext = Depends(get_admin_tenant)
):
    try:
        category = context.store.add_category(category_data)
        logger.info(f"Created category {category.id} for {context.slug}")
        return category
    except ValidationError as e:
        raise _validation_error(e)


@router.put("/{slug}/categories/order", response_model=List[Category])
async def reorder_categories(
    order: ReorderRequest,
    context: TenantContext = Depends(get_admin_tenant)
):
    return context.store.reorder_categories(order.ids)


@router.patch("/{slug}/categories/{category_id}", response_model=Category)
async def update_category(
    category_id: str,
    category_data: CategoryUpdate,
    context: TenantContext = Depends(get_admin_tenant)
):
    try:
        return context.store.update_category(category_id, category_data.model_dump(exclude_unset=True))
    except ValidationError as e:
        raise _validation_error(e)
    except NotFoundError as e:
        raise _not_found(e)


@router.delete("/{slug}/categories/{category_id}", response_model=CategoryDeleteResponse)
async def delete_category(category_id: str, context: TenantContext = Depends(get_admin_tenant)):
    """Delete a category together with its products"""
    try:
        removed = context.store.delete_category(category_id)
        return CategoryDeleteResponse(category_id=category_id, removed_product_ids=removed)
    except NotFoundError as e:
        raise _not_found(e)


@router.put("/{slug}/categories/{category_id}/products/order", response_model=List[Product])
async def reorder_products(
    category_id: str,
    order: ReorderRequest,
    context: TenantContext = Depends(get_admin_tenant)
):
    try:
        return context.store.reorder_products(category_id, order.ids)
    except NotFoundError as e:
        raise _not_found(e)


# Products

@router.post("/{slug}/products", response_model=Product, status_code=status.HTTP_201_CREATED)
async def create_product(
    product_data: ProductCreate,
    context: TenantContext = Depends(get_admin_tenant)
):
    try:
        product = context.store.add_product(product_data)
        logger.info(f"Created product {product.id} for {context.slug}")
        return product
    except ValidationError as e:
        raise _validation_error(e)


@router.patch("/{slug}/products/{product_id}", response_model=Product)
async def update_product(
    product_id: str,
    partial: Dict[str, Any] = Body(...),
    context: TenantContext = Depends(get_admin_tenant)
):
    try:
        return context.store.update_product(product_id, partial)
    except ValidationError as e:
        raise _validation_error(e)
    except NotFoundError as e:
        raise _not_found(e)


@router.delete("/{slug}/products/{product_id}", response_model=Product)
async def delete_product(product_id: str, context: TenantContext = Depends(get_admin_tenant)):
    try:
        return context.store.delete_product(product_id)
    except NotFoundError as e:
        raise _not_found(e)


# Tags

@router.get("/{slug}/tags", response_model=List[str])
async def list_tags(context: TenantContext = Depends(get_admin_tenant)):
    return context.store.tags


@router.post("/{slug}/tags", response_model=TagsResponse)
async def add_tag(tag_data: TagRequest, context: TenantContext = Depends(get_admin_tenant)):
    try:
        changed = context.store.add_tag(tag_data.name)
        return TagsResponse(tags=context.store.tags, changed=changed)
    except ValidationError as e:
        raise _validation_error(e)


@router.delete("/{slug}/tags/{name}", response_model=TagsResponse)
async def remove_tag(name: str, context: TenantContext = Depends(get_admin_tenant)):
    changed = context.store.remove_tag(name)
    return TagsResponse(tags=context.store.tags, changed=changed)


# Theme

@router.get("/{slug}/theme", response_model=ThemeResponse)
async def get_theme(context: TenantContext = Depends(get_admin_tenant)):
    return theme_response(context)


@router.post("/{slug}/theme", response_model=ThemeResponse)
async def update_theme(
    theme_data: ThemeUpdateRequest,
    context: TenantContext = Depends(get_admin_tenant)
):
    """Save theme tokens; merged over the stored ones unless replace is set"""
    business = context.store.require_business()
    settings = dict(theme_data.settings) if theme_data.replace else {**business.theme_settings, **theme_data.settings}
    try:
        context.store.update_business({"theme_settings": settings})
    except ValidationError as e:
        raise _validation_error(e)
    return theme_response(context)


@router.post("/{slug}/theme/preset", response_model=ThemeResponse)
async def apply_theme_preset(
    preset_data: PresetRequest,
    context: TenantContext = Depends(get_admin_tenant)
):
    """Merge a named color preset into the stored theme"""
    try:
        colors = theme_preset(preset_data.name)
        business = context.store.require_business()
        context.store.update_business({"theme_settings": {**business.theme_settings, **colors}})
    except ValidationError as e:
        raise _validation_error(e)
    logger.info(f"Applied theme preset {preset_data.name} for {context.slug}")
    return theme_response(context)


# Feedback inbox

@router.get("/{slug}/feedback", response_model=FeedbackListResponse)
async def list_feedback(context: TenantContext = Depends(get_admin_tenant)):
    inbox = context.feedback
    return FeedbackListResponse(
        feedbacks=inbox.feedbacks,
        unread_count=inbox.unread_count,
        average_rating=inbox.average_rating(),
    )


@router.post("/{slug}/feedback/{feedback_id}/read", response_model=Feedback)
async def mark_feedback_read(feedback_id: str, context: TenantContext = Depends(get_admin_tenant)):
    try:
        return context.feedback.mark_as_read(feedback_id)
    except NotFoundError as e:
        raise _not_found(e)


@router.delete("/{slug}/feedback/{feedback_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_feedback(feedback_id: str, context: TenantContext = Depends(get_admin_tenant)):
    try:
        context.feedback.delete(feedback_id)
    except NotFoundError as e:
        raise _not_found(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{slug}/feedback")
async def delete_all_feedback(context: TenantContext = Depends(get_admin_tenant)):
    deleted = context.feedback.delete_all()
    return {"deleted": deleted}


# QR

@router.get("/{slug}/qr")
async def get_qr_code(
    preset: str = DEFAULT_QR_PRESET,
    context: TenantContext = Depends(get_admin_tenant)
):
    """PNG QR code linking to the public menu"""
    try:
        png = render_menu_qr(context.store.require_business().slug, preset)
    except ValidationError as e:
        raise _validation_error(e)
    return Response(
        content=png,
        media_type="image/png",
        headers={"Content-Disposition": f'inline; filename="{context.slug}-qr.png"'},
    )
