"""
Public storefront API endpoints
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from datetime import datetime
from typing import List, Optional
import structlog

from qrmenu.core.dependencies import get_tenant
from qrmenu.core.errors import ValidationError
from qrmenu.models.category import Category
from qrmenu.models.feedback import Feedback, FeedbackCreate
from qrmenu.models.product import Product
from qrmenu.schemas.menu import HoursResponse, MenuResponse, PriceRequest, ThemeResponse
from qrmenu.services.menu import (
    DEFAULT_MAX_PRICE, DEFAULT_MIN_PRICE, MenuFilter, PriceQuote, categories_with_products,
    compute_price, discounted_products, featured_products, filter_products, has_active_filters,
    is_open_at, products_by_category, search_products,
)
from qrmenu.services.registry import TenantContext

logger = structlog.get_logger(__name__)
router = APIRouter()


def theme_response(context: TenantContext) -> ThemeResponse:
    return ThemeResponse(tokens=context.theme.to_dict(), css_variables=context.theme.css_variables())


@router.get("/{slug}", response_model=MenuResponse)
async def get_menu(context: TenantContext = Depends(get_tenant)):
    """Full menu of a tenant"""
    store = context.store
    return MenuResponse(
        business=store.business,
        categories=store.categories,
        products=store.products,
        tags=store.tags,
        theme=theme_response(context),
    )


@router.get("/{slug}/products", response_model=List[Product])
async def list_products(
    category: Optional[List[str]] = Query(None),
    tag: Optional[List[str]] = Query(None),
    min_price: float = DEFAULT_MIN_PRICE,
    max_price: float = DEFAULT_MAX_PRICE,
    context: TenantContext = Depends(get_tenant)
):
    """Products narrowed by the storefront filter panel"""
    menu_filter = MenuFilter(
        categories=category or [],
        tags=tag or [],
        min_price=min_price,
        max_price=max_price,
    )
    if not has_active_filters(menu_filter):
        return context.store.products
    return filter_products(context.store.products, menu_filter)


@router.get("/{slug}/categories", response_model=List[Category])
async def list_categories(context: TenantContext = Depends(get_tenant)):
    """Categories with at least one product, in menu order"""
    return categories_with_products(context.store.categories, context.store.products)


@router.get("/{slug}/categories/{category_id}/products", response_model=List[Product])
async def list_category_products(category_id: str, context: TenantContext = Depends(get_tenant)):
    if context.store.get_category(category_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Category {category_id} not found"
        )
    return products_by_category(context.store.products, category_id)


@router.get("/{slug}/search", response_model=List[Product])
async def search(q: str = "", context: TenantContext = Depends(get_tenant)):
    return search_products(context.store.products, q)


@router.get("/{slug}/featured", response_model=List[Product])
async def list_featured(context: TenantContext = Depends(get_tenant)):
    return featured_products(context.store.products)


@router.get("/{slug}/discounted", response_model=List[Product])
async def list_discounted(context: TenantContext = Depends(get_tenant)):
    return discounted_products(context.store.products)


@router.get("/{slug}/products/{product_id}", response_model=Product)
async def get_product(product_id: str, context: TenantContext = Depends(get_tenant)):
    product = context.store.get_product(product_id)
    if product is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Product {product_id} not found"
        )
    return product


@router.post("/{slug}/products/{product_id}/price", response_model=PriceQuote)
async def price_product(
    product_id: str,
    price_request: PriceRequest,
    context: TenantContext = Depends(get_tenant)
):
    """Price a product with a variation, extras and quantity"""
    product = context.store.get_product(product_id)
    if product is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Product {product_id} not found"
        )
    try:
        return compute_price(
            product,
            variation_id=price_request.variation_id,
            extra_ids=price_request.extra_ids,
            quantity=price_request.quantity,
        )
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.to_dict())


@router.get("/{slug}/theme", response_model=ThemeResponse)
async def get_theme(context: TenantContext = Depends(get_tenant)):
    return theme_response(context)


@router.get("/{slug}/hours", response_model=HoursResponse)
async def get_hours(context: TenantContext = Depends(get_tenant)):
    """Opening hours, evaluated against the server's local time"""
    now = datetime.now()
    working_hours = context.store.business.working_hours
    return HoursResponse(
        working_hours=working_hours,
        is_open=is_open_at(working_hours, now),
        checked_at=now,
    )


@router.post("/{slug}/feedback", response_model=Feedback, status_code=status.HTTP_201_CREATED)
async def submit_feedback(
    feedback_data: FeedbackCreate,
    context: TenantContext = Depends(get_tenant)
):
    """Leave feedback for a tenant"""
    try:
        return context.feedback.add(feedback_data)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.to_dict())
    except Exception as e:
        logger.error(f"Error saving feedback for {context.slug}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save feedback"
        )
