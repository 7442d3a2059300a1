"""
Storefront menu queries over a tenant snapshot
"""

from datetime import datetime
from typing import Dict, Iterable, List, Optional
from pydantic import BaseModel, Field

from qrmenu.core.errors import ValidationError
from qrmenu.models.business import WEEK_DAYS, WorkingHours
from qrmenu.models.category import Category
from qrmenu.models.product import Product

NEW_TAG = "Yeni"
DISCOUNTED_TAG = "İndirimli"

DEFAULT_MIN_PRICE = 0.0
DEFAULT_MAX_PRICE = 1000.0

MIN_QUANTITY = 1
MAX_QUANTITY = 10


def products_by_category(products: Iterable[Product], category_id: str) -> List[Product]:
    return [p for p in products if p.category_id == category_id]


def featured_products(products: Iterable[Product]) -> List[Product]:
    return [p for p in products if p.is_featured]


def discounted_products(products: Iterable[Product]) -> List[Product]:
    return [p for p in products if p.is_discounted]


def categories_with_products(categories: Iterable[Category], products: Iterable[Product]) -> List[Category]:
    """Categories that hold at least one of the given products, in menu order"""
    used = {p.category_id for p in products}
    return [c for c in categories if c.id in used]


def search_products(products: Iterable[Product], query: str) -> List[Product]:
    """Case-insensitive match on name, description or any tag"""
    needle = (query or "").strip().lower()
    if not needle:
        return []
    return [
        p for p in products
        if needle in p.name.lower()
        or needle in p.description.lower()
        or any(needle in tag.lower() for tag in p.tags)
    ]


class MenuFilter(BaseModel):
    """Storefront filter panel state"""
    categories: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    min_price: float = DEFAULT_MIN_PRICE
    max_price: float = DEFAULT_MAX_PRICE


def has_active_filters(menu_filter: MenuFilter) -> bool:
    return (
        bool(menu_filter.categories)
        or bool(menu_filter.tags)
        or menu_filter.min_price > DEFAULT_MIN_PRICE
        or menu_filter.max_price < DEFAULT_MAX_PRICE
    )


def _matches_tags(product: Product, tags: List[str]) -> bool:
    if NEW_TAG in tags and product.is_new:
        return True
    if DISCOUNTED_TAG in tags and product.is_discounted:
        return True
    return any(tag in tags for tag in product.tags)


def filter_products(products: Iterable[Product], menu_filter: MenuFilter) -> List[Product]:
    result = list(products)
    if menu_filter.categories:
        result = [p for p in result if p.category_id in menu_filter.categories]
    result = [p for p in result if menu_filter.min_price <= p.price <= menu_filter.max_price]
    if menu_filter.tags:
        result = [p for p in result if _matches_tags(p, menu_filter.tags)]
    return result


class PriceQuote(BaseModel):
    """Price of a configured product line"""
    product_id: str
    variation_id: Optional[str] = None
    extra_ids: List[str] = Field(default_factory=list)
    quantity: int
    unit_price: float
    total_price: float


def compute_price(
    product: Product,
    variation_id: Optional[str] = None,
    extra_ids: Optional[List[str]] = None,
    quantity: int = 1,
) -> PriceQuote:
    """
    Price a product with one variation, any extras and a quantity

    Raises:
        ValidationError: unknown variation or extra, quantity outside 1-10
    """
    if not MIN_QUANTITY <= quantity <= MAX_QUANTITY:
        raise ValidationError(f"Quantity must be between {MIN_QUANTITY} and {MAX_QUANTITY}", field="quantity")

    unit = product.price
    if variation_id:
        variation = next((v for v in product.variations if v.id == variation_id), None)
        if variation is None:
            raise ValidationError(f"Unknown variation {variation_id}", field="variation_id")
        unit += variation.price_modifier

    extras: Dict[str, float] = {e.id: e.price for e in product.extras}
    selected = list(dict.fromkeys(extra_ids or []))
    for extra_id in selected:
        if extra_id not in extras:
            raise ValidationError(f"Unknown extra {extra_id}", field="extra_ids")
        unit += extras[extra_id]

    unit = round(unit, 2)
    return PriceQuote(
        product_id=product.id,
        variation_id=variation_id,
        extra_ids=selected,
        quantity=quantity,
        unit_price=unit,
        total_price=round(unit * quantity, 2),
    )


def _minutes(value: str) -> int:
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def is_open_at(working_hours: List[WorkingHours], when: datetime) -> bool:
    """Whether the business is open at a local time

    Closing at or before the opening time means the day runs past midnight.
    """
    if len(working_hours) != len(WEEK_DAYS):
        return False
    now = when.hour * 60 + when.minute
    today = working_hours[when.weekday()]
    yesterday = working_hours[when.weekday() - 1]

    if not today.is_closed:
        opens, closes = _minutes(today.open), _minutes(today.close)
        if closes > opens and opens <= now < closes:
            return True
        if closes <= opens and now >= opens:
            return True

    # Tail of an overnight shift that started yesterday
    if not yesterday.is_closed:
        opens, closes = _minutes(yesterday.open), _minutes(yesterday.close)
        if closes <= opens and now < closes:
            return True
    return False
