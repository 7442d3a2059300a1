"""
Request and response schemas for the storefront and admin API
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, Dict, List, Optional

from qrmenu.models.business import Business, WorkingHours
from qrmenu.models.category import Category
from qrmenu.models.feedback import Feedback
from qrmenu.models.product import Product
from qrmenu.models.snapshot import MenuStats


# Storefront

class ThemeResponse(BaseModel):
    """Derived styling tokens"""
    tokens: Dict[str, Any]
    css_variables: Dict[str, str]


class MenuResponse(BaseModel):
    """Full public menu of one tenant"""
    business: Business
    categories: List[Category]
    products: List[Product]
    tags: List[str]
    theme: ThemeResponse


class HoursResponse(BaseModel):
    """Opening hours and current state"""
    working_hours: List[WorkingHours]
    is_open: bool
    checked_at: datetime


class PriceRequest(BaseModel):
    """Configured product line to price"""
    variation_id: Optional[str] = None
    extra_ids: List[str] = Field(default_factory=list)
    quantity: int = 1


# Admin

class AdminStateResponse(BaseModel):
    """Editor view of a tenant"""
    business: Business
    categories: List[Category]
    products: List[Product]
    tags: List[str]
    source: str
    is_draft: bool
    stats: MenuStats
    pending_writes: int


class SlugRequest(BaseModel):
    slug: str


class SlugResponse(BaseModel):
    """Renamed business and a session for the new slug"""
    business: Business
    access_token: str
    token_type: str = "bearer"


class ReorderRequest(BaseModel):
    ids: List[str]


class TagRequest(BaseModel):
    name: str


class TagsResponse(BaseModel):
    tags: List[str]
    changed: bool


class ThemeUpdateRequest(BaseModel):
    """Theme tokens merged into the stored settings"""
    settings: Dict[str, Any]
    replace: bool = False


class PresetRequest(BaseModel):
    name: str


class FeedbackListResponse(BaseModel):
    feedbacks: List[Feedback]
    unread_count: int
    average_rating: Optional[float] = None


class CategoryDeleteResponse(BaseModel):
    category_id: str
    removed_product_ids: List[str]
