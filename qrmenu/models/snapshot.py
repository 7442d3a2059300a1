"""
Tenant snapshot - the unit mirrored to the local cache
"""

from pydantic import BaseModel, Field
from datetime import datetime, timezone
from typing import List, Optional

from qrmenu.models.business import Business
from qrmenu.models.category import Category
from qrmenu.models.product import Product


class TenantSnapshot(BaseModel):
    """Full {business, categories, products, tags} view of one tenant"""
    business: Optional[Business] = None
    categories: List[Category] = Field(default_factory=list)
    products: List[Product] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    saved_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class MenuStats(BaseModel):
    """Dashboard counters"""
    total_products: int
    total_categories: int
    featured_products: int
    new_products: int
