"""
Menu category model for organizing products
"""

from pydantic import BaseModel, Field
from typing import Optional
import uuid


def new_category_id() -> str:
    return f"cat-{uuid.uuid4().hex}"


class Category(BaseModel):
    """Menu category"""
    id: str = Field(default_factory=new_category_id)
    name: str
    icon: str = "UtensilsCrossed"

    # Derived, may drift from actual membership
    product_count: int = 0

    is_featured: Optional[bool] = None


class CategoryCreate(BaseModel):
    """Input for creating a category"""
    name: str
    icon: str = "UtensilsCrossed"
    is_featured: Optional[bool] = None


class CategoryUpdate(BaseModel):
    """Partial category update"""
    name: Optional[str] = None
    icon: Optional[str] = None
    is_featured: Optional[bool] = None
