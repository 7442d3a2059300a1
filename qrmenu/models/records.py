"""
SQL rows backing the sql remote store
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import Column, DateTime, JSON, UniqueConstraint
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BusinessRecord(SQLModel, table=True):
    """Business row, one per tenant"""

    __tablename__ = "businesses"

    id: str = Field(primary_key=True, max_length=64)
    slug: str = Field(unique=True, index=True, max_length=255, description="Public menu route")
    name: str = Field(default="", max_length=255)
    description: str = Field(default="")
    phone: str = Field(default="", max_length=64)
    email: str = Field(default="", max_length=255)
    address: str = Field(default="")
    website: str = Field(default="", max_length=1000)
    slogan: Optional[str] = None

    # Branding
    logo: str = Field(default="", max_length=1000)
    cover_image: str = Field(default="", max_length=1000)
    cuisine_types: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    rating: float = Field(default=5.0)
    review_count: int = Field(default=0)

    # Nested documents
    social_media: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    working_hours: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    gallery: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    slider_items: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    welcome_settings: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON))
    theme_settings: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))


class CategoryRecord(SQLModel, table=True):
    """Menu category row"""

    __tablename__ = "categories"

    id: str = Field(primary_key=True, max_length=64)
    business_id: str = Field(foreign_key="businesses.id", index=True)
    name: str = Field(max_length=255, nullable=False)
    icon: str = Field(default="UtensilsCrossed", max_length=64)
    product_count: int = Field(default=0)
    is_featured: Optional[bool] = None

    # Insertion order, advisory only
    sort_order: int = Field(default=0, index=True)

    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))


class ProductRecord(SQLModel, table=True):
    """Menu product row"""

    __tablename__ = "products"

    id: str = Field(primary_key=True, max_length=64)
    business_id: str = Field(foreign_key="businesses.id", index=True)
    category_id: str = Field(foreign_key="categories.id", index=True)
    name: str = Field(max_length=255, nullable=False)
    description: str = Field(default="")

    # Pricing
    price: float = Field(default=0.0)
    original_price: Optional[float] = None

    # Images
    image: str = Field(default="", max_length=1000)
    gallery: List[str] = Field(default_factory=list, sa_column=Column(JSON))

    # Display
    is_featured: bool = Field(default=False, index=True)
    is_new: bool = Field(default=False)
    tags: List[str] = Field(default_factory=list, sa_column=Column(JSON))

    # Options
    variations: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    extras: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))

    # Nutritional/allergen info
    allergens: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    preparation_time: Optional[str] = None
    calories: Optional[int] = None

    sort_order: int = Field(default=0, index=True)

    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))


class TagRecord(SQLModel, table=True):
    """Tenant tag vocabulary entry"""

    __tablename__ = "tags"
    __table_args__ = (UniqueConstraint("business_id", "name", name="uq_tag_business_name"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    business_id: str = Field(foreign_key="businesses.id", index=True)
    name: str = Field(max_length=255, nullable=False)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
