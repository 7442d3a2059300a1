"""
Product model for menu items
"""

from pydantic import BaseModel, Field
from typing import List, Optional
import uuid


def new_product_id() -> str:
    return f"p-{uuid.uuid4().hex}"


class ProductVariation(BaseModel):
    """Mutually exclusive size/type choice, modifier adds to base price"""
    id: str
    name: str
    price_modifier: float = 0.0


class ProductExtra(BaseModel):
    """Independently toggleable add-on"""
    id: str
    name: str
    price: float = Field(default=0.0, ge=0)


class Product(BaseModel):
    """Menu product"""
    id: str = Field(default_factory=new_product_id)
    category_id: str
    name: str
    description: str = ""

    # Pricing (currency agnostic)
    price: float = Field(ge=0)
    original_price: Optional[float] = Field(default=None, ge=0)

    # Images
    image: str = ""
    gallery: List[str] = Field(default_factory=list)

    # Display flags
    is_featured: bool = False
    is_new: bool = False
    tags: List[str] = Field(default_factory=list)

    # Options
    variations: List[ProductVariation] = Field(default_factory=list)
    extras: List[ProductExtra] = Field(default_factory=list)

    # Nutritional/allergen info
    allergens: List[str] = Field(default_factory=list)
    preparation_time: Optional[str] = None
    calories: Optional[int] = Field(default=None, ge=0)

    @property
    def is_discounted(self) -> bool:
        return self.original_price is not None and self.original_price > self.price


class ProductCreate(BaseModel):
    """Input for creating a product"""
    category_id: str
    name: str
    description: str = ""
    price: float = Field(ge=0)
    original_price: Optional[float] = Field(default=None, ge=0)
    image: str = ""
    gallery: List[str] = Field(default_factory=list)
    is_featured: bool = False
    is_new: bool = False
    tags: List[str] = Field(default_factory=list)
    variations: List[ProductVariation] = Field(default_factory=list)
    extras: List[ProductExtra] = Field(default_factory=list)
    allergens: List[str] = Field(default_factory=list)
    preparation_time: Optional[str] = None
    calories: Optional[int] = Field(default=None, ge=0)
