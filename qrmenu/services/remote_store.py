"""
Remote store contract

The durable record of every tenant. Each call is a single request with no
retries and no transactions: it either completes or raises a
RemoteStoreError (TransientNetworkError for transport failures).
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Type, TypeVar
import pydantic
from pydantic import BaseModel

from qrmenu.core.errors import RemoteStoreError
from qrmenu.models.business import Business
from qrmenu.models.category import Category
from qrmenu.models.product import Product

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_row(model: Type[ModelT], row: Any, source: str) -> ModelT:
    """Validate one stored row; malformed data is a remote store failure"""
    try:
        return model.model_validate(row)
    except pydantic.ValidationError as e:
        raise RemoteStoreError(
            f"Malformed {model.__name__} row from {source}: {e.error_count()} errors"
        ) from e


def parse_rows(model: Type[ModelT], rows: Iterable[Any], source: str) -> List[ModelT]:
    return [parse_row(model, row, source) for row in rows]


class RemoteStore(ABC):
    """Record-oriented remote service keyed by business id"""

    name: str = "remote"

    # Reads

    @abstractmethod
    async def fetch_business_by_slug(self, slug: str) -> Business:
        """Return the business for a slug, raise NotFoundError if absent"""

    @abstractmethod
    async def fetch_categories(self, business_id: str) -> List[Category]:
        """Categories in insertion order"""

    @abstractmethod
    async def fetch_products(self, business_id: str) -> List[Product]:
        """Products in insertion order"""

    @abstractmethod
    async def fetch_tags(self, business_id: str) -> List[str]:
        """Tenant tag vocabulary"""

    @abstractmethod
    async def slug_available(self, slug: str, exclude_business_id: Optional[str] = None) -> bool:
        """Whether no other business uses the slug"""

    # Writes

    @abstractmethod
    async def update_business(self, business_id: str, partial: Dict[str, Any]) -> None:
        """Replace the given top-level business fields"""

    @abstractmethod
    async def add_category(self, business_id: str, category: Category) -> None:
        pass

    @abstractmethod
    async def update_category(self, business_id: str, category_id: str, partial: Dict[str, Any]) -> None:
        pass

    @abstractmethod
    async def delete_category(self, business_id: str, category_id: str) -> None:
        """Delete a category and every product in it"""

    @abstractmethod
    async def add_product(self, business_id: str, product: Product) -> None:
        pass

    @abstractmethod
    async def update_product(self, business_id: str, product_id: str, partial: Dict[str, Any]) -> None:
        pass

    @abstractmethod
    async def delete_product(self, business_id: str, product_id: str) -> None:
        pass

    @abstractmethod
    async def add_tag(self, business_id: str, name: str) -> None:
        pass

    @abstractmethod
    async def remove_tag(self, business_id: str, name: str) -> None:
        pass

    async def close(self) -> None:
        """Release connections held by the store"""
