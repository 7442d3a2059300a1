"""
In-process remote store for development and tests
"""

from typing import Any, Dict, List, Optional
import structlog

from qrmenu.core.errors import NotFoundError, RemoteStoreError
from qrmenu.models.business import Business
from qrmenu.models.category import Category
from qrmenu.models.product import Product
from qrmenu.models.snapshot import TenantSnapshot
from qrmenu.services.remote_store import RemoteStore, parse_row, parse_rows

logger = structlog.get_logger(__name__)


class MemoryRemoteStore(RemoteStore):
    """Remote store held in dictionaries keyed by business id"""

    name = "memory"

    def __init__(self):
        self.businesses: Dict[str, Dict[str, Any]] = {}
        self.categories: Dict[str, List[Dict[str, Any]]] = {}
        self.products: Dict[str, List[Dict[str, Any]]] = {}
        self.tags: Dict[str, List[str]] = {}

    def put_tenant(self, snapshot: TenantSnapshot) -> None:
        """Seed a whole tenant (registration happens out-of-band)"""
        if snapshot.business is None:
            raise ValueError("snapshot has no business")
        business_id = snapshot.business.id
        self.businesses[business_id] = snapshot.business.model_dump(mode="json")
        self.categories[business_id] = [c.model_dump(mode="json") for c in snapshot.categories]
        self.products[business_id] = [p.model_dump(mode="json") for p in snapshot.products]
        self.tags[business_id] = list(snapshot.tags)
        logger.info(f"Seeded tenant {snapshot.business.slug}")

    def _business(self, business_id: str) -> Dict[str, Any]:
        if business_id not in self.businesses:
            raise NotFoundError(f"Business {business_id} not found")
        return self.businesses[business_id]

    async def fetch_business_by_slug(self, slug: str) -> Business:
        for row in self.businesses.values():
            if row["slug"] == slug:
                return parse_row(Business, row, self.name)
        raise NotFoundError(f"Business {slug} not found")

    async def fetch_categories(self, business_id: str) -> List[Category]:
        return parse_rows(Category, self.categories.get(business_id, []), self.name)

    async def fetch_products(self, business_id: str) -> List[Product]:
        return parse_rows(Product, self.products.get(business_id, []), self.name)

    async def fetch_tags(self, business_id: str) -> List[str]:
        return list(self.tags.get(business_id, []))

    async def slug_available(self, slug: str, exclude_business_id: Optional[str] = None) -> bool:
        return not any(
            row["slug"] == slug and business_id != exclude_business_id
            for business_id, row in self.businesses.items()
        )

    async def update_business(self, business_id: str, partial: Dict[str, Any]) -> None:
        row = self._business(business_id)
        if "slug" in partial and not await self.slug_available(partial["slug"], business_id):
            raise RemoteStoreError(f"Slug {partial['slug']} already taken")
        row.update(partial)

    async def add_category(self, business_id: str, category: Category) -> None:
        self._business(business_id)
        self.categories.setdefault(business_id, []).append(category.model_dump(mode="json"))

    async def update_category(self, business_id: str, category_id: str, partial: Dict[str, Any]) -> None:
        for row in self.categories.get(business_id, []):
            if row["id"] == category_id:
                row.update(partial)
                return
        raise NotFoundError(f"Category {category_id} not found")

    async def delete_category(self, business_id: str, category_id: str) -> None:
        self._business(business_id)
        self.categories[business_id] = [
            row for row in self.categories.get(business_id, []) if row["id"] != category_id
        ]
        self.products[business_id] = [
            row for row in self.products.get(business_id, []) if row["category_id"] != category_id
        ]

    async def add_product(self, business_id: str, product: Product) -> None:
        self._business(business_id)
        self.products.setdefault(business_id, []).append(product.model_dump(mode="json"))

    async def update_product(self, business_id: str, product_id: str, partial: Dict[str, Any]) -> None:
        for row in self.products.get(business_id, []):
            if row["id"] == product_id:
                row.update(partial)
                return
        raise NotFoundError(f"Product {product_id} not found")

    async def delete_product(self, business_id: str, product_id: str) -> None:
        self._business(business_id)
        self.products[business_id] = [
            row for row in self.products.get(business_id, []) if row["id"] != product_id
        ]

    async def add_tag(self, business_id: str, name: str) -> None:
        tags = self.tags.setdefault(business_id, [])
        if name not in tags:
            tags.append(name)

    async def remove_tag(self, business_id: str, name: str) -> None:
        tags = self.tags.get(business_id, [])
        if name in tags:
            tags.remove(name)
