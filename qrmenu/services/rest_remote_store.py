"""
Remote store speaking the PostgREST dialect of the hosted backend

Tables are addressed as /rest/v1/<table> with filters such as
``slug=eq.mikail-cafe``.
"""

from typing import Any, Dict, List, Optional
import httpx
import structlog

from qrmenu.core.errors import NotFoundError, RemoteStoreError, TransientNetworkError
from qrmenu.models.business import Business
from qrmenu.models.category import Category
from qrmenu.models.product import Product
from qrmenu.services.remote_store import RemoteStore, parse_row, parse_rows

logger = structlog.get_logger(__name__)


class RestRemoteStore(RemoteStore):
    """Remote store over httpx against a PostgREST endpoint"""

    name = "rest"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            base_url: Project URL, e.g. https://xyz.supabase.co
            api_key: Anonymous or service key sent as apikey and bearer token
            timeout: Per-request timeout in seconds
            transport: Optional transport override (tests use httpx.MockTransport)
        """
        if not base_url:
            raise ValueError("base_url is required")
        if not api_key:
            raise ValueError("api_key is required")

        self.client = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + "/rest/v1",
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def _request(
        self,
        method: str,
        table: str,
        params: Optional[Dict[str, str]] = None,
        json: Any = None,
        prefer: Optional[str] = None,
    ) -> Any:
        headers = {"Prefer": prefer} if prefer else None
        try:
            response = await self.client.request(method, f"/{table}", params=params, json=json, headers=headers)
        except httpx.TransportError as e:
            logger.warning(f"{method} /{table} failed: {e}")
            raise TransientNetworkError(f"{method} {table} failed: {e}") from e

        if response.status_code >= 500:
            logger.warning(f"{method} /{table} returned {response.status_code}")
            raise TransientNetworkError(f"{method} {table} returned {response.status_code}")
        if response.status_code >= 400:
            logger.error(f"{method} /{table} rejected: {response.status_code} {response.text}")
            raise RemoteStoreError(f"{method} {table} rejected with {response.status_code}: {response.text}")

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"{method} /{table} returned a non-JSON body")
            raise RemoteStoreError(f"{method} {table} returned invalid JSON: {e}") from e

    async def _rows(self, table: str, params: Dict[str, str]) -> List[Dict[str, Any]]:
        """GET a table, rejecting anything but a list of row objects"""
        rows = await self._request("GET", table, params=params)
        if rows is None:
            return []
        if not isinstance(rows, list) or not all(isinstance(row, dict) for row in rows):
            raise RemoteStoreError(f"GET {table} returned {type(rows).__name__} instead of rows")
        return rows

    # Reads

    async def fetch_business_by_slug(self, slug: str) -> Business:
        rows = await self._rows(
            "businesses",
            params={"slug": f"eq.{slug}", "select": "*", "limit": "1"},
        )
        if not rows:
            raise NotFoundError(f"Business {slug} not found")
        return parse_row(Business, rows[0], self.name)

    async def fetch_categories(self, business_id: str) -> List[Category]:
        rows = await self._rows(
            "categories",
            params={"business_id": f"eq.{business_id}", "select": "*", "order": "sort_order.asc"},
        )
        return parse_rows(Category, rows, self.name)

    async def fetch_products(self, business_id: str) -> List[Product]:
        rows = await self._rows(
            "products",
            params={"business_id": f"eq.{business_id}", "select": "*", "order": "sort_order.asc"},
        )
        return parse_rows(Product, rows, self.name)

    async def fetch_tags(self, business_id: str) -> List[str]:
        rows = await self._rows(
            "tags",
            params={"business_id": f"eq.{business_id}", "select": "name", "order": "id.asc"},
        )
        try:
            return [str(row["name"]) for row in rows]
        except KeyError as e:
            raise RemoteStoreError("GET tags returned rows without a name") from e

    async def slug_available(self, slug: str, exclude_business_id: Optional[str] = None) -> bool:
        params = {"slug": f"eq.{slug}", "select": "id"}
        if exclude_business_id:
            params["id"] = f"neq.{exclude_business_id}"
        rows = await self._rows("businesses", params)
        return not rows

    # Writes

    async def update_business(self, business_id: str, partial: Dict[str, Any]) -> None:
        await self._request(
            "PATCH", "businesses",
            params={"id": f"eq.{business_id}"},
            json=partial,
            prefer="return=minimal",
        )
        logger.info(f"Updated business {business_id}")

    async def add_category(self, business_id: str, category: Category) -> None:
        await self._request(
            "POST", "categories",
            json={"business_id": business_id, **category.model_dump(mode="json")},
            prefer="return=minimal",
        )
        logger.info(f"Created category {category.id}")

    async def update_category(self, business_id: str, category_id: str, partial: Dict[str, Any]) -> None:
        await self._request(
            "PATCH", "categories",
            params={"id": f"eq.{category_id}", "business_id": f"eq.{business_id}"},
            json=partial,
            prefer="return=minimal",
        )

    async def delete_category(self, business_id: str, category_id: str) -> None:
        # Products first, the hosted schema has no ON DELETE CASCADE
        await self._request(
            "DELETE", "products",
            params={"category_id": f"eq.{category_id}", "business_id": f"eq.{business_id}"},
        )
        await self._request(
            "DELETE", "categories",
            params={"id": f"eq.{category_id}", "business_id": f"eq.{business_id}"},
        )
        logger.info(f"Deleted category {category_id}")

    async def add_product(self, business_id: str, product: Product) -> None:
        await self._request(
            "POST", "products",
            json={"business_id": business_id, **product.model_dump(mode="json")},
            prefer="return=minimal",
        )
        logger.info(f"Created product {product.id}")

    async def update_product(self, business_id: str, product_id: str, partial: Dict[str, Any]) -> None:
        await self._request(
            "PATCH", "products",
            params={"id": f"eq.{product_id}", "business_id": f"eq.{business_id}"},
            json=partial,
            prefer="return=minimal",
        )

    async def delete_product(self, business_id: str, product_id: str) -> None:
        await self._request(
            "DELETE", "products",
            params={"id": f"eq.{product_id}", "business_id": f"eq.{business_id}"},
        )

    async def add_tag(self, business_id: str, name: str) -> None:
        await self._request(
            "POST", "tags",
            params={"on_conflict": "business_id,name"},
            json={"business_id": business_id, "name": name},
            prefer="resolution=ignore-duplicates,return=minimal",
        )

    async def remove_tag(self, business_id: str, name: str) -> None:
        await self._request(
            "DELETE", "tags",
            params={"business_id": f"eq.{business_id}", "name": f"eq.{name}"},
        )

    async def close(self) -> None:
        await self.client.aclose()
