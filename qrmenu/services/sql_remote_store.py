"""
Remote store backed by SQL tables (PostgreSQL in production)
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlmodel import select
import structlog

from qrmenu.core.database import create_session_maker
from qrmenu.core.errors import NotFoundError, RemoteStoreError, TransientNetworkError
from qrmenu.models.business import Business
from qrmenu.models.category import Category
from qrmenu.models.product import Product
from qrmenu.models.records import BusinessRecord, CategoryRecord, ProductRecord, TagRecord
from qrmenu.models.snapshot import TenantSnapshot
from qrmenu.services.remote_store import RemoteStore, parse_row

logger = structlog.get_logger(__name__)


class SQLRemoteStore(RemoteStore):
    """Remote store using SQLModel rows over an async engine"""

    name = "sql"

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.session_maker = create_session_maker(engine)

    @asynccontextmanager
    async def _session(self, operation: str):
        try:
            async with self.session_maker() as session:
                yield session
        except IntegrityError as e:
            logger.error(f"Constraint violated during {operation}: {e}")
            raise RemoteStoreError(f"{operation} rejected: {e.orig}") from e
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Database error during {operation}: {e}")
            raise TransientNetworkError(f"{operation} failed: {e}") from e

    async def _get_category(self, session, business_id: str, category_id: str) -> CategoryRecord:
        result = await session.exec(
            select(CategoryRecord).where(
                CategoryRecord.id == category_id,
                CategoryRecord.business_id == business_id
            )
        )
        record = result.first()
        if not record:
            raise NotFoundError(f"Category {category_id} not found")
        return record

    async def _get_product(self, session, business_id: str, product_id: str) -> ProductRecord:
        result = await session.exec(
            select(ProductRecord).where(
                ProductRecord.id == product_id,
                ProductRecord.business_id == business_id
            )
        )
        record = result.first()
        if not record:
            raise NotFoundError(f"Product {product_id} not found")
        return record

    async def _next_sort_order(self, session, model, business_id: str) -> int:
        result = await session.exec(
            select(func.max(model.sort_order)).where(model.business_id == business_id)
        )
        current = result.first()
        return 0 if current is None else current + 1

    @staticmethod
    def _apply(record, partial: Dict[str, Any]):
        for key, value in partial.items():
            if key in ("id", "business_id") or key not in type(record).model_fields:
                raise RemoteStoreError(f"Unknown column {key}")
            setattr(record, key, value)
        record.updated_at = datetime.now(timezone.utc)

    # Reads

    async def fetch_business_by_slug(self, slug: str) -> Business:
        async with self._session("fetch_business_by_slug") as session:
            result = await session.exec(select(BusinessRecord).where(BusinessRecord.slug == slug))
            record = result.first()
        if not record:
            raise NotFoundError(f"Business {slug} not found")
        return parse_row(Business, record.model_dump(), self.name)

    async def fetch_categories(self, business_id: str) -> List[Category]:
        async with self._session("fetch_categories") as session:
            result = await session.exec(
                select(CategoryRecord)
                .where(CategoryRecord.business_id == business_id)
                .order_by(CategoryRecord.sort_order.asc())
            )
            records = result.all()
        return [parse_row(Category, record.model_dump(), self.name) for record in records]

    async def fetch_products(self, business_id: str) -> List[Product]:
        async with self._session("fetch_products") as session:
            result = await session.exec(
                select(ProductRecord)
                .where(ProductRecord.business_id == business_id)
                .order_by(ProductRecord.sort_order.asc())
            )
            records = result.all()
        return [parse_row(Product, record.model_dump(), self.name) for record in records]

    async def fetch_tags(self, business_id: str) -> List[str]:
        async with self._session("fetch_tags") as session:
            result = await session.exec(
                select(TagRecord)
                .where(TagRecord.business_id == business_id)
                .order_by(TagRecord.id.asc())
            )
            return [record.name for record in result.all()]

    async def slug_available(self, slug: str, exclude_business_id: Optional[str] = None) -> bool:
        async with self._session("slug_available") as session:
            query = select(BusinessRecord.id).where(BusinessRecord.slug == slug)
            if exclude_business_id:
                query = query.where(BusinessRecord.id != exclude_business_id)
            result = await session.exec(query)
            return result.first() is None

    # Writes

    async def create_tenant(self, snapshot: TenantSnapshot) -> None:
        """Insert a whole tenant (registration and seeding only)"""
        business = snapshot.business
        if business is None:
            raise ValueError("snapshot has no business")
        async with self._session("create_tenant") as session:
            session.add(BusinessRecord(**business.model_dump(mode="json")))
            for position, category in enumerate(snapshot.categories):
                session.add(CategoryRecord(
                    business_id=business.id,
                    sort_order=position,
                    **category.model_dump(mode="json")
                ))
            for position, product in enumerate(snapshot.products):
                session.add(ProductRecord(
                    business_id=business.id,
                    sort_order=position,
                    **product.model_dump(mode="json")
                ))
            for name in snapshot.tags:
                session.add(TagRecord(business_id=business.id, name=name))
            await session.commit()
        logger.info(f"Created tenant {business.slug}")

    async def update_business(self, business_id: str, partial: Dict[str, Any]) -> None:
        async with self._session("update_business") as session:
            record = await session.get(BusinessRecord, business_id)
            if not record:
                raise NotFoundError(f"Business {business_id} not found")
            self._apply(record, partial)
            session.add(record)
            await session.commit()
        logger.info(f"Updated business {business_id}")

    async def add_category(self, business_id: str, category: Category) -> None:
        async with self._session("add_category") as session:
            sort_order = await self._next_sort_order(session, CategoryRecord, business_id)
            session.add(CategoryRecord(
                business_id=business_id,
                sort_order=sort_order,
                **category.model_dump(mode="json")
            ))
            await session.commit()
        logger.info(f"Created category {category.id}")

    async def update_category(self, business_id: str, category_id: str, partial: Dict[str, Any]) -> None:
        async with self._session("update_category") as session:
            record = await self._get_category(session, business_id, category_id)
            self._apply(record, partial)
            session.add(record)
            await session.commit()
        logger.info(f"Updated category {category_id}")

    async def delete_category(self, business_id: str, category_id: str) -> None:
        async with self._session("delete_category") as session:
            record = await self._get_category(session, business_id, category_id)
            result = await session.exec(
                select(ProductRecord).where(
                    ProductRecord.business_id == business_id,
                    ProductRecord.category_id == category_id
                )
            )
            products = result.all()
            for product in products:
                await session.delete(product)
            await session.flush()
            await session.delete(record)
            await session.commit()
        logger.info(f"Deleted category {category_id} with {len(products)} products")

    async def add_product(self, business_id: str, product: Product) -> None:
        async with self._session("add_product") as session:
            await self._get_category(session, business_id, product.category_id)
            sort_order = await self._next_sort_order(session, ProductRecord, business_id)
            session.add(ProductRecord(
                business_id=business_id,
                sort_order=sort_order,
                **product.model_dump(mode="json")
            ))
            await session.commit()
        logger.info(f"Created product {product.id}")

    async def update_product(self, business_id: str, product_id: str, partial: Dict[str, Any]) -> None:
        async with self._session("update_product") as session:
            record = await self._get_product(session, business_id, product_id)
            self._apply(record, partial)
            session.add(record)
            await session.commit()
        logger.info(f"Updated product {product_id}")

    async def delete_product(self, business_id: str, product_id: str) -> None:
        async with self._session("delete_product") as session:
            record = await self._get_product(session, business_id, product_id)
            await session.delete(record)
            await session.commit()
        logger.info(f"Deleted product {product_id}")

    async def add_tag(self, business_id: str, name: str) -> None:
        async with self._session("add_tag") as session:
            result = await session.exec(
                select(TagRecord).where(TagRecord.business_id == business_id, TagRecord.name == name)
            )
            if result.first():
                return
            session.add(TagRecord(business_id=business_id, name=name))
            await session.commit()

    async def remove_tag(self, business_id: str, name: str) -> None:
        async with self._session("remove_tag") as session:
            result = await session.exec(
                select(TagRecord).where(TagRecord.business_id == business_id, TagRecord.name == name)
            )
            record = result.first()
            if record:
                await session.delete(record)
                await session.commit()

    async def close(self) -> None:
        await self.engine.dispose()
