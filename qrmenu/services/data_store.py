"""
Tenant data store

Holds one synchronously readable view of a tenant ({business, categories,
products, tags}) reconciled from the local cache and the remote store.

Loading: the cached snapshot is shown first, then replaced by the remote
snapshot when the remote answers. Mutating: every change is validated,
applied to memory, written through to the cache, then forwarded to the
remote store as a background task. Failed remote writes are recorded and
announced but never rolled back.
"""

from collections import deque
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Type, TypeVar, Union
import asyncio
import uuid

import pydantic
from pydantic import BaseModel, Field
import structlog

from qrmenu.core.errors import NotFoundError, RemoteStoreError, ValidationError
from qrmenu.core.events import (
    BusinessUpdated, CategoryDeleted, EventBus, RemoteWriteFailed, TenantLoaded
)
from qrmenu.data.demo import DEFAULT_TAGS
from qrmenu.models.business import Business, empty_draft
from qrmenu.models.category import Category, CategoryCreate, CategoryUpdate
from qrmenu.models.product import Product, ProductCreate
from qrmenu.models.snapshot import MenuStats, TenantSnapshot
from qrmenu.services.local_cache import LocalCache
from qrmenu.services.remote_store import RemoteStore
from qrmenu.services.slugs import is_valid_slug

logger = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class SnapshotSource(str, Enum):
    """Where the current in-memory view came from"""
    NONE = "none"
    CACHE = "cache"
    REMOTE = "remote"
    DRAFT = "draft"


class MutationStatus(str, Enum):
    """Lifecycle of a forwarded remote write"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"


class MutationRecord(BaseModel):
    """One forwarded remote write"""
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    operation: str
    target: Optional[str] = None
    status: MutationStatus = MutationStatus.PENDING
    error: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = None

    def finish(self, status: MutationStatus, error: Optional[str] = None):
        self.status = status
        self.error = error
        self.completed_at = datetime.now(timezone.utc)


def _validated(model: Type[ModelT], data: Union[Mapping[str, Any], BaseModel]) -> ModelT:
    """Validate input into a model, reporting the first failing field"""
    if isinstance(data, BaseModel):
        data = data.model_dump()
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        error = e.errors()[0]
        field = str(error["loc"][0]) if error["loc"] else None
        raise ValidationError(f"Invalid {field or 'input'}: {error['msg']}", field=field) from e


class DataStore:
    """Offline-first view of one tenant"""

    def __init__(
        self,
        remote: RemoteStore,
        cache: Optional[LocalCache] = None,
        events: Optional[EventBus] = None,
        max_mutation_history: int = 200,
    ):
        self.remote = remote
        self.cache = cache
        self.events = events or EventBus()

        self.slug: Optional[str] = None
        self.business: Optional[Business] = None
        self.categories: List[Category] = []
        self.products: List[Product] = []
        self.tags: List[str] = []

        self.is_loading = False
        self.not_found = False
        self.source = SnapshotSource.NONE

        self.mutations: deque = deque(maxlen=max_mutation_history)
        self._pending: set = set()
        self._draft_on_miss = False

    # Loading

    async def initialize(self, slug: str, draft_on_miss: bool = False) -> "DataStore":
        """Load a tenant from the cache, then from the remote store

        Args:
            slug: Tenant slug
            draft_on_miss: Expose an empty editable draft when neither source
                knows the tenant (admin surface)
        """
        self.slug = slug
        self._draft_on_miss = draft_on_miss
        self.is_loading = True
        self.not_found = False

        try:
            self._load_from_cache(slug)

            try:
                snapshot = await self._fetch_remote(slug)
            except NotFoundError:
                logger.warning(f"Tenant {slug} not found in remote store")
            except RemoteStoreError as e:
                logger.warning(f"Remote store unavailable for {slug}: {e}")
            else:
                self._replace(snapshot)
                self.source = SnapshotSource.REMOTE
                self._persist()

            if self.business is None:
                if draft_on_miss:
                    self._replace(TenantSnapshot(business=empty_draft(slug), tags=list(DEFAULT_TAGS)))
                    self.source = SnapshotSource.DRAFT
                    logger.info(f"Tenant {slug} unknown, editing empty draft")
                else:
                    self.not_found = True
        finally:
            self.is_loading = False

        logger.info(f"Tenant {slug} loaded from {self.source.value}")
        self.events.emit(TenantLoaded(slug=slug, source=self.source.value, found=not self.not_found))
        return self

    async def reload(self) -> "DataStore":
        """Drop the cached snapshot and load again"""
        if self.slug is None:
            raise NotFoundError("Store was never initialized")
        if self.cache is not None:
            self.cache.delete(self.slug)
        self._replace(TenantSnapshot())
        self.source = SnapshotSource.NONE
        return await self.initialize(self.slug, draft_on_miss=self._draft_on_miss)

    def _load_from_cache(self, slug: str) -> bool:
        if self.cache is None:
            return False
        raw = self.cache.read(slug)
        if raw is None:
            return False
        try:
            snapshot = TenantSnapshot.model_validate(raw)
        except pydantic.ValidationError as e:
            logger.warning(f"Ignoring unreadable cache entry for {slug}: {e.error_count()} errors")
            return False
        if snapshot.business is None:
            return False
        self._replace(snapshot)
        # A draft mirrored by earlier admin edits has no remote record
        self.source = SnapshotSource.CACHE if snapshot.business.id else SnapshotSource.DRAFT
        logger.debug(f"Tenant {slug} populated from cache")
        return True

    async def _fetch_remote(self, slug: str) -> TenantSnapshot:
        business = await self.remote.fetch_business_by_slug(slug)
        categories, products, tags = await asyncio.gather(
            self.remote.fetch_categories(business.id),
            self.remote.fetch_products(business.id),
            self.remote.fetch_tags(business.id),
        )
        return TenantSnapshot(business=business, categories=categories, products=products, tags=tags)

    def _replace(self, snapshot: TenantSnapshot):
        self.business = snapshot.business
        self.categories = list(snapshot.categories)
        self.products = list(snapshot.products)
        self.tags = list(snapshot.tags)

    def _persist(self, key: Optional[str] = None) -> bool:
        if self.cache is None:
            return False
        key = key or self.slug
        saved = self.cache.write(key, self.snapshot().model_dump(mode="json"))
        if not saved:
            logger.warning(f"Snapshot for {key} not mirrored to local cache")
        return saved

    # Reading

    def snapshot(self) -> TenantSnapshot:
        """Deep copy of the current view"""
        return TenantSnapshot(
            business=self.business,
            categories=self.categories,
            products=self.products,
            tags=self.tags,
        ).model_copy(deep=True)

    def require_business(self) -> Business:
        if self.business is None:
            raise NotFoundError(f"Tenant {self.slug} not found")
        return self.business

    def get_category(self, category_id: str) -> Optional[Category]:
        return next((c for c in self.categories if c.id == category_id), None)

    def get_product(self, product_id: str) -> Optional[Product]:
        return next((p for p in self.products if p.id == product_id), None)

    def get_stats(self) -> MenuStats:
        return MenuStats(
            total_products=len(self.products),
            total_categories=len(self.categories),
            featured_products=sum(1 for p in self.products if p.is_featured),
            new_products=sum(1 for p in self.products if p.is_new),
        )

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def _find_category(self, category_id: str) -> Category:
        category = self.get_category(category_id)
        if category is None:
            raise NotFoundError(f"Category {category_id} not found")
        return category

    def _find_product(self, product_id: str) -> Product:
        product = self.get_product(product_id)
        if product is None:
            raise NotFoundError(f"Product {product_id} not found")
        return product

    # Business

    def update_business(self, partial: Mapping[str, Any]) -> Business:
        """Replace top-level business fields

        Nested objects (social_media, welcome_settings, theme_settings,
        working_hours) are replaced wholesale, never deep-merged.
        """
        business = self.require_business()
        if not partial:
            raise ValidationError("No fields to update")

        for key in partial:
            if key not in Business.model_fields:
                raise ValidationError(f"Unknown business field: {key}", field=key)
        if "id" in partial and partial["id"] != business.id:
            raise ValidationError("Business id cannot change", field="id")
        if "name" in partial and not str(partial["name"] or "").strip():
            raise ValidationError("Business name is required", field="name")
        if "slug" in partial and not is_valid_slug(partial["slug"]):
            raise ValidationError("Slug must be lowercase letters, digits and hyphens", field="slug")
        if "slug" in partial and partial["slug"] != business.slug and self._slug_cached_by_other(partial["slug"]):
            raise ValidationError(f"Slug {partial['slug']} is already in use", field="slug")

        updated = _validated(Business, {**business.model_dump(), **partial})
        old_slug = self.slug
        self.business = updated

        if updated.slug != old_slug:
            self.slug = updated.slug
            self._persist()
            if self.cache is not None and old_slug:
                self.cache.delete(old_slug)
            logger.info(f"Tenant slug changed from {old_slug} to {updated.slug}")
        else:
            self._persist()

        fields = list(partial)
        payload = updated.model_dump(mode="json", include=set(fields))
        self._forward(
            "update_business",
            lambda: self.remote.update_business(updated.id, payload),
            target=updated.id,
        )
        self.events.emit(BusinessUpdated(slug=updated.slug, fields=fields))
        return updated

    def _slug_cached_by_other(self, slug: str) -> bool:
        """Whether the local cache holds another business under a slug"""
        if self.cache is None:
            return False
        raw = self.cache.read(slug)
        if not raw or not isinstance(raw.get("business"), dict):
            return False
        return raw["business"].get("id") != self.business.id

    async def rename_slug(self, new_slug: str) -> Business:
        """Change the public slug after checking it is free remotely"""
        business = self.require_business()
        if new_slug == business.slug:
            return business
        if not is_valid_slug(new_slug):
            raise ValidationError("Slug must be lowercase letters, digits and hyphens", field="slug")
        if not await self.remote.slug_available(new_slug, business.id or None):
            raise ValidationError(f"Slug {new_slug} is already in use", field="slug")
        return self.update_business({"slug": new_slug})

    # Categories

    def add_category(self, data: Union[CategoryCreate, Mapping[str, Any]]) -> Category:
        self.require_business()
        payload = _validated(CategoryCreate, data)
        name = payload.name.strip()
        if not name:
            raise ValidationError("Category name is required", field="name")

        category = Category(name=name, icon=payload.icon, is_featured=payload.is_featured)
        self.categories = [*self.categories, category]
        self._persist()

        self._forward(
            "add_category",
            lambda: self.remote.add_category(self.business.id, category),
            target=category.id,
        )
        return category

    def update_category(self, category_id: str, data: Union[CategoryUpdate, Mapping[str, Any]]) -> Category:
        category = self._find_category(category_id)
        if isinstance(data, BaseModel):
            data = data.model_dump(exclude_unset=True)
        updates = _validated(CategoryUpdate, data).model_dump(exclude_unset=True)
        if not updates:
            raise ValidationError("No fields to update")
        for key in ("name", "icon"):
            if key in updates and not (updates[key] or "").strip():
                raise ValidationError(f"Category {key} is required", field=key)
        if "name" in updates:
            updates["name"] = updates["name"].strip()

        updated = category.model_copy(update=updates)
        self.categories = [updated if c.id == category_id else c for c in self.categories]
        self._persist()

        self._forward(
            "update_category",
            lambda: self.remote.update_category(self.business.id, category_id, updates),
            target=category_id,
        )
        return updated

    def delete_category(self, category_id: str) -> List[str]:
        """Remove a category and its products, return the removed product ids"""
        self._find_category(category_id)
        removed = [p.id for p in self.products if p.category_id == category_id]

        self.categories = [c for c in self.categories if c.id != category_id]
        self.products = [p for p in self.products if p.category_id != category_id]
        self._persist()

        self._forward(
            "delete_category",
            lambda: self.remote.delete_category(self.business.id, category_id),
            target=category_id,
        )
        self.events.emit(CategoryDeleted(slug=self.slug, category_id=category_id, removed_product_ids=removed))
        logger.info(f"Deleted category {category_id} with {len(removed)} products")
        return removed

    def reorder_categories(self, category_ids: List[str]) -> List[Category]:
        """Put the listed categories first, in order; local only"""
        self.require_business()
        by_id = {c.id: c for c in self.categories}
        ordered = [by_id[i] for i in dict.fromkeys(category_ids) if i in by_id]
        listed = {c.id for c in ordered}
        self.categories = ordered + [c for c in self.categories if c.id not in listed]
        self._persist()
        return list(self.categories)

    # Products

    def _adjust_count(self, category_id: str, delta: int):
        self.categories = [
            c.model_copy(update={"product_count": max(0, c.product_count + delta)}) if c.id == category_id else c
            for c in self.categories
        ]

    def add_product(self, data: Union[ProductCreate, Mapping[str, Any]]) -> Product:
        self.require_business()
        payload = _validated(ProductCreate, data)
        if not payload.name.strip():
            raise ValidationError("Product name is required", field="name")
        if self.get_category(payload.category_id) is None:
            raise ValidationError(f"Unknown category {payload.category_id}", field="category_id")

        product = Product(**{**payload.model_dump(), "name": payload.name.strip()})
        self.products = [*self.products, product]
        self._adjust_count(product.category_id, 1)
        self._persist()

        self._forward(
            "add_product",
            lambda: self.remote.add_product(self.business.id, product),
            target=product.id,
        )
        return product

    def update_product(self, product_id: str, partial: Mapping[str, Any]) -> Product:
        product = self._find_product(product_id)
        if not partial:
            raise ValidationError("No fields to update")
        for key in partial:
            if key not in Product.model_fields or key == "id":
                raise ValidationError(f"Unknown product field: {key}", field=key)
        if "name" in partial and not str(partial["name"] or "").strip():
            raise ValidationError("Product name is required", field="name")

        updated = _validated(Product, {**product.model_dump(), **partial})
        if updated.category_id != product.category_id:
            if self.get_category(updated.category_id) is None:
                raise ValidationError(f"Unknown category {updated.category_id}", field="category_id")
            self._adjust_count(product.category_id, -1)
            self._adjust_count(updated.category_id, 1)

        self.products = [updated if p.id == product_id else p for p in self.products]
        self._persist()

        payload = updated.model_dump(mode="json", include=set(partial))
        self._forward(
            "update_product",
            lambda: self.remote.update_product(self.business.id, product_id, payload),
            target=product_id,
        )
        return updated

    def delete_product(self, product_id: str) -> Product:
        product = self._find_product(product_id)
        self.products = [p for p in self.products if p.id != product_id]
        self._adjust_count(product.category_id, -1)
        self._persist()

        self._forward(
            "delete_product",
            lambda: self.remote.delete_product(self.business.id, product_id),
            target=product_id,
        )
        return product

    def reorder_products(self, category_id: str, product_ids: List[str]) -> List[Product]:
        """Move a category's products after all others, listed ones first; local only"""
        self._find_category(category_id)
        others = [p for p in self.products if p.category_id != category_id]
        members = {p.id: p for p in self.products if p.category_id == category_id}
        ordered = [members[i] for i in dict.fromkeys(product_ids) if i in members]
        listed = {p.id for p in ordered}
        rest = [p for p in members.values() if p.id not in listed]
        self.products = others + ordered + rest
        self._persist()
        return ordered + rest

    # Tags

    def add_tag(self, name: str) -> bool:
        """Add a tag, return False when it already exists"""
        self.require_business()
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Tag name is required", field="name")
        name = name.strip()
        if name in self.tags:
            return False

        self.tags = [*self.tags, name]
        self._persist()
        self._forward("add_tag", lambda: self.remote.add_tag(self.business.id, name), target=name)
        return True

    def remove_tag(self, name: str) -> bool:
        """Remove a tag, return False when it was not present"""
        self.require_business()
        if name not in self.tags:
            return False

        self.tags = [t for t in self.tags if t != name]
        self._persist()
        self._forward("remove_tag", lambda: self.remote.remove_tag(self.business.id, name), target=name)
        return True

    # Remote forwarding

    def _forward(
        self,
        operation: str,
        call: Callable[[], Awaitable[None]],
        target: Optional[str] = None,
    ) -> MutationRecord:
        record = MutationRecord(operation=operation, target=target)
        self.mutations.append(record)

        if self.business is None or not self.business.id:
            record.finish(MutationStatus.FAILED, "tenant has no remote record")
            logger.warning(f"Skipped {operation} for {self.slug}: tenant has no remote record")
            return record

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            record.finish(MutationStatus.FAILED, "no running event loop")
            logger.warning(f"Skipped {operation} for {self.slug}: no running event loop")
            return record

        task = loop.create_task(self._run_forward(record, call))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return record

    async def _run_forward(self, record: MutationRecord, call: Callable[[], Awaitable[None]]):
        try:
            await call()
        except (RemoteStoreError, NotFoundError) as e:
            logger.warning(f"Remote {record.operation} failed for {self.slug}, keeping local change: {e}")
            await self._write_failed(record, str(e))
        except Exception as e:
            logger.error(f"Unexpected error forwarding {record.operation} for {self.slug}: {e}", exc_info=True)
            await self._write_failed(record, f"{type(e).__name__}: {e}")
        else:
            record.finish(MutationStatus.CONFIRMED)
            logger.debug(f"Remote {record.operation} confirmed for {self.slug}")

    async def _write_failed(self, record: MutationRecord, error: str):
        record.finish(MutationStatus.FAILED, error)
        await self.events.publish(RemoteWriteFailed(
            slug=self.slug,
            mutation_id=record.id,
            operation=record.operation,
            error=error,
        ))

    async def flush(self):
        """Wait for every in-flight remote write"""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
