"""
Store registry

Owns one DataStore, ThemeProjection and FeedbackStore per tenant slug. The
application builds a single registry at startup and hands it to routes
through FastAPI dependencies.
"""

from dataclasses import dataclass
from typing import Dict, Optional
import asyncio
import structlog

from qrmenu.core.config import Settings
from qrmenu.core.database import create_engine_from_url, init_db
from qrmenu.core.errors import RemoteStoreError
from qrmenu.core.events import BusinessUpdated
from qrmenu.data.demo import demo_snapshot
from qrmenu.services.data_store import DataStore, SnapshotSource
from qrmenu.services.feedback_store import FeedbackStore
from qrmenu.services.local_cache import LocalCache
from qrmenu.services.memory_remote_store import MemoryRemoteStore
from qrmenu.services.remote_store import RemoteStore
from qrmenu.services.rest_remote_store import RestRemoteStore
from qrmenu.services.sql_remote_store import SQLRemoteStore
from qrmenu.services.theme import ThemeProjection

logger = structlog.get_logger(__name__)


@dataclass
class TenantContext:
    """Everything the routes need for one tenant"""
    store: DataStore
    theme: ThemeProjection
    feedback: FeedbackStore

    @property
    def slug(self) -> str:
        return self.store.slug


class StoreRegistry:
    """Lazily initialized tenant contexts keyed by slug"""

    def __init__(self, remote: RemoteStore, cache: Optional[LocalCache] = None):
        self.remote = remote
        self.cache = cache
        self._tenants: Dict[str, TenantContext] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def __contains__(self, slug: str) -> bool:
        return slug in self._tenants

    def __len__(self) -> int:
        return len(self._tenants)

    async def get(self, slug: str, draft_on_miss: bool = False) -> TenantContext:
        """
        Return the tenant context for a slug, loading it on first use

        Unknown tenants are not kept, so a tenant created later is picked up
        on the next request. Drafts stay registered to keep admin edits and
        are loaded again once the remote store knows the slug.
        """
        context = self._tenants.get(slug)
        if context is not None and context.store.source != SnapshotSource.DRAFT:
            return context

        lock = self._locks.setdefault(slug, asyncio.Lock())
        try:
            async with lock:
                context = self._tenants.get(slug)
                if context is None:
                    return await self._load(slug, draft_on_miss)
                if context.store.source == SnapshotSource.DRAFT:
                    await self._refresh_draft(slug, context)
                return context
        finally:
            # Only registered tenants keep a lock
            if slug not in self._tenants and self._locks.get(slug) is lock:
                del self._locks[slug]

    async def _load(self, slug: str, draft_on_miss: bool) -> TenantContext:
        store = DataStore(self.remote, self.cache)
        theme = ThemeProjection().attach(store)
        await store.initialize(slug, draft_on_miss=draft_on_miss)

        feedback = FeedbackStore(slug, self.cache)
        feedback.load()
        context = TenantContext(store=store, theme=theme, feedback=feedback)

        if store.not_found:
            logger.info(f"Tenant {slug} not found, not registering")
            return context
        if slug in self._tenants:
            # Registered meanwhile by a caller holding a newer lock
            context.theme.detach()
            return self._tenants[slug]

        store.events.subscribe(BusinessUpdated.__name__, self._rekey_handler(context))
        self._tenants[slug] = context
        logger.info(f"Registered tenant {slug}", source=store.source.value)
        return context

    async def _refresh_draft(self, slug: str, context: TenantContext):
        try:
            if await self.remote.slug_available(slug):
                return
        except RemoteStoreError as e:
            logger.warning(f"Cannot check draft {slug} against remote store: {e}")
            return
        logger.info(f"Tenant {slug} now exists remotely, replacing draft")
        await context.store.initialize(slug, draft_on_miss=True)

    def _rekey_handler(self, context: TenantContext):
        def on_business_updated(event: BusinessUpdated):
            old_slug = next((s for s, c in self._tenants.items() if c is context), None)
            if old_slug is None or old_slug == event.slug:
                return
            current = self._tenants.get(event.slug)
            if current is not None and current is not context:
                logger.error(f"Slug {event.slug} is served by another tenant, dropping {old_slug}")
                self.drop(old_slug)
                return
            self._tenants[event.slug] = self._tenants.pop(old_slug)
            self._locks.pop(old_slug, None)
            context.feedback.rename(event.slug)
            logger.info(f"Tenant {old_slug} now served as {event.slug}")
        return on_business_updated

    def drop(self, slug: str) -> Optional[TenantContext]:
        """Forget a tenant; its in-flight writes still complete"""
        self._locks.pop(slug, None)
        context = self._tenants.pop(slug, None)
        if context is not None:
            context.theme.detach()
        return context

    async def flush(self):
        await asyncio.gather(*(c.store.flush() for c in list(self._tenants.values())))

    async def close(self):
        await self.flush()
        await self.remote.close()
        self._tenants.clear()
        self._locks.clear()
        logger.info("Store registry closed")


def build_remote_store(settings: Settings) -> RemoteStore:
    """Create the remote store selected by REMOTE_BACKEND"""
    backend = settings.REMOTE_BACKEND
    if backend == "memory":
        return MemoryRemoteStore()
    if backend == "sql":
        engine = create_engine_from_url(settings.DATABASE_URL, echo=False)
        return SQLRemoteStore(engine)
    if backend == "rest":
        return RestRemoteStore(
            settings.SUPABASE_URL,
            settings.SUPABASE_ANON_KEY,
            timeout=settings.REMOTE_TIMEOUT_SECONDS,
        )
    raise ValueError(f"Unknown REMOTE_BACKEND: {backend}")


async def prepare_remote_store(remote: RemoteStore, settings: Settings):
    """Create tables and seed the demo tenant where the backend supports it"""
    if isinstance(remote, SQLRemoteStore):
        await init_db(remote.engine)

    if not settings.SEED_DEMO_DATA:
        return
    snapshot = demo_snapshot()
    if isinstance(remote, MemoryRemoteStore):
        remote.put_tenant(snapshot)
    elif isinstance(remote, SQLRemoteStore):
        if await remote.slug_available(snapshot.business.slug):
            await remote.create_tenant(snapshot)
