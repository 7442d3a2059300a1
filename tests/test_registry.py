"""
Unit tests for the tenant store registry
"""

import asyncio
import pytest

from qrmenu.data.demo import DEMO_SLUG
from qrmenu.models.snapshot import TenantSnapshot
from qrmenu.services.data_store import SnapshotSource
from qrmenu.services.local_cache import MemoryLocalCache
from qrmenu.services.registry import StoreRegistry


@pytest.fixture
def registry(remote) -> StoreRegistry:
    return StoreRegistry(remote, MemoryLocalCache())


class TestLookup:
    """Test lazy tenant loading"""

    @pytest.mark.asyncio
    async def test_known_tenant_registered_once(self, registry):
        first = await registry.get("mikail-cafe")
        second = await registry.get("mikail-cafe")

        assert first is second
        assert first.store.source == SnapshotSource.REMOTE
        assert "mikail-cafe" in registry

    @pytest.mark.asyncio
    async def test_unknown_slugs_leave_nothing_behind(self, registry):
        """Test lookups of unknown slugs keep neither tenants nor locks"""
        slugs = [f"kayip-kafe-{i}" for i in range(20)]

        contexts = await asyncio.gather(*(registry.get(slug) for slug in slugs + slugs))

        assert all(c.store.not_found for c in contexts)
        assert len(registry) == 0
        assert registry._locks == {}

    @pytest.mark.asyncio
    async def test_concurrent_lookups_share_context(self, registry):
        contexts = await asyncio.gather(*(registry.get(DEMO_SLUG) for _ in range(5)))

        assert all(c is contexts[0] for c in contexts)
        assert len(registry) == 1


class TestDrafts:
    """Test admin drafts for slugs the remote store does not know"""

    @pytest.mark.asyncio
    async def test_draft_replaced_once_tenant_exists(self, remote, registry, mikail):
        draft = await registry.get("yeni-kafe", draft_on_miss=True)
        assert draft.store.source == SnapshotSource.DRAFT
        assert (await registry.get("yeni-kafe")).store.source == SnapshotSource.DRAFT

        business = mikail.business.model_copy(update={"id": "b-yeni", "slug": "yeni-kafe", "name": "Yeni Kafe"})
        remote.put_tenant(TenantSnapshot(business=business, tags=["Vegan"]))
        context = await registry.get("yeni-kafe")

        assert context is draft
        assert context.store.source == SnapshotSource.REMOTE
        assert context.store.business.id == "b-yeni"
        assert context.store.business.name == "Yeni Kafe"

    @pytest.mark.asyncio
    async def test_draft_edits_kept_while_slug_unknown(self, registry):
        draft = await registry.get("yeni-kafe", draft_on_miss=True)
        draft.store.update_business({"name": "Yeni Kafe"})

        context = await registry.get("yeni-kafe")

        assert context is draft
        assert context.store.source == SnapshotSource.DRAFT
        assert context.store.business.name == "Yeni Kafe"


class TestRekey:
    """Test slug changes move the registry entry"""

    @pytest.mark.asyncio
    async def test_slug_change_moves_entry(self, registry):
        context = await registry.get("mikail-cafe")

        context.store.update_business({"slug": "mikail-kahve"})
        await context.store.flush()

        assert "mikail-cafe" not in registry
        assert await registry.get("mikail-kahve") is context

    @pytest.mark.asyncio
    async def test_slug_of_live_tenant_not_taken_over(self, remote):
        """Test a tenant moving onto a served slug does not replace it"""
        registry = StoreRegistry(remote)
        demo = await registry.get(DEMO_SLUG)
        mikail = await registry.get("mikail-cafe")

        mikail.store.update_business({"slug": DEMO_SLUG})
        await mikail.store.flush()

        assert await registry.get(DEMO_SLUG) is demo
        assert demo.store.business.name != "Mikail Cafe"
        assert "mikail-cafe" not in registry
