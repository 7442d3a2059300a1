"""
Unit tests for the tenant data store
"""

import asyncio
import pytest

from qrmenu.core.errors import NotFoundError, ValidationError
from qrmenu.core.events import CategoryDeleted, RemoteWriteFailed, TenantLoaded
from qrmenu.data.demo import DEFAULT_TAGS, DEMO_SLUG
from qrmenu.services.data_store import DataStore, MutationStatus, SnapshotSource
from qrmenu.services.memory_remote_store import MemoryRemoteStore


class TestInitialize:
    """Test loading a tenant from cache and remote"""

    @pytest.mark.asyncio
    async def test_loads_reachable_tenant(self, data_store):
        """Test a reachable remote ends loaded with the requested slug"""
        await data_store.initialize("mikail-cafe")

        assert data_store.is_loading is False
        assert data_store.not_found is False
        assert data_store.business.slug == "mikail-cafe"
        assert data_store.source == SnapshotSource.REMOTE

    @pytest.mark.asyncio
    async def test_mikail_cafe_snapshot(self, data_store):
        """Test the remote snapshot arrives complete"""
        await data_store.initialize("mikail-cafe")

        assert len(data_store.categories) == 2
        assert len(data_store.products) == 5
        assert data_store.tags == ["Popüler", "Ev Yapımı", "Vegan"]

    @pytest.mark.asyncio
    async def test_remote_snapshot_written_to_cache(self, data_store, cache):
        """Test the remote snapshot is mirrored to the local cache"""
        await data_store.initialize("mikail-cafe")

        cached = cache.read("mikail-cafe")
        assert cached is not None
        assert cached["business"]["name"] == "Mikail Cafe"
        assert len(cached["products"]) == 5

    @pytest.mark.asyncio
    async def test_falls_back_to_cache_when_remote_unreachable(self, remote, cache):
        """Test a cached snapshot is kept when the remote cannot be reached"""
        await DataStore(remote, cache).initialize("mikail-cafe")
        remote.fail_reads = True

        store = await DataStore(remote, cache).initialize("mikail-cafe")

        assert store.source == SnapshotSource.CACHE
        assert store.not_found is False
        assert store.is_loading is False
        assert store.business.name == "Mikail Cafe"
        assert len(store.products) == 5

    @pytest.mark.asyncio
    async def test_malformed_remote_row_keeps_cache(self, remote, cache):
        """Test a remote row that fails validation is treated as an unusable remote"""
        await DataStore(remote, cache).initialize("mikail-cafe")
        remote.products["b-mikail"].append({"id": "m6", "name": "Fiyatsız"})
        loaded = []

        store = DataStore(remote, cache)
        store.events.subscribe(TenantLoaded.__name__, loaded.append)
        await store.initialize("mikail-cafe")

        assert store.source == SnapshotSource.CACHE
        assert len(store.products) == 5
        assert [e.source for e in loaded] == ["cache"]

    @pytest.mark.asyncio
    async def test_unknown_tenant_is_not_found(self, data_store):
        """Test a slug neither source knows ends in the not-found state"""
        await data_store.initialize("no-such-place")

        assert data_store.not_found is True
        assert data_store.business is None
        assert data_store.is_loading is False
        with pytest.raises(NotFoundError):
            data_store.require_business()

    @pytest.mark.asyncio
    async def test_unreachable_without_cache_is_not_found(self, remote):
        """Test no remote and no cache leaves nothing to show"""
        remote.fail_reads = True
        store = await DataStore(remote, cache=None).initialize("mikail-cafe")

        assert store.not_found is True
        assert store.is_loading is False

    @pytest.mark.asyncio
    async def test_draft_on_miss(self, data_store):
        """Test the admin surface gets an empty editable draft"""
        await data_store.initialize("yeni-kafe", draft_on_miss=True)

        assert data_store.not_found is False
        assert data_store.source == SnapshotSource.DRAFT
        assert data_store.business.id == ""
        assert data_store.business.slug == "yeni-kafe"
        assert len(data_store.business.working_hours) == 7
        assert data_store.business.working_hours[6].is_closed is True
        assert data_store.tags == DEFAULT_TAGS

    @pytest.mark.asyncio
    async def test_cached_draft_stays_draft(self, remote, cache):
        """Test a draft mirrored to the cache is not served as a cached tenant"""
        draft = await DataStore(remote, cache).initialize("yeni-kafe", draft_on_miss=True)
        draft.update_business({"name": "Yeni Kafe"})

        store = await DataStore(remote, cache).initialize("yeni-kafe")

        assert store.not_found is False
        assert store.source == SnapshotSource.DRAFT
        assert store.business.name == "Yeni Kafe"

    @pytest.mark.asyncio
    async def test_unreadable_cache_entry_ignored(self, remote, cache):
        """Test a corrupt cache entry does not prevent loading"""
        cache.write("mikail-cafe", {"business": {"slug": "Not A Slug"}})
        remote.fail_reads = True

        store = await DataStore(remote, cache).initialize("mikail-cafe")

        assert store.not_found is True

    @pytest.mark.asyncio
    async def test_tenant_loaded_event(self, data_store):
        """Test TenantLoaded is emitted after loading finishes"""
        events = []
        data_store.events.subscribe(
            TenantLoaded.__name__,
            lambda event: events.append((event, data_store.is_loading))
        )

        await data_store.initialize("mikail-cafe")

        assert len(events) == 1
        event, was_loading = events[0]
        assert event.slug == "mikail-cafe"
        assert event.source == "remote"
        assert event.found is True
        assert was_loading is False

    @pytest.mark.asyncio
    async def test_reload_discards_local_edits(self, remote, data_store, cache):
        """Test reload drops the cache and reads the remote again"""
        await data_store.initialize("mikail-cafe")
        remote.fail_writes = True
        data_store.update_business({"name": "Offline Name"})
        await data_store.flush()

        await data_store.reload()

        assert data_store.business.name == "Mikail Cafe"
        assert cache.read("mikail-cafe")["business"]["name"] == "Mikail Cafe"


class TestBusinessMutations:
    """Test business profile updates"""

    @pytest.mark.asyncio
    async def test_update_visible_immediately(self, data_store):
        """Test an update is readable before the remote confirms"""
        await data_store.initialize("mikail-cafe")

        data_store.update_business({"name": "X"})

        assert data_store.business.name == "X"
        assert data_store.pending_count == 1

        await data_store.flush()
        assert data_store.pending_count == 0

    @pytest.mark.asyncio
    async def test_update_reaches_remote_and_cache(self, remote, data_store, cache):
        await data_store.initialize("mikail-cafe")

        data_store.update_business({"name": "Mikail Kahvecisi", "phone": "+90 212 000 0000"})
        await data_store.flush()

        assert cache.read("mikail-cafe")["business"]["name"] == "Mikail Kahvecisi"
        business = await remote.fetch_business_by_slug("mikail-cafe")
        assert business.name == "Mikail Kahvecisi"
        assert business.phone == "+90 212 000 0000"
        assert data_store.mutations[-1].status == MutationStatus.CONFIRMED

    @pytest.mark.asyncio
    async def test_social_media_replaced_wholesale(self, data_store):
        """Test nested mappings are replaced, not merged"""
        await data_store.initialize("mikail-cafe")

        data_store.update_business({"social_media": {"instagram": "foo"}})
        data_store.update_business({"social_media": {"facebook": "bar"}})

        assert data_store.business.social_media == {"facebook": "bar"}

    @pytest.mark.asyncio
    async def test_rapid_updates_apply_in_order(self, remote, data_store):
        await data_store.initialize("mikail-cafe")

        data_store.update_business({"slogan": "first"})
        data_store.update_business({"slogan": "second"})
        await data_store.flush()

        assert data_store.business.slogan == "second"
        assert (await remote.fetch_business_by_slug("mikail-cafe")).slogan == "second"

    @pytest.mark.asyncio
    async def test_failed_write_is_not_rolled_back(self, remote, data_store):
        """Test a rejected remote write keeps the local change and is reported"""
        failures = []

        async def on_failure(event):
            failures.append(event)

        await data_store.initialize("mikail-cafe")
        data_store.events.subscribe(RemoteWriteFailed.__name__, on_failure)
        remote.fail_writes = True

        record_count = len(data_store.mutations)
        data_store.update_business({"name": "Offline"})
        await data_store.flush()

        assert data_store.business.name == "Offline"
        assert len(data_store.mutations) == record_count + 1
        record = data_store.mutations[-1]
        assert record.status == MutationStatus.FAILED
        assert "network unreachable" in record.error
        assert len(failures) == 1
        assert failures[0].operation == "update_business"
        assert failures[0].mutation_id == record.id

    @pytest.mark.asyncio
    @pytest.mark.parametrize("partial, field", [
        ({"unknown_field": 1}, "unknown_field"),
        ({"name": "   "}, "name"),
        ({"slug": "Not A Slug"}, "slug"),
        ({"id": "other"}, "id"),
        ({"working_hours": [{"day": "Pazartesi", "open": "09:00", "close": "18:00"}]}, "working_hours"),
    ])
    async def test_invalid_update_rejected(self, data_store, partial, field):
        """Test invalid updates raise before any state change"""
        await data_store.initialize("mikail-cafe")
        before = data_store.snapshot()

        with pytest.raises(ValidationError) as exc_info:
            data_store.update_business(partial)

        assert exc_info.value.field == field
        assert data_store.business == before.business
        assert len(data_store.mutations) == 0

    @pytest.mark.asyncio
    async def test_rename_slug(self, remote, data_store, cache):
        """Test a free slug is applied and the cache entry moves"""
        await data_store.initialize("mikail-cafe")

        business = await data_store.rename_slug("mikail-kahve")
        await data_store.flush()

        assert business.slug == "mikail-kahve"
        assert data_store.slug == "mikail-kahve"
        assert cache.read("mikail-kahve") is not None
        assert cache.read("mikail-cafe") is None
        assert (await remote.fetch_business_by_slug("mikail-kahve")).id == "b-mikail"

    @pytest.mark.asyncio
    async def test_rename_slug_collision(self, data_store):
        """Test a slug owned by another tenant is a field error"""
        await data_store.initialize("mikail-cafe")

        with pytest.raises(ValidationError) as exc_info:
            await data_store.rename_slug(DEMO_SLUG)

        assert exc_info.value.field == "slug"
        assert data_store.business.slug == "mikail-cafe"

    @pytest.mark.asyncio
    async def test_slug_of_cached_tenant_rejected(self, remote, cache):
        """Test a slug another cached tenant is served under cannot be taken"""
        await DataStore(remote, cache).initialize(DEMO_SLUG)
        store = await DataStore(remote, cache).initialize("mikail-cafe")

        with pytest.raises(ValidationError) as exc_info:
            store.update_business({"slug": DEMO_SLUG})

        assert exc_info.value.field == "slug"
        assert store.slug == "mikail-cafe"
        assert cache.read(DEMO_SLUG)["business"]["id"] != "b-mikail"
        assert store.update_business({"slug": "mikail-cafe", "slogan": "Aynı"}).slug == "mikail-cafe"
        await store.flush()


class TestCategoryMutations:
    """Test category editing"""

    @pytest.mark.asyncio
    async def test_add_category(self, remote, data_store):
        """Test adding Tatlılar to a two-category menu"""
        await data_store.initialize("mikail-cafe")

        category = data_store.add_category({"name": "Tatlılar", "icon": "Cake"})

        assert len(data_store.categories) == 3
        assert data_store.categories[-1].name == "Tatlılar"
        assert data_store.categories[-1].icon == "Cake"
        assert category.id.startswith("cat-")

        await data_store.flush()
        remote_categories = await remote.fetch_categories("b-mikail")
        assert [c.id for c in remote_categories][-1] == category.id

    @pytest.mark.asyncio
    async def test_add_category_requires_name(self, data_store):
        await data_store.initialize("mikail-cafe")

        with pytest.raises(ValidationError) as exc_info:
            data_store.add_category({"name": "  ", "icon": "Cake"})

        assert exc_info.value.field == "name"
        assert len(data_store.categories) == 2

    @pytest.mark.asyncio
    async def test_update_category(self, data_store):
        await data_store.initialize("mikail-cafe")

        updated = data_store.update_category("c-hot", {"name": "Kahveler", "is_featured": True})

        assert updated.name == "Kahveler"
        assert updated.icon == "Coffee"
        assert data_store.get_category("c-hot").is_featured is True

    @pytest.mark.asyncio
    async def test_update_unknown_category(self, data_store):
        await data_store.initialize("mikail-cafe")

        with pytest.raises(NotFoundError):
            data_store.update_category("missing", {"name": "X"})

    @pytest.mark.asyncio
    async def test_delete_category_cascades(self, remote, data_store):
        """Test deleting a category removes every product that references it"""
        deleted = []
        await data_store.initialize("mikail-cafe")
        data_store.events.subscribe(CategoryDeleted.__name__, deleted.append)

        removed = data_store.delete_category("c-hot")

        assert removed == ["m1", "m2", "m3"]
        assert all(c.id != "c-hot" for c in data_store.categories)
        assert all(p.category_id != "c-hot" for p in data_store.products)
        assert deleted[0].removed_product_ids == ["m1", "m2", "m3"]

        await data_store.flush()
        assert [p.id for p in await remote.fetch_products("b-mikail")] == ["m4", "m5"]

    @pytest.mark.asyncio
    async def test_reorder_categories_is_local(self, remote, data_store, cache):
        await data_store.initialize("mikail-cafe")

        ordered = data_store.reorder_categories(["c-food", "missing"])

        assert [c.id for c in ordered] == ["c-food", "c-hot"]
        assert [c["id"] for c in cache.read("mikail-cafe")["categories"]] == ["c-food", "c-hot"]
        assert data_store.pending_count == 0
        assert [c.id for c in await remote.fetch_categories("b-mikail")] == ["c-hot", "c-food"]


class TestProductMutations:
    """Test product editing and derived counts"""

    @pytest.mark.asyncio
    async def test_add_product_increments_count(self, data_store):
        await data_store.initialize("mikail-cafe")

        product = data_store.add_product({"category_id": "c-food", "name": "Poğaça", "price": 30})

        assert product.id.startswith("p-")
        assert data_store.get_product(product.id).name == "Poğaça"
        assert data_store.get_category("c-food").product_count == 3

    @pytest.mark.asyncio
    @pytest.mark.parametrize("data, field", [
        ({"category_id": "c-food", "name": "Poğaça", "price": -5}, "price"),
        ({"category_id": "missing", "name": "Poğaça", "price": 30}, "category_id"),
        ({"category_id": "c-food", "name": "", "price": 30}, "name"),
    ])
    async def test_add_product_validation(self, data_store, data, field):
        await data_store.initialize("mikail-cafe")

        with pytest.raises(ValidationError) as exc_info:
            data_store.add_product(data)

        assert exc_info.value.field == field
        assert len(data_store.products) == 5

    @pytest.mark.asyncio
    async def test_move_product_adjusts_counts(self, data_store):
        await data_store.initialize("mikail-cafe")

        moved = data_store.update_product("m4", {"category_id": "c-hot"})

        assert moved.category_id == "c-hot"
        assert data_store.get_category("c-hot").product_count == 4
        assert data_store.get_category("c-food").product_count == 1

    @pytest.mark.asyncio
    async def test_delete_product_decrements_count(self, remote, data_store):
        await data_store.initialize("mikail-cafe")

        data_store.delete_product("m5")
        await data_store.flush()

        assert data_store.get_product("m5") is None
        assert data_store.get_category("c-food").product_count == 1
        assert [p.id for p in await remote.fetch_products("b-mikail")] == ["m1", "m2", "m3", "m4"]

    @pytest.mark.asyncio
    async def test_update_product_forwards_changed_fields(self, remote, data_store):
        await data_store.initialize("mikail-cafe")

        data_store.update_product("m2", {"price": 25, "original_price": 30})
        await data_store.flush()

        product = next(p for p in await remote.fetch_products("b-mikail") if p.id == "m2")
        assert product.price == 25
        assert product.original_price == 30

    @pytest.mark.asyncio
    async def test_reorder_products(self, data_store):
        await data_store.initialize("mikail-cafe")

        ordered = data_store.reorder_products("c-hot", ["m3", "m1"])

        assert [p.id for p in ordered] == ["m3", "m1", "m2"]
        assert [p.id for p in data_store.products] == ["m4", "m5", "m3", "m1", "m2"]

    @pytest.mark.asyncio
    async def test_stats(self, data_store):
        await data_store.initialize("mikail-cafe")

        stats = data_store.get_stats()

        assert stats.total_products == 5
        assert stats.total_categories == 2
        assert stats.featured_products == 1
        assert stats.new_products == 1


class TestTagMutations:
    """Test tag vocabulary editing"""

    @pytest.mark.asyncio
    async def test_add_tag_twice(self, remote, data_store):
        """Test a tag added twice appears once and is forwarded once"""
        await data_store.initialize("mikail-cafe")

        assert data_store.add_tag("Glutensiz") is True
        assert data_store.add_tag("Glutensiz") is False
        await data_store.flush()

        assert data_store.tags.count("Glutensiz") == 1
        assert remote.write_calls.count("add_tag") == 1
        assert (await remote.fetch_tags("b-mikail")).count("Glutensiz") == 1

    @pytest.mark.asyncio
    async def test_tags_are_case_sensitive(self, data_store):
        await data_store.initialize("mikail-cafe")

        assert data_store.add_tag("vegan") is True
        assert "Vegan" in data_store.tags
        assert "vegan" in data_store.tags

    @pytest.mark.asyncio
    async def test_remove_absent_tag_is_noop(self, remote, data_store):
        await data_store.initialize("mikail-cafe")

        assert data_store.remove_tag("Yok") is False
        assert data_store.remove_tag("Vegan") is True
        await data_store.flush()

        assert remote.write_calls == ["remove_tag"]
        assert "Vegan" not in data_store.tags


class TestForwarding:
    """Test remote forwarding edge cases"""

    @pytest.mark.asyncio
    async def test_draft_writes_are_not_forwarded(self, remote, data_store):
        """Test a draft without a remote record keeps edits local"""
        await data_store.initialize("yeni-kafe", draft_on_miss=True)

        data_store.update_business({"name": "Yeni Kafe"})
        await data_store.flush()

        assert data_store.business.name == "Yeni Kafe"
        assert data_store.mutations[-1].status == MutationStatus.FAILED
        assert remote.write_calls == []

    def test_write_without_event_loop_is_recorded(self, remote, cache):
        """Test mutations outside an event loop apply locally and record the skip"""
        store = DataStore(remote, cache)
        asyncio.run(store.initialize("mikail-cafe"))

        store.add_tag("Glutensiz")

        assert "Glutensiz" in store.tags
        assert store.mutations[-1].status == MutationStatus.FAILED
        assert store.mutations[-1].error == "no running event loop"

    @pytest.mark.asyncio
    async def test_snapshot_is_a_copy(self, data_store):
        await data_store.initialize("mikail-cafe")

        snapshot = data_store.snapshot()
        snapshot.categories.clear()
        snapshot.business.name = "Changed"

        assert len(data_store.categories) == 2
        assert data_store.business.name == "Mikail Cafe"

    @pytest.mark.asyncio
    async def test_works_without_cache(self, remote):
        """Test the store degrades to remote-only without a cache"""
        store = await DataStore(remote, cache=None).initialize("mikail-cafe")

        store.add_category({"name": "Tatlılar", "icon": "Cake"})
        await store.flush()

        assert len(store.categories) == 3
        assert store.mutations[-1].status == MutationStatus.CONFIRMED

    @pytest.mark.asyncio
    async def test_unexpected_forwarding_error_is_reported(self, cache, mikail):
        """Test a write failing outside the remote store errors is still recorded"""
        class BrokenTagStore(MemoryRemoteStore):
            async def add_tag(self, business_id, name):
                raise ValueError("tag column missing")

        remote = BrokenTagStore()
        remote.put_tenant(mikail)
        store = await DataStore(remote, cache).initialize("mikail-cafe")
        failures = []

        async def on_failure(event):
            failures.append(event)

        store.events.subscribe(RemoteWriteFailed.__name__, on_failure)
        store.add_tag("Glutensiz")
        await store.flush()

        assert "Glutensiz" in store.tags
        record = store.mutations[-1]
        assert record.status == MutationStatus.FAILED
        assert record.error == "ValueError: tag column missing"
        assert [e.mutation_id for e in failures] == [record.id]
