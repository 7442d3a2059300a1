"""
Test configuration for pytest
"""

import os

# Test environment variables, set before any settings are read
os.environ["REMOTE_BACKEND"] = "memory"
os.environ["SEED_DEMO_DATA"] = "true"
os.environ["LOCAL_CACHE_ENABLED"] = "false"
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret"
os.environ["ADMIN_EMAIL"] = "admin@antigravity.com"
os.environ["PUBLIC_BASE_URL"] = "https://menu.example.com"

import pytest

from qrmenu.core.auth import hash_password
from qrmenu.core.errors import TransientNetworkError
from qrmenu.data.demo import demo_snapshot
from qrmenu.models.business import Business
from qrmenu.models.category import Category
from qrmenu.models.product import Product
from qrmenu.models.snapshot import TenantSnapshot
from qrmenu.services.data_store import DataStore
from qrmenu.services.local_cache import MemoryLocalCache
from qrmenu.services.memory_remote_store import MemoryRemoteStore

ADMIN_PASSWORD = "menu-admin-123"
os.environ["ADMIN_PASSWORD_HASH"] = hash_password(ADMIN_PASSWORD)


def mikail_snapshot() -> TenantSnapshot:
    """Small cafe with 2 categories and 5 products"""
    business = Business(
        id="b-mikail",
        slug="mikail-cafe",
        name="Mikail Cafe",
        phone="+90 212 555 0000",
        social_media={"instagram": "mikailcafe"},
        theme_settings={"primaryColor": "#1e3a5f"},
    )
    categories = [
        Category(id="c-hot", name="Sıcak İçecekler", icon="Coffee", product_count=3),
        Category(id="c-food", name="Yiyecekler", icon="Sandwich", product_count=2),
    ]
    products = [
        Product(id="m1", category_id="c-hot", name="Türk Kahvesi", price=60, tags=["Popüler"], is_featured=True),
        Product(id="m2", category_id="c-hot", name="Çay", price=20, description="Demli siyah çay"),
        Product(id="m3", category_id="c-hot", name="Latte", price=90, original_price=110, is_new=True),
        Product(id="m4", category_id="c-food", name="Tost", price=120, tags=["Ev Yapımı"]),
        Product(id="m5", category_id="c-food", name="Simit", price=25, tags=["Vegan"]),
    ]
    return TenantSnapshot(
        business=business,
        categories=categories,
        products=products,
        tags=["Popüler", "Ev Yapımı", "Vegan"],
    )


class FlakyRemoteStore(MemoryRemoteStore):
    """Memory remote store whose reads or writes can be switched off"""

    def __init__(self):
        super().__init__()
        self.fail_reads = False
        self.fail_writes = False
        self.write_calls = []

    def _check_read(self):
        if self.fail_reads:
            raise TransientNetworkError("network unreachable")

    def _check_write(self, operation):
        self.write_calls.append(operation)
        if self.fail_writes:
            raise TransientNetworkError("network unreachable")

    async def fetch_business_by_slug(self, slug):
        self._check_read()
        return await super().fetch_business_by_slug(slug)

    async def update_business(self, business_id, partial):
        self._check_write("update_business")
        await super().update_business(business_id, partial)

    async def add_category(self, business_id, category):
        self._check_write("add_category")
        await super().add_category(business_id, category)

    async def delete_category(self, business_id, category_id):
        self._check_write("delete_category")
        await super().delete_category(business_id, category_id)

    async def add_product(self, business_id, product):
        self._check_write("add_product")
        await super().add_product(business_id, product)

    async def add_tag(self, business_id, name):
        self._check_write("add_tag")
        await super().add_tag(business_id, name)

    async def remove_tag(self, business_id, name):
        self._check_write("remove_tag")
        await super().remove_tag(business_id, name)


@pytest.fixture
def remote() -> FlakyRemoteStore:
    """Remote store holding the demo tenant and mikail-cafe"""
    store = FlakyRemoteStore()
    store.put_tenant(demo_snapshot())
    store.put_tenant(mikail_snapshot())
    return store


@pytest.fixture
def cache() -> MemoryLocalCache:
    return MemoryLocalCache()


@pytest.fixture
def data_store(remote, cache) -> DataStore:
    return DataStore(remote, cache)


@pytest.fixture
def mikail() -> TenantSnapshot:
    return mikail_snapshot()
