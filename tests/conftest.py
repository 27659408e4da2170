"""Shared fixtures."""
import pytest

from attendance.infrastructure.database import SqlIdentityStore
from tests.fakes import FakeIdentityStore, FakeVisionProvider, encode_image


@pytest.fixture
def sample_image() -> bytes:
    """800x600 JPEG image."""
    return encode_image()


@pytest.fixture
def fake_provider() -> FakeVisionProvider:
    return FakeVisionProvider()


@pytest.fixture
def fake_store() -> FakeIdentityStore:
    return FakeIdentityStore()


@pytest.fixture
async def sql_store(tmp_path):
    """SQLite-backed identity store in a temporary directory."""
    store = SqlIdentityStore.from_url(f"sqlite+aiosqlite:///{tmp_path / 'attendance.db'}")
    await store.initialize()
    yield store
    await store.close()
