"""Shared fixtures: the API wired to an in-memory store."""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from app.api.v1.tlds import get_mutation_service, get_store, view_cache
from app.main import app
from registry.catalogs import Catalogs, InMemoryCatalog
from registry.mutation import TldMutationService
from registry.store import InMemoryTldStore


@pytest.fixture
def api_store() -> InMemoryTldStore:
    return InMemoryTldStore()


@pytest.fixture
def api_catalogs() -> Catalogs:
    return Catalogs(
        premium_lists=InMemoryCatalog(["example_premium"]),
        reserved_lists=InMemoryCatalog(["common_abuse", "example_extra", "bar_extra"]),
        allocation_tokens=InMemoryCatalog(["promo1"]),
        dns_writers=InMemoryCatalog(["VoidDnsWriter"]),
    )


@pytest.fixture
def client(api_store: InMemoryTldStore, api_catalogs: Catalogs) -> Iterator[TestClient]:
    """TestClient whose store and catalogs live in memory."""
    view_cache.clear()
    app.dependency_overrides[get_store] = lambda: api_store
    app.dependency_overrides[get_mutation_service] = lambda: TldMutationService(
        api_store, catalogs=api_catalogs, invalidate=view_cache.invalidate
    )
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    view_cache.clear()
