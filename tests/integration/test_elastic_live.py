"""
Integration tests against a live Elasticsearch node.

Run with SEARCH_ELASTIC_INTEGRATION=1 and SEARCH_ELASTIC_HOST pointing at a
disposable node; the test index is dropped and recreated.
"""

import asyncio
import os
import uuid

import pytest
import pytest_asyncio

from searchcluster.cluster.host import ElasticSearchHost
from searchcluster.cluster.router import ClusterRouter
from searchcluster.cluster.service import SearchService
from searchcluster.platform.config import settings
from searchcluster.storage.search.documents import Document, FieldType, SavedQuery

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(
        os.environ.get("SEARCH_ELASTIC_INTEGRATION") != "1",
        reason="set SEARCH_ELASTIC_INTEGRATION=1 to run against a live backend",
    ),
]


@pytest_asyncio.fixture
async def router():
    from urllib.parse import urlsplit

    parts = urlsplit(settings.SEARCH_ELASTIC_HOST)
    host = ElasticSearchHost(
        parts.hostname or "localhost",
        port=parts.port or 9200,
        protocol=parts.scheme or "http",
        path=f"searchcluster_test_{uuid.uuid4().hex[:8]}",
        version=settings.SEARCH_ELASTIC_VERSION,
        roles={"read": True, "write": True},
        indexable_types=["TASK"],
    )
    await host.engine.init_index()
    router = ClusterRouter([SearchService("live", [host])])
    yield router
    await host.engine.transport.request("/", None, "DELETE")
    await router.close()


@pytest.mark.asyncio
async def test_live_index_is_sane(router):
    host = router.all_hosts()[0]
    assert await host.engine.index_is_sane() is True


@pytest.mark.asyncio
async def test_live_reindex_and_search(router):
    doc = Document(phid="PHID-TASK-live1", type="TASK", title="Flux capacitor", created_at=1, modified_at=2)
    doc.add_field(FieldType.BODY.value, "Requires 1.21 gigawatts")

    assert await router.reindex(doc) == 1
    await router.all_hosts()[0].engine.transport.request("/_refresh", None, "POST")
    await asyncio.sleep(0.5)

    assert await router.search(SavedQuery({"query": "gigawatts"})) == ["PHID-TASK-live1"]

    rebuilt = await router.all_hosts()[0].engine.reconstruct("PHID-TASK-live1")
    assert rebuilt.title == "Flux capacitor"
