"""
In-memory stand-in for an Elasticsearch node, served through httpx.MockTransport.
"""

import json
from typing import Any, Dict, List, Optional

import httpx
import pytest

from searchcluster.storage.search.elastic import ElasticFulltextStorageEngine
from searchcluster.storage.search.tags import Tag, TagSource


class FakeElastic:
    def __init__(self, index: str = "phabricator"):
        self.index = index
        self.documents: Dict[str, Dict[str, Any]] = {}
        self.requests: List[httpx.Request] = []
        self.index_config: Optional[Dict[str, Any]] = None
        self.search_hits: List[str] = []
        self.search_status = 200
        self.syntax_errors = 0

    def body(self, request: httpx.Request) -> Any:
        return json.loads(request.content) if request.content else None

    def bodies(self, method: str, suffix: str = "") -> List[Any]:
        return [
            self.body(r)
            for r in self.requests
            if r.method == method and r.url.path.endswith(suffix)
        ]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        prefix = f"/{self.index}"
        path = request.url.path[len(prefix):].rstrip("/")
        parts = [p for p in path.split("/") if p]

        if path.endswith("_search"):
            if self.syntax_errors:
                self.syntax_errors -= 1
                return httpx.Response(400, json={"error": "query_parsing_exception"})
            hits = [{"_id": phid, "_score": 1.0} for phid in self.search_hits]
            return httpx.Response(self.search_status, json={"hits": {"total": len(hits), "hits": hits}})

        if not parts or parts == ["_status"]:
            if request.method == "DELETE":
                self.index_config = None
                self.documents.clear()
                return httpx.Response(200, json={"acknowledged": True})
            if request.method == "PUT":
                self.index_config = self.body(request)
                return httpx.Response(200, json={"acknowledged": True})
            if self.index_config is None:
                return httpx.Response(404, json={"error": "index_not_found_exception"})
            return httpx.Response(200, json={self.index: self.index_config})

        if parts in (["_mapping"], ["_settings"]):
            if self.index_config is None:
                return httpx.Response(404, json={"error": "index_not_found_exception"})
            key = "mappings" if parts[0] == "_mapping" else "settings"
            return httpx.Response(200, json={self.index: {key: self.index_config.get(key, {})}})

        if len(parts) == 2:
            doc_type, phid = parts
            key = f"{doc_type}/{phid}"
            if request.method == "PUT":
                self.documents[key] = self.body(request)
                return httpx.Response(201, json={"_id": phid, "created": True})
            if key not in self.documents:
                return httpx.Response(404, json={"_id": phid, "found": False})
            return httpx.Response(
                200,
                json={"_id": phid, "_type": doc_type, "found": True, "_source": self.documents[key]},
            )

        return httpx.Response(400, json={"error": f"unexpected path {path}"})


class CountingTagSource(TagSource):
    def __init__(self, tags: List[Tag]):
        self.tags = {tag.phid: tag for tag in tags}
        self.calls: List[List[str]] = []

    async def fetch_tags(self, phids: List[str]) -> List[Tag]:
        self.calls.append(list(phids))
        return [self.tags[phid] for phid in phids if phid in self.tags]


@pytest.fixture
def fake_elastic():
    return FakeElastic()


@pytest.fixture
def tag_source():
    return CountingTagSource([
        Tag("PHID-PROJ-backend", "Backend Team", ["backend_team", "be"]),
        Tag("PHID-PROJ-infra", "Infrastructure", ["infra", "backend_team"]),
    ])


@pytest.fixture
def engine(fake_elastic, tag_source):
    return ElasticFulltextStorageEngine(
        uri="http://search.local:9200",
        index="phabricator",
        version=5,
        enabled=True,
        indexable_types=["TASK", "DREV"],
        tag_source=tag_source,
        transport=httpx.MockTransport(fake_elastic.handler),
    )
