from typing import Dict, Optional
from unittest.mock import AsyncMock

import pytest

from searchcluster.cluster.health import MemoryHealthStore
from searchcluster.cluster.host import STATUS_FAIL, STATUS_OKAY, SearchHost
from searchcluster.cluster.service import SearchService
from searchcluster.storage.search.elastic import ElasticFulltextStorageEngine

READ_WRITE = {"read": True, "write": True}


class FakeHost(SearchHost):
    """A host whose engine is an AsyncMock."""

    def __init__(
        self,
        name: str,
        roles: Optional[Dict[str, bool]] = None,
        disabled: bool = False,
        reachable: bool = True,
        store: Optional[MemoryHealthStore] = None,
    ):
        super().__init__(
            name,
            9200,
            roles=roles if roles is not None else dict(READ_WRITE),
            disabled=disabled,
            health_cooldown=60,
            health_store=store or MemoryHealthStore(),
        )
        self._engine = AsyncMock(spec=ElasticFulltextStorageEngine)
        self.reachable = reachable
        self.status_checks = 0

    @property
    def engine(self):
        return self._engine

    def status_view_columns(self):
        return {"Host": self.host, "Port": str(self.port)}

    async def connection_status(self) -> str:
        self.status_checks += 1
        return STATUS_OKAY if self.reachable else STATUS_FAIL


@pytest.fixture
def make_host():
    return FakeHost


@pytest.fixture
def make_service():
    def factory(name, *hosts):
        return SearchService(name, list(hosts))
    return factory
