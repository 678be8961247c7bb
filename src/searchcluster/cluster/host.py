"""
Search hosts: one backend endpoint each, with roles and a health record.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

import httpx

from searchcluster.cluster.health import HealthRecord, HealthStore
from searchcluster.storage.search.base import FulltextStorageEngine
from searchcluster.storage.search.elastic import ElasticFulltextStorageEngine
from searchcluster.storage.search.tags import TagSource

ROLE_READ = "read"
ROLE_WRITE = "write"

STATUS_OKAY = "okay"
STATUS_FAIL = "fail"

KEY_HEALTH = "cluster.search.health"


class SearchHost(ABC):
    """A backend endpoint serving some set of roles."""

    def __init__(
        self,
        host: str,
        port: int,
        roles: Optional[Dict[str, bool]] = None,
        disabled: bool = False,
        health_cooldown: Optional[float] = None,
        health_store: Optional[HealthStore] = None,
    ):
        self.host = host
        self.port = port
        self.roles: Dict[str, bool] = dict(roles or {})
        self.disabled = disabled
        self._health_cooldown = health_cooldown
        self._health_store = health_store
        self._health_record: Optional[HealthRecord] = None

    def has_role(self, role: str) -> bool:
        return self.roles.get(role) is True

    def is_writable(self) -> bool:
        return self.has_role(ROLE_WRITE)

    def is_readable(self) -> bool:
        return self.has_role(ROLE_READ)

    @property
    def health_record_cache_key(self) -> str:
        return f"{KEY_HEALTH}({self.host}, {self.port})"

    @property
    def health_record(self) -> HealthRecord:
        if self._health_record is None:
            self._health_record = HealthRecord(
                self.health_record_cache_key,
                cooldown=self._health_cooldown,
                store=self._health_store,
            )
        return self._health_record

    def did_health_check(self, reachable: bool) -> None:
        """Record a health check outcome, unless the record is still cooling down."""
        record = self.health_record
        if record.should_check():
            record.record_check(reachable)

    @property
    def display_name(self) -> str:
        return f"{self.host}:{self.port}"

    @property
    @abstractmethod
    def engine(self) -> FulltextStorageEngine:
        pass

    @abstractmethod
    def status_view_columns(self) -> Dict[str, str]:
        """Label/value pairs shown in the cluster status overview."""
        pass

    @abstractmethod
    async def connection_status(self) -> str:
        """STATUS_OKAY or STATUS_FAIL."""
        pass

    def __repr__(self) -> str:
        roles = ",".join(sorted(r for r, on in self.roles.items() if on))
        return f"<{type(self).__name__} {self.display_name} roles={roles} disabled={self.disabled}>"


class ElasticSearchHost(SearchHost):
    """An Elasticsearch node addressed by protocol, host, port and index path."""

    def __init__(
        self,
        host: str,
        port: int = 9200,
        protocol: str = "http",
        path: str = "phabricator",
        version: int = 5,
        roles: Optional[Dict[str, bool]] = None,
        disabled: bool = False,
        timeout: Optional[float] = None,
        indexable_types: Optional[List[str]] = None,
        tag_source: Optional[TagSource] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        health_cooldown: Optional[float] = None,
        health_store: Optional[HealthStore] = None,
    ):
        super().__init__(
            host,
            port,
            roles=roles,
            disabled=disabled,
            health_cooldown=health_cooldown,
            health_store=health_store,
        )
        self.protocol = protocol
        self.path = path.strip("/")
        self.version = version
        self._engine = ElasticFulltextStorageEngine(
            uri=self.uri,
            index=self.path,
            version=version,
            timeout=timeout,
            enabled=True,
            indexable_types=indexable_types,
            tag_source=tag_source,
            transport=transport,
        )

    @property
    def uri(self) -> str:
        return f"{self.protocol}://{self.host}:{self.port}"

    @property
    def engine(self) -> ElasticFulltextStorageEngine:
        return self._engine

    def status_view_columns(self) -> Dict[str, str]:
        return {
            "Protocol": self.protocol,
            "Host": self.host,
            "Port": str(self.port),
            "Index Path": self.path,
            "Elastic Version": str(self.version),
        }

    async def connection_status(self) -> str:
        return STATUS_OKAY if await self._engine.health_check() else STATUS_FAIL
