"""
Cluster Router - distributes indexing and queries across search services.

Writes fan out to every writable host of every service. Reads fail over:
services are tried in configured order, hosts within a service in listed
order, and the first host that answers wins.
"""

from typing import Any, Dict, List, Optional, Sequence

import structlog

from searchcluster.cluster.config import services_from_settings
from searchcluster.cluster.host import ROLE_READ, ROLE_WRITE, STATUS_OKAY, SearchHost
from searchcluster.cluster.service import SearchService
from searchcluster.errors import (
    NoReadableHostError,
    NoWritableHostError,
    SearchClusterError,
)
from searchcluster.platform.config import settings
from searchcluster.platform.logging import host_context
from searchcluster.storage.search.documents import Document, SavedQuery

logger = structlog.get_logger()


class ClusterRouter:
    """
    Routes document operations over an explicit list of services.

    Args:
        services: Services in failover order
        abort_on_error: When True, the first writable host that fails a
            reindex aborts the fan-out and its error propagates. When False
            (default), failing hosts are logged and skipped.
    """

    def __init__(
        self,
        services: Sequence[SearchService],
        abort_on_error: Optional[bool] = None,
    ):
        self.services: List[SearchService] = list(services)
        self.abort_on_error = (
            abort_on_error
            if abort_on_error is not None
            else settings.SEARCH_REINDEX_ABORT_ON_ERROR
        )

    @classmethod
    def from_settings(cls, **kwargs: Any) -> "ClusterRouter":
        return cls(services_from_settings(**kwargs))

    def all_hosts(self) -> List[SearchHost]:
        return [host for service in self.services for host in service.hosts]

    def hosts_for_role(self, role: str) -> List[SearchHost]:
        return [
            host
            for service in self.services
            for host in service.get_all_hosts_for_role(role)
        ]

    async def reindex(self, document: Document) -> int:
        """
        Write `document` to every writable host.

        Returns the number of hosts that accepted it. Raises
        NoWritableHostError when that number is zero, chained to the last
        host error if any host was tried.
        """
        indexed = 0
        attempted = 0
        last_error: Optional[SearchClusterError] = None

        for service in self.services:
            for host in service.get_all_hosts_for_role(ROLE_WRITE):
                attempted += 1
                with host_context(service.name, host.display_name):
                    try:
                        await host.engine.reindex(document)
                    except SearchClusterError as e:
                        if self.abort_on_error:
                            raise
                        last_error = e
                        logger.warning("reindex_host_failed", phid=document.phid, error=str(e))
                        continue
                indexed += 1

        if indexed == 0:
            if last_error is not None:
                raise NoWritableHostError(
                    f"Document {document.phid} was not indexed: all {attempted} "
                    f"writable hosts failed, last error: {last_error}"
                ) from last_error
            raise NoWritableHostError()

        logger.debug(
            "reindexed_document_on_cluster",
            phid=document.phid,
            indexed=indexed,
            attempted=attempted,
        )
        return indexed

    async def search(self, query: SavedQuery) -> List[str]:
        """
        Run `query` against the first readable host that succeeds.

        If every host fails, the error from the last host attempted is
        raised. If there was no readable host at all, NoReadableHostError.
        """
        last_error: Optional[SearchClusterError] = None

        for service in self.services:
            for host in service.get_all_hosts_for_role(ROLE_READ):
                with host_context(service.name, host.display_name):
                    try:
                        return await host.engine.search(query)
                    except SearchClusterError as e:
                        last_error = e
                        logger.warning("search_host_failed", error=str(e))

        if last_error is not None:
            raise last_error
        raise NoReadableHostError()

    async def check_health(self) -> List[Dict[str, Any]]:
        """
        Check every enabled host whose health record is due for a check,
        and report the status of all hosts.
        """
        rows: List[Dict[str, Any]] = []
        for service in self.services:
            for host in service.hosts:
                record = host.health_record
                if not host.disabled and record.should_check():
                    status = await host.connection_status()
                    host.did_health_check(status == STATUS_OKAY)

                rows.append({
                    "service": service.name,
                    "host": host.display_name,
                    "roles": sorted(r for r, on in host.roles.items() if on),
                    "disabled": host.disabled,
                    "reachable": record.reachable,
                    "last_checked_at": record.last_checked_at,
                    "columns": host.status_view_columns(),
                })
        return rows

    async def close(self) -> None:
        for host in self.all_hosts():
            await host.engine.close()
