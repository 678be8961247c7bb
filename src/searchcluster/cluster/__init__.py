"""Search cluster: hosts, services, health records and routing."""

from .health import HealthRecord, HealthState, HealthStore, MemoryHealthStore
from .host import (
    ROLE_READ,
    ROLE_WRITE,
    STATUS_FAIL,
    STATUS_OKAY,
    ElasticSearchHost,
    SearchHost,
)
from .service import SearchService
from .router import ClusterRouter

__all__ = [
    "HealthRecord",
    "HealthState",
    "HealthStore",
    "MemoryHealthStore",
    "SearchHost",
    "ElasticSearchHost",
    "SearchService",
    "ClusterRouter",
    "ROLE_READ",
    "ROLE_WRITE",
    "STATUS_OKAY",
    "STATUS_FAIL",
]
