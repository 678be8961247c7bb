"""
Cluster definition parsing.

SEARCH_CLUSTER_SERVICES holds a list of services, e.g.:

    [
      {
        "type": "elasticsearch",
        "path": "phabricator",
        "version": 5,
        "hosts": [
          {"host": "search-a.local", "roles": {"read": true, "write": true}},
          {"host": "search-b.local", "roles": {"read": true, "write": false}}
        ]
      }
    ]

Service-level keys (port, protocol, path, version, roles) are defaults
for the hosts listed under it.
"""

from typing import Any, Dict, List, Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, Field, ValidationError

from searchcluster.cluster.health import HealthStore
from searchcluster.cluster.host import ElasticSearchHost, SearchHost
from searchcluster.cluster.service import SearchService
from searchcluster.errors import ClusterConfigurationError
from searchcluster.platform.config import Settings, settings as default_settings
from searchcluster.storage.search.tags import TagSource

SUPPORTED_SERVICE_TYPES = ("elasticsearch",)


class HostConfig(BaseModel):
    host: str
    port: Optional[int] = None
    protocol: Optional[str] = None
    path: Optional[str] = None
    version: Optional[int] = None
    roles: Optional[Dict[str, bool]] = None
    disabled: bool = False


class ServiceConfig(BaseModel):
    type: str = "elasticsearch"
    name: Optional[str] = None
    port: int = 9200
    protocol: str = "http"
    path: str = "phabricator"
    version: int = 5
    roles: Dict[str, bool] = Field(default_factory=lambda: {"read": True, "write": True})
    disabled: bool = False
    hosts: List[HostConfig] = Field(default_factory=list)


def parse_service_configs(raw: List[Dict[str, Any]]) -> List[ServiceConfig]:
    try:
        configs = [ServiceConfig.model_validate(item) for item in raw]
    except ValidationError as e:
        raise ClusterConfigurationError(f"Invalid search cluster configuration: {e}") from e

    for config in configs:
        if config.type not in SUPPORTED_SERVICE_TYPES:
            raise ClusterConfigurationError(
                f"Unsupported search service type '{config.type}'. "
                f"Supported: {', '.join(SUPPORTED_SERVICE_TYPES)}."
            )
    return configs


def default_service_config(config: Settings) -> Dict[str, Any]:
    """A single read+write service derived from SEARCH_ELASTIC_HOST."""
    parts = urlsplit(config.SEARCH_ELASTIC_HOST)
    return {
        "type": "elasticsearch",
        "name": "default",
        "protocol": parts.scheme or "http",
        "port": parts.port or 9200,
        "path": config.SEARCH_ELASTIC_NAMESPACE,
        "version": config.SEARCH_ELASTIC_VERSION,
        "disabled": not config.SEARCH_ELASTIC_ENABLED,
        "hosts": [{"host": parts.hostname or "localhost"}],
    }


def build_services(
    raw: List[Dict[str, Any]],
    config: Optional[Settings] = None,
    tag_source: Optional[TagSource] = None,
    health_store: Optional[HealthStore] = None,
) -> List[SearchService]:
    config = config or default_settings
    services: List[SearchService] = []

    for position, service_config in enumerate(parse_service_configs(raw)):
        hosts: List[SearchHost] = []
        for host_config in service_config.hosts:
            roles = dict(service_config.roles)
            roles.update(host_config.roles or {})
            hosts.append(
                ElasticSearchHost(
                    host=host_config.host,
                    port=host_config.port or service_config.port,
                    protocol=host_config.protocol or service_config.protocol,
                    path=host_config.path or service_config.path,
                    version=host_config.version or service_config.version,
                    roles=roles,
                    disabled=service_config.disabled or host_config.disabled,
                    timeout=config.SEARCH_ELASTIC_TIMEOUT,
                    indexable_types=config.SEARCH_INDEXABLE_TYPES,
                    tag_source=tag_source,
                    health_cooldown=config.SEARCH_HEALTH_CHECK_COOLDOWN,
                    health_store=health_store,
                )
            )

        name = service_config.name or f"{service_config.type}-{position}"
        services.append(SearchService(name, hosts, service_type=service_config.type))

    return services


def services_from_settings(
    config: Optional[Settings] = None,
    tag_source: Optional[TagSource] = None,
    health_store: Optional[HealthStore] = None,
) -> List[SearchService]:
    config = config or default_settings
    raw = config.SEARCH_CLUSTER_SERVICES or [default_service_config(config)]
    return build_services(raw, config=config, tag_source=tag_source, health_store=health_store)
