import pytest

from searchcluster.cluster.config import (
    build_services,
    default_service_config,
    services_from_settings,
)
from searchcluster.cluster.host import ElasticSearchHost
from searchcluster.errors import ClusterConfigurationError
from searchcluster.platform.config import Settings


def test_build_services_inherits_service_defaults():
    services = build_services(
        [
            {
                "name": "primary",
                "path": "docs",
                "version": 6,
                "port": 9201,
                "hosts": [
                    {"host": "a.local"},
                    {"host": "b.local", "port": 9300, "roles": {"write": False}},
                ],
            },
            {"hosts": [{"host": "c.local", "disabled": True}]},
        ],
        config=Settings(),
    )

    assert [s.name for s in services] == ["primary", "elasticsearch-1"]
    a, b = services[0].hosts
    assert isinstance(a, ElasticSearchHost)
    assert (a.host, a.port, a.path, a.version) == ("a.local", 9201, "docs", 6)
    assert a.roles == {"read": True, "write": True}
    assert b.port == 9300
    assert b.roles == {"read": True, "write": False}
    assert services[1].hosts[0].disabled is True
    assert services[0].get_all_hosts_for_role("write") == [a]


def test_unknown_service_type_is_rejected():
    with pytest.raises(ClusterConfigurationError):
        build_services([{"type": "solr", "hosts": [{"host": "x"}]}], config=Settings())


def test_invalid_host_definition_is_rejected():
    with pytest.raises(ClusterConfigurationError):
        build_services([{"hosts": [{"port": 9200}]}], config=Settings())


def test_default_service_from_elastic_host():
    config = Settings(
        SEARCH_ELASTIC_HOST="https://search.example.com:9243",
        SEARCH_ELASTIC_NAMESPACE="phab",
        SEARCH_ELASTIC_ENABLED=True,
    )

    raw = default_service_config(config)
    services = services_from_settings(config=config)

    assert raw["protocol"] == "https"
    host = services[0].hosts[0]
    assert host.engine.uri == "https://search.example.com:9243"
    assert host.engine.index == "phab"
    assert host.disabled is False


def test_default_service_disabled_when_elastic_disabled():
    services = services_from_settings(config=Settings(SEARCH_ELASTIC_ENABLED=False))
    assert services[0].get_all_hosts_for_role("read") == []
