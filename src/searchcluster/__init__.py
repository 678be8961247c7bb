"""
SearchCluster - Cluster-aware full-text search for indexed documents.

This package contains:
- cluster: Search hosts, services, health records and the cluster router
- storage: Full-text storage engines (Elasticsearch over HTTP+JSON)
- platform: Cross-cutting concerns (configuration, logging)
- errors: Error hierarchy shared by routing and transport
"""

__version__ = "0.1.0"
