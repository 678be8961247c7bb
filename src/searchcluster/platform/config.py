"""
SearchCluster Configuration Management

Uses Pydantic Settings for type-safe configuration from environment variables.
"""

from functools import lru_cache
from typing import Any, Dict, List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    # =========================================================================
    # APPLICATION
    # =========================================================================
    APP_NAME: str = "SearchCluster"
    APP_ENV: str = "development"
    LOG_LEVEL: str = "info"
    VERSION: str = "0.1.0"

    # =========================================================================
    # ELASTICSEARCH (Full-Text Search Backend)
    # =========================================================================
    SEARCH_ELASTIC_HOST: str = "http://localhost:9200"
    SEARCH_ELASTIC_NAMESPACE: str = "phabricator"
    SEARCH_ELASTIC_VERSION: int = 5
    SEARCH_ELASTIC_ENABLED: bool = False
    SEARCH_ELASTIC_TIMEOUT: Optional[float] = None
    # Overrides the version-derived "last modified" field name
    SEARCH_ELASTIC_TIMESTAMP_FIELD: Optional[str] = None

    # =========================================================================
    # CLUSTER
    # =========================================================================
    # JSON list of service definitions, see searchcluster.cluster.config
    SEARCH_CLUSTER_SERVICES: List[Dict[str, Any]] = []
    SEARCH_HEALTH_CHECK_COOLDOWN: float = 60.0
    SEARCH_REINDEX_ABORT_ON_ERROR: bool = False
    SEARCH_STATUS_PORT: int = 8090

    # =========================================================================
    # DOCUMENT TYPES
    # =========================================================================
    SEARCH_INDEXABLE_TYPES: List[str] = [
        "TASK",
        "DREV",
        "CMIT",
        "WIKI",
        "PROJ",
        "USER",
        "MOCK",
        "PSTE",
        "QUES",
        "FILE",
        "REPO",
        "POST",
    ]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Singleton instance for easy import
settings = get_settings()
