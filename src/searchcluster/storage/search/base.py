"""
Full-text storage engine interface.
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from searchcluster.storage.search.documents import Document, SavedQuery


class FulltextStorageEngine(ABC):
    """Abstract interface for full-text search engine operations."""

    @property
    @abstractmethod
    def engine_identifier(self) -> str:
        """Short name of the backend, e.g. "elasticsearch"."""
        pass

    @property
    def engine_priority(self) -> int:
        return 100

    @abstractmethod
    def is_enabled(self) -> bool:
        pass

    @abstractmethod
    async def connect(self) -> None:
        """Establish connection."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close connection."""
        pass

    @abstractmethod
    async def reindex(self, document: Document) -> None:
        """Write `document` to the index, replacing any previous version."""
        pass

    @abstractmethod
    async def reconstruct(self, phid: str) -> Optional[Document]:
        """Read a stored document back, or None if it is not indexed."""
        pass

    @abstractmethod
    async def search(self, query: SavedQuery) -> List[str]:
        """Return matching document identifiers in result order."""
        pass

    @abstractmethod
    async def index_exists(self) -> bool:
        pass

    @abstractmethod
    async def index_is_sane(self) -> bool:
        pass

    @abstractmethod
    async def init_index(self) -> None:
        """Drop and recreate the index. Destroys all indexed documents."""
        pass
