"""
Tag keyword resolution for the `tags` search field.

Tags (projects) are indexed by the words of their display name and their
alternate short names, so a search for "backend" finds documents tagged
with "Backend_Team".
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Iterable, List


@dataclass
class Tag:
    phid: str
    display_name: str
    slugs: List[str] = field(default_factory=list)


class TagSource(ABC):
    """Looks up tag names for a batch of identifiers."""

    @abstractmethod
    async def fetch_tags(self, phids: List[str]) -> List[Tag]:
        """Return the tags that exist among `phids`; unknown ones are omitted."""
        pass


def _unique(words: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(words))


def derive_keywords(tag: Tag) -> List[str]:
    text = " ".join([tag.display_name, *tag.slugs])
    text = text.lower().replace("_", " ")
    return _unique(text.split())


class TagKeywordCache:
    """
    Keyword sets per tag identifier.

    Unbounded and never invalidated: entries live as long as the owning
    engine, so a renamed tag keeps its old keywords until the process
    restarts. A lock serializes lookups when the engine is shared between
    concurrent tasks.
    """

    def __init__(self, source: TagSource):
        self._source = source
        self._keywords: Dict[str, List[str]] = {}
        self._lock = asyncio.Lock()

    def __contains__(self, phid: str) -> bool:
        return phid in self._keywords

    def __len__(self) -> int:
        return len(self._keywords)

    async def resolve(self, phids: List[str]) -> str:
        """Space-joined, de-duplicated keywords for every tag in `phids`."""
        async with self._lock:
            missing = _unique(p for p in phids if p not in self._keywords)
            if missing:
                for tag in await self._source.fetch_tags(missing):
                    self._keywords[tag.phid] = derive_keywords(tag)

            keywords: List[str] = []
            for phid in phids:
                keywords.extend(self._keywords.get(phid, []))

        return " ".join(_unique(keywords))
