"""
Per-host health records with a check cooldown.

A record remembers when its host was last checked and whether it answered.
Checks are rate limited: `should_check()` stays False until the cooldown
has elapsed, so routing decisions never trigger a storm of checks against
a host that is already known to be up or down.
"""

import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import structlog

from searchcluster.platform.config import settings

logger = structlog.get_logger()


@dataclass(frozen=True)
class HealthState:
    last_checked_at: float
    reachable: bool


class HealthStore(ABC):
    """Where health state lives between checks."""

    @abstractmethod
    def get(self, key: str) -> Optional[HealthState]:
        pass

    @abstractmethod
    def set(self, key: str, state: HealthState) -> None:
        pass


class MemoryHealthStore(HealthStore):
    """Process-local store."""

    def __init__(self):
        self._states: Dict[str, HealthState] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[HealthState]:
        with self._lock:
            return self._states.get(key)

    def set(self, key: str, state: HealthState) -> None:
        with self._lock:
            self._states[key] = state

    def clear(self) -> None:
        with self._lock:
            self._states.clear()


default_health_store = MemoryHealthStore()


class HealthRecord:
    """
    Reachability of one host.

    The check-then-record sequence is not atomic: two concurrent callers
    may both see `should_check()` as True and both check. That costs an
    extra check, never a wrong state.
    """

    def __init__(
        self,
        cache_key: str,
        cooldown: Optional[float] = None,
        store: Optional[HealthStore] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.cache_key = cache_key
        self.cooldown = cooldown if cooldown is not None else settings.SEARCH_HEALTH_CHECK_COOLDOWN
        self._store = store or default_health_store
        self._clock = clock

    @property
    def state(self) -> Optional[HealthState]:
        return self._store.get(self.cache_key)

    @property
    def last_checked_at(self) -> Optional[float]:
        state = self.state
        return state.last_checked_at if state else None

    @property
    def reachable(self) -> Optional[bool]:
        """None until the first check is recorded."""
        state = self.state
        return state.reachable if state else None

    def should_check(self) -> bool:
        state = self.state
        if state is None:
            return True
        return self._clock() - state.last_checked_at >= self.cooldown

    def record_check(self, reachable: bool) -> None:
        previous = self.reachable
        self._store.set(self.cache_key, HealthState(self._clock(), reachable))
        if previous is not None and previous != reachable:
            logger.info(
                "search_host_health_changed",
                key=self.cache_key,
                reachable=reachable,
            )
