"""Short lived single-consume key/value storage."""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple

from .clock import Clock

LOGGER = logging.getLogger(__name__)


class NoteStore(ABC):
    """Key/value store whose entries expire and are read at most once."""

    @abstractmethod
    async def put(self, key: str, value: str, expires_at: int):
        """Store value under key until the epoch second expires_at."""

    @abstractmethod
    async def pop(self, key: str) -> Optional[str]:
        """Atomically read and delete key; expired entries return None."""


class InMemoryNoteStore(NoteStore):
    """NoteStore held in process memory."""

    def __init__(self, clock: Clock):
        """Initialize the store."""
        self._clock = clock
        self._notes: Dict[str, Tuple[str, int]] = {}
        self._lock = threading.Lock()

    async def put(self, key: str, value: str, expires_at: int):
        """Store value under key until expires_at."""
        with self._lock:
            self._purge()
            self._notes[key] = (value, expires_at)

    async def pop(self, key: str) -> Optional[str]:
        """Atomically read and delete key."""
        with self._lock:
            entry = self._notes.pop(key, None)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock.epoch() > expires_at:
            LOGGER.debug("Note %s expired at %s", key, expires_at)
            return None
        return value

    def __len__(self) -> int:
        """Number of entries held, expired or not."""
        return len(self._notes)

    def _purge(self):
        now = self._clock.epoch()
        for key in [k for k, (_, exp) in self._notes.items() if now > exp]:
            del self._notes[key]
