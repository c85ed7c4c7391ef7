from __future__ import annotations

import logging
import secrets
import time
from collections import OrderedDict
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Optional

from ..config import settings
from ..services.repository import DocumentRepository
from .controller import AppController

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    controller: AppController
    last_seen: float


class SessionRegistry:
    """Process-local map of browser session token -> controller.

    Entries expire after ``ttl_seconds`` without a request, and the least
    recently used entry is evicted once ``max_active`` sessions exist. An
    evicted controller takes its preview cache with it.
    """

    def __init__(
        self,
        ttl_seconds: float,
        max_active: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.max_active = max(1, max_active)
        self._clock = clock
        self._entries: OrderedDict[str, _Entry] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def _expired(self, entry: _Entry, now: float) -> bool:
        return now - entry.last_seen > self.ttl_seconds

    def get(self, token: Optional[str]) -> Optional[AppController]:
        if not token:
            return None
        entry = self._entries.get(token)
        if entry is None:
            return None
        now = self._clock()
        if self._expired(entry, now):
            del self._entries[token]
            logger.info("ui_session_expired sessions=%s", len(self._entries))
            return None
        entry.last_seen = now
        self._entries.move_to_end(token)
        return entry.controller

    def create(self, repository: DocumentRepository) -> tuple[str, AppController]:
        now = self._clock()
        self._purge_expired(now)
        while len(self._entries) >= self.max_active:
            self._entries.popitem(last=False)
            logger.info("ui_session_evicted reason=capacity max_active=%s", self.max_active)

        token = secrets.token_urlsafe(32)
        controller = AppController(repository)
        self._entries[token] = _Entry(controller=controller, last_seen=now)
        logger.info("ui_session_started sessions=%s", len(self._entries))
        return token, controller

    def _purge_expired(self, now: float) -> None:
        stale = [token for token, entry in self._entries.items() if self._expired(entry, now)]
        for token in stale:
            del self._entries[token]
        if stale:
            logger.info("ui_session_expired count=%s sessions=%s", len(stale), len(self._entries))

    def clear(self) -> None:
        self._entries.clear()


@lru_cache(maxsize=1)
def get_session_registry() -> SessionRegistry:
    return SessionRegistry(
        ttl_seconds=settings.session_ttl_hours * 3600,
        max_active=settings.session_max_active,
    )
