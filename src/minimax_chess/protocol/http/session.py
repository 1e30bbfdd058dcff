from __future__ import annotations

import logging
import threading
import uuid
from collections import OrderedDict
from typing import List, Optional

from ...engine.game import Game


logger = logging.getLogger(__name__)


class InMemorySessionStore:
    """Thread-safe in-memory store of games keyed by ``game_id``.

    The store only guards its own mapping. Operations on one game are
    serialized by that game's ``lock``. When ``max_sessions`` is reached the
    oldest session is evicted to make room for a new one.
    """

    def __init__(self, max_sessions: Optional[int] = None) -> None:
        self._lock = threading.RLock()
        self._games: "OrderedDict[str, Game]" = OrderedDict()
        self._max_sessions = max_sessions

    def create(self, game: Optional[Game] = None) -> str:
        """Store ``game`` (default: a new game) and return its fresh ``game_id``."""
        gid = str(uuid.uuid4())
        with self._lock:
            if self._max_sessions is not None:
                while len(self._games) >= self._max_sessions:
                    evicted, _ = self._games.popitem(last=False)
                    logger.info("session evicted", extra={"game_id": evicted})
            self._games[gid] = game if game is not None else Game.new()
        return gid

    def get(self, game_id: str) -> Optional[Game]:
        with self._lock:
            return self._games.get(game_id)

    def delete(self, game_id: str) -> bool:
        """Remove a game; return False if it did not exist."""
        with self._lock:
            return self._games.pop(game_id, None) is not None

    def ids(self) -> List[str]:
        """Return session ids, oldest first."""
        with self._lock:
            return list(self._games)

    def __len__(self) -> int:
        with self._lock:
            return len(self._games)
