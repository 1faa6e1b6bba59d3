from __future__ import annotations

import threading
import uuid
from typing import Dict, List, Optional

from ...engine.game import ChessGame


class InMemorySessionStore:
    """Thread-safe registry of running games keyed by ``game_id``.

    The store only guards its own map; each :class:`ChessGame` serializes
    calls made against it.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._games: Dict[str, ChessGame] = {}

    def create(self, game: Optional[ChessGame] = None) -> str:
        """Register a game (a fresh one by default) and return its `game_id`."""
        gid = str(uuid.uuid4())
        if game is None:
            game = ChessGame()
        with self._lock:
            self._games[gid] = game
        return gid

    def get(self, game_id: str) -> Optional[ChessGame]:
        with self._lock:
            return self._games.get(game_id)

    def delete(self, game_id: str) -> bool:
        with self._lock:
            return self._games.pop(game_id, None) is not None

    def ids(self) -> List[str]:
        with self._lock:
            return list(self._games)

    def __len__(self) -> int:
        with self._lock:
            return len(self._games)
