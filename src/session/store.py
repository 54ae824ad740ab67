"""Session history storage."""

import asyncio
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Dict, List, Optional, Sequence

from src.content.models import ConversationTurn
from src.utils.config import get_settings
from src.utils.logger import get_logger

logger = get_logger()


class SessionStore(ABC):
    """Provides and persists conversation history per session."""

    @abstractmethod
    async def get(self, session_id: str) -> List[ConversationTurn]:
        """Get history for a session, oldest first (empty if unknown)."""
        pass

    @abstractmethod
    async def append(self, session_id: str, turns: Sequence[ConversationTurn]) -> bool:
        """Append turns to a session. Returns False on failure."""
        pass


class InMemorySessionStore(SessionStore):
    """Process-local session store, trimmed to the newest turns."""

    def __init__(self, max_turns: Optional[int] = None):
        """
        Initialize store.

        Args:
            max_turns: Turns kept per session (defaults to settings)
        """
        self.max_turns = max_turns or get_settings().session_max_turns
        self._sessions: Dict[str, List[ConversationTurn]] = defaultdict(list)
        self._lock = asyncio.Lock()

    async def get(self, session_id: str) -> List[ConversationTurn]:
        async with self._lock:
            return list(self._sessions.get(session_id, []))

    async def append(self, session_id: str, turns: Sequence[ConversationTurn]) -> bool:
        try:
            async with self._lock:
                history = self._sessions[session_id]
                history.extend(turns)
                if len(history) > self.max_turns:
                    del history[: len(history) - self.max_turns]
            logger.debug(f"Session {session_id}: appended {len(turns)} turns")
            return True
        except Exception as e:
            logger.warning(f"Failed to save history for session {session_id}: {e}")
            return False

    @property
    def session_count(self) -> int:
        return len(self._sessions)


# Global store instance (singleton pattern)
_session_store: Optional[SessionStore] = None


def get_session_store() -> SessionStore:
    """Get or create the global session store."""
    global _session_store
    if _session_store is None:
        _session_store = InMemorySessionStore()
        logger.info("Created in-memory session store")
    return _session_store
