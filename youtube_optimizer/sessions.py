# youtube_optimizer/sessions.py
import logging
from typing import Dict, Optional
from fastapi import Request

from .models import SessionEntry

logger = logging.getLogger(__name__)


class SessionStore:
    """In-memory map of userId -> SessionEntry.

    Entries do not survive a process restart. Concurrent writes for the same
    user are last-write-wins.
    """

    def __init__(self):
        self._entries: Dict[str, SessionEntry] = {}

    def get(self, user_id: str) -> Optional[SessionEntry]:
        return self._entries.get(user_id)

    def set(self, user_id: str, entry: SessionEntry) -> None:
        self._entries[user_id] = entry
        logger.info("Bound Google session for user %s", user_id)

    def delete(self, user_id: str) -> bool:
        removed = self._entries.pop(user_id, None) is not None
        if removed:
            logger.info("Removed Google session for user %s", user_id)
        return removed

    def __contains__(self, user_id: str) -> bool:
        return user_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store
