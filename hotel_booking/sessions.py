import logging
import time
import uuid
from typing import Callable, Optional

from hotel_booking import errors
from hotel_booking.config import settings
from hotel_booking.router import AppState, initial_state

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Holds one ``AppState`` per browsing session.

    A session that goes unused for longer than ``ttl`` seconds is dropped,
    so abandoned browsing sessions do not accumulate.
    """

    def __init__(
        self,
        ttl: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl = settings.session_ttl_seconds if ttl is None else ttl
        self.clock = clock
        self._states: dict[str, AppState] = {}
        self._last_seen: dict[str, float] = {}

    def create(self) -> tuple[str, AppState]:
        self.purge_expired()
        session_id = uuid.uuid4().hex
        state = initial_state()
        self._states[session_id] = state
        self._last_seen[session_id] = self.clock()
        logger.debug(f"Session created: {session_id}")
        return session_id, state

    def get(self, session_id: str) -> AppState:
        state = self._states.get(session_id)
        if state is None:
            raise errors.NotFound("session", session_id)
        now = self.clock()
        if self._expired(session_id, now):
            self._drop(session_id)
            logger.debug(f"Session expired: {session_id}")
            raise errors.NotFound("session", session_id)
        self._last_seen[session_id] = now
        return state

    def save(self, session_id: str, state: AppState) -> AppState:
        self.get(session_id)
        self._states[session_id] = state
        return state

    def purge_expired(self) -> int:
        now = self.clock()
        expired = [session_id for session_id in self._states if self._expired(session_id, now)]
        for session_id in expired:
            self._drop(session_id)
        if expired:
            logger.info(f"Purged {len(expired)} expired sessions")
        return len(expired)

    def _expired(self, session_id: str, now: float) -> bool:
        return now - self._last_seen[session_id] > self.ttl

    def _drop(self, session_id: str):
        self._states.pop(session_id, None)
        self._last_seen.pop(session_id, None)

    def __len__(self):
        return len(self._states)
