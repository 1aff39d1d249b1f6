"""
Conversation sessions.

Each session owns its confirmation state and a lock that serialises provider
calls, so one session never has two calls in flight while separate sessions
run independently. Sessions live in memory only and expire when idle.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

from .confirmation import ConfirmationProtocol
from .errors import OperationCancelledError


logger = logging.getLogger(__name__)

T = TypeVar("T")


def _now() -> datetime:
    return datetime.now(timezone.utc)


class SessionContext:
    """State scoped to a single conversation."""

    def __init__(
        self,
        session_id: Optional[str] = None,
        max_spelling_attempts: int = 5,
        name_suffix: str = "eth",
    ):
        self.session_id = session_id or str(uuid.uuid4())
        self.confirmation = ConfirmationProtocol(
            max_spelling_attempts=max_spelling_attempts,
            suffix=name_suffix,
        )
        self.created_at = _now()
        self.last_activity = self.created_at
        self._lock = asyncio.Lock()
        self._inflight: Optional[asyncio.Future] = None
        self._cancel_requested = False

    @property
    def busy(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    def touch(self) -> None:
        self.last_activity = _now()

    async def run(self, factory: Callable[[], Awaitable[T]]) -> T:
        """
        Run one provider operation after any earlier one in this session.

        Raises:
            OperationCancelledError: ``cancel()`` was called while it ran.
        """
        async with self._lock:
            self.touch()
            self._cancel_requested = False
            task = asyncio.ensure_future(factory())
            self._inflight = task
            try:
                return await task
            except asyncio.CancelledError:
                if self._cancel_requested and task.cancelled():
                    raise OperationCancelledError() from None
                raise
            finally:
                self._inflight = None
                self._cancel_requested = False

    def cancel(self) -> bool:
        """Abort the in-flight provider call, if any."""
        if not self.busy:
            return False
        self._cancel_requested = True
        self._inflight.cancel()
        logger.info("cancelled in-flight call for session %s", self.session_id)
        return True

    def close(self) -> None:
        self.cancel()
        self.confirmation.discard()

    def to_dict(self) -> Dict[str, Any]:
        state = self.confirmation.state
        return {
            "sessionId": self.session_id,
            "createdAt": self.created_at.isoformat(),
            "lastActivity": self.last_activity.isoformat(),
            "busy": self.busy,
            "confirmation": state.to_dict() if state else None,
        }


class SessionManager:
    """
    In-memory registry of conversation sessions.

    Sessions idle for longer than the timeout are dropped when accessed and
    swept whenever a new session is created.
    """

    def __init__(
        self,
        session_timeout_minutes: int = 30,
        max_spelling_attempts: int = 5,
        name_suffix: str = "eth",
    ):
        self.session_timeout = timedelta(minutes=session_timeout_minutes)
        self.max_spelling_attempts = max_spelling_attempts
        self.name_suffix = name_suffix
        self._sessions: Dict[str, SessionContext] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def create_session(self, session_id: Optional[str] = None) -> SessionContext:
        self.purge_expired()
        session = SessionContext(
            session_id=session_id,
            max_spelling_attempts=self.max_spelling_attempts,
            name_suffix=self.name_suffix,
        )
        self._sessions[session.session_id] = session
        logger.info("created session %s", session.session_id)
        return session

    def get_session(self, session_id: str) -> Optional[SessionContext]:
        """Get a live session, or None if unknown or expired."""
        session = self._sessions.get(session_id)
        if session is None:
            return None
        if _now() - session.last_activity > self.session_timeout and not session.busy:
            self.end_session(session_id)
            return None
        return session

    def ensure_session(self, session_id: str) -> SessionContext:
        return self.get_session(session_id) or self.create_session(session_id)

    def end_session(self, session_id: str) -> bool:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.close()
        logger.info("ended session %s", session_id)
        return True

    def purge_expired(self) -> int:
        """End every idle session with nothing in flight; returns how many."""
        expired = [
            session_id
            for session_id, session in self._sessions.items()
            if _now() - session.last_activity > self.session_timeout and not session.busy
        ]
        for session_id in expired:
            self.end_session(session_id)
        if expired:
            logger.info("purged %d idle sessions", len(expired))
        return len(expired)


_session_manager: Optional[SessionManager] = None


def get_session_manager() -> SessionManager:
    """Get or create the process-wide session manager."""
    global _session_manager
    if _session_manager is None:
        from ..config import settings

        _session_manager = SessionManager(
            session_timeout_minutes=settings.session_timeout_minutes,
            max_spelling_attempts=settings.max_spelling_attempts,
            name_suffix=settings.name_suffix,
        )
    return _session_manager
