"""Registry of open logging sessions."""

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from uuid import UUID

from realitylog.exceptions import PermissionDeniedError, SessionNotFoundError
from realitylog.services.entry_store import EntryStore
from realitylog.services.log_session import LoggingSession
from realitylog.services.permissions import Identity
from realitylog.services.timecode import DEFAULT_FPS, DEFAULT_TICK_MS, TimecodeGenerator

logger = logging.getLogger(__name__)


class SessionManager:
    def __init__(
        self,
        store: EntryStore,
        fps: int = DEFAULT_FPS,
        tick_ms: int = DEFAULT_TICK_MS,
        idle_timeout: timedelta = timedelta(hours=4),
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._fps = fps
        self._tick_ms = tick_ms
        self._idle_timeout = idle_timeout
        self._clock = clock
        self._sessions: dict[UUID, LoggingSession] = {}
        self._lock = asyncio.Lock()
        self._reaper: asyncio.Task | None = None

    async def open(self, owner: Identity) -> LoggingSession:
        await self.reap_idle()
        generator = TimecodeGenerator(fps=self._fps, tick_ms=self._tick_ms, clock=self._clock)
        session = LoggingSession(owner=owner, store=self._store, timecode=generator)
        await generator.start()
        async with self._lock:
            self._sessions[session.id] = session
        logger.info(f"Opened logging session {session.id} for {owner.email}")
        return session

    def get(self, session_id: UUID, requester: Identity) -> LoggingSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(str(session_id))
        if session.owner.id != requester.id:
            raise PermissionDeniedError("This logging session belongs to another user")
        session.touch()
        return session

    async def close(self, session_id: UUID, requester: Identity) -> None:
        session = self.get(session_id, requester)
        async with self._lock:
            self._sessions.pop(session.id, None)
        await session.close()
        logger.info(f"Closed logging session {session_id}")

    async def reap_idle(self) -> int:
        """Close sessions idle for longer than the timeout."""
        cutoff = datetime.now(timezone.utc) - self._idle_timeout
        async with self._lock:
            stale = [s for s in self._sessions.values() if s.last_activity_at < cutoff]
            for session in stale:
                del self._sessions[session.id]
        for session in stale:
            await session.close()
            logger.info(f"Reaped idle logging session {session.id}")
        return len(stale)

    def start_reaper(self, interval_seconds: float) -> None:
        """Reap idle sessions in the background every ``interval_seconds``."""
        if self._reaper is not None and not self._reaper.done():
            return
        self._reaper = asyncio.create_task(self._reap_loop(interval_seconds))
        logger.info(f"Session reaper started (every {interval_seconds}s)")

    async def stop_reaper(self) -> None:
        if self._reaper is None:
            return
        self._reaper.cancel()
        try:
            await self._reaper
        except asyncio.CancelledError:
            pass
        self._reaper = None
        logger.info("Session reaper stopped")

    async def _reap_loop(self, interval_seconds: float) -> None:
        while True:
            await asyncio.sleep(interval_seconds)
            try:
                await self.reap_idle()
            except Exception as e:
                logger.error(f"Reaping idle sessions failed: {e}", exc_info=True)

    async def shutdown(self) -> None:
        await self.stop_reaper()
        async with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            await session.close()
        logger.info(f"Closed {len(sessions)} logging sessions on shutdown")

    def count(self) -> int:
        return len(self._sessions)


def _default_session_manager() -> SessionManager:
    from realitylog.config import get_settings
    from realitylog.services.entry_store import entry_store

    settings = get_settings()
    return SessionManager(
        entry_store,
        fps=settings.timecode_fps,
        tick_ms=settings.timecode_tick_ms,
        idle_timeout=timedelta(minutes=settings.session_idle_minutes),
    )


# Global session manager instance
session_manager = _default_session_manager()
