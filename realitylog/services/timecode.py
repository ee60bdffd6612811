"""Wall-clock timecode generator.

The generator is either *synced* (value derived from the wall clock on every
read and every tick) or *manual* (frozen at an operator-supplied value until
``resync()``). Subscribers receive the formatted value on every tick while
the generator is started.
"""

import asyncio
import logging
import re
from collections.abc import AsyncGenerator, Callable
from dataclasses import dataclass
from datetime import datetime

from realitylog.exceptions import InvalidTimecodeError

logger = logging.getLogger(__name__)

TIMECODE_PATTERN = re.compile(r"^([0-9]{2}):([0-9]{2}):([0-9]{2}):([0-9]{2})$")

DEFAULT_FPS = 30
DEFAULT_TICK_MS = 33


@dataclass(frozen=True)
class Timecode:
    hours: int
    minutes: int
    seconds: int
    frames: int

    def __str__(self) -> str:
        return f"{self.hours:02d}:{self.minutes:02d}:{self.seconds:02d}:{self.frames:02d}"

    @classmethod
    def from_datetime(cls, moment: datetime, fps: int = DEFAULT_FPS) -> "Timecode":
        milliseconds = moment.microsecond // 1000
        return cls(
            hours=moment.hour,
            minutes=moment.minute,
            seconds=moment.second,
            frames=milliseconds * fps // 1000,
        )

    @classmethod
    def parse(cls, value: str, fps: int = DEFAULT_FPS) -> "Timecode":
        """Parse ``HH:MM:SS:FF``; every field must be two digits and in range.

        Raises:
            InvalidTimecodeError: on any format or range violation
        """
        match = TIMECODE_PATTERN.match(value.strip()) if isinstance(value, str) else None
        if match is None:
            raise InvalidTimecodeError(str(value), fps)

        hours, minutes, seconds, frames = (int(part) for part in match.groups())
        if hours > 23 or minutes > 59 or seconds > 59 or frames >= fps:
            raise InvalidTimecodeError(value, fps)
        return cls(hours, minutes, seconds, frames)


class TimecodeGenerator:
    """Owned timecode service with an explicit start/stop lifecycle."""

    def __init__(
        self,
        fps: int = DEFAULT_FPS,
        tick_ms: int = DEFAULT_TICK_MS,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if fps < 1 or fps > 100:
            raise ValueError(f"fps must be between 1 and 100 (got {fps})")
        self.fps = fps
        self.tick_ms = tick_ms
        self._clock = clock or datetime.now
        self._manual: Timecode | None = None
        self._last: Timecode = Timecode.from_datetime(self._clock(), fps)
        self._subscribers: set[asyncio.Queue[str]] = set()
        self._task: asyncio.Task | None = None

    @property
    def is_manual(self) -> bool:
        return self._manual is not None

    @property
    def mode(self) -> str:
        return "manual" if self.is_manual else "synced"

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def current(self) -> Timecode:
        """Value at this instant. Read it once and keep the result."""
        if self._manual is not None:
            return self._manual
        return Timecode.from_datetime(self._clock(), self.fps)

    @property
    def last(self) -> Timecode:
        """Value produced by the most recent tick."""
        return self._last

    def tick(self) -> Timecode:
        value = self.current
        self._last = value
        self._broadcast(str(value))
        return value

    def set_manual(self, value: str) -> Timecode:
        """Pin the timecode to ``value``. On invalid input nothing changes."""
        parsed = Timecode.parse(value, self.fps)
        self._manual = parsed
        self._last = parsed
        self._broadcast(str(parsed))
        logger.info(f"Timecode pinned to {parsed}")
        return parsed

    def resync(self) -> Timecode:
        """Drop any manual value and recompute from the wall clock now."""
        self._manual = None
        logger.info("Timecode resynced to wall clock")
        return self.tick()

    async def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run())
        logger.info(f"Timecode generator started ({self.fps} fps, {self.tick_ms} ms tick)")

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Timecode generator stopped")

    async def _run(self) -> None:
        interval = self.tick_ms / 1000
        while True:
            self.tick()
            await asyncio.sleep(interval)

    def _broadcast(self, value: str) -> None:
        for queue in self._subscribers:
            if queue.full():
                # Only the newest value matters
                queue.get_nowait()
            queue.put_nowait(value)

    async def subscribe(self) -> AsyncGenerator[str, None]:
        """Yield the current value, then every subsequent tick."""
        queue: asyncio.Queue[str] = asyncio.Queue(maxsize=1)
        self._subscribers.add(queue)
        try:
            yield str(self.current)
            while True:
                yield await queue.get()
        finally:
            self._subscribers.discard(queue)

    def get_subscriber_count(self) -> int:
        return len(self._subscribers)
