"""Tests for timecode formatting, parsing and the generator lifecycle."""

import asyncio
from datetime import datetime

import pytest

from realitylog.exceptions import InvalidTimecodeError
from realitylog.services.timecode import Timecode, TimecodeGenerator


class FakeClock:
    def __init__(self, moment: datetime):
        self.moment = moment

    def __call__(self) -> datetime:
        return self.moment


class TestTimecode:
    def test_from_datetime_derives_frames_from_milliseconds(self):
        moment = datetime(2024, 5, 1, 12, 34, 56, 500_000)
        assert str(Timecode.from_datetime(moment, fps=30)) == "12:34:56:15"

    def test_frames_never_reach_fps(self):
        moment = datetime(2024, 5, 1, 23, 59, 59, 999_000)
        assert str(Timecode.from_datetime(moment, fps=30)) == "23:59:59:29"
        assert str(Timecode.from_datetime(moment, fps=25)) == "23:59:59:24"

    def test_zero_padding(self):
        moment = datetime(2024, 5, 1, 1, 2, 3, 0)
        assert str(Timecode.from_datetime(moment)) == "01:02:03:00"

    @pytest.mark.parametrize("value", ["00:00:00:00", "23:59:59:29", "12:30:15:07"])
    def test_parse_accepts_valid_values(self, value):
        assert str(Timecode.parse(value, fps=30)) == value

    @pytest.mark.parametrize(
        "value",
        [
            "1:02:03:04",  # single digit field
            "01:02:03",  # missing frames
            "24:00:00:00",
            "00:60:00:00",
            "00:00:60:00",
            "00:00:00:30",  # frames must be below fps
            "ab:cd:ef:gh",
            "\u0661\u0662:00:00:00",  # non-ASCII digits
            "",
        ],
    )
    def test_parse_rejects_invalid_values(self, value):
        with pytest.raises(InvalidTimecodeError) as exc_info:
            Timecode.parse(value, fps=30)
        assert exc_info.value.code == "INVALID_TIMECODE"
        assert exc_info.value.status_code == 400

    def test_frame_bound_follows_fps(self):
        assert str(Timecode.parse("00:00:00:24", fps=25)) == "00:00:00:24"
        with pytest.raises(InvalidTimecodeError):
            Timecode.parse("00:00:00:25", fps=25)


class TestTimecodeGenerator:
    @pytest.fixture
    def clock(self):
        return FakeClock(datetime(2024, 5, 1, 10, 0, 0, 0))

    def test_synced_value_follows_clock(self, clock):
        generator = TimecodeGenerator(fps=30, clock=clock)
        assert generator.mode == "synced"
        assert str(generator.current) == "10:00:00:00"

        clock.moment = datetime(2024, 5, 1, 10, 0, 1, 100_000)
        assert str(generator.current) == "10:00:01:03"

    def test_manual_value_is_frozen(self, clock):
        generator = TimecodeGenerator(fps=30, clock=clock)
        generator.set_manual("01:00:00:00")

        clock.moment = datetime(2024, 5, 1, 11, 30, 0, 0)
        generator.tick()
        assert generator.is_manual
        assert str(generator.current) == "01:00:00:00"
        assert str(generator.last) == "01:00:00:00"

    def test_invalid_manual_value_leaves_state_unchanged(self, clock):
        generator = TimecodeGenerator(fps=30, clock=clock)

        with pytest.raises(InvalidTimecodeError):
            generator.set_manual("99:99:99:99")

        assert generator.mode == "synced"
        assert str(generator.current) == "10:00:00:00"

    def test_resync_returns_to_wall_clock(self, clock):
        generator = TimecodeGenerator(fps=30, clock=clock)
        generator.set_manual("01:00:00:00")

        value = generator.resync()

        assert generator.mode == "synced"
        assert str(value) == "10:00:00:00"

    def test_rejects_unreasonable_fps(self):
        with pytest.raises(ValueError):
            TimecodeGenerator(fps=0)

    @pytest.mark.asyncio
    async def test_start_and_stop(self):
        generator = TimecodeGenerator(tick_ms=5)

        await generator.start()
        assert generator.running
        await generator.start()  # second start is a no-op
        assert generator.running

        await generator.stop()
        assert not generator.running
        await generator.stop()

    @pytest.mark.asyncio
    async def test_subscribers_receive_ticks(self, clock):
        generator = TimecodeGenerator(tick_ms=5, clock=clock)
        stream = generator.subscribe()

        first = await stream.__anext__()
        assert first == "10:00:00:00"
        assert generator.get_subscriber_count() == 1

        await generator.start()
        clock.moment = datetime(2024, 5, 1, 10, 0, 2, 0)
        value = await asyncio.wait_for(stream.__anext__(), timeout=1)
        while value != "10:00:02:00":
            value = await asyncio.wait_for(stream.__anext__(), timeout=1)

        await stream.aclose()
        await generator.stop()
        assert generator.get_subscriber_count() == 0

    @pytest.mark.asyncio
    async def test_manual_edit_is_pushed_to_subscribers(self, clock):
        generator = TimecodeGenerator(clock=clock)
        stream = generator.subscribe()
        await stream.__anext__()

        generator.set_manual("05:06:07:08")

        assert await asyncio.wait_for(stream.__anext__(), timeout=1) == "05:06:07:08"
        await stream.aclose()
