"""Tests for log export rendering and dashboard statistics."""

import csv
import io
import json
import uuid
from datetime import datetime, timezone

import pytest

from realitylog.models.log_entry import LogEntry
from realitylog.services.analytics import dashboard_stats
from realitylog.services.export_service import (
    COLUMNS,
    NameLookup,
    build_csv,
    build_json,
    build_pdf,
    export_entries,
    truncate_notes,
)

KITCHEN = str(uuid.uuid4())
POOL = str(uuid.uuid4())
ARGUMENT = str(uuid.uuid4())
ALEX = str(uuid.uuid4())
SAM = str(uuid.uuid4())
DRAMA = str(uuid.uuid4())


@pytest.fixture
def lookup():
    return NameLookup(
        participants={ALEX: "Alex", SAM: "Sam"},
        locations={KITCHEN: "Kitchen", POOL: "Pool"},
        action_categories={ARGUMENT: "Argument"},
        tags={DRAMA: "Drama"},
    )


def make_entry(notes, location=KITCHEN, participants=(), tags=(), day=1):
    moment = datetime(2024, 5, day, 20, 0, tzinfo=timezone.utc)
    return LogEntry(
        id=uuid.uuid4(),
        timestamp=moment,
        timecode="20:00:00:00",
        participants=list(participants),
        location_id=uuid.UUID(location),
        action_category_id=uuid.UUID(ARGUMENT),
        tags=list(tags),
        notes=notes,
        created_by=uuid.uuid4(),
        created_at=moment,
    )


class TestTruncateNotes:
    def test_short_notes_unchanged(self):
        assert truncate_notes("a" * 50) == "a" * 50

    def test_long_notes_truncated_with_ellipsis(self):
        assert truncate_notes("a" * 51) == "a" * 50 + "..."


class TestCsv:
    def test_rows_resolve_names(self, lookup):
        entries = [make_entry("Alex and Sam argue", participants=[ALEX, SAM], tags=[DRAMA])]

        rows = list(csv.reader(io.StringIO(build_csv(entries, lookup).decode("utf-8"))))

        assert rows[0] == list(COLUMNS)
        assert rows[1][1:] == ["20:00:00:00", "Alex, Sam", "Kitchen", "Argument", "Drama", "Alex and Sam argue"]

    def test_dangling_and_empty_references(self, lookup):
        entries = [make_entry("x" * 80, location=str(uuid.uuid4()), participants=[str(uuid.uuid4())])]

        row = list(csv.reader(io.StringIO(build_csv(entries, lookup).decode("utf-8"))))[1]

        assert row[2] == "Unknown"  # deleted participant
        assert row[3] == "Unknown"  # deleted location
        assert row[5] == "None"  # no tags
        assert row[6] == "x" * 80  # csv keeps full notes


class TestPdfAndJson:
    def test_pdf_is_rendered(self, lookup):
        entries = [make_entry("Pool party <3 & more", location=POOL), make_entry("quiet night")]

        content = build_pdf(entries, lookup)

        assert content.startswith(b"%PDF")

    def test_json_export(self, lookup):
        entry = make_entry("Sam leaves", participants=[SAM])

        payload = json.loads(build_json([entry], lookup))

        assert payload["total"] == 1
        exported = payload["entries"][0]
        assert exported["id"] == str(entry.id)
        assert exported["participants"] == [{"id": SAM, "name": "Sam"}]
        assert exported["location"]["name"] == "Kitchen"

    def test_export_entries_dispatch(self, lookup):
        content, media_type, filename = export_entries("csv", [], lookup)

        assert media_type == "text/csv"
        assert filename == "reality-show-log.csv"
        assert content.decode("utf-8").startswith("Timestamp,")

    def test_unknown_format(self, lookup):
        with pytest.raises(ValueError):
            export_entries("xml", [], lookup)


class TestDashboardStats:
    def test_aggregates(self, lookup):
        entries = [
            make_entry("one", participants=[ALEX, SAM], day=1),
            make_entry("two", participants=[ALEX], day=1),
            make_entry("three", location=POOL, day=2),
        ]

        stats = dashboard_stats(entries, lookup)

        assert stats.total_entries == 3
        assert stats.active_participants == 2
        assert stats.top_locations[0] == {"location": "Kitchen", "id": KITCHEN, "count": 2}
        assert stats.top_actions == [{"action": "Argument", "id": ARGUMENT, "count": 3}]
        assert stats.entries_per_day == [
            {"date": "2024-05-01", "count": 2},
            {"date": "2024-05-02", "count": 1},
        ]
        assert stats.participant_activity[0] == {"participant": "Alex", "id": ALEX, "count": 2}

    def test_empty(self, lookup):
        stats = dashboard_stats([], lookup)

        assert stats.total_entries == 0
        assert stats.top_locations == []
