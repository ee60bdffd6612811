"""Log entry export to PDF, CSV and JSON.

References are resolved to display names at export time. A reference that
no longer exists renders as ``Unknown``; an empty participant or tag list
renders as ``None``.
"""

import csv
import io
import json
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime

from reportlab.lib import colors
from reportlab.lib.pagesizes import landscape, letter
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from realitylog.models.log_entry import LogEntry

EXPORT_TITLE = "Reality Show Log Export"

COLUMNS: Sequence[str] = (
    "Timestamp",
    "Timecode",
    "Participants",
    "Location",
    "Action",
    "Tags",
    "Notes",
)

MEDIA_TYPES = {
    "pdf": "application/pdf",
    "csv": "text/csv",
    "json": "application/json",
}


@dataclass
class NameLookup:
    """id -> display name maps for each reference collection."""

    participants: dict[str, str] = field(default_factory=dict)
    locations: dict[str, str] = field(default_factory=dict)
    action_categories: dict[str, str] = field(default_factory=dict)
    tags: dict[str, str] = field(default_factory=dict)


def truncate_notes(notes: str, limit: int = 50) -> str:
    if len(notes) > limit:
        return notes[:limit] + "..."
    return notes


def _join_names(ids: Sequence[str], names: dict[str, str]) -> str:
    resolved = [names.get(str(i), "Unknown") for i in ids]
    return ", ".join(resolved) or "None"


def _entry_row(entry: LogEntry, lookup: NameLookup, notes_limit: int | None) -> list[str]:
    notes = entry.notes if notes_limit is None else truncate_notes(entry.notes, notes_limit)
    return [
        entry.timestamp.isoformat(),
        entry.timecode or "N/A",
        _join_names(entry.participants, lookup.participants),
        lookup.locations.get(str(entry.location_id), "Unknown"),
        lookup.action_categories.get(str(entry.action_category_id), "Unknown"),
        _join_names(entry.tags, lookup.tags),
        notes,
    ]


def build_pdf(
    entries: Sequence[LogEntry],
    lookup: NameLookup,
    *,
    notes_limit: int = 50,
    generated_at: datetime | None = None,
) -> bytes:
    generated_at = generated_at or datetime.now(UTC)
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=landscape(letter),
        title=EXPORT_TITLE,
        leftMargin=36,
        rightMargin=36,
        topMargin=36,
        bottomMargin=36,
    )
    styles = getSampleStyleSheet()
    cell_style = styles["BodyText"].clone("cell", fontSize=8, leading=10)

    elements = [
        Paragraph(EXPORT_TITLE, styles["Heading1"]),
        Paragraph(f"Generated: {generated_at.date().isoformat()}", styles["BodyText"]),
        Paragraph(f"Total Entries: {len(entries)}", styles["BodyText"]),
        Spacer(1, 12),
    ]

    table_data = [list(COLUMNS)]
    for entry in entries:
        # Paragraph cells wrap instead of overflowing the column
        row = _entry_row(entry, lookup, notes_limit)
        table_data.append([Paragraph(_escape(value), cell_style) for value in row])

    table = Table(
        table_data,
        repeatRows=1,
        colWidths=[110, 70, 110, 90, 90, 90, 160],
    )
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, 0), 8),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ]
        )
    )
    elements.append(table)

    doc.build(elements)
    return buffer.getvalue()


def build_csv(entries: Sequence[LogEntry], lookup: NameLookup) -> bytes:
    """Full (untruncated) notes, one row per entry under a header row."""
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(list(COLUMNS))
    for entry in entries:
        writer.writerow(_entry_row(entry, lookup, None))
    return buffer.getvalue().encode("utf-8")


def build_json(entries: Sequence[LogEntry], lookup: NameLookup) -> bytes:
    items = []
    for entry in entries:
        items.append(
            {
                "id": str(entry.id),
                "timestamp": entry.timestamp.isoformat(),
                "timecode": entry.timecode,
                "participants": [
                    {"id": pid, "name": lookup.participants.get(pid, "Unknown")}
                    for pid in entry.participants
                ],
                "location": {
                    "id": str(entry.location_id),
                    "name": lookup.locations.get(str(entry.location_id), "Unknown"),
                },
                "action_category": {
                    "id": str(entry.action_category_id),
                    "name": lookup.action_categories.get(str(entry.action_category_id), "Unknown"),
                },
                "tags": [
                    {"id": tid, "name": lookup.tags.get(tid, "Unknown")} for tid in entry.tags
                ],
                "notes": entry.notes,
                "created_by": str(entry.created_by),
                "created_at": entry.created_at.isoformat(),
            }
        )
    return json.dumps({"total": len(items), "entries": items}, ensure_ascii=False).encode("utf-8")


def export_entries(
    fmt: str,
    entries: Sequence[LogEntry],
    lookup: NameLookup,
    *,
    notes_limit: int = 50,
) -> tuple[bytes, str, str]:
    """Render entries in ``fmt``. Returns (content, media type, filename)."""
    if fmt == "pdf":
        content = build_pdf(entries, lookup, notes_limit=notes_limit)
    elif fmt == "csv":
        content = build_csv(entries, lookup)
    elif fmt == "json":
        content = build_json(entries, lookup)
    else:
        raise ValueError(f"Unsupported export format: {fmt}")
    return content, MEDIA_TYPES[fmt], f"reality-show-log.{fmt}"


def _escape(value: str) -> str:
    # Paragraph parses a mini markup language
    return value.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
