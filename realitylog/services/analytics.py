"""Dashboard statistics over stored log entries."""

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field

from realitylog.models.log_entry import LogEntry
from realitylog.services.export_service import NameLookup

TOP_N = 5


@dataclass
class DashboardStats:
    total_entries: int = 0
    active_participants: int = 0
    top_locations: list[dict] = field(default_factory=list)
    top_actions: list[dict] = field(default_factory=list)
    entries_per_day: list[dict] = field(default_factory=list)
    participant_activity: list[dict] = field(default_factory=list)


def _ranked(counter: Counter, names: dict[str, str], key: str, limit: int | None) -> list[dict]:
    return [
        {key: names.get(item_id, "Unknown"), "id": item_id, "count": count}
        for item_id, count in counter.most_common(limit)
    ]


def dashboard_stats(entries: Sequence[LogEntry], lookup: NameLookup) -> DashboardStats:
    """Aggregate entries already filtered to the requested date range."""
    locations: Counter = Counter()
    actions: Counter = Counter()
    participants: Counter = Counter()
    per_day: Counter = Counter()

    for entry in entries:
        locations[str(entry.location_id)] += 1
        actions[str(entry.action_category_id)] += 1
        participants.update(set(entry.participants))
        per_day[entry.timestamp.date().isoformat()] += 1

    return DashboardStats(
        total_entries=len(entries),
        active_participants=len(participants),
        top_locations=_ranked(locations, lookup.locations, "location", TOP_N),
        top_actions=_ranked(actions, lookup.action_categories, "action", TOP_N),
        entries_per_day=[{"date": day, "count": per_day[day]} for day in sorted(per_day)],
        participant_activity=_ranked(participants, lookup.participants, "participant", None),
    )
