from datetime import datetime

from fastapi import APIRouter

from realitylog.api.deps import CurrentIdentity, Entries, References
from realitylog.schemas.analytics import DashboardStatsResponse
from realitylog.services.analytics import dashboard_stats
from realitylog.services.entry_store import EntryQuery

router = APIRouter()


@router.get("/dashboard", response_model=DashboardStatsResponse)
async def get_dashboard_stats(
    identity: CurrentIdentity,
    store: Entries,
    references: References,
    start: datetime | None = None,
    end: datetime | None = None,
) -> DashboardStatsResponse:
    """Totals and rankings over entries in the optional date range."""
    entries = await store.list_entries(EntryQuery(start=start, end=end))
    stats = dashboard_stats(entries, await references.name_lookup())
    return DashboardStatsResponse.model_validate(stats)
