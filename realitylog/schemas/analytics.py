from pydantic import BaseModel


class RankedLocation(BaseModel):
    id: str
    location: str
    count: int


class RankedAction(BaseModel):
    id: str
    action: str
    count: int


class RankedParticipant(BaseModel):
    id: str
    participant: str
    count: int


class DailyCount(BaseModel):
    date: str
    count: int


class DashboardStatsResponse(BaseModel):
    total_entries: int
    active_participants: int
    top_locations: list[RankedLocation]
    top_actions: list[RankedAction]
    entries_per_day: list[DailyCount]
    participant_activity: list[RankedParticipant]

    class Config:
        from_attributes = True
