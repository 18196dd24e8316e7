from typing import Literal

from pydantic import BaseModel

from jobtracker.schemas.job import JobRecord

TimeView = Literal["month", "week", "day"]


class FunnelMetrics(BaseModel):
    total_jobs: int = 0
    applied: int = 0
    offers: int = 0
    rejected: int = 0
    had_interview: int = 0
    had_offer: int = 0
    got_response: int = 0
    # Percentages pre-formatted to one decimal place, "0" when nothing was applied to.
    response_rate: str = "0"
    conversion_rate: str = "0"
    rejection_rate: str = "0"


class TimeBucket(BaseModel):
    key: str
    label: str
    applications: int


class StatsResponse(BaseModel):
    time_view: TimeView
    status_counts: dict[str, int]
    metrics: FunnelMetrics
    upcoming_interview: JobRecord | None
    timeline: list[TimeBucket]
    summary: str
