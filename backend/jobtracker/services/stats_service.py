"""
Statistics for a single owner's job collection.

Everything here is a pure function of (jobs, time view, now): no database,
no session lookups. Routers load the jobs and hand them over.
"""
from collections.abc import Sequence
from datetime import date, datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal

from jobtracker.schemas.job import JobRecord
from jobtracker.schemas.stats import FunnelMetrics, StatsResponse, TimeBucket

APPLIED_STATUSES = ("Applied", "Interview", "Offer", "Rejected")
TIME_VIEWS = ("month", "week", "day")
DAY_BUCKET_LIMIT = 30


def parse_date(value: str | None) -> date | None:
    """Parse a stored ``YYYY-MM-DD`` value, returning None for anything else."""
    if not value:
        return None
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except (ValueError, AttributeError):
        return None


def _rate(num: int, denom: int) -> str:
    if denom <= 0:
        return "0"
    # Exact ties round up (6.25 -> "6.3"), matching JavaScript toFixed.
    pct = Decimal(num / denom * 100).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return str(pct)


def count_statuses(jobs: Sequence[JobRecord]) -> dict[str, int]:
    counts: dict[str, int] = {}
    for job in jobs:
        status = job.status or "Unknown"
        counts[status] = counts.get(status, 0) + 1
    return counts


def funnel_metrics(jobs: Sequence[JobRecord], status_counts: dict[str, int] | None = None) -> FunnelMetrics:
    if status_counts is None:
        status_counts = count_statuses(jobs)

    applied = sum(1 for j in jobs if j.status in APPLIED_STATUSES)
    offers = status_counts.get("Offer", 0)
    rejected = status_counts.get("Rejected", 0)
    had_interview = sum(1 for j in jobs if j.had_interview or j.status == "Interview")
    had_offer = sum(1 for j in jobs if j.had_offer or j.status == "Offer")
    # A job with both an interview and an offer counts twice here; rate displays rely on it.
    got_response = had_interview + had_offer

    return FunnelMetrics(
        total_jobs=len(jobs),
        applied=applied,
        offers=offers,
        rejected=rejected,
        had_interview=had_interview,
        had_offer=had_offer,
        got_response=got_response,
        response_rate=_rate(got_response, applied),
        conversion_rate=_rate(offers, applied),
        rejection_rate=_rate(rejected, applied),
    )


def next_interview(jobs: Sequence[JobRecord], now: datetime | None = None) -> JobRecord | None:
    """Earliest future deadline among jobs currently at Interview.

    A deadline counts from the start of its day, so a deadline of today is
    already past. Ties go to whichever job comes first in ``jobs``.
    """
    now = now or datetime.now(timezone.utc)
    best: JobRecord | None = None
    best_start: datetime | None = None
    for job in jobs:
        if job.status != "Interview":
            continue
        deadline = parse_date(job.deadline)
        if deadline is None:
            continue
        start = datetime(deadline.year, deadline.month, deadline.day, tzinfo=now.tzinfo)
        if start <= now:
            continue
        if best_start is None or start < best_start:
            best, best_start = job, start
    return best


def _week_start(d: date) -> date:
    # Weeks run Sunday to Saturday.
    return d - timedelta(days=(d.weekday() + 1) % 7)


def _bucket_key(d: date, time_view: str) -> date:
    if time_view == "month":
        return d.replace(day=1)
    if time_view == "week":
        return _week_start(d)
    return d


def _bucket_label(d: date, time_view: str) -> str:
    if time_view == "month":
        return f"{d:%b} {d.year}"
    return f"{d:%b} {d.day}"


def application_timeline(
    jobs: Sequence[JobRecord],
    time_view: str = "month",
    day_limit: int = DAY_BUCKET_LIMIT,
) -> list[TimeBucket]:
    """Count applications per month, Sunday-started week, or day.

    Wishlist jobs and jobs without a usable ``applied_on`` are left out.
    The day view keeps only the most recent ``day_limit`` buckets.
    """
    if time_view not in TIME_VIEWS:
        raise ValueError(f"Unknown time view {time_view!r}. Must be one of: {TIME_VIEWS}")

    counts: dict[date, int] = {}
    for job in jobs:
        if job.status == "Wishlist":
            continue
        applied_on = parse_date(job.applied_on)
        if applied_on is None:
            continue
        key = _bucket_key(applied_on, time_view)
        counts[key] = counts.get(key, 0) + 1

    ordered = sorted(counts.items())
    if time_view == "day":
        ordered = ordered[-day_limit:] if day_limit > 0 else []

    return [
        TimeBucket(
            key=key.strftime("%Y-%m") if time_view == "month" else key.isoformat(),
            label=_bucket_label(key, time_view),
            applications=n,
        )
        for key, n in ordered
    ]


def compute_stats(
    jobs: Sequence[JobRecord],
    time_view: str = "month",
    now: datetime | None = None,
    day_limit: int = DAY_BUCKET_LIMIT,
) -> StatsResponse:
    status_counts = count_statuses(jobs)
    metrics = funnel_metrics(jobs, status_counts)
    summary = (
        f"You've applied to {metrics.applied} job(s), scored {metrics.had_interview} "
        f"interview(s), and landed {metrics.offers} offer(s)."
    )
    return StatsResponse(
        time_view=time_view,
        status_counts=status_counts,
        metrics=metrics,
        upcoming_interview=next_interview(jobs, now),
        timeline=application_timeline(jobs, time_view, day_limit),
        summary=summary,
    )
