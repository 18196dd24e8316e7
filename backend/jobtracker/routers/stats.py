from fastapi import APIRouter, Depends

from jobtracker.config import settings
from jobtracker.dependencies import get_job_store, store_errors
from jobtracker.schemas.stats import StatsResponse, TimeView
from jobtracker.services.job_store import JobStore
from jobtracker.services.stats_service import compute_stats

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("", response_model=StatsResponse)
async def get_stats(view: TimeView = "month", store: JobStore = Depends(get_job_store)):
    with store_errors():
        jobs = store.list()
    return compute_stats(jobs, view, day_limit=settings.day_bucket_limit)
