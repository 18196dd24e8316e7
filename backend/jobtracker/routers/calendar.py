from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from jobtracker.dependencies import get_job_store, store_errors
from jobtracker.services.calendar_service import generate_deadline_ics
from jobtracker.services.job_store import JobStore
from jobtracker.services.stats_service import parse_date

router = APIRouter(tags=["calendar"])


@router.get("/jobs/{job_id}/calendar")
async def job_calendar(job_id: str, store: JobStore = Depends(get_job_store)):
    with store_errors():
        job = store.get(job_id)
    if parse_date(job.deadline) is None:
        raise HTTPException(status_code=400, detail="Job has no deadline set")

    ics_data = generate_deadline_ics(
        title=job.title,
        company=job.company,
        status_link=job.status_link,
        notes=job.notes,
        deadline=job.deadline,
    )
    return Response(
        content=ics_data,
        media_type="text/calendar",
        headers={"Content-Disposition": f'attachment; filename="deadline_{job_id[:8]}.ics"'},
    )
