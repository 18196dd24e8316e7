from fastapi import APIRouter, Depends

from jobtracker.dependencies import get_job_store, store_errors
from jobtracker.schemas.job import JobCreate, JobListResponse, JobRecord, JobStatus, JobUpdate
from jobtracker.services.job_store import JobStore

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.post("", response_model=JobRecord, status_code=201)
async def create_job(req: JobCreate, store: JobStore = Depends(get_job_store)):
    with store_errors():
        return store.create(req)


@router.get("", response_model=JobListResponse)
async def list_jobs(status: JobStatus | None = None, store: JobStore = Depends(get_job_store)):
    with store_errors():
        jobs = store.list()
    if status:
        jobs = [j for j in jobs if j.status == status]
    return JobListResponse(jobs=jobs, total=len(jobs))


@router.get("/{job_id}", response_model=JobRecord)
async def get_job(job_id: str, store: JobStore = Depends(get_job_store)):
    with store_errors():
        return store.get(job_id)


@router.put("/{job_id}", response_model=JobRecord)
async def update_job(job_id: str, req: JobUpdate, store: JobStore = Depends(get_job_store)):
    with store_errors():
        return store.update(job_id, req)


@router.delete("/{job_id}")
async def delete_job(job_id: str, store: JobStore = Depends(get_job_store)):
    with store_errors():
        store.delete(job_id)
    return {"message": "Job deleted"}
