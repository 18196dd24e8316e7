"""
Job storage for one owner.

Two backends share the ``JobStore`` interface:

* ``DurableJobStore`` keeps an authenticated user's jobs in the SQLite
  database and refuses a second job with the same title and company.
* ``VolatileJobStore`` keeps a guest's jobs in process memory for the
  lifetime of the guest session. It performs no duplicate check.
"""
import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone

from sqlalchemy import literal_column
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from jobtracker.models.job import Job
from jobtracker.schemas.job import JobCreate, JobRecord, JobUpdate, merge_milestones

logger = logging.getLogger("jobtracker.store")


class JobStoreError(Exception):
    pass


class StorageError(JobStoreError):
    pass


class DuplicateJobError(JobStoreError):
    pass


class JobNotFoundError(JobStoreError):
    pass


def _utcnow() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def new_record(req: JobCreate) -> JobRecord:
    had_interview, had_offer = merge_milestones(req.status)
    return JobRecord(
        id=str(uuid.uuid4()),
        title=req.title,
        company=req.company,
        status=req.status,
        portal=req.portal,
        status_link=req.status_link,
        applied_on=req.applied_on,
        deadline=req.deadline,
        notes=req.notes,
        had_interview=had_interview,
        had_offer=had_offer,
        created_at=_utcnow(),
    )


def apply_update(current: JobRecord, req: JobUpdate) -> dict:
    """Resolve a partial update into the full set of changed column values."""
    changes = req.model_dump(exclude_unset=True, exclude={"had_interview", "had_offer"})
    status = changes.get("status", current.status)
    had_interview, had_offer = merge_milestones(
        status,
        current.had_interview or bool(req.had_interview),
        current.had_offer or bool(req.had_offer),
    )
    changes["had_interview"] = had_interview
    changes["had_offer"] = had_offer
    return changes


class JobStore(ABC):
    @abstractmethod
    def list(self) -> list[JobRecord]: ...

    @abstractmethod
    def get(self, job_id: str) -> JobRecord: ...

    @abstractmethod
    def create(self, req: JobCreate) -> JobRecord: ...

    @abstractmethod
    def update(self, job_id: str, req: JobUpdate) -> JobRecord: ...

    @abstractmethod
    def delete(self, job_id: str) -> None: ...


def _row_to_record(job: Job) -> JobRecord:
    return JobRecord(
        id=job.id,
        title=job.title,
        company=job.company,
        status=job.status,
        portal=job.portal,
        status_link=job.status_link,
        applied_on=job.applied_on,
        deadline=job.deadline,
        notes=job.notes,
        had_interview=bool(job.had_interview),
        had_offer=bool(job.had_offer),
        created_at=job.created_at,
    )


class DurableJobStore(JobStore):
    def __init__(self, db: Session, user_id: str):
        self.db = db
        self.user_id = user_id

    def _query(self):
        return self.db.query(Job).filter(Job.user_id == self.user_id)

    def _row(self, job_id: str) -> Job:
        try:
            job = self._query().filter(Job.id == job_id).first()
        except SQLAlchemyError as exc:
            logger.error("Error fetching job %s: %s", job_id, exc)
            raise StorageError(str(exc)) from exc
        if not job:
            raise JobNotFoundError(job_id)
        return job

    def _commit(self, action: str):
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            logger.warning("Duplicate job on %s for user %s: %s", action, self.user_id, exc.orig)
            raise DuplicateJobError("You have already applied for the same role at this company.") from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Error on %s for user %s: %s", action, self.user_id, exc)
            raise StorageError(str(exc)) from exc

    def list(self) -> list[JobRecord]:
        try:
            jobs = (
                self._query()
                .order_by(Job.created_at.desc(), literal_column("jobs.rowid").desc())
                .all()
            )
        except SQLAlchemyError as exc:
            logger.error("Error fetching jobs for user %s: %s", self.user_id, exc)
            raise StorageError(str(exc)) from exc
        return [_row_to_record(j) for j in jobs]

    def get(self, job_id: str) -> JobRecord:
        return _row_to_record(self._row(job_id))

    def create(self, req: JobCreate) -> JobRecord:
        try:
            existing = (
                self._query()
                .filter(Job.title == req.title, Job.company == req.company)
                .first()
            )
        except SQLAlchemyError as exc:
            logger.error("Error checking for duplicate job: %s", exc)
            raise StorageError(str(exc)) from exc
        if existing:
            logger.warning("Duplicate job entry for user %s: %s at %s", self.user_id, req.title, req.company)
            raise DuplicateJobError("You have already applied for the same role at this company.")

        record = new_record(req)
        self.db.add(Job(user_id=self.user_id, **record.model_dump()))
        self._commit("insert")
        return record

    def update(self, job_id: str, req: JobUpdate) -> JobRecord:
        job = self._row(job_id)
        for key, value in apply_update(_row_to_record(job), req).items():
            setattr(job, key, value)
        self._commit("update")
        self.db.refresh(job)
        return _row_to_record(job)

    def delete(self, job_id: str) -> None:
        job = self._row(job_id)
        self.db.delete(job)
        self._commit("delete")


class GuestStorage:
    """Per-guest-session job lists. Nothing here outlives the process."""

    def __init__(self):
        self._jobs: dict[str, list[JobRecord]] = {}  # guest_id -> jobs, newest first

    def open(self, guest_id: str):
        self._jobs.setdefault(guest_id, [])

    def jobs_for(self, guest_id: str) -> list[JobRecord]:
        return self._jobs.setdefault(guest_id, [])

    def discard(self, guest_id: str):
        self._jobs.pop(guest_id, None)

    def clear(self):
        self._jobs.clear()


guest_storage = GuestStorage()


class VolatileJobStore(JobStore):
    def __init__(self, guest_id: str, storage: GuestStorage | None = None):
        self.guest_id = guest_id
        self.storage = storage or guest_storage

    @property
    def _jobs(self) -> list[JobRecord]:
        return self.storage.jobs_for(self.guest_id)

    def _index(self, job_id: str) -> int:
        for i, job in enumerate(self._jobs):
            if job.id == job_id:
                return i
        raise JobNotFoundError(job_id)

    def list(self) -> list[JobRecord]:
        return list(self._jobs)

    def get(self, job_id: str) -> JobRecord:
        return self._jobs[self._index(job_id)]

    def create(self, req: JobCreate) -> JobRecord:
        record = new_record(req)
        self._jobs.insert(0, record)
        return record

    def update(self, job_id: str, req: JobUpdate) -> JobRecord:
        i = self._index(job_id)
        updated = self._jobs[i].model_copy(update=apply_update(self._jobs[i], req))
        self._jobs[i] = updated
        return updated

    def delete(self, job_id: str) -> None:
        del self._jobs[self._index(job_id)]
