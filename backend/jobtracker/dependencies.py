from contextlib import contextmanager

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from jobtracker.database import get_db
from jobtracker.services.job_store import (
    DurableJobStore,
    DuplicateJobError,
    JobNotFoundError,
    JobStore,
    StorageError,
    VolatileJobStore,
)
from jobtracker.services.session_service import OwnerContext, session_service


async def require_token(authorization: str = Header(...)) -> str:
    if not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing bearer token")
    return authorization[7:]


async def require_owner(token: str = Depends(require_token)) -> OwnerContext:
    owner = session_service.resolve(token)
    if owner is None:
        raise HTTPException(status_code=401, detail="Session expired or invalid")
    return owner


def open_store(owner: OwnerContext, db: Session) -> JobStore:
    if owner.is_guest:
        return VolatileJobStore(owner.guest_id)
    return DurableJobStore(db, owner.user_id)


async def get_job_store(
    owner: OwnerContext = Depends(require_owner),
    db: Session = Depends(get_db),
) -> JobStore:
    return open_store(owner, db)


@contextmanager
def store_errors():
    """Translate store failures into HTTP errors the client can show as-is."""
    try:
        yield
    except JobNotFoundError:
        raise HTTPException(status_code=404, detail="Job not found")
    except DuplicateJobError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except StorageError as exc:
        raise HTTPException(status_code=503, detail=f"Failed to save job: {exc}")
