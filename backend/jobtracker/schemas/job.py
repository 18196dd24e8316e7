from datetime import datetime
from typing import Literal

from pydantic import BaseModel, field_validator

JobStatus = Literal["Wishlist", "Applied", "Interview", "Offer", "Rejected"]
Portal = Literal["Internshala", "Naukri", "LinkedIn", "Glassdoor", "Instahyre", "Indeed"]

_OPTIONAL_TEXT = ("portal", "status_link", "applied_on", "deadline", "notes")


def _blank_to_none(value):
    # Forms submit "" for untouched optional inputs.
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _check_iso_date(value: str | None) -> str | None:
    if value is None:
        return None
    # Same parser the statistics use, so anything stored is countable.
    if len(value) != 10:
        raise ValueError("Dates must be YYYY-MM-DD")
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError as exc:
        raise ValueError("Dates must be YYYY-MM-DD") from exc
    return value


def _check_required_text(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Field is required")
    return value


class JobCreate(BaseModel):
    title: str
    company: str
    status: JobStatus = "Wishlist"
    portal: Portal | None = None
    status_link: str | None = None
    applied_on: str | None = None
    deadline: str | None = None
    notes: str | None = None

    @field_validator(*_OPTIONAL_TEXT, mode="before")
    @classmethod
    def _optional_blank(cls, v):
        return _blank_to_none(v)

    @field_validator("title", "company")
    @classmethod
    def _required(cls, v: str) -> str:
        return _check_required_text(v)

    @field_validator("applied_on", "deadline")
    @classmethod
    def _iso_date(cls, v: str | None) -> str | None:
        return _check_iso_date(v)


class JobUpdate(BaseModel):
    """Fields an owner may change on an existing job.

    Anything left unset keeps its stored value. The milestone flags can be
    raised explicitly but never lowered; see ``merge_milestones``.
    """

    title: str | None = None
    company: str | None = None
    status: JobStatus | None = None
    portal: Portal | None = None
    status_link: str | None = None
    applied_on: str | None = None
    deadline: str | None = None
    notes: str | None = None
    had_interview: bool | None = None
    had_offer: bool | None = None

    @field_validator(*_OPTIONAL_TEXT, mode="before")
    @classmethod
    def _optional_blank(cls, v):
        return _blank_to_none(v)

    @field_validator("title", "company")
    @classmethod
    def _required(cls, v: str | None) -> str | None:
        if v is None:
            raise ValueError("Field cannot be cleared")
        return _check_required_text(v)

    @field_validator("status")
    @classmethod
    def _status_set(cls, v: str | None) -> str | None:
        if v is None:
            raise ValueError("Status cannot be cleared")
        return v

    @field_validator("applied_on", "deadline")
    @classmethod
    def _iso_date(cls, v: str | None) -> str | None:
        return _check_iso_date(v)


class JobRecord(BaseModel):
    id: str
    title: str
    company: str
    # Plain str so stored rows with unexpected values still load.
    status: str | None = "Wishlist"
    portal: str | None = None
    status_link: str | None = None
    applied_on: str | None = None
    deadline: str | None = None
    notes: str | None = None
    had_interview: bool = False
    had_offer: bool = False
    created_at: str | None = None


class JobListResponse(BaseModel):
    jobs: list[JobRecord]
    total: int


def merge_milestones(
    status: str | None,
    had_interview: bool = False,
    had_offer: bool = False,
) -> tuple[bool, bool]:
    """Return the (had_interview, had_offer) flags for a job now at ``status``.

    Flags only ever turn on: a job that reached Interview or Offer keeps that
    history even if its status is later moved back.
    """
    interview = bool(had_interview) or status in ("Interview", "Offer", "Rejected")
    offer = bool(had_offer) or status == "Offer"
    return interview, offer
