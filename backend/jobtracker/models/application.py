from datetime import datetime
from enum import Enum

from pydantic import BaseModel, field_validator


class ApplicationStatus(str, Enum):
    TODO = "TODO"
    APPLIED = "APPLIED"
    INTERVIEW = "INTERVIEW"
    OFFER = "OFFER"
    REJECTED = "REJECTED"
    ARCHIVED = "ARCHIVED"


class ApplicationPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


DEFAULT_STATUS = ApplicationStatus.TODO
DEFAULT_PRIORITY = ApplicationPriority.MEDIUM

# Date field stamped the first time a record enters each status.
STATUS_DATE_FIELDS: dict[ApplicationStatus, str] = {
    ApplicationStatus.APPLIED: "applied_date",
    ApplicationStatus.INTERVIEW: "interview_date",
    ApplicationStatus.OFFER: "offer_date",
    ApplicationStatus.REJECTED: "rejected_date",
}


class ApplicationRecord(BaseModel):
    id: str
    url: str = ""
    link_title: str | None = None
    company: str | None = None
    role_title: str | None = None
    location: str | None = None
    status: ApplicationStatus = DEFAULT_STATUS
    priority: ApplicationPriority = DEFAULT_PRIORITY
    notes: str | None = None
    applied_date: datetime | None = None
    interview_date: datetime | None = None
    offer_date: datetime | None = None
    rejected_date: datetime | None = None
    created_at: datetime
    updated_at: datetime

    @field_validator("link_title", "company", "role_title", "location", "notes")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        # An empty cell and an absent value are the same thing in the table.
        return value or None

    @field_validator("url", mode="before")
    @classmethod
    def _url_never_none(cls, value):
        return value or ""
