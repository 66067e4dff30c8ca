from datetime import date

from pydantic import BaseModel

from jobtracker.models.application import (
    ApplicationPriority,
    ApplicationRecord,
    ApplicationStatus,
)


class ApplicationPatch(BaseModel):
    """Partial update. Only fields the caller actually set are applied."""

    url: str | None = None
    link_title: str | None = None
    company: str | None = None
    role_title: str | None = None
    location: str | None = None
    status: ApplicationStatus | None = None
    priority: ApplicationPriority | None = None
    notes: str | None = None


class ApplicationFilter(BaseModel):
    status: ApplicationStatus | None = None
    priority: ApplicationPriority | None = None
    search: str | None = None
    start_date: date | None = None
    end_date: date | None = None


class LinkWithTitle(BaseModel):
    url: str
    link_title: str | None = None


class LinksRequest(BaseModel):
    links: list[str] | None = None
    links_with_titles: list[LinkWithTitle] | None = None
    text: str | None = None

    def raw_entries(self) -> list[str] | None:
        if self.links_with_titles is not None:
            return [
                f"{item.link_title}|{item.url}" if item.link_title else item.url
                for item in self.links_with_titles
            ]
        if self.links is not None:
            return self.links
        if self.text is not None:
            return self.text.splitlines()
        return None


class StatsResponse(BaseModel):
    total: int
    count_by_status: dict[ApplicationStatus, int]
    count_by_priority: dict[ApplicationPriority, int]
    recent_count: int

    @classmethod
    def empty(cls) -> "StatsResponse":
        return cls(
            total=0,
            count_by_status={s: 0 for s in ApplicationStatus},
            count_by_priority={p: 0 for p in ApplicationPriority},
            recent_count=0,
        )


class RestoreResponse(BaseModel):
    message: str
    count: int
    applications: list[ApplicationRecord]


class StorageInfo(BaseModel):
    storage: str
    location: str
