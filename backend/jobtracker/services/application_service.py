import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable

from jobtracker.errors import DuplicateUrlError, InvalidInputError, NotFoundError
from jobtracker.models.application import (
    ApplicationRecord,
    ApplicationStatus,
    STATUS_DATE_FIELDS,
)
from jobtracker.schemas.application import (
    ApplicationFilter,
    ApplicationPatch,
    StatsResponse,
    StorageInfo,
)
from jobtracker.services.record_store import RecordStore
from jobtracker.utils.urls import ensure_scheme, parse_link_entry, url_key

logger = logging.getLogger(__name__)

# Patch fields copied onto the record as given (None clears them).
_TEXT_FIELDS = ("link_title", "company", "role_title", "location", "notes")
_SEARCH_FIELDS = ("company", "role_title", "notes", "url", "link_title")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def dedupe_records(records: list[ApplicationRecord]) -> tuple[list[ApplicationRecord], int]:
    """Keep the first record for each URL; records without a URL are all kept.

    Returns the surviving records in their original order and how many
    were dropped.
    """
    seen: set[str] = set()
    kept = []
    for record in records:
        if record.url:
            key = url_key(record.url)
            if key in seen:
                continue
            seen.add(key)
        kept.append(record)
    return kept, len(records) - len(kept)


def _matches(record: ApplicationRecord, filters: ApplicationFilter) -> bool:
    if filters.status is not None and record.status != filters.status:
        return False
    if filters.priority is not None and record.priority != filters.priority:
        return False
    if filters.search:
        needle = filters.search.lower()
        haystack = (getattr(record, name) or "" for name in _SEARCH_FIELDS)
        if not any(needle in value.lower() for value in haystack):
            return False
    created_on = record.created_at.astimezone(timezone.utc).date()
    if filters.start_date is not None and created_on < filters.start_date:
        return False
    if filters.end_date is not None and created_on > filters.end_date:
        return False
    return True


class ApplicationService:
    def __init__(
        self,
        store: RecordStore,
        recent_window_days: int = 7,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.recent_window_days = recent_window_days
        self._clock = clock

    def _load(self, persist_heal: bool) -> tuple[list[ApplicationRecord], bool]:
        records, removed = dedupe_records(self.store.load_all())
        if removed:
            logger.info("Removed %d duplicate applications", removed)
            if persist_heal:
                self.store.save_all(records)
        return records, bool(removed)

    def _seed_record(self) -> ApplicationRecord:
        now = self._clock()
        return ApplicationRecord(
            id=str(uuid.uuid4()),
            url="https://example.com/job-posting",
            link_title="Example Job Posting",
            company="Example Company",
            role_title="Software Engineer",
            location="Remote",
            notes="This is a sample application. You can edit or delete it. "
                  "Start by adding your own job links!",
            created_at=now,
            updated_at=now,
        )

    def _find(self, records: list[ApplicationRecord], application_id: str) -> int:
        for idx, record in enumerate(records):
            if record.id == application_id:
                return idx
        raise NotFoundError(application_id)

    def list_applications(self, filters: ApplicationFilter | None = None) -> list[ApplicationRecord]:
        records, _ = self._load(persist_heal=True)
        if not records:
            seed = self._seed_record()
            self.store.save_all([seed])
            logger.info("Store was empty; created example application %s", seed.id)
            records = [seed]
        if filters is None:
            return records
        return [r for r in records if _matches(r, filters)]

    def get_application(self, application_id: str) -> ApplicationRecord:
        records, _ = self._load(persist_heal=False)
        return records[self._find(records, application_id)]

    def ingest_links(self, raw_entries: list[str] | None) -> list[ApplicationRecord]:
        if not raw_entries:
            raise InvalidInputError("No links provided")
        if not all(isinstance(entry, str) for entry in raw_entries):
            raise InvalidInputError("Links must be strings")

        records, healed = self._load(persist_heal=False)
        seen = {url_key(r.url) for r in records if r.url}
        now = self._clock()
        created = []
        for entry in raw_entries:
            parsed = parse_link_entry(entry)
            if parsed is None:
                continue
            key = url_key(parsed.url)
            if key in seen:
                logger.debug("Skipping duplicate link %s", parsed.url)
                continue
            seen.add(key)
            created.append(ApplicationRecord(
                id=str(uuid.uuid4()),
                url=parsed.url,
                link_title=parsed.title,
                created_at=now,
                updated_at=now,
            ))

        if created or healed:
            self.store.save_all(records + created)
        logger.info("Ingested %d of %d links", len(created), len(raw_entries))
        return created

    def update_application(self, application_id: str, patch: ApplicationPatch | dict) -> ApplicationRecord:
        if isinstance(patch, dict):
            patch = ApplicationPatch.model_validate(patch)
        given = patch.model_fields_set

        records, _ = self._load(persist_heal=False)
        idx = self._find(records, application_id)
        current = records[idx]
        now = self._clock()
        changes: dict = {}

        if "url" in given:
            url = ensure_scheme(patch.url or "")
            if url:
                key = url_key(url)
                for other in records:
                    if other.id != current.id and other.url and url_key(other.url) == key:
                        raise DuplicateUrlError(url)
            changes["url"] = url

        for name in _TEXT_FIELDS:
            if name in given:
                changes[name] = getattr(patch, name)

        if "priority" in given and patch.priority is not None:
            changes["priority"] = patch.priority

        if "status" in given and patch.status is not None:
            changes["status"] = patch.status
            date_field = STATUS_DATE_FIELDS.get(patch.status)
            if (
                patch.status != current.status
                and date_field is not None
                and getattr(current, date_field) is None
            ):
                changes[date_field] = now

        changes["updated_at"] = max(now, current.created_at)
        updated = ApplicationRecord.model_validate({**current.model_dump(), **changes})
        records[idx] = updated
        self.store.save_all(records)
        return updated

    def archive_application(self, application_id: str) -> ApplicationRecord:
        return self.update_application(application_id, ApplicationPatch(status=ApplicationStatus.ARCHIVED))

    def clear_link(self, application_id: str) -> ApplicationRecord:
        return self.update_application(application_id, ApplicationPatch(url="", link_title=None))

    def delete_application(self, application_id: str) -> None:
        records, _ = self._load(persist_heal=False)
        idx = self._find(records, application_id)
        removed = records.pop(idx)
        self.store.save_all(records)
        logger.info("Deleted application %s", removed.id)

    def get_stats(self) -> StatsResponse:
        try:
            records, _ = dedupe_records(self.store.load_all())
            cutoff = self._clock() - timedelta(days=self.recent_window_days)
            stats = StatsResponse.empty()
            stats.total = len(records)
            for record in records:
                stats.count_by_status[record.status] += 1
                stats.count_by_priority[record.priority] += 1
                if record.created_at >= cutoff:
                    stats.recent_count += 1
            return stats
        except Exception:
            logger.exception("Could not compute application stats")
            return StatsResponse.empty()

    def export_table(self) -> bytes:
        return self.store.export_blob()

    def restore_table(self, data: bytes) -> list[ApplicationRecord]:
        return self.store.restore_from(data)

    def storage_info(self) -> StorageInfo:
        return StorageInfo(storage=self.store.storage_name, location=self.store.location)
