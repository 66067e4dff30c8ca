import logging

from jobtracker.errors import (
    BackendWriteError,
    CorruptTableError,
    InvalidRestoreDataError,
    PersistenceError,
)
from jobtracker.models.application import ApplicationRecord
from jobtracker.services.blob_backend import BlobBackend
from jobtracker.services.table_codec import TableCodec

logger = logging.getLogger(__name__)


class RecordStore:
    """Owns the table blob. Every write replaces the whole table.

    Reads never fail: a missing or unreadable blob loads as an empty store.
    Writes always report failure as ``PersistenceError``.
    """

    def __init__(self, backend: BlobBackend, codec: TableCodec | None = None):
        self.backend = backend
        self.codec = codec or TableCodec()

    @property
    def storage_name(self) -> str:
        return self.backend.name

    @property
    def location(self) -> str:
        return self.backend.describe()

    def load_all(self) -> list[ApplicationRecord]:
        data = self.backend.read()
        if data is None:
            logger.info("No table found at %s; starting empty", self.location)
            return []
        try:
            return self.codec.decode(data)
        except CorruptTableError as exc:
            logger.warning("Table at %s is unreadable, treating store as empty: %s", self.location, exc)
            return []

    def save_all(self, records: list[ApplicationRecord]) -> None:
        self._write(self.codec.encode(records))

    def restore_from(self, data: bytes) -> list[ApplicationRecord]:
        if not data:
            raise InvalidRestoreDataError("Uploaded file is empty")
        try:
            records = self.codec.decode(data)
        except CorruptTableError as exc:
            raise InvalidRestoreDataError(f"Uploaded file is not a valid applications table: {exc}") from exc

        # Stored as uploaded so the backup can be downloaded again byte for byte.
        self._write(data)
        logger.info("Restored %d applications to %s", len(records), self.location)
        return records

    def export_blob(self) -> bytes:
        data = self.backend.read()
        if data:
            try:
                self.codec.decode(data)
                return data
            except CorruptTableError as exc:
                logger.warning("Stored table is unreadable, exporting an empty one: %s", exc)
        return self.codec.encode([])

    def _write(self, data: bytes) -> None:
        try:
            self.backend.write(data)
        except BackendWriteError:
            raise
        except OSError as exc:
            logger.error("Write to %s failed: %s", self.location, exc)
            raise PersistenceError(f"Could not save applications: {exc}") from exc
