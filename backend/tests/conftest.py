import io
import zipfile
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from jobtracker.dependencies import get_record_store
from jobtracker.errors import BackendWriteError
from jobtracker.main import app
from jobtracker.models.application import ApplicationRecord
from jobtracker.services.application_service import ApplicationService
from jobtracker.services.blob_backend import BlobBackend, LocalFileBackend
from jobtracker.services.record_store import RecordStore
from jobtracker.services.table_codec import TableCodec


class MemoryBackend(BlobBackend):
    """Keeps the blob in memory and counts calls."""

    name = "memory"

    def __init__(self, data: bytes | None = None):
        self.data = data
        self.reads = 0
        self.writes = 0
        self.fail_writes = False

    def read(self) -> bytes | None:
        self.reads += 1
        return self.data

    def write(self, data: bytes) -> None:
        if self.fail_writes:
            raise BackendWriteError("disk full")
        self.writes += 1
        self.data = data

    def describe(self) -> str:
        return "memory"


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def make_record(**fields) -> ApplicationRecord:
    now = fields.pop("now", datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc))
    fields.setdefault("id", f"app-{fields.get('url', 'none')}")
    fields.setdefault("created_at", now)
    fields.setdefault("updated_at", now)
    return ApplicationRecord(**fields)


@pytest.fixture
def codec():
    return TableCodec()


@pytest.fixture
def backend():
    return MemoryBackend()


@pytest.fixture
def store(backend, codec):
    return RecordStore(backend, codec)


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 10, 9, 30, tzinfo=timezone.utc))


@pytest.fixture
def service(store, clock):
    return ApplicationService(store, recent_window_days=7, clock=clock)


@pytest.fixture
def file_store(tmp_path, codec):
    return RecordStore(LocalFileBackend(tmp_path / "data" / "applications.xlsx"), codec)


@pytest.fixture
def client(file_store):
    app.dependency_overrides[get_record_store] = lambda: file_store
    c = TestClient(app)
    yield c
    app.dependency_overrides.clear()


def replace_zip_member(data: bytes, name: str, content: bytes) -> bytes:
    """Return a copy of an xlsx blob with one archive member overwritten."""
    out = io.BytesIO()
    with zipfile.ZipFile(io.BytesIO(data)) as src, zipfile.ZipFile(out, "w") as dst:
        for item in src.infolist():
            dst.writestr(item, content if item.filename == name else src.read(item.filename))
    return out.getvalue()
