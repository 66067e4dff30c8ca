from functools import lru_cache

from fastapi import Depends

from jobtracker.config import settings
from jobtracker.services.application_service import ApplicationService
from jobtracker.services.blob_backend import build_backend
from jobtracker.services.record_store import RecordStore
from jobtracker.services.table_codec import TableCodec


@lru_cache(maxsize=1)
def get_record_store() -> RecordStore:
    # Backend choice is fixed for the life of the process.
    return RecordStore(build_backend(settings), TableCodec(settings.sheet_name))


def get_application_service(store: RecordStore = Depends(get_record_store)) -> ApplicationService:
    return ApplicationService(store, recent_window_days=settings.recent_window_days)
