from jobtracker.models.application import (
    ApplicationPriority,
    ApplicationRecord,
    ApplicationStatus,
    DEFAULT_PRIORITY,
    DEFAULT_STATUS,
    STATUS_DATE_FIELDS,
)

__all__ = [
    "ApplicationPriority",
    "ApplicationRecord",
    "ApplicationStatus",
    "DEFAULT_PRIORITY",
    "DEFAULT_STATUS",
    "STATUS_DATE_FIELDS",
]
