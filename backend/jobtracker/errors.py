class TrackerError(Exception):
    """Base class for errors raised by the record store and lifecycle service."""


class NotFoundError(TrackerError):
    def __init__(self, application_id: str):
        super().__init__(f"Application with id {application_id} not found")
        self.application_id = application_id


class DuplicateUrlError(TrackerError):
    def __init__(self, url: str):
        super().__init__(f"Another application already tracks {url}")
        self.url = url


class InvalidInputError(TrackerError):
    pass


class InvalidRestoreDataError(InvalidInputError):
    pass


class CorruptTableError(TrackerError):
    pass


class PersistenceError(TrackerError):
    pass


class BackendWriteError(PersistenceError):
    pass
