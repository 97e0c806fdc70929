"""Error taxonomy shared by services and HTTP handlers.

Services raise these exceptions; `main` registers one exception handler
per class that renders the JSON body clients expect.
"""


class SchoolApiError(Exception):
    """Base class for errors surfaced to API clients."""
    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class NotFound(SchoolApiError):
    """The requested record does not exist."""
    status_code = 404

    def __init__(self, message: str = "Not found"):
        super().__init__(message)


class ValidationError(SchoolApiError):
    """A query argument cannot be applied to the entity (e.g. unknown sort field)."""
    status_code = 400


class PersistenceError(SchoolApiError):
    """Any other failure raised by the data layer, including constraint violations."""
    status_code = 500
