"""
Domain errors raised by the services layer.
Each maps to one HTTP status in main.py; routes never catch them.
"""


class FieldOpsError(Exception):
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFound(FieldOpsError):
    status_code = 404


class PreconditionFailed(FieldOpsError):
    """A workflow guard rejected the operation; the caller may correct and retry."""
    status_code = 409


class VersionConflict(PreconditionFailed):
    """The document changed since the caller read it."""
    status_code = 412


class StoreUnavailable(FieldOpsError):
    """The document store failed; propagated without retry."""
    status_code = 503
