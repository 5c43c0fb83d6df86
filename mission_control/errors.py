"""
Error taxonomy surfaced by the services and mapped to HTTP responses.
"""


class MissionControlError(Exception):
    """Base class for every error the dashboard reports to a caller."""
    status_code = 500


class MalformedSnapshot(MissionControlError):
    """Raised when an uploaded file is not parseable JSON."""
    status_code = 400

    def __init__(self, filename, reason=None):
        self.filename = filename
        self.reason = reason
        message = f"Could not read '{filename}': not a valid JSON export"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class NotFound(MissionControlError):
    """Raised when an operation references a missing record."""
    status_code = 404

    def __init__(self, kind, record_id):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} {record_id} not found")


class StoreFailure(MissionControlError):
    """Any read/write failure in the store. Message is the underlying cause."""
    status_code = 503
