"""
Domain errors for admin user operations.
Routers map `code` onto the JSON error envelope and an HTTP status.
"""


class LifecycleError(Exception):
    code = "lifecycle_error"
    status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LifecycleError):
    """Request rejected before any storage access."""
    code = "validation_error"
    status = 400


class NotFoundError(LifecycleError):
    code = "not_found"
    status = 404


class IneligibleUserError(LifecycleError):
    """User exists but the action does not apply to them (super user, non-trial plan)."""
    code = "not_eligible"
    status = 409


class ConflictError(LifecycleError):
    """Request clashes with the current state (e.g. an alumni application already pending)."""
    code = "conflict"
    status = 409


class StorageError(LifecycleError):
    """Wraps whatever the database layer raised; the original is chained as __cause__."""
    code = "storage_error"
    status = 500


class InvalidRecordError(LifecycleError):
    """Stored data on one user cannot take the requested change (e.g. a date out of range)."""
    code = "invalid_record"
    status = 422
