"""Typed failures raised by the task store.

Each carries a machine-readable ``kind`` and a human-readable ``message`` so
callers can render an error without inspecting the exception class.
"""


class StoreError(Exception):
    kind = "store_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(StoreError):
    """Input rejected before anything was sent to the store."""

    kind = "validation_error"


class NotFound(StoreError):
    """The task id does not resolve to a task owned by the caller."""

    kind = "not_found"


class RemoteUnavailable(StoreError):
    """The store call failed or timed out."""

    kind = "remote_unavailable"


class Unauthenticated(StoreError):
    kind = "unauthenticated"
