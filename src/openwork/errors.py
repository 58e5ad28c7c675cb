"""Error hierarchy for openwork.

Every error carries a human-readable message meant for direct display. The
``kind`` class attribute is the stable identifier used on the wire between the
host server and its clients.
"""

from __future__ import annotations

from typing import ClassVar


class OpenworkError(Exception):
    """Base class for all errors surfaced to the host application."""

    kind: ClassVar[str] = "OpenworkError"
    status_code: ClassVar[int] = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message: str = message


class ValidationError(OpenworkError):
    """Bad caller input (empty required path, unknown scope, ...)."""

    kind = "ValidationError"
    status_code = 400


class NotFoundError(OpenworkError):
    """The engine executable could not be located."""

    kind = "NotFoundError"
    status_code = 404


class AllocationError(OpenworkError):
    """No free loopback port could be obtained. Transient."""

    kind = "AllocationError"
    status_code = 503


class SpawnError(OpenworkError):
    """The OS refused to launch a process."""

    kind = "SpawnError"
    status_code = 500


class AlreadyExistsError(OpenworkError):
    """A destination exists and overwriting was not requested."""

    kind = "AlreadyExistsError"
    status_code = 409


class StorageError(OpenworkError):
    """A filesystem operation failed."""

    kind = "StorageError"
    status_code = 500


ERROR_KINDS: dict[str, type[OpenworkError]] = {
    cls.kind: cls
    for cls in (
        OpenworkError,
        ValidationError,
        NotFoundError,
        AllocationError,
        SpawnError,
        AlreadyExistsError,
        StorageError,
    )
}


def error_from_kind(kind: str | None, message: str) -> OpenworkError:
    """Rebuild an error from its wire representation."""
    cls = ERROR_KINDS.get(kind or "", OpenworkError)
    return cls(message)
