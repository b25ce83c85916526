"""Error taxonomy for the sync layer.

Every failure surfaced to callers derives from :class:`SEOSyncError` so
front ends can catch one type and branch on the subclass.
"""

from __future__ import annotations

from typing import Any


class SEOSyncError(Exception):
    """Base class for all seosync failures."""


class ValidationError(SEOSyncError):
    """Request rejected locally before any remote call was made."""


class NotFoundError(SEOSyncError):
    """The remote responded, but the requested sub-resource is absent."""


class TransportError(SEOSyncError):
    """The remote API could not be reached or returned an unreadable body."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class RemoteQueryError(SEOSyncError):
    """A read failed: transport error, GraphQL error, or malformed response."""


class RemoteMutationError(SEOSyncError):
    """A write was rejected by the remote API or could not be delivered.

    ``message`` is the first user-facing error verbatim; ``errors`` keeps
    every error the remote reported.
    """

    def __init__(
        self,
        message: str,
        field: list[str] | None = None,
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.field = field or []
        self.errors = errors or []
