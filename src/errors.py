"""Error taxonomy for the AppID tracker.

Every error carries a machine-readable ``code``, a human-readable
``message``, an optional ``context`` dict and an optional ``cause``.
The catalog fetcher raises FetchError, the snapshot store raises
StoreError, and the sync orchestrator wraps either of them in SyncError.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    FETCH_FAILED = "FETCH_FAILED"
    STORE_FAILED = "STORE_FAILED"
    SYNC_FAILED = "SYNC_FAILED"


STAGE_LOAD = "load"
STAGE_FETCH = "fetch"
STAGE_SAVE = "save"


class FetchReason(str, Enum):
    """Why a catalog fetch did not produce a result."""
    TRANSPORT = "transport"
    STATUS = "status"
    PARSE = "parse"
    TIMEOUT = "timeout"


class TrackerError(Exception):
    """Base exception for all tracker errors."""

    def __init__(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        self.code = code
        self.message = message
        self.context = context or {}
        self.cause = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        ctx = f", context={self.context!r}" if self.context else ""
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r}{ctx})"


class FetchError(TrackerError):
    """The remote catalog could not be retrieved or parsed.

    Context keys: ``reason`` (a FetchReason value), ``url`` and, for
    non-success responses, ``status_code``.
    """

    def __init__(
        self,
        message: str,
        reason: FetchReason,
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        ctx = dict(context or {})
        ctx["reason"] = reason.value
        if status_code is not None:
            ctx["status_code"] = status_code
        super().__init__(ErrorCode.FETCH_FAILED, message, ctx, cause)
        self.reason = reason
        self.status_code = status_code


class StoreError(TrackerError):
    """The snapshot could not be read from or written to storage."""

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(ErrorCode.STORE_FAILED, message, context, cause)


class SyncError(TrackerError):
    """A refresh cycle failed. ``cause`` is the FetchError or StoreError.

    ``stage`` is the step that failed: STAGE_LOAD (stored snapshot could not
    be read, nothing was fetched), STAGE_FETCH, or STAGE_SAVE (the catalog
    was fetched but not persisted).
    """

    def __init__(self, cause: TrackerError, stage: Optional[str] = None):
        if stage is None:
            stage = STAGE_FETCH if isinstance(cause, FetchError) else STAGE_SAVE
        super().__init__(
            ErrorCode.SYNC_FAILED,
            f"Refresh failed: {cause.message}",
            {"stage": stage},
            cause,
        )
        self.stage = stage

    @property
    def is_fetch_failure(self) -> bool:
        return isinstance(self.cause, FetchError)

    @property
    def is_store_failure(self) -> bool:
        return isinstance(self.cause, StoreError)
