"""
Service-layer exceptions for the dispatch engine.

Only these errors cross the engine boundary. Per-vendor scoring failures
and statistics aggregation failures are absorbed and logged internally.
"""

from typing import Any, Optional


class DispatchError(Exception):
    """Base exception for service layer errors."""
    pass


class NotFoundError(DispatchError):
    """Raised when a job or vendor identity does not resolve."""
    pass


class JobNotFoundError(NotFoundError):
    def __init__(self, job_id: Any) -> None:
        self.job_id = job_id
        super().__init__(f"Job not found: {job_id}")


class VendorNotFoundError(NotFoundError):
    def __init__(self, vendor_id: Any, reason: str = "not found") -> None:
        self.vendor_id = vendor_id
        super().__init__(f"Vendor {vendor_id} {reason}")


class InvalidStateError(DispatchError):
    """Raised when an operation is requested from an incompatible job status.

    No mutation is performed when this is raised.
    """

    def __init__(self, message: str, current_status: Optional[str] = None) -> None:
        self.current_status = current_status
        super().__init__(message)


class MatchingTimeoutError(DispatchError):
    """Raised when finding vendors exceeds the overall deadline."""

    def __init__(self, timeout_seconds: float) -> None:
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Vendor matching timed out after {timeout_seconds:g}s")


class NoSuitableVendorsError(DispatchError):
    """Raised when neither matching nor the fallback query yields a vendor."""

    def __init__(self, job_id: Any) -> None:
        self.job_id = job_id
        super().__init__(f"No suitable vendors found for job {job_id}")


class ConcurrentModificationError(DispatchError):
    """Raised when a job was changed by someone else between read and write."""

    def __init__(self, job_id: Any, expected_version: int) -> None:
        self.job_id = job_id
        self.expected_version = expected_version
        super().__init__(
            f"Job {job_id} was modified concurrently (expected version {expected_version})"
        )
