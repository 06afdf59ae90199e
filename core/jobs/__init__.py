"""Jobs Module - job data model and assignment state machine.

``JobService`` lives in ``core.jobs.service``; it depends on
``core.interfaces``, which itself imports this package's models.
"""
from core.jobs.models import (
    AssignmentAttempt,
    AssignmentResponse,
    Job,
    JobLocation,
    JobPriority,
    JobStatus,
    StatusHistoryEntry,
    TimeSlot,
    VendorQuote,
    new_job,
)

__all__ = [
    'AssignmentAttempt',
    'AssignmentResponse',
    'Job',
    'JobLocation',
    'JobPriority',
    'JobStatus',
    'StatusHistoryEntry',
    'TimeSlot',
    'VendorQuote',
    'new_job',
]
