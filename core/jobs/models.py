"""
Job data model.

Jobs are immutable values: every lifecycle operation in
``core.jobs.state_machine`` returns a new ``Job`` built with
``dataclasses.replace``. Repositories persist whole jobs and use
``version`` for optimistic concurrency.
"""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from enum import Enum
from typing import Optional, Tuple

from core.utils import parse_clock_minutes, utc_now


class JobStatus(str, Enum):
    PENDING = "PENDING"                  # submitted, waiting for a vendor
    ASSIGNED = "ASSIGNED"                # offered to a vendor
    IN_DISCUSSION = "IN_DISCUSSION"      # vendor accepted, discussing details
    QUOTE_SENT = "QUOTE_SENT"
    QUOTE_ACCEPTED = "QUOTE_ACCEPTED"
    QUOTE_REJECTED = "QUOTE_REJECTED"
    PAID = "PAID"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    SUPPORT_PENDING = "SUPPORT_PENDING"  # customer support conversation
    CANCELLED = "CANCELLED"
    REJECTED = "REJECTED"


TERMINAL_STATUSES = frozenset({JobStatus.COMPLETED, JobStatus.CANCELLED, JobStatus.REJECTED})


class AssignmentResponse(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class JobPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    EMERGENCY = "EMERGENCY"


SUPPORT_CATEGORY = "Support"
DEFAULT_START_TIME = "09:00"
DEFAULT_END_TIME = "17:00"


@dataclass(frozen=True)
class JobLocation:
    address: str = ""
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None


@dataclass(frozen=True)
class TimeSlot:
    """A requested service window on one calendar day (half-open)."""
    date: date
    start_time: str = DEFAULT_START_TIME
    end_time: str = DEFAULT_END_TIME

    def __post_init__(self):
        parse_clock_minutes(self.start_time)
        parse_clock_minutes(self.end_time)


@dataclass(frozen=True)
class AssignmentAttempt:
    vendor_id: str
    assigned_at: datetime
    response: AssignmentResponse = AssignmentResponse.PENDING
    responded_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None


@dataclass(frozen=True)
class StatusHistoryEntry:
    status: JobStatus
    timestamp: datetime
    updated_by: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class VendorQuote:
    amount: float
    quoted_at: datetime
    quoted_by: str
    valid_until: datetime
    description: Optional[str] = None


@dataclass(frozen=True)
class Job:
    id: str
    job_number: str
    customer_id: str
    title: str
    category: str
    description: str = ""
    priority: JobPriority = JobPriority.MEDIUM
    is_emergency: bool = False
    location: JobLocation = field(default_factory=JobLocation)
    requested_time_slot: Optional[TimeSlot] = None
    status: JobStatus = JobStatus.PENDING
    vendor_id: Optional[str] = None
    assignment_attempts: Tuple[AssignmentAttempt, ...] = ()
    status_history: Tuple[StatusHistoryEntry, ...] = ()
    total_amount: float = 0.0
    estimated_budget: Optional[float] = None
    vendor_quote: Optional[VendorQuote] = None
    progress_percentage: int = 0
    work_notes: Optional[str] = None
    actual_start_time: Optional[datetime] = None
    actual_end_time: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    cancelled_by: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    is_support: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    version: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def pending_attempt(self) -> Optional[AssignmentAttempt]:
        for attempt in reversed(self.assignment_attempts):
            if attempt.response == AssignmentResponse.PENDING:
                return attempt
        return None

    @property
    def actual_duration_hours(self) -> Optional[float]:
        if self.actual_start_time and self.actual_end_time:
            seconds = (self.actual_end_time - self.actual_start_time).total_seconds()
            return round(seconds / 3600, 2)
        return None

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        if self.status in (JobStatus.COMPLETED, JobStatus.CANCELLED):
            return False
        if not self.requested_time_slot:
            return False
        now = now or utc_now()
        end_minutes = parse_clock_minutes(self.requested_time_slot.end_time)
        scheduled_end = datetime.combine(
            self.requested_time_slot.date, time(0, 0), tzinfo=timezone.utc
        ) + timedelta(minutes=end_minutes)
        return now > scheduled_end


def format_job_number(day: date, sequence: int) -> str:
    return f"JOB-{day:%Y%m%d}-{sequence:04d}"


def next_job_number(day: date, latest: Optional[str]) -> str:
    """Next per-day job number given the highest existing one for that day."""
    sequence = 1
    if latest:
        sequence = int(latest.rsplit('-', 1)[-1]) + 1
    return format_job_number(day, sequence)


def new_job(
    customer_id: str,
    title: str,
    category: str,
    job_number: str,
    description: str = "",
    location: Optional[JobLocation] = None,
    requested_time_slot: Optional[TimeSlot] = None,
    priority: JobPriority = JobPriority.MEDIUM,
    total_amount: float = 0.0,
    estimated_budget: Optional[float] = None,
    status: JobStatus = JobStatus.PENDING,
    is_support: bool = False,
    notes: str = "Job created",
    now: Optional[datetime] = None,
    job_id: Optional[str] = None,
) -> Job:
    """Build a freshly created job with its first status-history entry."""
    now = now or utc_now()
    return Job(
        id=job_id or str(uuid.uuid4()),
        job_number=job_number,
        customer_id=customer_id,
        title=title,
        category=category,
        description=description,
        priority=priority,
        is_emergency=priority == JobPriority.EMERGENCY,
        location=location or JobLocation(),
        requested_time_slot=requested_time_slot,
        status=status,
        status_history=(
            StatusHistoryEntry(status=status, timestamp=now, updated_by=customer_id, notes=notes),
        ),
        total_amount=total_amount,
        estimated_budget=estimated_budget,
        is_support=is_support,
        created_at=now,
        updated_at=now,
    )
