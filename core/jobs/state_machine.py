"""
Job assignment state machine.

Pure transition functions over immutable ``Job`` values. Each successful
transition returns a new job carrying exactly one extra status-history
entry; a refused transition raises ``InvalidStateError`` and the input job
is untouched.

    PENDING -> ASSIGNED -> IN_DISCUSSION -> QUOTE_SENT
        -> {QUOTE_ACCEPTED | QUOTE_REJECTED} -> PAID -> IN_PROGRESS -> COMPLETED

CANCELLED and REJECTED are reachable from the pre-payment states.
SUPPORT_PENDING is a separate branch for support conversations.
"""

from dataclasses import replace
from datetime import datetime, timedelta
from typing import Dict, FrozenSet, Optional

from core.exceptions import InvalidStateError
from core.jobs.models import (
    AssignmentAttempt,
    AssignmentResponse,
    Job,
    JobStatus,
    StatusHistoryEntry,
    VendorQuote,
)

_PRE_PAYMENT_EXITS = frozenset({JobStatus.CANCELLED, JobStatus.REJECTED})

VALID_JOB_TRANSITIONS: Dict[JobStatus, FrozenSet[JobStatus]] = {
    JobStatus.PENDING: frozenset({JobStatus.ASSIGNED}) | _PRE_PAYMENT_EXITS,
    JobStatus.ASSIGNED: frozenset({
        JobStatus.PENDING, JobStatus.IN_DISCUSSION, JobStatus.QUOTE_SENT,
    }) | _PRE_PAYMENT_EXITS,
    JobStatus.IN_DISCUSSION: frozenset({JobStatus.QUOTE_SENT}) | _PRE_PAYMENT_EXITS,
    JobStatus.QUOTE_SENT: frozenset({
        JobStatus.QUOTE_ACCEPTED, JobStatus.QUOTE_REJECTED,
    }) | _PRE_PAYMENT_EXITS,
    JobStatus.QUOTE_ACCEPTED: frozenset({JobStatus.PAID}) | _PRE_PAYMENT_EXITS,
    JobStatus.QUOTE_REJECTED: frozenset({JobStatus.QUOTE_SENT}) | _PRE_PAYMENT_EXITS,
    JobStatus.PAID: frozenset({JobStatus.IN_PROGRESS}),
    JobStatus.IN_PROGRESS: frozenset({JobStatus.COMPLETED}),
    JobStatus.SUPPORT_PENDING: frozenset({JobStatus.COMPLETED, JobStatus.CANCELLED}),
    JobStatus.COMPLETED: frozenset(),
    JobStatus.CANCELLED: frozenset(),
    JobStatus.REJECTED: frozenset(),
}

ASSIGNABLE_STATUSES = frozenset({JobStatus.PENDING})
AUTO_ASSIGNABLE_STATUSES = frozenset({JobStatus.PENDING, JobStatus.ASSIGNED})
QUOTABLE_STATUSES = frozenset({JobStatus.ASSIGNED, JobStatus.IN_DISCUSSION, JobStatus.QUOTE_REJECTED})
CANCELLABLE_STATUSES = frozenset({
    JobStatus.PENDING, JobStatus.ASSIGNED, JobStatus.IN_DISCUSSION, JobStatus.QUOTE_SENT,
})
QUOTE_RESPONSES = frozenset({JobStatus.QUOTE_ACCEPTED, JobStatus.QUOTE_REJECTED})

# Targets that carry extra data and must go through their own operation
DEDICATED_TARGETS = frozenset({
    JobStatus.PENDING, JobStatus.ASSIGNED, JobStatus.IN_DISCUSSION,
    JobStatus.QUOTE_SENT, JobStatus.QUOTE_ACCEPTED, JobStatus.QUOTE_REJECTED,
})

DEFAULT_QUOTE_VALIDITY = timedelta(days=7)


def _format_amount(amount: float) -> str:
    amount = float(amount)
    return str(int(amount)) if amount.is_integer() else str(amount)


def can_transition(current: JobStatus, target: JobStatus) -> bool:
    return target in VALID_JOB_TRANSITIONS.get(current, frozenset())


def _require(job: Job, allowed: FrozenSet[JobStatus], action: str) -> None:
    if job.status not in allowed:
        allowed_text = ", ".join(sorted(s.value for s in allowed))
        raise InvalidStateError(
            f"Cannot {action} job {job.job_number} in status {job.status.value} "
            f"(allowed: {allowed_text})",
            current_status=job.status.value,
        )


def _transition(
    job: Job,
    new_status: JobStatus,
    now: datetime,
    actor: Optional[str] = None,
    notes: Optional[str] = None,
    **changes,
) -> Job:
    entry = StatusHistoryEntry(status=new_status, timestamp=now, updated_by=actor, notes=notes)
    return replace(
        job,
        status=new_status,
        status_history=job.status_history + (entry,),
        updated_at=now,
        **changes,
    )


def assign(
    job: Job,
    vendor_id: str,
    now: datetime,
    actor: Optional[str] = None,
    allow_reassign: bool = False,
) -> Job:
    """Offer the job to a vendor with a new PENDING assignment attempt.

    With ``allow_reassign`` an ASSIGNED job may be offered to another
    vendor; the outstanding PENDING attempt is closed as REJECTED.
    """
    allowed = AUTO_ASSIGNABLE_STATUSES if allow_reassign else ASSIGNABLE_STATUSES
    _require(job, allowed, "assign")

    attempts = tuple(
        replace(a, response=AssignmentResponse.REJECTED, responded_at=now, rejection_reason="Reassigned")
        if a.response == AssignmentResponse.PENDING else a
        for a in job.assignment_attempts
    )
    attempts += (AssignmentAttempt(vendor_id=vendor_id, assigned_at=now),)

    return _transition(
        job,
        JobStatus.ASSIGNED,
        now,
        actor=actor,
        notes=f"Assigned to vendor {vendor_id}",
        vendor_id=vendor_id,
        assignment_attempts=attempts,
    )


def record_vendor_response(
    job: Job,
    vendor_id: str,
    response: AssignmentResponse,
    now: datetime,
    reason: Optional[str] = None,
) -> Job:
    """Apply a vendor's accept/reject of its pending assignment.

    ACCEPTED moves the job to IN_DISCUSSION. REJECTED returns it to
    PENDING and clears the vendor so it can be reassigned.
    """
    if response not in (AssignmentResponse.ACCEPTED, AssignmentResponse.REJECTED):
        raise ValueError(f"Vendor response must be ACCEPTED or REJECTED, got {response}")
    _require(job, frozenset({JobStatus.ASSIGNED}), "respond to")

    index = next(
        (i for i, a in enumerate(job.assignment_attempts)
         if a.vendor_id == vendor_id and a.response == AssignmentResponse.PENDING),
        None,
    )
    if index is None:
        raise InvalidStateError(
            f"Vendor {vendor_id} has no pending assignment on job {job.job_number}",
            current_status=job.status.value,
        )

    attempts = list(job.assignment_attempts)
    attempts[index] = replace(
        attempts[index],
        response=response,
        responded_at=now,
        rejection_reason=reason if reason else attempts[index].rejection_reason,
    )

    if response == AssignmentResponse.ACCEPTED:
        return _transition(
            job, JobStatus.IN_DISCUSSION, now,
            actor=vendor_id,
            notes="Job accepted by vendor",
            assignment_attempts=tuple(attempts),
        )
    return _transition(
        job, JobStatus.PENDING, now,
        actor=vendor_id,
        notes=f"Job rejected: {reason or 'No reason provided'}",
        assignment_attempts=tuple(attempts),
        vendor_id=None,
    )


def submit_quote(
    job: Job,
    vendor_id: str,
    amount: float,
    now: datetime,
    description: Optional[str] = None,
    valid_until: Optional[datetime] = None,
) -> Job:
    if amount < 0:
        raise ValueError(f"Quote amount must be non-negative, got {amount}")
    _require(job, QUOTABLE_STATUSES, "quote on")
    if job.vendor_id != vendor_id:
        raise InvalidStateError(
            f"Vendor {vendor_id} is not assigned to job {job.job_number}",
            current_status=job.status.value,
        )

    quote = VendorQuote(
        amount=float(amount),
        description=description,
        valid_until=valid_until or now + DEFAULT_QUOTE_VALIDITY,
        quoted_at=now,
        quoted_by=vendor_id,
    )
    return _transition(
        job, JobStatus.QUOTE_SENT, now,
        actor=vendor_id,
        notes=f"Quote submitted: ${_format_amount(amount)}",
        vendor_quote=quote,
    )


def respond_to_quote(job: Job, response: JobStatus, now: datetime, actor: Optional[str] = None) -> Job:
    """Customer decision on the current quote; acceptance makes the quote the job total."""
    if response not in QUOTE_RESPONSES:
        raise ValueError("Invalid response. Must be QUOTE_ACCEPTED or QUOTE_REJECTED")
    _require(job, frozenset({JobStatus.QUOTE_SENT}), "respond to the quote of")

    if response == JobStatus.QUOTE_ACCEPTED:
        if job.vendor_quote is None:
            return _transition(job, response, now, actor=actor, notes="Quote accepted by customer")
        amount = job.vendor_quote.amount
        return _transition(
            job, response, now,
            actor=actor,
            notes=f"Quote accepted: ${_format_amount(amount)}",
            total_amount=amount,
        )
    return _transition(job, response, now, actor=actor, notes="Quote rejected by customer")


def cancel(job: Job, now: datetime, actor: Optional[str] = None, reason: Optional[str] = None) -> Job:
    _require(job, CANCELLABLE_STATUSES, "cancel")
    return _transition(
        job, JobStatus.CANCELLED, now,
        actor=actor,
        notes=reason or "Order cancelled by customer",
        cancellation_reason=reason or "Cancelled by customer",
        cancelled_by=actor,
        cancelled_at=now,
    )


def update_status(
    job: Job,
    new_status: JobStatus,
    now: datetime,
    actor: Optional[str] = None,
    notes: Optional[str] = None,
) -> Job:
    """Generic transition for statuses without a dedicated operation."""
    if new_status in DEDICATED_TARGETS:
        raise InvalidStateError(
            f"Status {new_status.value} must be set through its dedicated operation",
            current_status=job.status.value,
        )
    if not can_transition(job.status, new_status):
        raise InvalidStateError(
            f"Invalid transition for job {job.job_number}: "
            f"{job.status.value} -> {new_status.value}",
            current_status=job.status.value,
        )

    changes = {}
    if new_status == JobStatus.IN_PROGRESS:
        changes['actual_start_time'] = now
    elif new_status == JobStatus.COMPLETED:
        changes['actual_end_time'] = now
        changes['progress_percentage'] = 100
    elif new_status == JobStatus.CANCELLED:
        changes['cancellation_reason'] = notes or "Cancelled"
        changes['cancelled_by'] = actor
        changes['cancelled_at'] = now

    return _transition(job, new_status, now, actor=actor, notes=notes, **changes)


def update_progress(job: Job, percentage: int, now: datetime, notes: Optional[str] = None) -> Job:
    """Record work progress; no status change and no history entry."""
    changes = {'progress_percentage': min(100, max(0, int(percentage))), 'updated_at': now}
    if notes:
        changes['work_notes'] = notes
    return replace(job, **changes)
