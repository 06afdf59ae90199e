"""
Conversions between ORM rows and the engine's immutable domain objects.

Embedded job documents (assignment attempts, status history, quote) are
stored as JSON with ISO-8601 timestamps.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from core.jobs.models import (
    DEFAULT_END_TIME,
    DEFAULT_START_TIME,
    AssignmentAttempt,
    AssignmentResponse,
    Job,
    JobLocation,
    JobPriority,
    JobStatus,
    StatusHistoryEntry,
    TimeSlot,
    VendorQuote,
)
from core.matching.models import (
    AvailabilitySlot,
    MembershipFeatures,
    MembershipTier,
    Vendor,
    VendorOwner,
)
from core.utils import ensure_utc
from database.models import JobRecord, User, VendorProfile

logger = logging.getLogger(__name__)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _parse_iso(value: Optional[str]) -> Optional[datetime]:
    return ensure_utc(datetime.fromisoformat(value)) if value else None


def _float(value: Any) -> Optional[float]:
    return float(value) if value is not None else None


# --- Job -------------------------------------------------------------------

def attempt_to_dict(attempt: AssignmentAttempt) -> Dict[str, Any]:
    return {
        'vendor_id': attempt.vendor_id,
        'assigned_at': _iso(attempt.assigned_at),
        'response': attempt.response.value,
        'responded_at': _iso(attempt.responded_at),
        'rejection_reason': attempt.rejection_reason,
    }


def attempt_from_dict(data: Dict[str, Any]) -> AssignmentAttempt:
    return AssignmentAttempt(
        vendor_id=data['vendor_id'],
        assigned_at=_parse_iso(data['assigned_at']),
        response=AssignmentResponse(data.get('response', 'PENDING')),
        responded_at=_parse_iso(data.get('responded_at')),
        rejection_reason=data.get('rejection_reason'),
    )


def history_to_dict(entry: StatusHistoryEntry) -> Dict[str, Any]:
    return {
        'status': entry.status.value,
        'timestamp': _iso(entry.timestamp),
        'updated_by': entry.updated_by,
        'notes': entry.notes,
    }


def history_from_dict(data: Dict[str, Any]) -> StatusHistoryEntry:
    return StatusHistoryEntry(
        status=JobStatus(data['status']),
        timestamp=_parse_iso(data['timestamp']),
        updated_by=data.get('updated_by'),
        notes=data.get('notes'),
    )


def quote_to_dict(quote: Optional[VendorQuote]) -> Optional[Dict[str, Any]]:
    if quote is None:
        return None
    return {
        'amount': quote.amount,
        'description': quote.description,
        'valid_until': _iso(quote.valid_until),
        'quoted_at': _iso(quote.quoted_at),
        'quoted_by': quote.quoted_by,
    }


def quote_from_dict(data: Optional[Dict[str, Any]]) -> Optional[VendorQuote]:
    if not data:
        return None
    return VendorQuote(
        amount=float(data['amount']),
        description=data.get('description'),
        valid_until=_parse_iso(data['valid_until']),
        quoted_at=_parse_iso(data['quoted_at']),
        quoted_by=data['quoted_by'],
    )


def job_to_values(job: Job) -> Dict[str, Any]:
    """Column values for a job, excluding ``id`` and ``version``."""
    slot = job.requested_time_slot
    return {
        'job_number': job.job_number,
        'customer_id': job.customer_id,
        'vendor_id': job.vendor_id,
        'title': job.title,
        'category': job.category,
        'description': job.description,
        'priority': job.priority.value,
        'is_emergency': job.is_emergency,
        'is_support': job.is_support,
        'status': job.status.value,
        'address': job.location.address,
        'city': job.location.city,
        'state': job.location.state,
        'zip_code': job.location.zip_code,
        'requested_date': slot.date if slot else None,
        'requested_start_time': slot.start_time if slot else None,
        'requested_end_time': slot.end_time if slot else None,
        'total_amount': job.total_amount,
        'estimated_budget': job.estimated_budget,
        'vendor_quote': quote_to_dict(job.vendor_quote),
        'assignment_attempts': [attempt_to_dict(a) for a in job.assignment_attempts],
        'status_history': [history_to_dict(h) for h in job.status_history],
        'progress_percentage': job.progress_percentage,
        'work_notes': job.work_notes,
        'actual_start_time': job.actual_start_time,
        'actual_end_time': job.actual_end_time,
        'cancellation_reason': job.cancellation_reason,
        'cancelled_by': job.cancelled_by,
        'cancelled_at': job.cancelled_at,
        'created_at': job.created_at,
        'updated_at': job.updated_at,
    }


def job_from_record(record: JobRecord) -> Job:
    slot = None
    if record.requested_date is not None:
        slot = TimeSlot(
            date=record.requested_date,
            start_time=record.requested_start_time or DEFAULT_START_TIME,
            end_time=record.requested_end_time or DEFAULT_END_TIME,
        )

    return Job(
        id=record.id,
        job_number=record.job_number,
        customer_id=record.customer_id,
        title=record.title,
        category=record.category,
        description=record.description or '',
        priority=JobPriority(record.priority),
        is_emergency=bool(record.is_emergency),
        location=JobLocation(
            address=record.address or '',
            city=record.city,
            state=record.state,
            zip_code=record.zip_code,
        ),
        requested_time_slot=slot,
        status=JobStatus(record.status),
        vendor_id=record.vendor_id,
        assignment_attempts=tuple(attempt_from_dict(a) for a in record.assignment_attempts or []),
        status_history=tuple(history_from_dict(h) for h in record.status_history or []),
        total_amount=_float(record.total_amount) or 0.0,
        estimated_budget=_float(record.estimated_budget),
        vendor_quote=quote_from_dict(record.vendor_quote),
        progress_percentage=record.progress_percentage or 0,
        work_notes=record.work_notes,
        actual_start_time=ensure_utc(record.actual_start_time),
        actual_end_time=ensure_utc(record.actual_end_time),
        cancellation_reason=record.cancellation_reason,
        cancelled_by=record.cancelled_by,
        cancelled_at=ensure_utc(record.cancelled_at),
        is_support=bool(record.is_support),
        created_at=ensure_utc(record.created_at),
        updated_at=ensure_utc(record.updated_at),
        version=record.version,
    )


# --- Vendor ----------------------------------------------------------------

def owner_from_user(user: Optional[User]) -> Optional[VendorOwner]:
    if user is None:
        return None
    return VendorOwner(
        user_id=user.id,
        first_name=user.first_name or '',
        last_name=user.last_name or '',
        email=user.email,
        phone=user.phone,
    )


def schedule_from_json(entries: Optional[List[Dict[str, Any]]]) -> tuple:
    """Build availability slots, skipping entries that cannot be parsed."""
    slots = []
    for entry in entries or []:
        try:
            slots.append(AvailabilitySlot(
                day_of_week=int(entry['day_of_week']),
                start_time=entry['start_time'],
                end_time=entry['end_time'],
                is_available=entry.get('is_available', True),
            ))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping malformed availability entry {entry!r}: {e}")
    return tuple(slots)


def schedule_to_json(slots) -> List[Dict[str, Any]]:
    return [
        {
            'day_of_week': int(s.day_of_week),
            'start_time': s.start_time,
            'end_time': s.end_time,
            'is_available': s.is_available,
        }
        for s in slots
    ]


def vendor_from_profile(profile: VendorProfile) -> Vendor:
    features = profile.membership_features or {}
    try:
        tier = MembershipTier(profile.membership_tier)
    except ValueError:
        tier = MembershipTier.BASIC

    return Vendor(
        id=profile.id,
        user_id=profile.user_id,
        is_active=bool(profile.is_active),
        company_name=profile.company_name,
        service_categories=tuple(c.category for c in profile.categories),
        service_area=profile.service_area,
        availability_schedule=schedule_from_json(profile.availability_schedule),
        membership_tier=tier,
        membership_features=MembershipFeatures(
            priority_assignment=bool(features.get('priority_assignment')),
            emergency_service_enabled=bool(features.get('emergency_service_enabled')),
            featured_listing=bool(features.get('featured_listing')),
            advanced_analytics=bool(features.get('advanced_analytics')),
            priority_support=bool(features.get('priority_support')),
        ),
        total_jobs_completed=profile.total_jobs_completed or 0,
        total_jobs_assigned=profile.total_jobs_assigned or 0,
        total_earnings=_float(profile.total_earnings) or 0.0,
        owner=owner_from_user(profile.owner),
    )
