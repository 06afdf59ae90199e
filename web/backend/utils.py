#!/usr/bin/env python3
"""
Conversions from engine objects to API response models.
"""

from datetime import datetime
from typing import Optional

from core.jobs.analytics import PerformanceReport
from core.jobs.models import Job
from core.matching.models import ScoreRecord, VendorStatistics
from .models.responses import (
    AssignmentAttemptResponse,
    CategoryPerformanceResponse,
    JobResponse,
    PerformanceSummaryResponse,
    QuoteResponse,
    StatusHistoryResponse,
    SubScoreResponse,
    VendorPerformanceReportResponse,
    VendorPerformanceResponse,
    VendorRecommendation,
    VendorStatisticsResponse,
)


def safe_datetime_iso(dt: Optional[datetime]) -> Optional[str]:
    """
    Safely convert datetime to ISO format string.

    Args:
        dt: Datetime object.

    Returns:
        ISO format string or None.
    """
    if dt is None:
        return None
    return dt.isoformat()


def job_to_response(job: Job) -> JobResponse:
    slot = job.requested_time_slot
    quote = job.vendor_quote
    return JobResponse(
        id=job.id,
        job_number=job.job_number,
        customer_id=job.customer_id,
        title=job.title,
        category=job.category,
        description=job.description,
        priority=job.priority.value,
        is_emergency=job.is_emergency,
        is_support=job.is_support,
        status=job.status.value,
        vendor_id=job.vendor_id,
        address=job.location.address,
        city=job.location.city,
        state=job.location.state,
        zip_code=job.location.zip_code,
        requested_date=slot.date.isoformat() if slot else None,
        requested_start_time=slot.start_time if slot else None,
        requested_end_time=slot.end_time if slot else None,
        total_amount=job.total_amount,
        estimated_budget=job.estimated_budget,
        vendor_quote=QuoteResponse(
            amount=quote.amount,
            description=quote.description,
            valid_until=safe_datetime_iso(quote.valid_until),
            quoted_at=safe_datetime_iso(quote.quoted_at),
            quoted_by=quote.quoted_by,
        ) if quote else None,
        progress_percentage=job.progress_percentage,
        work_notes=job.work_notes,
        actual_start_time=safe_datetime_iso(job.actual_start_time),
        actual_end_time=safe_datetime_iso(job.actual_end_time),
        actual_duration_hours=job.actual_duration_hours,
        cancellation_reason=job.cancellation_reason,
        cancelled_by=job.cancelled_by,
        cancelled_at=safe_datetime_iso(job.cancelled_at),
        assignment_attempts=[
            AssignmentAttemptResponse(
                vendor_id=a.vendor_id,
                assigned_at=safe_datetime_iso(a.assigned_at),
                response=a.response.value,
                responded_at=safe_datetime_iso(a.responded_at),
                rejection_reason=a.rejection_reason,
            )
            for a in job.assignment_attempts
        ],
        status_history=[
            StatusHistoryResponse(
                status=h.status.value,
                timestamp=safe_datetime_iso(h.timestamp),
                updated_by=h.updated_by,
                notes=h.notes,
            )
            for h in job.status_history
        ],
        created_at=safe_datetime_iso(job.created_at),
        updated_at=safe_datetime_iso(job.updated_at),
        version=job.version,
    )


def _statistics_to_response(stats: VendorStatistics) -> VendorStatisticsResponse:
    return VendorStatisticsResponse(
        total_jobs=stats.total_jobs,
        completed_jobs=stats.completed_jobs,
        cancelled_jobs=stats.cancelled_jobs,
        completion_rate=stats.completion_rate,
        avg_job_value=stats.avg_job_value,
        total_revenue=stats.total_revenue,
        recent_jobs=stats.recent_jobs,
        average_rating=stats.average_rating,
        total_ratings=stats.total_ratings,
        recent_ratings=stats.recent_ratings,
        experience_level=stats.experience_level,
        reliability=stats.reliability,
        recent_activity=stats.recent_activity,
    )


def record_to_recommendation(record: ScoreRecord) -> VendorRecommendation:
    vendor = record.vendor
    return VendorRecommendation(
        vendor_id=vendor.user_id,
        profile_id=vendor.id,
        name=vendor.owner.display_name if vendor.owner else None,
        company_name=vendor.company_name,
        service_area=vendor.service_area,
        service_categories=list(vendor.service_categories),
        membership_tier=vendor.membership_tier.value,
        total_score=record.total_score,
        rationale=record.rationale,
        kind=record.kind.value,
        score_breakdown={
            name: SubScoreResponse(score=entry.score, weight=entry.weight, weighted=entry.weighted)
            for name, entry in record.breakdown.items()
        },
        statistics=_statistics_to_response(record.statistics) if record.statistics else None,
    )


def report_to_response(report: PerformanceReport) -> VendorPerformanceReportResponse:
    return VendorPerformanceReportResponse(
        success=True,
        timeframe_days=report.timeframe_days,
        vendor_performance=[
            VendorPerformanceResponse(
                vendor_id=v.vendor_id,
                vendor_name=v.vendor_name,
                vendor_email=v.vendor_email,
                total_assigned=v.total_assigned,
                completed=v.completed,
                cancelled=v.cancelled,
                in_progress=v.in_progress,
                avg_job_value=round(v.avg_job_value, 2),
                total_revenue=round(v.total_revenue, 2),
                completion_rate=round(v.completion_rate, 2),
                success_rate=round(v.success_rate, 2),
            )
            for v in report.vendors
        ],
        category_performance=[
            CategoryPerformanceResponse(
                category=c.category,
                total_jobs=c.total_jobs,
                assigned=c.assigned,
                completed=c.completed,
                assignment_rate=round(c.assignment_rate, 2),
            )
            for c in report.categories
        ],
        summary=PerformanceSummaryResponse(
            total_vendors=report.total_vendors,
            avg_completion_rate=round(report.avg_completion_rate, 2),
            total_revenue=round(report.total_revenue, 2),
        ),
    )
