#!/usr/bin/env python3
"""
Job endpoints - creation and lifecycle transitions.
"""

import logging

from fastapi import APIRouter, Depends

from core.jobs.models import AssignmentResponse, JobLocation, JobStatus, TimeSlot
from core.jobs.service import JobService
from ..dependencies import get_job_service
from ..models.requests import (
    AssignRequest,
    CancelRequest,
    CreateJobRequest,
    ProgressUpdateRequest,
    QuoteRequest,
    QuoteResponseRequest,
    StatusUpdateRequest,
    SupportRequest,
    VendorResponseRequest,
)
from ..models.responses import JobEnvelope
from ..utils import job_to_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/jobs", tags=["jobs"])


def _envelope(job) -> JobEnvelope:
    return JobEnvelope(success=True, job=job_to_response(job))


@router.post("", response_model=JobEnvelope, status_code=201)
async def create_job(body: CreateJobRequest, jobs: JobService = Depends(get_job_service)):
    slot = None
    if body.requested_time_slot:
        slot = TimeSlot(
            date=body.requested_time_slot.date,
            start_time=body.requested_time_slot.start_time,
            end_time=body.requested_time_slot.end_time,
        )
    job = await jobs.create_job(
        customer_id=body.customer_id,
        title=body.title,
        category=body.category,
        description=body.description,
        location=JobLocation(**body.location.model_dump()),
        requested_time_slot=slot,
        priority=body.priority,
        total_amount=body.total_amount,
        estimated_budget=body.estimated_budget,
    )
    return _envelope(job)


@router.post("/support", response_model=JobEnvelope, status_code=201)
async def create_support_request(body: SupportRequest, jobs: JobService = Depends(get_job_service)):
    job = await jobs.create_support_request(body.customer_id, body.description)
    return _envelope(job)


@router.get("/{job_id}", response_model=JobEnvelope)
async def get_job(job_id: str, jobs: JobService = Depends(get_job_service)):
    return _envelope(await jobs.get_job(job_id))


@router.post("/{job_id}/assign", response_model=JobEnvelope)
async def assign_job(job_id: str, body: AssignRequest, jobs: JobService = Depends(get_job_service)):
    """Offer a PENDING job to a specific vendor."""
    job = await jobs.assign_to_vendor(job_id, body.vendor_id, actor=body.actor)
    return _envelope(job)


@router.post("/{job_id}/respond", response_model=JobEnvelope)
async def respond_to_assignment(
    job_id: str,
    body: VendorResponseRequest,
    jobs: JobService = Depends(get_job_service),
):
    """Vendor accepts or rejects the assignment offered to them."""
    job = await jobs.record_vendor_response(
        job_id, body.vendor_id, AssignmentResponse(body.response), reason=body.reason,
    )
    return _envelope(job)


@router.post("/{job_id}/quote", response_model=JobEnvelope)
async def submit_quote(job_id: str, body: QuoteRequest, jobs: JobService = Depends(get_job_service)):
    job = await jobs.submit_quote(
        job_id, body.vendor_id, body.amount,
        description=body.description,
        valid_until=body.valid_until,
    )
    return _envelope(job)


@router.post("/{job_id}/quote-response", response_model=JobEnvelope)
async def respond_to_quote(
    job_id: str,
    body: QuoteResponseRequest,
    jobs: JobService = Depends(get_job_service),
):
    job = await jobs.respond_to_quote(job_id, JobStatus(body.response), actor=body.actor)
    return _envelope(job)


@router.post("/{job_id}/cancel", response_model=JobEnvelope)
async def cancel_job(job_id: str, body: CancelRequest, jobs: JobService = Depends(get_job_service)):
    job = await jobs.cancel(job_id, actor=body.actor, reason=body.reason)
    return _envelope(job)


@router.patch("/{job_id}/status", response_model=JobEnvelope)
async def update_status(job_id: str, body: StatusUpdateRequest, jobs: JobService = Depends(get_job_service)):
    job = await jobs.update_status(job_id, body.status, actor=body.actor, notes=body.notes)
    return _envelope(job)


@router.patch("/{job_id}/progress", response_model=JobEnvelope)
async def update_progress(job_id: str, body: ProgressUpdateRequest, jobs: JobService = Depends(get_job_service)):
    job = await jobs.update_progress(job_id, body.percentage, notes=body.notes)
    return _envelope(job)
