#!/usr/bin/env python3
"""
Matching endpoints - vendor recommendations and one-click assignment.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from core.jobs.service import JobService
from core.matching.orchestrator import AssignmentOrchestrator
from core.matching.service import VendorMatchingService
from ..dependencies import get_job_service, get_matching_service, get_orchestrator
from ..models.responses import AutoAssignResponse, RecommendationsResponse
from ..utils import job_to_response, record_to_recommendation

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/jobs", tags=["matching"])


@router.get("/{job_id}/recommended-vendors", response_model=RecommendationsResponse)
async def get_recommended_vendors(
    job_id: str,
    limit: Optional[int] = Query(default=None, ge=1, le=50, description="Maximum vendors to return"),
    include_unavailable: bool = Query(default=False, description="Keep vendors with poor availability"),
    jobs: JobService = Depends(get_job_service),
    matching: VendorMatchingService = Depends(get_matching_service),
):
    """
    Ranked vendor recommendations for a job, best first.
    """
    job = await jobs.get_job(job_id)
    records = await matching.find_best_vendors(job, limit=limit, include_unavailable=include_unavailable)

    return RecommendationsResponse(
        success=True,
        job_id=job.id,
        count=len(records),
        vendors=[record_to_recommendation(r) for r in records],
    )


@router.post("/{job_id}/auto-assign", response_model=AutoAssignResponse)
async def auto_assign_job(
    job_id: str,
    orchestrator: AssignmentOrchestrator = Depends(get_orchestrator),
):
    """
    Assign the job to the best-scoring vendor, or any active vendor if
    none could be scored.
    """
    result = await orchestrator.auto_assign_job(job_id)
    return AutoAssignResponse(
        success=True,
        auto_assigned=result.auto_assigned,
        job=job_to_response(result.job),
        assigned_vendor=record_to_recommendation(result.assigned_vendor),
    )
