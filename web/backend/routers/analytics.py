#!/usr/bin/env python3
"""
Analytics endpoints - how assignments turned out per vendor and category.
"""

import logging

from fastapi import APIRouter, Depends, Query

from core.jobs.service import JobService
from ..dependencies import get_job_service
from ..models.responses import VendorPerformanceReportResponse
from ..utils import report_to_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/jobs/analytics", tags=["analytics"])


@router.get("/vendor-performance", response_model=VendorPerformanceReportResponse)
async def get_vendor_performance(
    timeframe: int = Query(default=30, ge=1, le=365, description="Window in days"),
    jobs: JobService = Depends(get_job_service),
):
    """
    Per-vendor completion and revenue figures plus per-category
    assignment rates for jobs created within the window.
    """
    report = await jobs.vendor_performance_report(timeframe_days=timeframe)
    return report_to_response(report)
