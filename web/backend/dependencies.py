#!/usr/bin/env python3
"""
FastAPI dependencies for dependency injection.
"""

from functools import lru_cache

from fastapi import Depends

from core.app_context import AppContext
from core.jobs.service import JobService
from core.matching.orchestrator import AssignmentOrchestrator
from core.matching.service import VendorMatchingService
from .config import get_config


@lru_cache()
def get_app_context() -> AppContext:
    """
    Process-wide application context, built on first request.

    Tests replace it through ``app.dependency_overrides[get_app_context]``.
    """
    return AppContext.build(get_config())


def get_job_service(context: AppContext = Depends(get_app_context)) -> JobService:
    return context.job_service


def get_matching_service(context: AppContext = Depends(get_app_context)) -> VendorMatchingService:
    return context.matching_service


def get_orchestrator(context: AppContext = Depends(get_app_context)) -> AssignmentOrchestrator:
    return context.orchestrator
