"""
Availability scoring.

Compares a vendor's weekly schedule against the job's requested slot and
discounts the result when the vendor already has a heavy upcoming workload.
"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from core.interfaces import JobRepository
from core.jobs.models import DEFAULT_END_TIME, DEFAULT_START_TIME, Job, JobStatus
from core.matching.models import DayOfWeek, Vendor
from core.utils import parse_clock_minutes, round_half_up, utc_now

logger = logging.getLogger(__name__)

NO_SCHEDULE_SCORE = 60      # unknown availability, not unavailable
DAY_UNAVAILABLE_SCORE = 20
NO_TIME_OVERLAP_SCORE = 40
AVAILABLE_BASE_SCORE = 90
ERROR_SCORE = 50

HEAVY_WORKLOAD_JOBS = 5
HEAVY_WORKLOAD_MULTIPLIER = 0.7
MODERATE_WORKLOAD_JOBS = 3
MODERATE_WORKLOAD_MULTIPLIER = 0.85

WORKLOAD_STATUSES = (JobStatus.ASSIGNED, JobStatus.IN_PROGRESS)


def check_time_overlap(avail_start: str, avail_end: str, req_start: str, req_end: str) -> bool:
    """Half-open interval overlap of two ``HH:MM`` windows on the same day."""
    avail_start_min = parse_clock_minutes(avail_start)
    avail_end_min = parse_clock_minutes(avail_end)
    req_start_min = parse_clock_minutes(req_start)
    req_end_min = parse_clock_minutes(req_end)

    return not (req_end_min <= avail_start_min or req_start_min >= avail_end_min)


def workload_multiplier(current_jobs: int) -> float:
    if current_jobs >= HEAVY_WORKLOAD_JOBS:
        return HEAVY_WORKLOAD_MULTIPLIER
    if current_jobs >= MODERATE_WORKLOAD_JOBS:
        return MODERATE_WORKLOAD_MULTIPLIER
    return 1.0


class AvailabilityEvaluator:

    def __init__(
        self,
        job_repo: JobRepository,
        timeout_seconds: float = 5.0,
        window_days: int = 7,
        clock: Callable[[], datetime] = utc_now,
        log: Optional[logging.Logger] = None,
    ):
        self.job_repo = job_repo
        self.timeout_seconds = timeout_seconds
        self.window_days = window_days
        self.clock = clock
        self.log = log or logger

    async def current_workload(self, vendor: Vendor) -> int:
        today = self.clock().date()
        return await asyncio.wait_for(
            self.job_repo.count_scheduled_jobs(
                vendor.user_id,
                WORKLOAD_STATUSES,
                today,
                today + timedelta(days=self.window_days),
            ),
            timeout=self.timeout_seconds,
        )

    async def score(self, vendor: Vendor, job: Job) -> int:
        """Availability sub-score in [0, 100]; 50 if anything goes wrong."""
        try:
            if not vendor.availability_schedule:
                return NO_SCHEDULE_SCORE

            slot = job.requested_time_slot
            if slot is None:
                return DAY_UNAVAILABLE_SCORE

            requested_day = DayOfWeek.from_date(slot.date)
            day_availability = next(
                (s for s in vendor.availability_schedule
                 if s.day_of_week == requested_day and s.is_available),
                None,
            )
            if day_availability is None:
                return DAY_UNAVAILABLE_SCORE

            has_overlap = check_time_overlap(
                day_availability.start_time,
                day_availability.end_time,
                slot.start_time or DEFAULT_START_TIME,
                slot.end_time or DEFAULT_END_TIME,
            )
            if not has_overlap:
                return NO_TIME_OVERLAP_SCORE

            current_jobs = await self.current_workload(vendor)
            return round_half_up(AVAILABLE_BASE_SCORE * workload_multiplier(current_jobs))

        except Exception as e:
            self.log.warning(f"Error calculating availability score for vendor {vendor.user_id}: {e}")
            return ERROR_SCORE
