"""
Vendor statistics aggregation.

Runs the job-based and rating-based aggregations concurrently. Each half
has its own timeout and degrades to zero-valued defaults on failure, so
one broken data source never hides the other.
"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Optional, TypeVar

from core.interfaces import JobRepository, RatingRepository
from core.matching.models import JobStatsAggregate, RatingStatsAggregate, VendorStatistics
from core.utils import utc_now

logger = logging.getLogger(__name__)

T = TypeVar('T')


class StatisticsAggregator:

    def __init__(
        self,
        job_repo: JobRepository,
        rating_repo: RatingRepository,
        timeout_seconds: float = 10.0,
        recent_window_days: int = 30,
        clock: Callable[[], datetime] = utc_now,
        log: Optional[logging.Logger] = None,
    ):
        self.job_repo = job_repo
        self.rating_repo = rating_repo
        self.timeout_seconds = timeout_seconds
        self.recent_window_days = recent_window_days
        self.clock = clock
        self.log = log or logger

    async def _bounded(self, aggregation: Awaitable[T]) -> T:
        return await asyncio.wait_for(aggregation, timeout=self.timeout_seconds)

    def _settle(self, result, default: T, source: str, vendor_id: str) -> T:
        if isinstance(result, asyncio.TimeoutError):
            self.log.warning(
                f"{source} stats for vendor {vendor_id} timed out after {self.timeout_seconds:g}s"
            )
            return default
        if isinstance(result, Exception):
            self.log.warning(f"Failed to get {source} stats for vendor {vendor_id}: {result}")
            return default
        if isinstance(result, BaseException):
            raise result
        return result if result is not None else default

    async def get_vendor_statistics(self, vendor_id: str) -> VendorStatistics:
        """Compute derived statistics for a vendor's user id. Never raises."""
        try:
            since = self.clock() - timedelta(days=self.recent_window_days)
            job_result, rating_result = await asyncio.gather(
                self._bounded(self.job_repo.aggregate_job_stats(vendor_id, since)),
                self._bounded(self.rating_repo.aggregate_rating_stats(vendor_id, since)),
                return_exceptions=True,
            )
        except Exception as e:
            self.log.warning(f"Error getting statistics for vendor {vendor_id}: {e}")
            return VendorStatistics()

        job_stats = self._settle(job_result, JobStatsAggregate(), "job", vendor_id)
        rating_stats = self._settle(rating_result, RatingStatsAggregate(), "rating", vendor_id)

        return VendorStatistics.from_aggregates(job_stats, rating_stats)
