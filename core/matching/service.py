"""
Vendor Matching Service.

Finds the best vendors for a job:
1. Category normalization -> acceptable vendor categories
2. Candidate query -> active vendors in those categories (bounded)
3. Scoring -> statistics + eight sub-scores per vendor, in small batches
4. Ranking -> optional availability filter, sort, truncate

The whole pipeline runs under one overall deadline.
"""
import asyncio
import logging
from typing import List, Optional, Sequence, Tuple

from core.config_loader import MatchingConfig
from core.exceptions import MatchingTimeoutError
from core.interfaces import VendorRepository
from core.jobs.models import Job
from core.matching.availability import AvailabilityEvaluator
from core.matching.categories import find_acceptable_categories
from core.matching.models import ScoreRecord, Vendor
from core.matching.ranking import error_record, filter_available, rank
from core.matching.scoring import (
    build_breakdown,
    compute_sub_scores,
    generate_rationale,
    total_score,
)
from core.matching.statistics import StatisticsAggregator

logger = logging.getLogger(__name__)


class VendorMatchingService:
    """
    Scores and ranks vendors for a job.

    Holds no per-call state, so one instance can serve concurrent calls.
    """

    def __init__(
        self,
        vendor_repo: VendorRepository,
        statistics: StatisticsAggregator,
        availability: AvailabilityEvaluator,
        config: Optional[MatchingConfig] = None,
        log: Optional[logging.Logger] = None,
    ):
        """
        Args:
            vendor_repo: Source of vendor profiles
            statistics: Per-vendor statistics aggregator
            availability: Availability sub-score evaluator
            config: Limits, timeouts and scoring weights
            log: Logger to use instead of the module logger
        """
        self.vendor_repo = vendor_repo
        self.statistics = statistics
        self.availability = availability
        self.config = config or MatchingConfig()
        self.log = log or logger

    def find_acceptable_categories(self, job_category: str) -> Tuple[str, ...]:
        return find_acceptable_categories(job_category)

    async def query_active_vendors(self, categories: Sequence[str], limit: Optional[int] = None) -> List[Vendor]:
        """Active vendors in ``categories``; vendors without an owning user are dropped."""
        if limit is None:
            limit = self.config.candidate_limit
        vendors = await self.vendor_repo.query_active_vendors(list(categories), limit)
        resolved = [v for v in vendors if v.owner is not None and v.user_id]
        dropped = len(vendors) - len(resolved)
        if dropped:
            self.log.debug(f"Dropped {dropped} vendors without an owning user")
        return resolved[:limit]

    async def score_vendor(self, vendor: Vendor, job: Job) -> ScoreRecord:
        """
        Score one vendor against one job.

        Any failure is isolated to this vendor and returned as an error
        record; it never aborts the batch.
        """
        try:
            stats = await self.statistics.get_vendor_statistics(vendor.user_id)
            availability_score = await self.availability.score(vendor, job)

            raw_scores = compute_sub_scores(vendor, job, stats, availability_score)
            breakdown = build_breakdown(raw_scores, self.config.weights)

            record = ScoreRecord(
                vendor=vendor,
                total_score=total_score(breakdown),
                rationale=generate_rationale(breakdown, stats),
                breakdown=breakdown,
                statistics=stats,
            )
            self.log.debug(f"Vendor {vendor.user_id} scored {record.total_score:.2f} for job {job.job_number}")
            return record

        except Exception as e:
            self.log.warning(f"Error calculating score for vendor {vendor.user_id}: {e}")
            return error_record(vendor)

    async def score_vendors(self, vendors: Sequence[Vendor], job: Job) -> List[ScoreRecord]:
        """Score vendors in sequential batches of ``batch_size``; error records are excluded."""
        batch_size = self.config.batch_size
        records: List[ScoreRecord] = []

        for start in range(0, len(vendors), batch_size):
            batch = vendors[start:start + batch_size]
            batch_records = await asyncio.gather(*(self.score_vendor(v, job) for v in batch))
            records.extend(batch_records)
            self.log.debug(
                f"Scored batch {start // batch_size + 1} ({len(batch)} vendors) for job {job.job_number}"
            )

        failed = sum(1 for r in records if r.is_error)
        if failed:
            self.log.warning(f"{failed} of {len(records)} vendors could not be scored for job {job.job_number}")
        return [r for r in records if not r.is_error]

    async def _find_best_vendors(self, job: Job, limit: int, include_unavailable: bool) -> List[ScoreRecord]:
        categories = self.find_acceptable_categories(job.category)
        self.log.debug(f"Acceptable categories for '{job.category}': {', '.join(categories)}")

        vendors = await self.query_active_vendors(categories)
        self.log.info(f"Found {len(vendors)} candidate vendors for job {job.job_number}")
        if not vendors:
            return []

        records = await self.score_vendors(vendors, job)
        if not include_unavailable:
            records = filter_available(records, self.config.min_availability_score)

        return rank(records, limit)

    async def find_best_vendors(
        self,
        job: Job,
        limit: Optional[int] = None,
        include_unavailable: bool = False,
    ) -> List[ScoreRecord]:
        """
        Ranked recommendations for a job, best first.

        Returns at most ``limit`` records (``default_limit`` when omitted),
        possibly none.

        Raises:
            MatchingTimeoutError: The overall deadline passed. In-flight
                queries are cancelled and no partial result is returned.
        """
        if limit is None:
            limit = self.config.default_limit
        timeout = self.config.operation_timeout_seconds

        try:
            return await asyncio.wait_for(
                self._find_best_vendors(job, limit, include_unavailable),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            self.log.error(f"Vendor matching for job {job.job_number} timed out after {timeout:g}s")
            raise MatchingTimeoutError(timeout)
