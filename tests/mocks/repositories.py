#!/usr/bin/env python3
"""
In-memory repository fakes for unit tests.

They implement the ``core.interfaces`` contracts over plain dicts and
lists, with switches to inject failures and delays per operation.
"""
import asyncio
from dataclasses import replace
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Sequence

from core.exceptions import ConcurrentModificationError, JobNotFoundError
from core.interfaces import JobRepository, RatingRepository, VendorRepository
from core.jobs.analytics import OPEN_WORK_STATUSES, VENDOR_REPORT_LIMIT, CategoryPerformance, VendorPerformance
from core.jobs.models import Job, JobStatus
from core.matching.models import JobStatsAggregate, Rating, RatingStatsAggregate, Vendor


class _Faults:
    """Per-operation failure and delay injection."""

    def __init__(self):
        self.failures: Dict[str, BaseException] = {}
        self.delays: Dict[str, float] = {}
        self.calls: Dict[str, int] = {}

    def fail(self, operation: str, error: Optional[BaseException] = None) -> None:
        self.failures[operation] = error or RuntimeError(f"{operation} failed")

    def delay(self, operation: str, seconds: float) -> None:
        self.delays[operation] = seconds

    async def _enter(self, operation: str) -> None:
        self.calls[operation] = self.calls.get(operation, 0) + 1
        if operation in self.delays:
            await asyncio.sleep(self.delays[operation])
        if operation in self.failures:
            raise self.failures[operation]


class InMemoryJobRepository(_Faults, JobRepository):

    def __init__(self, jobs: Iterable[Job] = ()):
        super().__init__()
        self.jobs: Dict[str, Job] = {job.id: job for job in jobs}

    async def get_job(self, job_id: str) -> Optional[Job]:
        await self._enter('get_job')
        return self.jobs.get(job_id)

    async def add_job(self, job: Job) -> Job:
        await self._enter('add_job')
        self.jobs[job.id] = job
        return job

    async def save_job(self, job: Job) -> Job:
        await self._enter('save_job')
        stored = self.jobs.get(job.id)
        if stored is None:
            raise JobNotFoundError(job.id)
        if stored.version != job.version:
            raise ConcurrentModificationError(job.id, job.version)
        saved = replace(job, version=job.version + 1)
        self.jobs[job.id] = saved
        return saved

    async def latest_job_number(self, prefix: str) -> Optional[str]:
        await self._enter('latest_job_number')
        numbers = [j.job_number for j in self.jobs.values() if j.job_number.startswith(prefix)]
        return max(numbers) if numbers else None

    async def aggregate_job_stats(self, vendor_id: str, recent_since: datetime) -> JobStatsAggregate:
        await self._enter('aggregate_job_stats')
        jobs = [j for j in self.jobs.values() if j.vendor_id == vendor_id]
        if not jobs:
            return JobStatsAggregate()
        revenue = sum(j.total_amount for j in jobs)
        return JobStatsAggregate(
            total_jobs=len(jobs),
            completed_jobs=sum(1 for j in jobs if j.status == JobStatus.COMPLETED),
            cancelled_jobs=sum(1 for j in jobs if j.status == JobStatus.CANCELLED),
            avg_job_value=revenue / len(jobs),
            total_revenue=revenue,
            recent_jobs=sum(1 for j in jobs if j.created_at and j.created_at >= recent_since),
        )

    async def count_scheduled_jobs(
        self,
        vendor_id: str,
        statuses: Iterable[JobStatus],
        start: date,
        end: date,
    ) -> int:
        await self._enter('count_scheduled_jobs')
        statuses = set(statuses)
        return sum(
            1 for j in self.jobs.values()
            if j.vendor_id == vendor_id
            and j.status in statuses
            and j.requested_time_slot is not None
            and start <= j.requested_time_slot.date <= end
        )

    def _created_since(self, since: datetime) -> List[Job]:
        return [j for j in self.jobs.values() if j.created_at and j.created_at >= since]

    async def aggregate_vendor_performance(
        self,
        since: datetime,
        limit: int = VENDOR_REPORT_LIMIT,
    ) -> List[VendorPerformance]:
        await self._enter('aggregate_vendor_performance')
        by_vendor: Dict[str, List[Job]] = {}
        for job in self._created_since(since):
            if job.vendor_id:
                by_vendor.setdefault(job.vendor_id, []).append(job)

        report = []
        for vendor_id, jobs in by_vendor.items():
            revenue = sum(j.total_amount for j in jobs)
            report.append(VendorPerformance(
                vendor_id=vendor_id,
                total_assigned=len(jobs),
                completed=sum(1 for j in jobs if j.status == JobStatus.COMPLETED),
                cancelled=sum(1 for j in jobs if j.status == JobStatus.CANCELLED),
                in_progress=sum(1 for j in jobs if j.status in OPEN_WORK_STATUSES),
                avg_job_value=revenue / len(jobs),
                total_revenue=revenue,
            ))
        report.sort(key=lambda v: (-v.total_assigned, v.vendor_id))
        return report[:limit]

    async def aggregate_category_performance(self, since: datetime) -> List[CategoryPerformance]:
        await self._enter('aggregate_category_performance')
        by_category: Dict[str, List[Job]] = {}
        for job in self._created_since(since):
            by_category.setdefault(job.category, []).append(job)

        report = [
            CategoryPerformance(
                category=category,
                total_jobs=len(jobs),
                assigned=sum(1 for j in jobs if j.vendor_id),
                completed=sum(1 for j in jobs if j.status == JobStatus.COMPLETED),
            )
            for category, jobs in by_category.items()
        ]
        report.sort(key=lambda c: (-c.total_jobs, c.category))
        return report


class InMemoryVendorRepository(_Faults, VendorRepository):

    def __init__(self, vendors: Iterable[Vendor] = ()):
        super().__init__()
        self.vendors: List[Vendor] = list(vendors)

    async def query_active_vendors(self, categories: Sequence[str], limit: int) -> List[Vendor]:
        await self._enter('query_active_vendors')
        wanted = set(categories)
        matches = [v for v in self.vendors if v.is_active and wanted.intersection(v.service_categories)]
        return matches[:limit]

    async def find_any_active_vendor(self) -> Optional[Vendor]:
        await self._enter('find_any_active_vendor')
        return next((v for v in self.vendors if v.is_active and v.owner is not None), None)

    async def get_vendor_by_user(self, user_id: str) -> Optional[Vendor]:
        await self._enter('get_vendor_by_user')
        return next((v for v in self.vendors if v.user_id == user_id), None)


class InMemoryRatingRepository(_Faults, RatingRepository):

    def __init__(self, ratings: Iterable[Rating] = ()):
        super().__init__()
        self.ratings: List[Rating] = list(ratings)

    async def aggregate_rating_stats(self, vendor_id: str, recent_since: datetime) -> RatingStatsAggregate:
        await self._enter('aggregate_rating_stats')
        ratings = [r for r in self.ratings if r.vendor_id == vendor_id]
        if not ratings:
            return RatingStatsAggregate()
        values = [r.overall_rating for r in ratings]
        return RatingStatsAggregate(
            average_rating=sum(values) / len(values),
            total_ratings=len(values),
            recent_ratings=sum(1 for r in ratings if r.created_at >= recent_since),
            rating_distribution=tuple(values),
        )


class StaticStatsJobRepository(InMemoryJobRepository):
    """Job repository returning canned per-vendor statistics."""

    def __init__(self, stats: Dict[str, JobStatsAggregate], jobs: Iterable[Job] = ()):
        super().__init__(jobs)
        self.stats = stats

    async def aggregate_job_stats(self, vendor_id: str, recent_since: datetime) -> JobStatsAggregate:
        await self._enter('aggregate_job_stats')
        return self.stats.get(vendor_id, JobStatsAggregate())


class StaticStatsRatingRepository(InMemoryRatingRepository):

    def __init__(self, stats: Dict[str, RatingStatsAggregate]):
        super().__init__()
        self.stats = stats

    async def aggregate_rating_stats(self, vendor_id: str, recent_since: datetime) -> RatingStatsAggregate:
        await self._enter('aggregate_rating_stats')
        return self.stats.get(vendor_id, RatingStatsAggregate())
