"""
Job Service - loads jobs, applies state machine transitions, saves them.

Every mutation is read-modify-write against ``JobRepository.save_job``,
which rejects the write if the job changed in between.
"""
import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from core.exceptions import JobNotFoundError, VendorNotFoundError
from core.interfaces import JobRepository, VendorRepository
from core.jobs import state_machine
from core.jobs.analytics import PerformanceReport
from core.jobs.models import (
    SUPPORT_CATEGORY,
    AssignmentResponse,
    Job,
    JobLocation,
    JobPriority,
    JobStatus,
    TimeSlot,
    format_job_number,
    new_job,
    next_job_number,
)
from core.utils import utc_now

logger = logging.getLogger(__name__)


class JobService:

    def __init__(
        self,
        job_repo: JobRepository,
        vendor_repo: VendorRepository,
        clock: Callable[[], datetime] = utc_now,
        log: Optional[logging.Logger] = None,
    ):
        self.job_repo = job_repo
        self.vendor_repo = vendor_repo
        self.clock = clock
        self.log = log or logger

    async def get_job(self, job_id: str) -> Job:
        job = await self.job_repo.get_job(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return job

    async def _next_job_number(self, now: datetime) -> str:
        prefix = format_job_number(now.date(), 0).rsplit('-', 1)[0] + '-'
        latest = await self.job_repo.latest_job_number(prefix)
        return next_job_number(now.date(), latest)

    async def create_job(
        self,
        customer_id: str,
        title: str,
        category: str,
        description: str = "",
        location: Optional[JobLocation] = None,
        requested_time_slot: Optional[TimeSlot] = None,
        priority: JobPriority = JobPriority.MEDIUM,
        total_amount: float = 0.0,
        estimated_budget: Optional[float] = None,
    ) -> Job:
        now = self.clock()
        job = new_job(
            customer_id=customer_id,
            title=title,
            category=category,
            job_number=await self._next_job_number(now),
            description=description,
            location=location,
            requested_time_slot=requested_time_slot,
            priority=priority,
            total_amount=total_amount,
            estimated_budget=estimated_budget,
            now=now,
        )
        job = await self.job_repo.add_job(job)
        self.log.info(f"Created job {job.job_number} ({category}) for customer {customer_id}")
        return job

    async def create_support_request(self, customer_id: str, description: str) -> Job:
        now = self.clock()
        job = new_job(
            customer_id=customer_id,
            title="Support request",
            category=SUPPORT_CATEGORY,
            job_number=await self._next_job_number(now),
            description=description,
            location=JobLocation(address="Online", city="Online"),
            status=JobStatus.SUPPORT_PENDING,
            is_support=True,
            notes="Support request created",
            now=now,
        )
        job = await self.job_repo.add_job(job)
        self.log.info(f"Created support request {job.job_number} for customer {customer_id}")
        return job

    async def _require_active_vendor(self, vendor_id: str) -> None:
        vendor = await self.vendor_repo.get_vendor_by_user(vendor_id)
        if vendor is None:
            raise VendorNotFoundError(vendor_id)
        if not vendor.is_active:
            raise VendorNotFoundError(vendor_id, reason="is not active")

    async def assign_to_vendor(self, job_id: str, vendor_id: str, actor: Optional[str] = None) -> Job:
        """Manually offer a PENDING job to a vendor."""
        job = await self.get_job(job_id)
        await self._require_active_vendor(vendor_id)
        job = state_machine.assign(job, vendor_id, self.clock(), actor=actor)
        saved = await self.job_repo.save_job(job)
        self.log.info(f"Job {saved.job_number} assigned to vendor {vendor_id}")
        return saved

    async def record_vendor_response(
        self,
        job_id: str,
        vendor_id: str,
        response: AssignmentResponse,
        reason: Optional[str] = None,
    ) -> Job:
        job = await self.get_job(job_id)
        job = state_machine.record_vendor_response(job, vendor_id, response, self.clock(), reason=reason)
        saved = await self.job_repo.save_job(job)
        self.log.info(f"Vendor {vendor_id} {response.value.lower()} job {saved.job_number}")
        return saved

    async def submit_quote(
        self,
        job_id: str,
        vendor_id: str,
        amount: float,
        description: Optional[str] = None,
        valid_until: Optional[datetime] = None,
    ) -> Job:
        job = await self.get_job(job_id)
        job = state_machine.submit_quote(
            job, vendor_id, amount, self.clock(), description=description, valid_until=valid_until,
        )
        return await self.job_repo.save_job(job)

    async def respond_to_quote(self, job_id: str, response: JobStatus, actor: Optional[str] = None) -> Job:
        job = await self.get_job(job_id)
        job = state_machine.respond_to_quote(job, response, self.clock(), actor=actor)
        return await self.job_repo.save_job(job)

    async def update_status(
        self,
        job_id: str,
        new_status: JobStatus,
        actor: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Job:
        job = await self.get_job(job_id)
        job = state_machine.update_status(job, new_status, self.clock(), actor=actor, notes=notes)
        saved = await self.job_repo.save_job(job)
        self.log.info(f"Job {saved.job_number} moved to {new_status.value}")
        return saved

    async def cancel(self, job_id: str, actor: Optional[str] = None, reason: Optional[str] = None) -> Job:
        job = await self.get_job(job_id)
        job = state_machine.cancel(job, self.clock(), actor=actor, reason=reason)
        saved = await self.job_repo.save_job(job)
        self.log.info(f"Job {saved.job_number} cancelled by {actor}")
        return saved

    async def complete(self, job_id: str, actor: Optional[str] = None, notes: Optional[str] = None) -> Job:
        return await self.update_status(job_id, JobStatus.COMPLETED, actor=actor, notes=notes or "Job completed")

    async def update_progress(self, job_id: str, percentage: int, notes: Optional[str] = None) -> Job:
        job = await self.get_job(job_id)
        job = state_machine.update_progress(job, percentage, self.clock(), notes=notes)
        return await self.job_repo.save_job(job)

    async def vendor_performance_report(self, timeframe_days: int = 30) -> PerformanceReport:
        """Vendor and category outcomes for jobs created in the last ``timeframe_days`` days."""
        if timeframe_days < 1:
            raise ValueError(f"timeframe_days must be at least 1, got {timeframe_days}")
        since = self.clock() - timedelta(days=timeframe_days)
        vendors = await self.job_repo.aggregate_vendor_performance(since)
        categories = await self.job_repo.aggregate_category_performance(since)
        self.log.debug(
            f"Performance report over {timeframe_days} days: "
            f"{len(vendors)} vendors, {len(categories)} categories"
        )
        return PerformanceReport(
            timeframe_days=timeframe_days,
            vendors=tuple(vendors),
            categories=tuple(categories),
        )
