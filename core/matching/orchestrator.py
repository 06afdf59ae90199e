"""
Assignment Orchestrator - one-click auto-assignment of a job.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from core.exceptions import DispatchError, InvalidStateError, JobNotFoundError, NoSuitableVendorsError
from core.interfaces import JobRepository, VendorRepository
from core.jobs import state_machine
from core.jobs.models import Job
from core.matching.models import ScoreRecord
from core.matching.ranking import fallback_record
from core.matching.service import VendorMatchingService
from core.utils import utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssignmentResult:
    job: Job
    assigned_vendor: ScoreRecord
    auto_assigned: bool = True


class AssignmentOrchestrator:

    def __init__(
        self,
        job_repo: JobRepository,
        vendor_repo: VendorRepository,
        matching: VendorMatchingService,
        clock: Callable[[], datetime] = utc_now,
        log: Optional[logging.Logger] = None,
    ):
        self.job_repo = job_repo
        self.vendor_repo = vendor_repo
        self.matching = matching
        self.clock = clock
        self.log = log or logger

    async def _select_vendor(self, job: Job) -> ScoreRecord:
        best = await self.matching.find_best_vendors(job, limit=1)
        if best:
            return best[0]

        self.log.info(f"No scored vendors for job {job.job_number}, trying fallback")
        vendor = await self.vendor_repo.find_any_active_vendor()
        if vendor is None or vendor.owner is None:
            raise NoSuitableVendorsError(job.id)

        self.log.info(f"Using fallback vendor {vendor.owner.display_name} for job {job.job_number}")
        return fallback_record(vendor)

    async def auto_assign_job(self, job_id: str) -> AssignmentResult:
        """
        Assign a job to its best-scoring vendor.

        An ASSIGNED job is re-assigned: the previous vendor's pending
        offer is closed.

        Raises:
            JobNotFoundError: Unknown job id.
            InvalidStateError: Job is not PENDING or ASSIGNED.
            MatchingTimeoutError: Matching exceeded the overall deadline.
            NoSuitableVendorsError: No vendor at all could be found.
            ConcurrentModificationError: The job changed while matching.
        """
        try:
            job = await self.job_repo.get_job(job_id)
            if job is None:
                raise JobNotFoundError(job_id)

            if job.status not in state_machine.AUTO_ASSIGNABLE_STATUSES:
                raise InvalidStateError(
                    f"Job is not available for assignment. Current status: {job.status.value}",
                    current_status=job.status.value,
                )

            selected = await self._select_vendor(job)

            assigned = state_machine.assign(
                job, selected.vendor.user_id, self.clock(), allow_reassign=True,
            )
            saved = await self.job_repo.save_job(assigned)

            self.log.info(
                f"Job {saved.job_number} assigned to vendor {selected.vendor.user_id} "
                f"(score {selected.total_score:.2f})"
            )
            return AssignmentResult(job=saved, assigned_vendor=selected, auto_assigned=True)

        except DispatchError as e:
            self.log.error(f"Auto-assignment failed for job {job_id}: {e}")
            raise
