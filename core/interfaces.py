"""
Repository Interfaces - abstract data access used by the dispatch engine.

The engine never talks to a database directly. ``database.repositories``
provides SQLAlchemy implementations; tests substitute in-memory fakes.
"""
from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Iterable, List, Optional, Sequence

from core.jobs.analytics import VENDOR_REPORT_LIMIT, CategoryPerformance, VendorPerformance
from core.jobs.models import Job, JobStatus
from core.matching.models import JobStatsAggregate, RatingStatsAggregate, Vendor


class JobRepository(ABC):

    @abstractmethod
    async def get_job(self, job_id: str) -> Optional[Job]:
        pass

    @abstractmethod
    async def add_job(self, job: Job) -> Job:
        pass

    @abstractmethod
    async def save_job(self, job: Job) -> Job:
        """
        Persist a modified job if nobody else changed it since it was read.

        The stored version must equal ``job.version``. Returns the job with
        its version incremented.

        Raises:
            JobNotFoundError: The job does not exist.
            ConcurrentModificationError: The stored version differs.
        """
        pass

    @abstractmethod
    async def latest_job_number(self, prefix: str) -> Optional[str]:
        """Highest job number starting with ``prefix``, if any."""
        pass

    @abstractmethod
    async def aggregate_job_stats(self, vendor_id: str, recent_since: datetime) -> JobStatsAggregate:
        """Job counts, revenue and recent job count for a vendor's user id."""
        pass

    @abstractmethod
    async def count_scheduled_jobs(
        self,
        vendor_id: str,
        statuses: Iterable[JobStatus],
        start: date,
        end: date,
    ) -> int:
        """Count vendor jobs in ``statuses`` requested between ``start`` and ``end`` inclusive."""
        pass

    @abstractmethod
    async def aggregate_vendor_performance(
        self,
        since: datetime,
        limit: int = VENDOR_REPORT_LIMIT,
    ) -> List[VendorPerformance]:
        """
        Outcome counts per vendor for jobs created since ``since``.

        Only vendors with a resolvable user account are included. Ordered
        by jobs assigned, most first.
        """
        pass

    @abstractmethod
    async def aggregate_category_performance(self, since: datetime) -> List[CategoryPerformance]:
        """Job and assignment counts per category since ``since``, busiest first."""
        pass


class VendorRepository(ABC):

    @abstractmethod
    async def query_active_vendors(self, categories: Sequence[str], limit: int) -> List[Vendor]:
        """Active vendors offering at least one of ``categories``, at most ``limit``."""
        pass

    @abstractmethod
    async def find_any_active_vendor(self) -> Optional[Vendor]:
        """Any active vendor with a resolvable owner, for fallback assignment."""
        pass

    @abstractmethod
    async def get_vendor_by_user(self, user_id: str) -> Optional[Vendor]:
        pass


class RatingRepository(ABC):

    @abstractmethod
    async def aggregate_rating_stats(self, vendor_id: str, recent_since: datetime) -> RatingStatsAggregate:
        """Average, count, recent count and distribution of a vendor's ratings."""
        pass
