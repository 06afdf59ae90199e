"""
Assignment analytics - per-vendor and per-category job outcomes over a
recent window, for operators tuning the matching weights.
"""
from dataclasses import dataclass
from typing import Optional, Tuple

from core.jobs.models import JobStatus

# Statuses counted as work a vendor still has open
OPEN_WORK_STATUSES = (JobStatus.ASSIGNED, JobStatus.IN_PROGRESS, JobStatus.PAID)

VENDOR_REPORT_LIMIT = 20


def _percent(part: int, whole: int) -> float:
    return part / whole * 100 if whole else 0.0


@dataclass(frozen=True)
class VendorPerformance:
    vendor_id: str
    total_assigned: int
    completed: int = 0
    cancelled: int = 0
    in_progress: int = 0
    avg_job_value: float = 0.0
    total_revenue: float = 0.0
    vendor_name: Optional[str] = None
    vendor_email: Optional[str] = None

    @property
    def completion_rate(self) -> float:
        return _percent(self.completed, self.total_assigned)

    @property
    def success_rate(self) -> float:
        """Completed share of jobs that reached an outcome."""
        return _percent(self.completed, self.completed + self.cancelled)


@dataclass(frozen=True)
class CategoryPerformance:
    category: str
    total_jobs: int
    assigned: int = 0
    completed: int = 0

    @property
    def assignment_rate(self) -> float:
        return _percent(self.assigned, self.total_jobs)


@dataclass(frozen=True)
class PerformanceReport:
    timeframe_days: int
    vendors: Tuple[VendorPerformance, ...] = ()
    categories: Tuple[CategoryPerformance, ...] = ()

    @property
    def total_vendors(self) -> int:
        return len(self.vendors)

    @property
    def avg_completion_rate(self) -> float:
        if not self.vendors:
            return 0.0
        return sum(v.completion_rate for v in self.vendors) / len(self.vendors)

    @property
    def total_revenue(self) -> float:
        return sum(v.total_revenue for v in self.vendors)
