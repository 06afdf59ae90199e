"""
Matching Models - vendor profiles, derived statistics and score records.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum, IntEnum
from typing import Dict, Optional, Tuple

from core.utils import parse_clock_minutes, round_half_up


class MembershipTier(str, Enum):
    BASIC = "BASIC"
    PROFESSIONAL = "PROFESSIONAL"
    PREMIUM = "PREMIUM"
    ENTERPRISE = "ENTERPRISE"


class DayOfWeek(IntEnum):
    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6

    @classmethod
    def from_date(cls, value: date) -> "DayOfWeek":
        return cls(value.isoweekday() % 7)


@dataclass(frozen=True)
class MembershipFeatures:
    priority_assignment: bool = False
    emergency_service_enabled: bool = False
    featured_listing: bool = False
    advanced_analytics: bool = False
    priority_support: bool = False


@dataclass(frozen=True)
class AvailabilitySlot:
    """Weekly availability window; same-day, end exclusive."""
    day_of_week: int
    start_time: str
    end_time: str
    is_available: bool = True

    def __post_init__(self):
        if not 0 <= int(self.day_of_week) <= 6:
            raise ValueError(f"day_of_week must be 0-6 (0 = Sunday), got {self.day_of_week}")
        parse_clock_minutes(self.start_time)
        parse_clock_minutes(self.end_time)


@dataclass(frozen=True)
class VendorOwner:
    """The user account that owns a vendor profile."""
    user_id: str
    first_name: str = ""
    last_name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or self.user_id


@dataclass(frozen=True)
class Vendor:
    """A service provider profile.

    Jobs and ratings reference the vendor through ``user_id``. ``owner`` is
    the resolved user account; candidates without one are never matched.
    """
    id: str
    user_id: Optional[str]
    is_active: bool = True
    company_name: Optional[str] = None
    service_categories: Tuple[str, ...] = ()
    service_area: Optional[str] = None
    availability_schedule: Tuple[AvailabilitySlot, ...] = ()
    membership_tier: MembershipTier = MembershipTier.BASIC
    membership_features: MembershipFeatures = field(default_factory=MembershipFeatures)
    total_jobs_completed: int = 0
    total_jobs_assigned: int = 0
    total_earnings: float = 0.0
    owner: Optional[VendorOwner] = None


@dataclass(frozen=True)
class Rating:
    vendor_id: str
    overall_rating: int
    created_at: datetime
    job_id: Optional[str] = None
    customer_id: Optional[str] = None
    id: Optional[str] = None


@dataclass(frozen=True)
class JobStatsAggregate:
    total_jobs: int = 0
    completed_jobs: int = 0
    cancelled_jobs: int = 0
    avg_job_value: float = 0.0
    total_revenue: float = 0.0
    recent_jobs: int = 0


@dataclass(frozen=True)
class RatingStatsAggregate:
    average_rating: float = 0.0
    total_ratings: int = 0
    recent_ratings: int = 0
    rating_distribution: Tuple[int, ...] = ()


def experience_level(total_jobs: int) -> str:
    if total_jobs >= 100:
        return 'Expert'
    if total_jobs >= 50:
        return 'Advanced'
    if total_jobs >= 15:
        return 'Experienced'
    if total_jobs >= 5:
        return 'Intermediate'
    return 'Beginner'


def reliability(completed: int, cancelled: int) -> int:
    """Percentage of finished jobs that were completed; new vendors get 100."""
    total = completed + cancelled
    if total == 0:
        return 100
    return round_half_up(completed / total * 100)


@dataclass(frozen=True)
class VendorStatistics:
    """Derived per-vendor statistics, recomputed on every matching call."""
    total_jobs: int = 0
    completed_jobs: int = 0
    cancelled_jobs: int = 0
    completion_rate: float = 0.0  # percent
    avg_job_value: float = 0.0
    total_revenue: float = 0.0
    recent_jobs: int = 0
    average_rating: float = 0.0
    total_ratings: int = 0
    recent_ratings: int = 0
    rating_distribution: Tuple[int, ...] = ()
    experience_level: str = 'Beginner'
    reliability: int = 100
    recent_activity: int = 0

    @classmethod
    def from_aggregates(
        cls,
        jobs: Optional[JobStatsAggregate] = None,
        ratings: Optional[RatingStatsAggregate] = None,
    ) -> "VendorStatistics":
        jobs = jobs or JobStatsAggregate()
        ratings = ratings or RatingStatsAggregate()
        completion_rate = 0.0
        if jobs.total_jobs > 0:
            completion_rate = jobs.completed_jobs / jobs.total_jobs * 100
        return cls(
            total_jobs=jobs.total_jobs,
            completed_jobs=jobs.completed_jobs,
            cancelled_jobs=jobs.cancelled_jobs,
            completion_rate=completion_rate,
            avg_job_value=jobs.avg_job_value,
            total_revenue=jobs.total_revenue,
            recent_jobs=jobs.recent_jobs,
            average_rating=ratings.average_rating,
            total_ratings=ratings.total_ratings,
            recent_ratings=ratings.recent_ratings,
            rating_distribution=tuple(ratings.rating_distribution),
            experience_level=experience_level(jobs.total_jobs),
            reliability=reliability(jobs.completed_jobs, jobs.cancelled_jobs),
            recent_activity=jobs.recent_jobs + ratings.recent_ratings,
        )


@dataclass(frozen=True)
class SubScore:
    score: float
    weight: float

    @property
    def weighted(self) -> float:
        return self.score * self.weight


class ScoreKind(str, Enum):
    SCORED = "SCORED"
    FALLBACK = "FALLBACK"
    ERROR = "ERROR"


@dataclass(frozen=True)
class ScoreRecord:
    """Score of one vendor against one job, valid for a single matching call."""
    vendor: Vendor
    total_score: float
    rationale: str
    breakdown: Dict[str, SubScore] = field(default_factory=dict)
    statistics: Optional[VendorStatistics] = None
    kind: ScoreKind = ScoreKind.SCORED

    @property
    def is_fallback(self) -> bool:
        return self.kind == ScoreKind.FALLBACK

    @property
    def is_error(self) -> bool:
        return self.kind == ScoreKind.ERROR

    def sub_score(self, name: str) -> Optional[float]:
        entry = self.breakdown.get(name)
        return entry.score if entry else None
