import logging
from dataclasses import dataclass
from typing import Optional

from core.config_loader import AppConfig, LoggingConfig
from core.interfaces import JobRepository, RatingRepository, VendorRepository
from core.jobs.service import JobService
from core.matching.availability import AvailabilityEvaluator
from core.matching.orchestrator import AssignmentOrchestrator
from core.matching.service import VendorMatchingService
from core.matching.statistics import StatisticsAggregator


def configure_logging(config: Optional[LoggingConfig] = None) -> None:
    config = config or LoggingConfig()
    logging.basicConfig(level=config.level, format=config.format)


@dataclass
class AppContext:
    """Application context container that holds all wired dependencies.

    Repositories own a session factory and open one short transaction per
    call, so a single context can be shared by every request handler.
    """
    config: AppConfig
    job_repo: JobRepository
    vendor_repo: VendorRepository
    rating_repo: RatingRepository
    job_service: JobService
    matching_service: VendorMatchingService
    orchestrator: AssignmentOrchestrator

    @classmethod
    def build(cls, config: AppConfig) -> "AppContext":
        """Build an AppContext backed by the configured database.

        Args:
            config: Loaded application configuration

        Returns:
            Fully wired AppContext instance
        """
        from database.database import get_session_factory
        from database.repositories import (
            JobRecordRepository,
            VendorProfileRepository,
            VendorRatingRepository,
        )

        session_factory = get_session_factory(config.database.url, echo=config.database.echo)
        return cls.from_repositories(
            config,
            job_repo=JobRecordRepository(session_factory),
            vendor_repo=VendorProfileRepository(session_factory),
            rating_repo=VendorRatingRepository(session_factory),
        )

    @classmethod
    def from_repositories(
        cls,
        config: AppConfig,
        job_repo: JobRepository,
        vendor_repo: VendorRepository,
        rating_repo: RatingRepository,
    ) -> "AppContext":
        """Wire the services around any repository implementations."""
        matching_config = config.matching

        statistics = StatisticsAggregator(
            job_repo,
            rating_repo,
            timeout_seconds=matching_config.aggregation_timeout_seconds,
            recent_window_days=matching_config.recent_window_days,
        )
        availability = AvailabilityEvaluator(
            job_repo,
            timeout_seconds=matching_config.workload_query_timeout_seconds,
            window_days=matching_config.workload_window_days,
        )
        matching_service = VendorMatchingService(vendor_repo, statistics, availability, matching_config)

        return cls(
            config=config,
            job_repo=job_repo,
            vendor_repo=vendor_repo,
            rating_repo=rating_repo,
            job_service=JobService(job_repo, vendor_repo),
            matching_service=matching_service,
            orchestrator=AssignmentOrchestrator(job_repo, vendor_repo, matching_service),
        )
