#!/usr/bin/env python3
"""
Tests for VendorMatchingService: candidate query, batched scoring,
availability filter, ranking and the overall deadline.
"""

import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from core.config_loader import MatchingConfig
from core.exceptions import MatchingTimeoutError
from core.jobs.models import TimeSlot
from core.matching.availability import AvailabilityEvaluator
from core.matching.models import (
    AvailabilitySlot,
    DayOfWeek,
    JobStatsAggregate,
    MembershipTier,
    RatingStatsAggregate,
    VendorStatistics,
)
from core.matching.service import VendorMatchingService
from core.matching.statistics import StatisticsAggregator
from tests.fixtures.dispatch_fixtures import TUESDAY, make_job, make_vendor
from tests.mocks.repositories import (
    InMemoryJobRepository,
    InMemoryVendorRepository,
    StaticStatsJobRepository,
    StaticStatsRatingRepository,
)


def build_service(vendors, job_stats=None, rating_stats=None, **config_overrides):
    job_repo = StaticStatsJobRepository(job_stats or {})
    rating_repo = StaticStatsRatingRepository(rating_stats or {})
    vendor_repo = InMemoryVendorRepository(vendors)
    config = MatchingConfig(**config_overrides)
    service = VendorMatchingService(
        vendor_repo,
        StatisticsAggregator(job_repo, rating_repo),
        AvailabilityEvaluator(job_repo),
        config,
    )
    return service, vendor_repo


@pytest.mark.asyncio
class TestFindBestVendors:

    async def test_specialist_with_strong_history_beats_new_generalist(self):
        specialist = make_vendor("vendor-a", categories=("plumbing",))
        generalist = make_vendor(
            "vendor-b", categories=("plumbing", "electrical", "painting", "moving", "cleaning"),
        )
        service, _ = build_service(
            [generalist, specialist],
            job_stats={"vendor-a": JobStatsAggregate(total_jobs=20, completed_jobs=19)},
            rating_stats={"vendor-a": RatingStatsAggregate(average_rating=4.8, total_ratings=40)},
        )

        results = await service.find_best_vendors(make_job(category="plumbing"))

        assert [r.vendor.user_id for r in results] == ["vendor-a", "vendor-b"]
        assert results[0].total_score > results[1].total_score
        assert results[0].total_score == pytest.approx(75.1)
        assert results[1].total_score == pytest.approx(49.5)
        assert results[1].sub_score('rating') == 50

    async def test_limit_and_descending_order(self):
        tiers = [MembershipTier.BASIC, MembershipTier.PROFESSIONAL, MembershipTier.PREMIUM, MembershipTier.ENTERPRISE]
        vendors = [make_vendor(f"vendor-{i}", tier=tiers[i % 4]) for i in range(7)]
        service, _ = build_service(vendors)

        results = await service.find_best_vendors(make_job(), limit=3)

        assert len(results) == 3
        scores = [r.total_score for r in results]
        assert scores == sorted(scores, reverse=True)
        assert results[0].vendor.membership_tier == MembershipTier.ENTERPRISE

    async def test_default_limit_applies(self):
        vendors = [make_vendor(f"vendor-{i}") for i in range(6)]
        service, _ = build_service(vendors, default_limit=4)

        assert len(await service.find_best_vendors(make_job())) == 4

    async def test_scores_and_sub_scores_are_bounded(self):
        vendors = [
            make_vendor("vendor-a", tier=MembershipTier.ENTERPRISE),
            make_vendor("vendor-b", categories=("general",), service_area=None),
        ]
        service, _ = build_service(
            vendors,
            job_stats={"vendor-a": JobStatsAggregate(total_jobs=500, completed_jobs=500, recent_jobs=50)},
            rating_stats={"vendor-a": RatingStatsAggregate(average_rating=5, total_ratings=500, recent_ratings=50)},
        )

        for record in await service.find_best_vendors(make_job()):
            assert 0 <= record.total_score <= 100
            assert len(record.breakdown) == 8
            for entry in record.breakdown.values():
                assert 0 <= entry.score <= 100

    async def test_no_candidates_returns_empty_list(self):
        service, _ = build_service([make_vendor(categories=("roofing",))])
        assert await service.find_best_vendors(make_job(category="plumbing")) == []

    async def test_vendor_without_owner_is_dropped(self):
        service, _ = build_service([
            make_vendor("vendor-a", with_owner=False),
            make_vendor("vendor-b"),
        ])

        results = await service.find_best_vendors(make_job())

        assert [r.vendor.user_id for r in results] == ["vendor-b"]

    async def test_unavailable_vendors_filtered_unless_requested(self):
        monday_only = (AvailabilitySlot(day_of_week=DayOfWeek.MONDAY, start_time="09:00", end_time="17:00"),)
        service, _ = build_service([
            make_vendor("vendor-monday", schedule=monday_only),
            make_vendor("vendor-unknown"),
        ])
        job = make_job(slot=TimeSlot(date=TUESDAY, start_time="10:00", end_time="11:00"))

        available = await service.find_best_vendors(job)
        everyone = await service.find_best_vendors(job, include_unavailable=True)

        assert [r.vendor.user_id for r in available] == ["vendor-unknown"]
        assert {r.vendor.user_id for r in everyone} == {"vendor-monday", "vendor-unknown"}

    async def test_overall_deadline_raises_timeout(self):
        service, vendor_repo = build_service([make_vendor()], operation_timeout_seconds=0.05)
        vendor_repo.delay('query_active_vendors', 1.0)

        with pytest.raises(MatchingTimeoutError):
            await service.find_best_vendors(make_job())


@pytest.mark.asyncio
class TestScoreVendors:

    async def test_failing_vendor_is_isolated(self):
        vendors = [make_vendor("vendor-ok"), make_vendor("vendor-broken"), make_vendor("vendor-ok-2")]

        def statistics_for(vendor_id):
            if vendor_id == "vendor-broken":
                raise RuntimeError("statistics unavailable")
            return VendorStatistics()

        statistics = Mock(spec=StatisticsAggregator)
        statistics.get_vendor_statistics = AsyncMock(side_effect=statistics_for)
        service = VendorMatchingService(
            InMemoryVendorRepository(vendors),
            statistics,
            AvailabilityEvaluator(InMemoryJobRepository()),
        )

        broken = await service.score_vendor(vendors[1], make_job())
        results = await service.score_vendors(vendors, make_job())

        assert broken.is_error
        assert broken.total_score == 0
        assert broken.rationale == "Error calculating score"
        assert [r.vendor.user_id for r in results] == ["vendor-ok", "vendor-ok-2"]

    async def test_scores_in_bounded_batches(self):
        in_flight = 0
        peak = 0

        async def slow_statistics(vendor_id):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return VendorStatistics()

        statistics = Mock(spec=StatisticsAggregator)
        statistics.get_vendor_statistics = slow_statistics
        vendors = [make_vendor(f"vendor-{i}") for i in range(7)]
        service = VendorMatchingService(
            InMemoryVendorRepository(vendors),
            statistics,
            AvailabilityEvaluator(InMemoryJobRepository()),
            MatchingConfig(batch_size=3),
        )

        results = await service.score_vendors(vendors, make_job())

        assert len(results) == 7
        assert peak == 3

    async def test_candidate_limit_bounds_query(self):
        vendors = [make_vendor(f"vendor-{i}") for i in range(8)]
        service, vendor_repo = build_service(vendors, candidate_limit=5)

        candidates = await service.query_active_vendors(service.find_acceptable_categories("plumbing"))

        assert len(candidates) == 5

    async def test_explicit_zero_limit_is_respected(self):
        service, _ = build_service([make_vendor(f"vendor-{i}") for i in range(3)], candidate_limit=5)

        candidates = await service.query_active_vendors(("plumbing",), limit=0)

        assert candidates == []

    async def test_explicit_limit_overrides_candidate_limit(self):
        service, _ = build_service([make_vendor(f"vendor-{i}") for i in range(8)], candidate_limit=5)

        candidates = await service.query_active_vendors(("plumbing",), limit=7)

        assert len(candidates) == 7
