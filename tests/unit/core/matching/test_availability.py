#!/usr/bin/env python3
"""
Tests for schedule overlap and workload-adjusted availability scores.
"""

import unittest
from dataclasses import replace
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from core.jobs.models import JobStatus, TimeSlot
from core.matching.availability import AvailabilityEvaluator, check_time_overlap, workload_multiplier
from core.matching.models import AvailabilitySlot, DayOfWeek
from tests.fixtures.dispatch_fixtures import MONDAY, NOW, TUESDAY, make_job, make_vendor
from tests.mocks.repositories import InMemoryJobRepository

MONDAY_ONLY = (AvailabilitySlot(day_of_week=DayOfWeek.MONDAY, start_time="09:00", end_time="17:00"),)


class TestCheckTimeOverlap(unittest.TestCase):

    def test_partial_overlap(self):
        self.assertTrue(check_time_overlap("09:00", "12:00", "11:00", "13:00"))

    def test_adjacent_windows_do_not_overlap(self):
        self.assertFalse(check_time_overlap("09:00", "10:00", "10:00", "11:00"))
        self.assertFalse(check_time_overlap("10:00", "11:00", "09:00", "10:00"))

    def test_contained_window(self):
        self.assertTrue(check_time_overlap("09:00", "17:00", "10:00", "11:00"))

    def test_invalid_time_raises(self):
        with self.assertRaises(ValueError):
            check_time_overlap("9am", "17:00", "10:00", "11:00")


class TestWorkloadMultiplier(unittest.TestCase):

    def test_thresholds(self):
        self.assertEqual(workload_multiplier(0), 1.0)
        self.assertEqual(workload_multiplier(2), 1.0)
        self.assertEqual(workload_multiplier(3), 0.85)
        self.assertEqual(workload_multiplier(5), 0.7)


def _evaluator(repo, **kwargs):
    return AvailabilityEvaluator(repo, clock=lambda: NOW, **kwargs)


def _busy_jobs(vendor_id: str, count: int, status: JobStatus = JobStatus.ASSIGNED):
    jobs = []
    for i in range(count):
        job = make_job(
            job_id=f"busy-{i}",
            job_number=f"JOB-20260302-{i + 100:04d}",
            slot=TimeSlot(date=MONDAY + timedelta(days=i % 7), start_time="13:00", end_time="14:00"),
        )
        jobs.append(replace(job, status=status, vendor_id=vendor_id))
    return jobs


@pytest.mark.asyncio
class TestAvailabilityEvaluator:

    async def test_no_schedule_is_unknown_not_unavailable(self):
        score = await _evaluator(InMemoryJobRepository()).score(make_vendor(schedule=()), make_job())
        assert score == 60

    async def test_available_monday_with_no_workload(self):
        vendor = make_vendor(schedule=MONDAY_ONLY)
        score = await _evaluator(InMemoryJobRepository()).score(vendor, make_job())
        assert score == 90

    async def test_requested_day_not_in_schedule(self):
        vendor = make_vendor(schedule=MONDAY_ONLY)
        job = make_job(slot=TimeSlot(date=TUESDAY, start_time="10:00", end_time="11:00"))
        assert await _evaluator(InMemoryJobRepository()).score(vendor, job) == 20

    async def test_day_marked_unavailable(self):
        vendor = make_vendor(schedule=(
            AvailabilitySlot(day_of_week=DayOfWeek.MONDAY, start_time="09:00", end_time="17:00", is_available=False),
        ))
        assert await _evaluator(InMemoryJobRepository()).score(vendor, make_job()) == 20

    async def test_job_without_requested_slot(self):
        vendor = make_vendor(schedule=MONDAY_ONLY)
        job = replace(make_job(), requested_time_slot=None)
        assert await _evaluator(InMemoryJobRepository()).score(vendor, job) == 20

    async def test_no_time_overlap(self):
        vendor = make_vendor(schedule=MONDAY_ONLY)
        job = make_job(slot=TimeSlot(date=MONDAY, start_time="17:00", end_time="18:00"))
        assert await _evaluator(InMemoryJobRepository()).score(vendor, job) == 40

    async def test_moderate_workload_rounds_half_up(self):
        vendor = make_vendor(schedule=MONDAY_ONLY)
        repo = InMemoryJobRepository(_busy_jobs(vendor.user_id, 3))
        # 90 * 0.85 = 76.5
        assert await _evaluator(repo).score(vendor, make_job()) == 77

    async def test_heavy_workload(self):
        vendor = make_vendor(schedule=MONDAY_ONLY)
        repo = InMemoryJobRepository(_busy_jobs(vendor.user_id, 5, status=JobStatus.IN_PROGRESS))
        assert await _evaluator(repo).score(vendor, make_job()) == 63

    async def test_jobs_in_other_statuses_do_not_count(self):
        vendor = make_vendor(schedule=MONDAY_ONLY)
        repo = InMemoryJobRepository(_busy_jobs(vendor.user_id, 5, status=JobStatus.COMPLETED))
        assert await _evaluator(repo).score(vendor, make_job()) == 90

    async def test_workload_query_window(self):
        vendor = make_vendor(schedule=MONDAY_ONLY)
        repo = InMemoryJobRepository()
        repo.count_scheduled_jobs = AsyncMock(return_value=0)

        await _evaluator(repo, window_days=7).score(vendor, make_job())

        args = repo.count_scheduled_jobs.await_args.args
        assert args[0] == vendor.user_id
        assert set(args[1]) == {JobStatus.ASSIGNED, JobStatus.IN_PROGRESS}
        assert args[2] == NOW.date()
        assert args[3] == NOW.date() + timedelta(days=7)

    async def test_workload_query_failure_gives_safe_default(self):
        vendor = make_vendor(schedule=MONDAY_ONLY)
        repo = InMemoryJobRepository()
        repo.fail('count_scheduled_jobs')
        assert await _evaluator(repo).score(vendor, make_job()) == 50

    async def test_workload_query_timeout_gives_safe_default(self):
        vendor = make_vendor(schedule=MONDAY_ONLY)
        repo = InMemoryJobRepository()
        repo.delay('count_scheduled_jobs', 0.5)
        assert await _evaluator(repo, timeout_seconds=0.01).score(vendor, make_job()) == 50
