"""
Tests for JobService: numbering, support requests and persisted transitions.
"""
from dataclasses import replace
from datetime import timedelta

import pytest

from core.exceptions import (
    ConcurrentModificationError,
    InvalidStateError,
    JobNotFoundError,
    VendorNotFoundError,
)
from core.jobs.models import SUPPORT_CATEGORY, AssignmentResponse, JobStatus
from core.jobs.service import JobService
from tests.fixtures.dispatch_fixtures import NOW, make_job, make_vendor
from tests.mocks.repositories import InMemoryJobRepository, InMemoryVendorRepository


@pytest.fixture
def job_repo():
    return InMemoryJobRepository([make_job()])


@pytest.fixture
def vendor_repo():
    return InMemoryVendorRepository([
        make_vendor("vendor-1"),
        make_vendor("vendor-idle", is_active=False),
    ])


@pytest.fixture
def service(job_repo, vendor_repo):
    return JobService(job_repo, vendor_repo, clock=lambda: NOW)


@pytest.mark.asyncio
class TestJobNumbering:

    async def test_first_job_of_the_day(self, vendor_repo):
        service = JobService(InMemoryJobRepository(), vendor_repo, clock=lambda: NOW)
        job = await service.create_job("customer-1", "Fix tap", "plumbing")
        assert job.job_number == "JOB-20260302-0001"
        assert job.status == JobStatus.PENDING
        assert len(job.status_history) == 1

    async def test_numbering_continues_from_latest(self, vendor_repo):
        repo = InMemoryJobRepository([
            make_job(job_id="a", job_number="JOB-20260302-0007"),
            make_job(job_id="b", job_number="JOB-20260301-0042"),
        ])
        service = JobService(repo, vendor_repo, clock=lambda: NOW)

        job = await service.create_job("customer-1", "Fix tap", "plumbing")

        assert job.job_number == "JOB-20260302-0008"
        assert repo.jobs[job.id] == job

    async def test_support_request(self, service):
        job = await service.create_support_request("customer-9", "Cannot log in")

        assert job.status == JobStatus.SUPPORT_PENDING
        assert job.category == SUPPORT_CATEGORY
        assert job.is_support is True
        assert job.location.address == "Online"
        assert job.location.city == "Online"
        assert job.status_history[0].notes == "Support request created"


@pytest.mark.asyncio
class TestJobTransitions:

    async def test_unknown_job(self, service):
        with pytest.raises(JobNotFoundError):
            await service.get_job("missing")

    async def test_assign_to_unknown_vendor(self, service):
        with pytest.raises(VendorNotFoundError):
            await service.assign_to_vendor("job-1", "nobody")

    async def test_assign_to_inactive_vendor(self, service, job_repo):
        with pytest.raises(VendorNotFoundError):
            await service.assign_to_vendor("job-1", "vendor-idle")
        assert job_repo.jobs["job-1"].status == JobStatus.PENDING

    async def test_assign_bumps_version(self, service, job_repo):
        job = await service.assign_to_vendor("job-1", "vendor-1", actor="admin")

        assert job.status == JobStatus.ASSIGNED
        assert job.vendor_id == "vendor-1"
        assert job.version == 1
        assert job_repo.jobs["job-1"] == job

    async def test_assign_quote_sent_job_leaves_store_unchanged(self, service, job_repo):
        stored = replace(job_repo.jobs["job-1"], status=JobStatus.QUOTE_SENT, vendor_id="vendor-1")
        job_repo.jobs["job-1"] = stored

        with pytest.raises(InvalidStateError):
            await service.assign_to_vendor("job-1", "vendor-1")

        assert job_repo.jobs["job-1"] is stored
        assert job_repo.calls.get('save_job', 0) == 0

    async def test_full_lifecycle(self, service):
        await service.assign_to_vendor("job-1", "vendor-1")
        await service.record_vendor_response("job-1", "vendor-1", AssignmentResponse.ACCEPTED)
        await service.submit_quote("job-1", "vendor-1", 180.0, description="Parts and labour")
        await service.respond_to_quote("job-1", JobStatus.QUOTE_ACCEPTED, actor="customer-1")
        await service.update_status("job-1", JobStatus.PAID)
        await service.update_status("job-1", JobStatus.IN_PROGRESS, actor="vendor-1")
        await service.update_progress("job-1", 60, notes="Pipe replaced")
        job = await service.complete("job-1", actor="vendor-1")

        assert job.status == JobStatus.COMPLETED
        assert job.total_amount == 180.0
        assert job.progress_percentage == 100
        assert job.work_notes == "Pipe replaced"
        assert job.status_history[-1].notes == "Job completed"
        assert [h.status for h in job.status_history] == [
            JobStatus.PENDING,
            JobStatus.ASSIGNED,
            JobStatus.IN_DISCUSSION,
            JobStatus.QUOTE_SENT,
            JobStatus.QUOTE_ACCEPTED,
            JobStatus.PAID,
            JobStatus.IN_PROGRESS,
            JobStatus.COMPLETED,
        ]

    async def test_cancel(self, service):
        job = await service.cancel("job-1", actor="customer-1", reason="Fixed it myself")
        assert job.status == JobStatus.CANCELLED
        assert job.cancellation_reason == "Fixed it myself"
        assert job.cancelled_by == "customer-1"

    async def test_stale_write_is_rejected(self, service, job_repo):
        stale = job_repo.jobs["job-1"]
        await service.assign_to_vendor("job-1", "vendor-1")

        with pytest.raises(ConcurrentModificationError):
            await job_repo.save_job(replace(stale, title="Edited elsewhere"))
        assert job_repo.jobs["job-1"].status == JobStatus.ASSIGNED


@pytest.mark.asyncio
class TestPerformanceReport:

    async def test_report_over_window(self, vendor_repo):
        old = NOW - timedelta(days=45)
        repo = InMemoryJobRepository([
            replace(make_job(job_id="j1", category="plumbing"),
                    vendor_id="vendor-1", status=JobStatus.COMPLETED, total_amount=200.0),
            replace(make_job(job_id="j2", category="plumbing"),
                    vendor_id="vendor-1", status=JobStatus.IN_PROGRESS, total_amount=100.0),
            replace(make_job(job_id="j3", category="electrical"),
                    vendor_id="vendor-2", status=JobStatus.CANCELLED),
            make_job(job_id="j4", category="electrical"),
            replace(make_job(job_id="j5", category="roofing", now=old),
                    vendor_id="vendor-3", status=JobStatus.COMPLETED, total_amount=900.0),
        ])
        service = JobService(repo, vendor_repo, clock=lambda: NOW)

        report = await service.vendor_performance_report(timeframe_days=30)

        assert report.timeframe_days == 30
        assert [v.vendor_id for v in report.vendors] == ["vendor-1", "vendor-2"]
        top = report.vendors[0]
        assert (top.total_assigned, top.completed, top.in_progress) == (2, 1, 1)
        assert top.avg_job_value == pytest.approx(150.0)
        assert top.completion_rate == pytest.approx(50.0)
        assert report.vendors[1].success_rate == 0.0

        by_category = {c.category: c for c in report.categories}
        assert set(by_category) == {"plumbing", "electrical"}
        assert by_category["electrical"].assignment_rate == pytest.approx(50.0)
        assert report.total_revenue == pytest.approx(300.0)

    async def test_report_without_jobs(self, vendor_repo):
        service = JobService(InMemoryJobRepository(), vendor_repo, clock=lambda: NOW)
        report = await service.vendor_performance_report()
        assert report.timeframe_days == 30
        assert report.vendors == ()
        assert report.avg_completion_rate == 0.0

    async def test_report_rejects_empty_window(self, service):
        with pytest.raises(ValueError):
            await service.vendor_performance_report(timeframe_days=0)
