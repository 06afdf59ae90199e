import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Iterable, List, Optional

from sqlalchemy import select, update, func, case

from core.exceptions import ConcurrentModificationError, JobNotFoundError
from core.interfaces import JobRepository
from core.jobs.analytics import OPEN_WORK_STATUSES, VENDOR_REPORT_LIMIT, CategoryPerformance, VendorPerformance
from core.jobs.models import Job, JobStatus
from core.matching.models import JobStatsAggregate
from database.mappers import job_from_record, job_to_values
from database.models import JobRecord, User
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class JobRecordRepository(BaseRepository, JobRepository):

    async def get_job(self, job_id: str) -> Optional[Job]:
        async with self.session_scope() as session:
            record = await session.get(JobRecord, job_id)
            return job_from_record(record) if record else None

    async def add_job(self, job: Job) -> Job:
        async with self.session_scope() as session:
            session.add(JobRecord(id=job.id, version=job.version, **job_to_values(job)))
        return job

    async def save_job(self, job: Job) -> Job:
        async with self.session_scope() as session:
            stmt = (
                update(JobRecord)
                .where(JobRecord.id == job.id, JobRecord.version == job.version)
                .values(version=job.version + 1, **job_to_values(job))
            )
            result = await session.execute(stmt)

            if result.rowcount == 0:
                exists = await session.scalar(select(JobRecord.id).where(JobRecord.id == job.id))
                if exists is None:
                    raise JobNotFoundError(job.id)
                logger.warning(f"Stale write rejected for job {job.job_number} (version {job.version})")
                raise ConcurrentModificationError(job.id, job.version)

        return replace(job, version=job.version + 1)

    async def latest_job_number(self, prefix: str) -> Optional[str]:
        async with self.session_scope() as session:
            stmt = select(func.max(JobRecord.job_number)).where(JobRecord.job_number.like(f"{prefix}%"))
            return await session.scalar(stmt)

    async def aggregate_job_stats(self, vendor_id: str, recent_since: datetime) -> JobStatsAggregate:
        stmt = select(
            func.count(JobRecord.id),
            func.sum(case((JobRecord.status == JobStatus.COMPLETED.value, 1), else_=0)),
            func.sum(case((JobRecord.status == JobStatus.CANCELLED.value, 1), else_=0)),
            func.avg(JobRecord.total_amount),
            func.sum(JobRecord.total_amount),
            func.sum(case((JobRecord.created_at >= recent_since, 1), else_=0)),
        ).where(JobRecord.vendor_id == vendor_id)

        async with self.session_scope() as session:
            total, completed, cancelled, avg_value, revenue, recent = (await session.execute(stmt)).one()

        return JobStatsAggregate(
            total_jobs=total or 0,
            completed_jobs=int(completed or 0),
            cancelled_jobs=int(cancelled or 0),
            avg_job_value=float(avg_value or 0),
            total_revenue=float(revenue or 0),
            recent_jobs=int(recent or 0),
        )

    async def count_scheduled_jobs(
        self,
        vendor_id: str,
        statuses: Iterable[JobStatus],
        start: date,
        end: date,
    ) -> int:
        stmt = select(func.count(JobRecord.id)).where(
            JobRecord.vendor_id == vendor_id,
            JobRecord.status.in_([s.value for s in statuses]),
            JobRecord.requested_date >= start,
            JobRecord.requested_date <= end,
        )
        async with self.session_scope() as session:
            return await session.scalar(stmt) or 0

    async def aggregate_vendor_performance(
        self,
        since: datetime,
        limit: int = VENDOR_REPORT_LIMIT,
    ) -> List[VendorPerformance]:
        assigned = func.count(JobRecord.id)
        stmt = (
            select(
                JobRecord.vendor_id,
                User.first_name,
                User.last_name,
                User.email,
                assigned,
                func.sum(case((JobRecord.status == JobStatus.COMPLETED.value, 1), else_=0)),
                func.sum(case((JobRecord.status == JobStatus.CANCELLED.value, 1), else_=0)),
                func.sum(case((JobRecord.status.in_([s.value for s in OPEN_WORK_STATUSES]), 1), else_=0)),
                func.avg(JobRecord.total_amount),
                func.sum(JobRecord.total_amount),
            )
            .join(User, User.id == JobRecord.vendor_id)
            .where(JobRecord.created_at >= since)
            .group_by(JobRecord.vendor_id, User.first_name, User.last_name, User.email)
            .order_by(assigned.desc(), JobRecord.vendor_id)
            .limit(limit)
        )

        async with self.session_scope() as session:
            rows = (await session.execute(stmt)).all()

        return [
            VendorPerformance(
                vendor_id=vendor_id,
                vendor_name=f"{first or ''} {last or ''}".strip() or None,
                vendor_email=email,
                total_assigned=total,
                completed=int(completed or 0),
                cancelled=int(cancelled or 0),
                in_progress=int(in_progress or 0),
                avg_job_value=float(avg_value or 0),
                total_revenue=float(revenue or 0),
            )
            for vendor_id, first, last, email, total, completed, cancelled, in_progress, avg_value, revenue in rows
        ]

    async def aggregate_category_performance(self, since: datetime) -> List[CategoryPerformance]:
        total = func.count(JobRecord.id)
        stmt = (
            select(
                JobRecord.category,
                total,
                func.count(JobRecord.vendor_id),
                func.sum(case((JobRecord.status == JobStatus.COMPLETED.value, 1), else_=0)),
            )
            .where(JobRecord.created_at >= since)
            .group_by(JobRecord.category)
            .order_by(total.desc(), JobRecord.category)
        )

        async with self.session_scope() as session:
            rows = (await session.execute(stmt)).all()

        return [
            CategoryPerformance(
                category=category,
                total_jobs=jobs,
                assigned=assigned or 0,
                completed=int(completed or 0),
            )
            for category, jobs, assigned, completed in rows
        ]
