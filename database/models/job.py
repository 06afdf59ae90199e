import uuid

from sqlalchemy import (
    Column, String, Text, Boolean, Integer, Numeric, Date, TIMESTAMP, ForeignKey, JSON, Index,
)

from core.utils import utc_now
from .base import Base


class JobRecord(Base):
    """
    Persisted maintenance job.

    Assignment attempts, status history and the quote are stored as JSON
    documents; ``version`` guards every update against lost writes.
    """
    __tablename__ = 'jobs'

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    job_number = Column(Text, nullable=False, unique=True)  # JOB-YYYYMMDD-NNNN
    customer_id = Column(String(36), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    vendor_id = Column(String(36), ForeignKey('users.id', ondelete='SET NULL'))

    title = Column(Text, nullable=False)
    category = Column(Text, nullable=False)
    description = Column(Text, nullable=False, default='')
    priority = Column(Text, nullable=False, default='MEDIUM')
    is_emergency = Column(Boolean, nullable=False, default=False)
    is_support = Column(Boolean, nullable=False, default=False)
    status = Column(Text, nullable=False, default='PENDING')

    # Location
    address = Column(Text, nullable=False, default='')
    city = Column(Text)
    state = Column(Text)
    zip_code = Column(Text)

    # Requested slot
    requested_date = Column(Date)
    requested_start_time = Column(Text)  # HH:MM
    requested_end_time = Column(Text)

    # Money
    total_amount = Column(Numeric, nullable=False, default=0)
    estimated_budget = Column(Numeric)
    vendor_quote = Column(JSON)

    # Embedded documents
    assignment_attempts = Column(JSON, nullable=False, default=list)
    status_history = Column(JSON, nullable=False, default=list)

    # Work tracking
    progress_percentage = Column(Integer, nullable=False, default=0)
    work_notes = Column(Text)
    actual_start_time = Column(TIMESTAMP(timezone=True))
    actual_end_time = Column(TIMESTAMP(timezone=True))

    # Cancellation
    cancellation_reason = Column(Text)
    cancelled_by = Column(String(36))
    cancelled_at = Column(TIMESTAMP(timezone=True))

    version = Column(Integer, nullable=False, default=0)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now)

    __table_args__ = (
        Index('idx_jobs_vendor_status', 'vendor_id', 'status'),
        Index('idx_jobs_vendor_requested_date', 'vendor_id', 'requested_date'),
        Index('idx_jobs_created_at', 'created_at'),
    )
