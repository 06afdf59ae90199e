import uuid

from sqlalchemy import Column, String, Integer, Text, TIMESTAMP, ForeignKey, CheckConstraint, Index

from core.utils import utc_now
from .base import Base


class VendorRating(Base):
    __tablename__ = 'vendor_ratings'

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    vendor_id = Column(String(36), ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    customer_id = Column(String(36), ForeignKey('users.id', ondelete='SET NULL'))
    job_id = Column(String(36), ForeignKey('jobs.id', ondelete='SET NULL'))
    overall_rating = Column(Integer, nullable=False)
    comment = Column(Text)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now)

    __table_args__ = (
        CheckConstraint('overall_rating BETWEEN 1 AND 5', name='ck_vendor_ratings_overall_rating'),
        Index('idx_vendor_ratings_vendor_created', 'vendor_id', 'created_at'),
    )
