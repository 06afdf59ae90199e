import uuid

from sqlalchemy import Column, String, Text, Boolean, Integer, Numeric, TIMESTAMP, ForeignKey, JSON, Index
from sqlalchemy.orm import relationship

from core.utils import utc_now
from .base import Base


class VendorProfile(Base):
    """
    Service provider profile owned by a user.

    Jobs and ratings point at ``user_id``, not at this row's id.
    """
    __tablename__ = 'vendor_profiles'

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey('users.id', ondelete='SET NULL'), nullable=True, unique=True)
    is_active = Column(Boolean, nullable=False, default=True)
    company_name = Column(Text)
    service_area = Column(Text)

    # [{"day_of_week": 1, "start_time": "09:00", "end_time": "17:00", "is_available": true}]
    availability_schedule = Column(JSON, nullable=False, default=list)

    membership_tier = Column(Text, nullable=False, default='BASIC')  # BASIC|PROFESSIONAL|PREMIUM|ENTERPRISE
    membership_features = Column(JSON, nullable=False, default=dict)

    # Maintained by other services; read-only for matching
    total_jobs_completed = Column(Integer, nullable=False, default=0)
    total_jobs_assigned = Column(Integer, nullable=False, default=0)
    total_earnings = Column(Numeric, nullable=False, default=0)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)

    owner = relationship("User", back_populates="vendor_profile", lazy="joined")
    categories = relationship(
        "VendorServiceCategory",
        back_populates="vendor",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="VendorServiceCategory.position",
    )

    __table_args__ = (
        Index('idx_vendor_profiles_active', 'is_active'),
    )


class VendorServiceCategory(Base):
    __tablename__ = 'vendor_service_categories'

    vendor_id = Column(String(36), ForeignKey('vendor_profiles.id', ondelete='CASCADE'), primary_key=True)
    category = Column(Text, primary_key=True)
    position = Column(Integer, nullable=False, default=0)

    vendor = relationship("VendorProfile", back_populates="categories")

    __table_args__ = (
        Index('idx_vendor_service_categories_category', 'category'),
    )
