import uuid

from sqlalchemy import Column, String, Text, Boolean, TIMESTAMP, Index
from sqlalchemy.orm import relationship

from core.utils import utc_now
from .base import Base


class User(Base):
    """
    User account. Customers and vendor owners are both users.
    """
    __tablename__ = 'users'

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(Text, nullable=False, unique=True)
    first_name = Column(Text, nullable=False, default='')
    last_name = Column(Text, nullable=False, default='')
    phone = Column(Text)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)

    vendor_profile = relationship("VendorProfile", back_populates="owner", uselist=False)

    __table_args__ = (
        Index('idx_users_email', 'email'),
    )
