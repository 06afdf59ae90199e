from .base import Base
from .user import User
from .vendor import VendorProfile, VendorServiceCategory
from .job import JobRecord
from .rating import VendorRating

__all__ = [
    'Base',
    'User',
    'VendorProfile',
    'VendorServiceCategory',
    'JobRecord',
    'VendorRating',
]
