from database.repositories.base import BaseRepository
from database.repositories.job import JobRecordRepository
from database.repositories.vendor import VendorProfileRepository
from database.repositories.rating import VendorRatingRepository

__all__ = [
    'BaseRepository',
    'JobRecordRepository',
    'VendorProfileRepository',
    'VendorRatingRepository',
]
