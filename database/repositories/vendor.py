import logging
from typing import Iterable, List, Optional, Sequence

from sqlalchemy import select

from core.interfaces import VendorRepository
from core.matching.models import Vendor
from database.mappers import vendor_from_profile
from database.models import VendorProfile, VendorServiceCategory
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

# Profiles read when looking for a fallback vendor; unreadable ones are skipped
FALLBACK_SCAN_LIMIT = 10


def _to_vendors(profiles: Iterable[VendorProfile]) -> List[Vendor]:
    vendors = []
    for profile in profiles:
        try:
            vendors.append(vendor_from_profile(profile))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping unreadable vendor profile {profile.id}: {e}")
    return vendors


class VendorProfileRepository(BaseRepository, VendorRepository):

    async def query_active_vendors(self, categories: Sequence[str], limit: int) -> List[Vendor]:
        if not categories or limit <= 0:
            return []
        stmt = (
            select(VendorProfile)
            .where(
                VendorProfile.is_active.is_(True),
                VendorProfile.categories.any(VendorServiceCategory.category.in_(list(categories))),
            )
            .order_by(VendorProfile.created_at)
            .limit(limit)
        )
        async with self.session_scope() as session:
            profiles = (await session.execute(stmt)).scalars().all()
            return _to_vendors(profiles)

    async def find_any_active_vendor(self) -> Optional[Vendor]:
        stmt = (
            select(VendorProfile)
            .where(VendorProfile.is_active.is_(True), VendorProfile.owner.has())
            .order_by(VendorProfile.created_at)
            .limit(FALLBACK_SCAN_LIMIT)
        )
        async with self.session_scope() as session:
            profiles = (await session.execute(stmt)).scalars().all()
            vendors = _to_vendors(profiles)
            return vendors[0] if vendors else None

    async def get_vendor_by_user(self, user_id: str) -> Optional[Vendor]:
        stmt = select(VendorProfile).where(VendorProfile.user_id == user_id)
        async with self.session_scope() as session:
            profile = (await session.execute(stmt)).scalars().first()
            return vendor_from_profile(profile) if profile else None
