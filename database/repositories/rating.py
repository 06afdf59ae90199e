from datetime import datetime

from sqlalchemy import select, func, case

from core.interfaces import RatingRepository
from core.matching.models import RatingStatsAggregate
from database.models import VendorRating
from database.repositories.base import BaseRepository


class VendorRatingRepository(BaseRepository, RatingRepository):

    async def aggregate_rating_stats(self, vendor_id: str, recent_since: datetime) -> RatingStatsAggregate:
        summary = select(
            func.avg(VendorRating.overall_rating),
            func.count(VendorRating.id),
            func.sum(case((VendorRating.created_at >= recent_since, 1), else_=0)),
        ).where(VendorRating.vendor_id == vendor_id)
        values = (
            select(VendorRating.overall_rating)
            .where(VendorRating.vendor_id == vendor_id)
            .order_by(VendorRating.created_at)
        )

        async with self.session_scope() as session:
            average, total, recent = (await session.execute(summary)).one()
            distribution = (await session.execute(values)).scalars().all()

        return RatingStatsAggregate(
            average_rating=float(average or 0),
            total_ratings=total or 0,
            recent_ratings=int(recent or 0),
            rating_distribution=tuple(distribution),
        )
