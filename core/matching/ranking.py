"""
Ranking and fallback selection for scored vendors.
"""

from typing import Iterable, List

from core.matching.models import ScoreKind, ScoreRecord, Vendor

FALLBACK_SCORE = 50
FALLBACK_RATIONALE = 'Fallback assignment - no specific matches found'
ERROR_RATIONALE = 'Error calculating score'


def error_record(vendor: Vendor) -> ScoreRecord:
    return ScoreRecord(vendor=vendor, total_score=0, rationale=ERROR_RATIONALE, kind=ScoreKind.ERROR)


def fallback_record(vendor: Vendor) -> ScoreRecord:
    return ScoreRecord(
        vendor=vendor,
        total_score=FALLBACK_SCORE,
        rationale=FALLBACK_RATIONALE,
        kind=ScoreKind.FALLBACK,
    )


def filter_available(records: Iterable[ScoreRecord], min_availability_score: float) -> List[ScoreRecord]:
    """Keep records whose availability sub-score is above the threshold."""
    kept = []
    for record in records:
        availability = record.sub_score('availability')
        if availability is not None and availability > min_availability_score:
            kept.append(record)
    return kept


def rank(records: Iterable[ScoreRecord], limit: int) -> List[ScoreRecord]:
    """Sort by total score descending and keep the top ``limit``.

    Error records never rank. Ties keep their input order.
    """
    scored = [r for r in records if not r.is_error]
    scored.sort(key=lambda r: r.total_score, reverse=True)
    return scored[:max(limit, 0)]
