"""
Vendor Scoring - the eight sub-scores and their weighted combination.

Every sub-score is on a 0-100 scale. The weights come from
``ScoringWeights`` and sum to 1.0, so the total is also in [0, 100].
All functions here are pure; the availability sub-score needs a data
store lookup and is computed by ``AvailabilityEvaluator`` instead.
"""

from typing import Dict, List, Mapping

from core.config_loader import ScoringWeights
from core.jobs.models import Job
from core.matching.models import MembershipTier, SubScore, Vendor, VendorStatistics

# Rating
NEUTRAL_RATING_SCORE = 50  # new vendors are not penalized
RATING_COUNT_BONUS_STEPS = (10, 50, 100)
RATING_COUNT_BONUS = 5
RECENT_RATINGS_FOR_BONUS = 3
RECENT_RATINGS_BONUS = 3

# Experience
EXPERIENCE_JOB_STEPS = (1, 5, 15, 50, 100)
EXPERIENCE_STEP_POINTS = 20
HIGH_COMPLETION_RATE = 90
HIGH_COMPLETION_BONUS = 10
GOOD_COMPLETION_RATE = 80
GOOD_COMPLETION_BONUS = 5
RECENT_JOBS_FOR_BONUS = 2
RECENT_JOBS_BONUS = 5

# Location
CITY_MATCH_SCORE = 100
STATE_MATCH_SCORE = 70
NO_LOCATION_MATCH_SCORE = 30
UNKNOWN_LOCATION_SCORE = 50

# Category expertise
CATEGORY_BASE_SCORE = 80
SINGLE_CATEGORY_BONUS = 20
FEW_CATEGORIES_LIMIT = 3
FEW_CATEGORIES_BONUS = 10

# Recent activity: (minimum activity, score), checked in order
RECENT_ACTIVITY_STEPS = ((5, 100), (3, 80), (1, 60))
LOW_ACTIVITY_SCORE = 30

NEUTRAL_PRICE_SCORE = 70

# Membership
MEMBERSHIP_TIER_SCORES = {
    MembershipTier.BASIC: 0,
    MembershipTier.PROFESSIONAL: 25,
    MembershipTier.PREMIUM: 50,
    MembershipTier.ENTERPRISE: 75,
}
MEMBERSHIP_FEATURE_BONUSES = {
    'priority_assignment': 15,
    'emergency_service_enabled': 10,
    'featured_listing': 10,
    'advanced_analytics': 5,
    'priority_support': 5,
}

# Rationale
RATIONALE_MIN_SCORE = 80
RATIONALE_TOP_FACTORS = 3
DEFAULT_RATIONALE = 'Available vendor in your area'

SUB_SCORE_NAMES = (
    'rating',
    'experience',
    'availability',
    'location',
    'category_expertise',
    'recent_activity',
    'price_compatibility',
    'membership',
)


def clamp_score(value: float) -> float:
    return max(0.0, min(100.0, float(value)))


def calculate_rating_score(stats: VendorStatistics) -> float:
    if stats.total_ratings == 0:
        return NEUTRAL_RATING_SCORE

    score = (stats.average_rating / 5) * 100
    for step in RATING_COUNT_BONUS_STEPS:
        if stats.total_ratings >= step:
            score += RATING_COUNT_BONUS
    if stats.recent_ratings >= RECENT_RATINGS_FOR_BONUS:
        score += RECENT_RATINGS_BONUS

    return clamp_score(score)


def calculate_experience_score(stats: VendorStatistics) -> float:
    score = sum(EXPERIENCE_STEP_POINTS for step in EXPERIENCE_JOB_STEPS if stats.completed_jobs >= step)

    if stats.completion_rate >= HIGH_COMPLETION_RATE:
        score += HIGH_COMPLETION_BONUS
    elif stats.completion_rate >= GOOD_COMPLETION_RATE:
        score += GOOD_COMPLETION_BONUS

    if stats.recent_jobs >= RECENT_JOBS_FOR_BONUS:
        score += RECENT_JOBS_BONUS

    return clamp_score(score)


def calculate_location_score(vendor: Vendor, job: Job) -> float:
    """Coarse service-area text match; not a geographic distance."""
    city = job.location.city if job.location else None
    if not city or not vendor.service_area:
        return UNKNOWN_LOCATION_SCORE

    vendor_area = vendor.service_area.lower()
    if city.lower() in vendor_area:
        return CITY_MATCH_SCORE

    state = job.location.state
    if state and state.lower() in vendor_area:
        return STATE_MATCH_SCORE

    return NO_LOCATION_MATCH_SCORE


def calculate_category_expertise_score(vendor: Vendor, job: Job) -> float:
    categories = vendor.service_categories
    if not categories or job.category not in categories:
        return 0

    score = CATEGORY_BASE_SCORE
    if len(categories) == 1:
        score += SINGLE_CATEGORY_BONUS
    elif len(categories) <= FEW_CATEGORIES_LIMIT:
        score += FEW_CATEGORIES_BONUS

    return clamp_score(score)


def calculate_recent_activity_score(stats: VendorStatistics) -> float:
    for minimum, score in RECENT_ACTIVITY_STEPS:
        if stats.recent_activity >= minimum:
            return score
    return LOW_ACTIVITY_SCORE


def calculate_price_compatibility_score(vendor: Vendor, job: Job) -> float:
    # TODO: compare job.estimated_budget against the vendor's historical avg_job_value
    return NEUTRAL_PRICE_SCORE


def calculate_membership_score(vendor: Vendor) -> float:
    score = MEMBERSHIP_TIER_SCORES.get(vendor.membership_tier, 0)
    features = vendor.membership_features
    for flag, bonus in MEMBERSHIP_FEATURE_BONUSES.items():
        if getattr(features, flag, False):
            score += bonus
    return clamp_score(score)


def build_breakdown(raw_scores: Mapping[str, float], weights: ScoringWeights) -> Dict[str, SubScore]:
    """Pair each raw sub-score (clamped) with its weight, in canonical order."""
    weight_map = weights.as_dict()
    return {
        name: SubScore(score=clamp_score(raw_scores[name]), weight=weight_map[name])
        for name in SUB_SCORE_NAMES
    }


def total_score(breakdown: Mapping[str, SubScore]) -> float:
    return clamp_score(sum(entry.weighted for entry in breakdown.values()))


def _rationale_phrase(name: str, stats: VendorStatistics):
    if name == 'rating':
        return f"Excellent customer ratings ({stats.average_rating:.1f}/5)"
    if name == 'experience':
        return f"Highly experienced ({stats.completed_jobs} jobs completed)"
    if name == 'availability':
        return 'Available during requested time'
    if name == 'location':
        return 'Located in your service area'
    if name == 'category_expertise':
        return 'Specializes in this service category'
    if name == 'recent_activity':
        return 'Recently active on platform'
    return None


def generate_rationale(breakdown: Mapping[str, SubScore], stats: VendorStatistics) -> str:
    """
    Human-readable reason for a recommendation.

    Takes the three largest weighted contributions and keeps those whose
    raw score is at least 80. Price and membership have no phrase.
    """
    top = sorted(breakdown.items(), key=lambda item: item[1].weighted, reverse=True)
    top = top[:RATIONALE_TOP_FACTORS]

    reasons: List[str] = []
    for name, entry in top:
        if entry.score < RATIONALE_MIN_SCORE:
            continue
        phrase = _rationale_phrase(name, stats)
        if phrase:
            reasons.append(phrase)

    if not reasons:
        reasons.append(DEFAULT_RATIONALE)

    return ', '.join(reasons)


def compute_sub_scores(vendor: Vendor, job: Job, stats: VendorStatistics, availability_score: float) -> Dict[str, float]:
    return {
        'rating': calculate_rating_score(stats),
        'experience': calculate_experience_score(stats),
        'availability': availability_score,
        'location': calculate_location_score(vendor, job),
        'category_expertise': calculate_category_expertise_score(vendor, job),
        'recent_activity': calculate_recent_activity_score(stats),
        'price_compatibility': calculate_price_compatibility_score(vendor, job),
        'membership': calculate_membership_score(vendor),
    }
