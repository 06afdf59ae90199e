"""
Category normalization.

Maps a job category to the vendor service categories allowed to take it.
Every list ends with a general-purpose category so the candidate query
always has a usable filter, including for categories not listed here.
"""

from typing import Dict, Tuple

GENERAL_CATEGORY = 'home-repairs'  # acts as "general" for vendor profiles
FALLBACK_CATEGORIES: Tuple[str, ...] = (GENERAL_CATEGORY,)

CATEGORY_MAP: Dict[str, Tuple[str, ...]] = {
    # Vendor-style service categories
    'furniture-assembly': ('furniture-assembly', 'home-repairs'),
    'home-repairs': ('home-repairs',),
    'painting-services': ('painting-services', 'home-repairs'),
    'electrical-services': ('electrical-services', 'home-repairs'),
    'plumbing-services': ('plumbing-services', 'home-repairs'),
    'carpentry-services': ('carpentry-services', 'home-repairs'),
    'flooring-services': ('flooring-services', 'home-repairs'),
    'appliance-installation': ('appliance-installation', 'electrical-services', 'home-repairs'),
    'moving-services': ('moving-services', 'home-repairs'),
    'cleaning-services': ('cleaning-services', 'home-repairs'),
    'safety-security': ('safety-security', 'home-repairs'),
    'renovation': ('renovation', 'home-repairs'),

    # Single word job categories
    'assembly': ('assembly', 'home-repairs', 'general'),
    'maintenance': ('maintenance', 'home-repairs', 'general'),
    'painting': ('painting', 'home-repairs', 'general'),
    'electrical': ('electrical', 'home-repairs', 'general'),
    'plumbing': ('plumbing', 'home-repairs', 'general'),
    'flooring': ('flooring', 'home-repairs', 'general'),
    'installation': ('installation', 'home-repairs', 'general'),
    'moving': ('moving', 'home-repairs', 'general'),
    'cleaning': ('cleaning', 'home-repairs', 'general'),
    'security': ('security', 'home-repairs', 'general'),
    'gardening': ('gardening', 'renovation', 'general'),
    'hvac': ('electrical', 'home-repairs', 'general'),
    'carpentry': ('carpentry', 'home-repairs', 'general'),
    'general': ('general', 'home-repairs'),
}


def find_acceptable_categories(job_category: str) -> Tuple[str, ...]:
    """Return the ordered, de-duplicated vendor categories for a job category.

    Never empty and never raises; unknown or missing categories get
    ``FALLBACK_CATEGORIES``.
    """
    if not isinstance(job_category, str):
        return FALLBACK_CATEGORIES
    return CATEGORY_MAP.get(job_category, FALLBACK_CATEGORIES)
