"""
Constants Package

Whitelists, tunables and lookup tables shared across the application.
"""

from .validation import (
    RECIPE_CATEGORIES,
    DEFAULT_CATEGORY,
    DAY_NAMES,
    ALL_DAYS,
    DEFAULT_SERVINGS,
    MIN_SERVINGS,
    MAX_SERVINGS,
    MAX_LENGTHS,
)
from .recommendation import (
    BASE_SCORE,
    REUSED_RECIPE_PENALTY,
    REUSED_CATEGORY_PENALTY,
    NEVER_COOKED_BONUS,
    MAX_FRESHNESS_BONUS,
    MIN_SCORE,
    TOP_SLICE_SHARE,
)
from .units import COMMON_FRACTIONS, UNICODE_FRACTIONS
