"""
Recommendation Tunables

Scores used by the smart recipe picker. The values are empirical; keep
their ratios if they are ever adjusted.
"""

BASE_SCORE = 100
REUSED_RECIPE_PENALTY = 95
REUSED_CATEGORY_PENALTY = 80
NEVER_COOKED_BONUS = 20
MAX_FRESHNESS_BONUS = 30
MIN_SCORE = 1

# Share of the best-scoring candidates the random pick is drawn from
TOP_SLICE_SHARE = 0.2
