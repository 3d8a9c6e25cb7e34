"""
Recommendation Service

Smart weighted-random recipe picker used to fill a week. Candidates are
scored so that recipes already planned this week, categories already
planned this week and recently cooked dishes sink, then one recipe is
drawn at random from the best-scoring slice.
"""

import copy
import logging
import random
from datetime import date

from constants import (
    BASE_SCORE,
    REUSED_RECIPE_PENALTY,
    REUSED_CATEGORY_PENALTY,
    NEVER_COOKED_BONUS,
    MAX_FRESHNESS_BONUS,
    MIN_SCORE,
    TOP_SLICE_SHARE,
)
from .plans import normalize_active_days
from .weeks import check_day_id, days_between, parse_iso_date

logger = logging.getLogger(__name__)


def score_recipe(recipe, used_ids, used_categories, today=None):
    """Score one candidate; higher is better and the result is never below MIN_SCORE."""
    if today is None:
        today = date.today()

    score = BASE_SCORE
    if recipe['id'] in used_ids:
        score -= REUSED_RECIPE_PENALTY
    if recipe.get('category') in used_categories:
        score -= REUSED_CATEGORY_PENALTY

    last_cooked = parse_iso_date(recipe.get('last_cooked'))
    if last_cooked is None:
        score += NEVER_COOKED_BONUS
    else:
        # A date in the future counts as cooked today
        elapsed = max(0, days_between(today, last_cooked))
        score += min(elapsed, MAX_FRESHNESS_BONUS)

    return max(score, MIN_SCORE)


def pick_smart_recipe(recipes, used_ids, used_categories, rng=None, today=None):
    """
    Pick a recipe at random from the top-scoring fifth of the catalog.

    Returns None when there is nothing to pick from.
    """
    if not recipes:
        return None
    if rng is None:
        rng = random

    scored = [(score_recipe(r, used_ids, used_categories, today), r) for r in recipes]
    scored.sort(key=lambda item: item[0], reverse=True)

    top_count = max(1, int(len(scored) * TOP_SLICE_SHARE))
    return rng.choice(scored[:top_count])[1]


def build_week_excludes(plan, recipes, skip_day_ids=()):
    """Recipe ids and categories planned in the week, ignoring the days in `skip_day_ids`."""
    by_id = {r['id']: r for r in recipes}
    used_ids = set()
    used_categories = set()

    for day in plan['days']:
        if day['day_id'] in skip_day_ids or day['recipe_id'] is None:
            continue
        used_ids.add(day['recipe_id'])
        recipe = by_id.get(day['recipe_id'])
        if recipe is not None:
            used_categories.add(recipe.get('category'))

    return used_ids, used_categories


def randomize_all(plan, recipes, rng=None, today=None):
    """
    Fill every active day of the week with a fresh pick.

    Inactive days keep their entries and still count as used, so the new
    picks avoid repeating them. Each pick is added to the used sets before
    the next day is filled.
    """
    result = copy.deepcopy(plan)
    if not recipes:
        logger.debug("Randomize %s skipped: recipe catalog is empty", plan.get('week_identifier'))
        return result

    active = normalize_active_days(plan.get('active_day_indices'))
    used_ids, used_categories = build_week_excludes(plan, recipes, skip_day_ids=set(active))

    chosen = {}
    for day_id in active:
        recipe = pick_smart_recipe(recipes, used_ids, used_categories, rng=rng, today=today)
        if recipe is None:
            continue
        used_ids.add(recipe['id'])
        used_categories.add(recipe.get('category'))
        chosen[day_id] = {'day_id': day_id, 'recipe_id': recipe['id'], 'free_text': None}

    days = [d for d in result['days'] if d['day_id'] not in chosen]
    days.extend(chosen.values())
    result['days'] = sorted(days, key=lambda d: d['day_id'])
    return result


def randomize_day(plan, day_id, recipes, rng=None, today=None):
    """Pick a new recipe for one day, avoiding what the other six days already use."""
    check_day_id(day_id)
    result = copy.deepcopy(plan)
    if not recipes:
        return result

    used_ids, used_categories = build_week_excludes(plan, recipes, skip_day_ids={day_id})
    recipe = pick_smart_recipe(recipes, used_ids, used_categories, rng=rng, today=today)
    if recipe is None:
        return result

    days = [d for d in result['days'] if d['day_id'] != day_id]
    days.append({'day_id': day_id, 'recipe_id': recipe['id'], 'free_text': None})
    result['days'] = sorted(days, key=lambda d: d['day_id'])
    return result
