"""
Week Plan Service

Parse-and-normalize boundary for week plans read from the store, and the
plan mutations a user can apply to a single day or to a week's active days.

Every function returns new dicts; the plan passed in is never modified.

Shapes:
    day plan:  {'day_id': 0..6, 'recipe_id': int | None, 'free_text': str | None}
    week plan: {'week_identifier': 'YYYY-Www', 'days': [day plan, ...],
                'active_day_indices': [0..6, ...]}
"""

import copy
import math

from constants import ALL_DAYS
from .weeks import check_day_id


def _to_int(value):
    """Coerce ints, integral floats and numeric strings to int; anything else is None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or not number.is_integer():
        return None
    return int(number)


def _pick(raw, *keys):
    for key in keys:
        if key in raw:
            return raw[key]
    return None


def normalize_active_days(value):
    """Sorted, de-duplicated day indices in 0..6. Anything that isn't a list means all days."""
    if not isinstance(value, (list, tuple, set, frozenset)):
        return list(ALL_DAYS)
    days = {_to_int(v) for v in value}
    return sorted(d for d in days if d is not None and d in ALL_DAYS)


def normalize_day_plan(raw):
    """
    Coerce one untrusted day entry into a day plan, or None if it has no valid day.

    Free text wins when both a recipe id and free text are present.
    """
    if not isinstance(raw, dict):
        return None

    day_id = _to_int(_pick(raw, 'day_id', 'dayId'))
    if day_id is None or day_id not in ALL_DAYS:
        return None

    raw_recipe_id = _pick(raw, 'recipe_id', 'recipeId')
    recipe_id = None if raw_recipe_id in (None, '') else _to_int(raw_recipe_id)

    raw_text = _pick(raw, 'free_text', 'freeText')
    free_text = raw_text.strip() if isinstance(raw_text, str) else None
    if not free_text:
        free_text = None

    if free_text:
        recipe_id = None

    return {'day_id': day_id, 'recipe_id': recipe_id, 'free_text': free_text}


def normalize_day_plans(value):
    """One day plan per day_id (last entry wins), sorted by day_id."""
    if not isinstance(value, (list, tuple)):
        return []

    by_day = {}
    for raw in value:
        plan = normalize_day_plan(raw)
        if plan is not None:
            by_day[plan['day_id']] = plan

    return [by_day[day_id] for day_id in sorted(by_day)]


def normalize_week_plan(raw):
    """Build a week plan dict from a stored row or request payload."""
    if not isinstance(raw, dict):
        raw = {}
    return {
        'week_identifier': _pick(raw, 'week_identifier', 'weekIdentifier'),
        'days': normalize_day_plans(raw.get('days')),
        'active_day_indices': normalize_active_days(_pick(raw, 'active_day_indices', 'activeDayIndices')),
    }


def empty_week_plan(week_identifier, active_day_indices=None):
    return {
        'week_identifier': week_identifier,
        'days': [],
        'active_day_indices': normalize_active_days(
            list(ALL_DAYS) if active_day_indices is None else active_day_indices
        ),
    }


def find_week_plan(plans, week_identifier, active_day_indices=None):
    """Copy of the stored plan for a week, or a fresh empty plan if there is none yet."""
    for plan in plans:
        if plan['week_identifier'] == week_identifier:
            return copy.deepcopy(plan)
    return empty_week_plan(week_identifier, active_day_indices)


def replace_week_plan(plans, plan):
    """New plan list with `plan` stored under its week; other weeks are untouched."""
    others = [copy.deepcopy(p) for p in plans if p['week_identifier'] != plan['week_identifier']]
    others.append(copy.deepcopy(plan))
    return sorted(others, key=lambda p: p['week_identifier'])


def get_day_plan(plan, day_id):
    for day in plan['days']:
        if day['day_id'] == day_id:
            return day
    return None


def _with_day(plan, day_id, recipe_id, free_text):
    updated = copy.deepcopy(plan)
    days = [d for d in updated['days'] if d['day_id'] != day_id]
    days.append({'day_id': day_id, 'recipe_id': recipe_id, 'free_text': free_text})
    updated['days'] = sorted(days, key=lambda d: d['day_id'])
    return updated


def set_day_recipe(plan, day_id, recipe_id):
    """Assign a recipe (or None) to one day; any free text on that day is cleared."""
    check_day_id(day_id)
    return _with_day(plan, day_id, recipe_id, None)


def set_day_free_text(plan, day_id, text):
    """
    Write free text for one day, clearing its recipe.

    Text that is empty after trimming clears the day entirely.
    """
    check_day_id(day_id)
    cleaned = (text or '').strip()
    if not cleaned:
        return _with_day(plan, day_id, None, None)
    return _with_day(plan, day_id, None, cleaned)


def clear_day(plan, day_id):
    return set_day_free_text(plan, day_id, '')


def toggle_active_day(plan, day_id):
    """
    Switch a day on or off for the week.

    Day entries are kept as they are, so switching a day back on
    restores whatever was planned for it.
    """
    check_day_id(day_id)
    active = set(normalize_active_days(plan.get('active_day_indices')))
    active ^= {day_id}
    updated = copy.deepcopy(plan)
    updated['active_day_indices'] = normalize_active_days(active)
    return updated
