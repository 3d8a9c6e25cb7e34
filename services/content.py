"""
Recipe Content Service

Normalization for recipe metadata and for recipe content (ingredient
lines and cooking steps), plus serving-size scaling for display.
"""

from constants import (
    RECIPE_CATEGORIES,
    DEFAULT_CATEGORY,
    DEFAULT_SERVINGS,
    MIN_SERVINGS,
    MAX_SERVINGS,
    MAX_LENGTHS,
)
from utils.sanitizer import sanitize_line, sanitize_text, sanitize_recipe_name, sanitize_source
from .parsing import parse_amount, scale_amount, format_amount
from .weeks import parse_iso_date


def normalize_category(category):
    """Whitelisted category, matched case-insensitively; unknown values become 'Other'."""
    if isinstance(category, str):
        wanted = category.strip().lower()
        for known in RECIPE_CATEGORIES:
            if known.lower() == wanted:
                return known
    return DEFAULT_CATEGORY


def normalize_servings(value, default=DEFAULT_SERVINGS):
    """Servings as an int within MIN_SERVINGS..MAX_SERVINGS."""
    try:
        servings = int(value) if value not in (None, '') else default
    except (TypeError, ValueError):
        servings = default
    return max(MIN_SERVINGS, min(MAX_SERVINGS, servings))


def normalize_last_cooked(value):
    """ISO date string, or None to clear it. Raises ValueError for text that isn't a date."""
    if value in (None, ''):
        return None
    parsed = parse_iso_date(value)
    if parsed is None:
        raise ValueError(f"Invalid last_cooked date: {value!r}")
    return parsed.isoformat()


def normalize_recipe_fields(data, existing=None):
    """
    Validate the editable recipe fields from a request payload.

    Fields missing from `data` keep their value from `existing`.
    Raises ValueError when the recipe would end up without a name
    or last_cooked isn't a date.
    """
    existing = existing or {}

    name = sanitize_recipe_name(data['name']) if 'name' in data else existing.get('name', '')
    if not name:
        raise ValueError("Recipe name is required")

    category = normalize_category(data['category'] if 'category' in data else existing.get('category'))
    source = sanitize_source(data['source']) if 'source' in data else existing.get('source')
    base_servings = normalize_servings(
        data['base_servings'] if 'base_servings' in data else existing.get('base_servings')
    )
    last_cooked = normalize_last_cooked(data['last_cooked']) if 'last_cooked' in data else existing.get('last_cooked')

    return {
        'name': name,
        'category': category,
        'source': source,
        'base_servings': base_servings,
        'last_cooked': last_cooked,
    }


def normalize_ingredients(rows):
    """
    Clean ingredient rows; blank rows are dropped and sort_order renumbered from 0.

    Raises ValueError naming the row index when an amount can't be read.
    """
    result = []
    for index, row in enumerate(rows or []):
        if not isinstance(row, dict):
            raise ValueError(f"Invalid ingredient at index {index}")

        name = sanitize_line(row.get('name'), max_length=MAX_LENGTHS['ingredient_name'])
        unit = sanitize_line(row.get('unit'), max_length=MAX_LENGTHS['unit']) or None
        try:
            amount = parse_amount(row.get('amount'))
        except ValueError:
            raise ValueError(f"Invalid ingredient amount at index {index}")

        if not name and amount is None and not unit:
            continue

        result.append({
            'name': name,
            'amount': amount,
            'unit': unit,
            'optional': bool(row.get('optional')),
        })

    for sort_order, row in enumerate(result):
        row['sort_order'] = sort_order
    return result


def normalize_steps(rows):
    """Non-empty steps numbered from 1. Accepts strings or {'text': ...} dicts."""
    texts = []
    for row in rows or []:
        text = row.get('text') if isinstance(row, dict) else row
        text = sanitize_text(text, max_length=MAX_LENGTHS['step_text'])
        if text:
            texts.append(text)
    return [{'text': text, 'step_order': order} for order, text in enumerate(texts, start=1)]


def normalize_recipe_content(ingredients, steps):
    return normalize_ingredients(ingredients), normalize_steps(steps)


def scale_ingredients(ingredients, base_servings, servings):
    """Copies of the ingredient rows with amounts scaled and a display string added."""
    scaled = []
    for row in ingredients:
        row = dict(row)
        row['amount'] = scale_amount(row.get('amount'), base_servings, servings)
        row['display_amount'] = format_amount(row['amount'])
        scaled.append(row)
    return scaled
