"""
Parsing Service

Functions for parsing ingredient amounts and displaying them as fractions,
including serving-size scaling.
"""

import math
import re

from constants import UNICODE_FRACTIONS, COMMON_FRACTIONS


def float_to_fraction(value):
    """Convert float to fraction string for display."""
    if value is None or value == 0:
        return '0'
    # Check if it's a whole number
    if value == int(value):
        return str(int(value))
    # Split into whole and decimal parts
    whole = int(value)
    decimal = value - whole
    # Check common fractions (with tolerance)
    for dec, frac in COMMON_FRACTIONS.items():
        if abs(decimal - dec) < 0.02:
            if whole > 0:
                return f"{whole} {frac}"
            return frac
    # Fall back to decimal
    return f"{value:.2f}".rstrip('0').rstrip('.')


def normalize_fractions(text):
    """Replace Unicode fraction characters with decimal equivalents."""
    # First, normalize all whitespace (including non-breaking spaces) to regular spaces
    text = re.sub(r'[\s\u00a0\u2000-\u200b]+', ' ', text)

    for char, value in UNICODE_FRACTIONS.items():
        if char in text:
            # Mixed fraction like "1½" or "1 ½"
            pattern = r'(\d+)\s*' + re.escape(char)
            match = re.search(pattern, text)
            if match:
                whole = float(match.group(1))
                text = re.sub(pattern, str(whole + value), text)
            else:
                text = text.replace(char, str(value))
    return text


def parse_amount(value):
    """
    Parse an ingredient amount into a float.

    Accepts numbers and strings such as '2', '1.5', '1,5', '1/2', '1 1/2' and '1½'.
    Empty values give None; anything else that can't be read raises ValueError.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"Invalid amount: {value!r}")
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            raise ValueError(f"Invalid amount: {value!r}")
        return float(value)

    text = normalize_fractions(str(value)).strip()
    if not text:
        return None
    # Decimal comma
    text = re.sub(r'(\d),(\d)', r'\1.\2', text)

    mixed_match = re.match(r'^(\d+)\s+(\d+)\s*/\s*(\d+)$', text)
    if mixed_match:
        whole, num, denom = (float(g) for g in mixed_match.groups())
        if denom == 0:
            raise ValueError(f"Invalid amount: {value!r}")
        return whole + num / denom

    frac_match = re.match(r'^(\d+)\s*/\s*(\d+)$', text)
    if frac_match:
        num, denom = (float(g) for g in frac_match.groups())
        if denom == 0:
            raise ValueError(f"Invalid amount: {value!r}")
        return num / denom

    try:
        result = float(text)
    except ValueError:
        raise ValueError(f"Invalid amount: {value!r}")
    if not math.isfinite(result):
        raise ValueError(f"Invalid amount: {value!r}")
    return result


def scale_amount(amount, base_servings, servings):
    """Scale an amount written for `base_servings` to `servings`."""
    if amount is None:
        return None
    if not base_servings or not servings:
        return amount
    return amount * servings / base_servings


def format_amount(amount):
    """Display form of an amount; blank when the recipe gives none."""
    if amount is None:
        return ''
    return float_to_fraction(amount)
