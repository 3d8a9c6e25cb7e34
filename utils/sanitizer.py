"""
Input Sanitization Module

Cleans user input and data read back from the store before it reaches
the planner: strips control characters, collapses whitespace, enforces
length limits and rejects dangerous URL schemes.

Output escaping (HTML, iCalendar) is done where the text is rendered.
"""

import re
from urllib.parse import urlparse

from constants import MAX_LENGTHS

CONTROL_CHARS = re.compile(r'[\x00-\x08\x0b-\x1f\x7f-\x9f]')

# Schemes that could execute code when used in href or src attributes
DANGEROUS_SCHEMES = {
    'javascript', 'data', 'vbscript', 'file',
    'blob', 'about', 'chrome', 'moz-extension'
}


def sanitize_text(text, max_length=10000):
    """
    Sanitize free-form text.

    Args:
        text: The text to sanitize (can be None)
        max_length: Maximum allowed length (default 10000)

    Returns:
        Stripped string without control characters, truncated if necessary
    """
    if text is None:
        return ''

    if not isinstance(text, str):
        text = str(text)

    text = CONTROL_CHARS.sub('', text).strip()

    if len(text) > max_length:
        text = text[:max_length].rstrip()

    return text


def sanitize_line(text, max_length=200):
    """Single-line text: like sanitize_text but newlines and runs of spaces collapse to one space."""
    text = sanitize_text(text, max_length=10000)
    text = re.sub(r'\s+', ' ', text)
    if len(text) > max_length:
        text = text[:max_length].rstrip()
    return text


def sanitize_url(url):
    """
    Sanitize a URL by rejecting dangerous schemes.

    Prevents javascript:, data:, vbscript:, and other dangerous URL schemes
    that could execute code when used in href or src attributes.

    Args:
        url: The URL to validate (can be None)

    Returns:
        The URL if safe, empty string if unsafe or invalid
    """
    if not url:
        return ''

    if not isinstance(url, str):
        return ''

    url = url.strip()

    try:
        parsed = urlparse(url)
    except ValueError:
        return ''

    scheme = parsed.scheme.lower()

    # Only allow http and https
    if scheme not in ('http', 'https'):
        return ''

    url_lower = url.lower()
    for dangerous in DANGEROUS_SCHEMES:
        if dangerous + ':' in url_lower:
            return ''
        # Check for URL-encoded versions
        if dangerous.replace('a', '%61') in url_lower:
            return ''

    return url


def sanitize_recipe_name(name):
    """Recipe display name; empty string if nothing usable remains."""
    return sanitize_line(name, max_length=MAX_LENGTHS['recipe_name'])


def sanitize_free_text(text):
    """Free-text day entry, e.g. 'Leftovers' or 'Eating out'."""
    return sanitize_line(text, max_length=MAX_LENGTHS['free_text'])


def sanitize_source(source):
    """
    Recipe provenance: either a URL or a short text like 'Grandma's notebook'.

    Text that looks like a URL must pass sanitize_url; returns None when empty.
    """
    source = sanitize_line(source, max_length=MAX_LENGTHS['source'])
    if not source:
        return None
    scheme = source.split(':', 1)[0].strip().lower()
    if '://' in source or scheme in DANGEROUS_SCHEMES:
        return sanitize_url(source) or None
    return source


def sanitize_filename(name, max_length=100):
    """Download file base name: letters, digits, dots, dashes and underscores only."""
    name = sanitize_line(name, max_length=max_length).replace(' ', '_')
    name = re.sub(r'[^A-Za-z0-9._-]', '', name)
    return name.strip('._-')
