"""
Export Service

Turns a finished week plan into an iCalendar payload and into the batch
of "cooked on" dates to write back to the recipe catalog.
"""

import copy
import logging
from collections import namedtuple
from datetime import datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from constants import DAY_NAMES
from .plans import normalize_active_days
from .weeks import check_day_id, week_day_to_date, week_day_to_iso_date

logger = logging.getLogger(__name__)

CalendarSettings = namedtuple(
    'CalendarSettings', ['timezone', 'dinner_start', 'dinner_minutes', 'prodid']
)
DEFAULT_CALENDAR_SETTINGS = CalendarSettings('Europe/Stockholm', '17:30', 60, '-//Mealplan//EN')

PLACEHOLDER_TITLE = 'Dinner'
UID_DOMAIN = 'mealplan'


def calendar_settings_from_config(config):
    """Build CalendarSettings from a Flask config mapping."""
    return CalendarSettings(
        timezone=config.get('PLANNER_TIMEZONE', DEFAULT_CALENDAR_SETTINGS.timezone),
        dinner_start=config.get('DINNER_START', DEFAULT_CALENDAR_SETTINGS.dinner_start),
        dinner_minutes=config.get('DINNER_MINUTES', DEFAULT_CALENDAR_SETTINGS.dinner_minutes),
        prodid=config.get('ICS_PRODID', DEFAULT_CALENDAR_SETTINGS.prodid),
    )


def _has_content(day):
    return day.get('recipe_id') is not None or bool((day.get('free_text') or '').strip())


def exportable_days(plan):
    """Active days that have a recipe or non-blank free text."""
    active = set(normalize_active_days(plan.get('active_day_indices')))
    return [copy.deepcopy(d) for d in plan['days'] if d['day_id'] in active and _has_content(d)]


def mark_cooked_updates(plan, today=None):
    """
    One {'id', 'last_cooked'} entry per recipe planned on an active day.

    A recipe planned on several days gets the latest of its dates.
    Free-text days have no recipe and are skipped.
    """
    active = set(normalize_active_days(plan.get('active_day_indices')))
    latest = {}

    for day in plan['days']:
        if day['day_id'] not in active or day['recipe_id'] is None:
            continue
        cook_date = week_day_to_iso_date(plan['week_identifier'], day['day_id'], today=today)
        # YYYY-MM-DD strings sort in date order
        existing = latest.get(day['recipe_id'])
        if existing is None or cook_date > existing:
            latest[day['recipe_id']] = cook_date

    return [{'id': recipe_id, 'last_cooked': cooked} for recipe_id, cooked in latest.items()]


def apply_cooked_updates(recipes, updates):
    """New recipe list with last_cooked replaced for the recipes in `updates`."""
    by_id = {u['id']: u['last_cooked'] for u in updates}
    result = []
    for recipe in recipes:
        recipe = dict(recipe)
        if recipe['id'] in by_id:
            recipe['last_cooked'] = by_id[recipe['id']]
        result.append(recipe)
    return result


def escape_ics_text(text):
    return (
        text.replace('\\', '\\\\')
        .replace('\r\n', '\\n')
        .replace('\n', '\\n')
        .replace(',', '\\,')
        .replace(';', '\\;')
    )


MAX_LINE_OCTETS = 75


def fold_ics_line(line):
    """
    Split a content line into chunks of at most 75 UTF-8 octets.

    Continuation chunks start with a single space, which counts towards
    their 75 octets. Multi-byte characters are never split.
    """
    chunks = []
    current = ''
    size = 0
    for char in line:
        width = len(char.encode('utf-8'))
        if size + width > MAX_LINE_OCTETS:
            chunks.append(current)
            current = ' '
            size = 1
        current += char
        size += width
    chunks.append(current)
    return '\r\n'.join(chunks)


def format_ics_datetime(value):
    """UTC timestamp in iCalendar basic format, e.g. 20260105T163000Z."""
    return value.astimezone(timezone.utc).strftime('%Y%m%dT%H%M%SZ')


def _zone(name):
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r, exporting in UTC", name)
        return timezone.utc


def _dinner_start(value):
    try:
        hours, minutes = str(value).split(':', 1)
        return time(int(hours), int(minutes))
    except ValueError:
        logger.warning("Invalid dinner start %r, using 17:30", value)
        return time(17, 30)


def event_uid(week_identifier, day):
    recipe_part = day['recipe_id'] if day.get('recipe_id') is not None else 'text'
    return f"{week_identifier}-{day['day_id']}-{recipe_part}@{UID_DOMAIN}"


def build_event(week_identifier, day, recipes_by_id, settings, now, today=None):
    """VEVENT lines for one planned day."""
    recipe = recipes_by_id.get(day['recipe_id']) if day.get('recipe_id') is not None else None

    title = ((recipe or {}).get('name') or '').strip() or (day.get('free_text') or '').strip() or PLACEHOLDER_TITLE
    source = (recipe or {}).get('source')
    description = f"Source: {source}" if source else ''

    cook_date = week_day_to_date(week_identifier, day['day_id'], today=today)
    start = datetime.combine(cook_date, _dinner_start(settings.dinner_start), tzinfo=_zone(settings.timezone))
    end = start + timedelta(minutes=int(settings.dinner_minutes))

    return [
        'BEGIN:VEVENT',
        f"UID:{escape_ics_text(event_uid(week_identifier, day))}",
        f"DTSTAMP:{format_ics_datetime(now)}",
        f"DTSTART:{format_ics_datetime(start)}",
        f"DTEND:{format_ics_datetime(end)}",
        f"SUMMARY:{escape_ics_text(title)}",
        f"DESCRIPTION:{escape_ics_text(description)}",
        'END:VEVENT',
    ]


def render_calendar(week_identifier, days, recipes, settings=None, now=None, today=None):
    """Full VCALENDAR text with one event per day in `days`."""
    if settings is None:
        settings = DEFAULT_CALENDAR_SETTINGS
    if now is None:
        now = datetime.now(timezone.utc)

    recipes_by_id = {r['id']: r for r in recipes}
    lines = [
        'BEGIN:VCALENDAR',
        'VERSION:2.0',
        f"PRODID:{settings.prodid}",
        'CALSCALE:GREGORIAN',
    ]
    for day in days:
        lines.extend(build_event(week_identifier, day, recipes_by_id, settings, now, today=today))
    lines.append('END:VCALENDAR')
    return '\r\n'.join(fold_ics_line(line) for line in lines) + '\r\n'


def calendar_filename(week_identifier, day_id=None, file_name=None):
    base = (file_name or '').strip()
    if not base:
        base = f"mealplan-{week_identifier}"
        if day_id is not None:
            base = f"{base}-{DAY_NAMES[day_id][:3]}"
    return f"{base}.ics"


def export_week(plan, recipes, settings=None, file_name=None, now=None, today=None):
    """(filename, ics_text) for all exportable days, or None when there is nothing to export."""
    days = exportable_days(plan)
    if not days:
        return None
    content = render_calendar(plan['week_identifier'], days, recipes, settings=settings, now=now, today=today)
    return calendar_filename(plan['week_identifier'], file_name=file_name), content


def export_day(plan, day_id, recipes, settings=None, file_name=None, now=None, today=None):
    """(filename, ics_text) for a single day, or None if that day has nothing to export."""
    check_day_id(day_id)
    days = [d for d in exportable_days(plan) if d['day_id'] == day_id]
    if not days:
        return None
    content = render_calendar(plan['week_identifier'], days, recipes, settings=settings, now=now, today=today)
    return calendar_filename(plan['week_identifier'], day_id=day_id, file_name=file_name), content
