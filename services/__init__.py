"""
Services Package

Business logic modules for the meal planner.
"""

from .weeks import (
    parse_week_identifier,
    is_valid_week_identifier,
    format_week_identifier,
    current_week_identifier,
    week_day_to_date,
    week_day_to_iso_date,
    week_dates,
)

from .plans import (
    normalize_active_days,
    normalize_day_plans,
    normalize_week_plan,
    empty_week_plan,
    find_week_plan,
    replace_week_plan,
    get_day_plan,
    set_day_recipe,
    set_day_free_text,
    clear_day,
    toggle_active_day,
)

from .recommend import (
    score_recipe,
    pick_smart_recipe,
    build_week_excludes,
    randomize_all,
    randomize_day,
)

from .export import (
    CalendarSettings,
    calendar_settings_from_config,
    exportable_days,
    mark_cooked_updates,
    apply_cooked_updates,
    render_calendar,
    export_week,
    export_day,
)

from .parsing import (
    float_to_fraction,
    parse_amount,
    scale_amount,
)

from .content import (
    normalize_category,
    normalize_servings,
    normalize_recipe_fields,
    normalize_recipe_content,
)

from .store import (
    StoreError,
    ChangeFeed,
    SqlStore,
    init_change_feed,
)

from .sync import (
    SyncResult,
    WriteGuard,
    PlannerSession,
    tentative_apply,
)

__all__ = [
    # Weeks
    'parse_week_identifier',
    'is_valid_week_identifier',
    'format_week_identifier',
    'current_week_identifier',
    'week_day_to_date',
    'week_day_to_iso_date',
    'week_dates',
    # Plans
    'normalize_active_days',
    'normalize_day_plans',
    'normalize_week_plan',
    'empty_week_plan',
    'find_week_plan',
    'replace_week_plan',
    'get_day_plan',
    'set_day_recipe',
    'set_day_free_text',
    'clear_day',
    'toggle_active_day',
    # Recommendation
    'score_recipe',
    'pick_smart_recipe',
    'build_week_excludes',
    'randomize_all',
    'randomize_day',
    # Export
    'CalendarSettings',
    'calendar_settings_from_config',
    'exportable_days',
    'mark_cooked_updates',
    'apply_cooked_updates',
    'render_calendar',
    'export_week',
    'export_day',
    # Parsing
    'float_to_fraction',
    'parse_amount',
    'scale_amount',
    # Content
    'normalize_category',
    'normalize_servings',
    'normalize_recipe_fields',
    'normalize_recipe_content',
    # Store
    'StoreError',
    'ChangeFeed',
    'SqlStore',
    'init_change_feed',
    # Sync
    'SyncResult',
    'WriteGuard',
    'PlannerSession',
    'tentative_apply',
]
