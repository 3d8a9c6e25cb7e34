"""Tests for week plan normalization and day mutations."""
import pytest

from services.plans import (
    clear_day,
    find_week_plan,
    get_day_plan,
    normalize_active_days,
    normalize_day_plans,
    normalize_week_plan,
    replace_week_plan,
    set_day_free_text,
    set_day_recipe,
    toggle_active_day,
)

from conftest import make_plan


def test_active_days_default_to_whole_week():
    assert normalize_active_days(None) == [0, 1, 2, 3, 4, 5, 6]
    assert normalize_active_days('0,1') == [0, 1, 2, 3, 4, 5, 6]


def test_active_days_are_cleaned():
    assert normalize_active_days([4, '2', 2, 9, -1, 'x', 1.0, 2.5, None]) == [1, 2, 4]
    assert normalize_active_days([]) == []


def test_day_plans_free_text_wins_over_recipe():
    days = normalize_day_plans([{'dayId': 1, 'recipeId': 3, 'freeText': '  Pizza night '}])
    assert days == [{'day_id': 1, 'recipe_id': None, 'free_text': 'Pizza night'}]


def test_day_plans_skip_invalid_and_keep_last_duplicate():
    days = normalize_day_plans([
        {'day_id': 3, 'recipe_id': 1},
        {'day_id': 7, 'recipe_id': 2},
        {'day_id': 'x'},
        'not a dict',
        {'day_id': 0, 'recipe_id': '', 'free_text': '   '},
        {'day_id': 3, 'recipe_id': '4'},
    ])
    assert days == [
        {'day_id': 0, 'recipe_id': None, 'free_text': None},
        {'day_id': 3, 'recipe_id': 4, 'free_text': None},
    ]


def test_day_plans_non_list_is_empty():
    assert normalize_day_plans({'day_id': 1}) == []
    assert normalize_day_plans(None) == []


def test_normalize_week_plan_from_row():
    plan = normalize_week_plan({'weekIdentifier': '2026-W02', 'days': None, 'activeDayIndices': 'bad'})
    assert plan == make_plan()


def test_set_day_recipe_clears_free_text():
    plan = make_plan(days=[{'day_id': 2, 'recipe_id': None, 'free_text': 'Leftovers'}])
    updated = set_day_recipe(plan, 2, 8)
    assert get_day_plan(updated, 2) == {'day_id': 2, 'recipe_id': 8, 'free_text': None}
    # input untouched
    assert get_day_plan(plan, 2)['free_text'] == 'Leftovers'


def test_set_day_free_text_clears_recipe():
    plan = make_plan(days=[{'day_id': 2, 'recipe_id': 8, 'free_text': None}])
    updated = set_day_free_text(plan, 2, '  Eating out  ')
    assert get_day_plan(updated, 2) == {'day_id': 2, 'recipe_id': None, 'free_text': 'Eating out'}


@pytest.mark.parametrize('text', ['', '   ', None])
def test_empty_free_text_clears_day(text):
    plan = make_plan(days=[{'day_id': 2, 'recipe_id': 8, 'free_text': None}])
    updated = set_day_free_text(plan, 2, text)
    assert get_day_plan(updated, 2) == {'day_id': 2, 'recipe_id': None, 'free_text': None}
    assert clear_day(plan, 2) == updated


def test_mutations_never_set_both_fields():
    plan = make_plan()
    for day_id in range(7):
        plan = set_day_recipe(plan, day_id, day_id + 1)
        plan = set_day_free_text(plan, day_id, f"text {day_id}" if day_id % 2 else '')
    for day in plan['days']:
        assert day['recipe_id'] is None or day['free_text'] is None


def test_mutation_only_touches_addressed_day():
    plan = make_plan(days=[
        {'day_id': 0, 'recipe_id': 1, 'free_text': None},
        {'day_id': 4, 'recipe_id': None, 'free_text': 'Tacos'},
    ], active=[0, 4])
    updated = set_day_recipe(plan, 2, 9)
    assert get_day_plan(updated, 0) == get_day_plan(plan, 0)
    assert get_day_plan(updated, 4) == get_day_plan(plan, 4)
    assert updated['active_day_indices'] == [0, 4]
    assert [d['day_id'] for d in updated['days']] == [0, 2, 4]


def test_toggle_twice_restores_active_days():
    plan = make_plan(active=[0, 2, 5])
    once = toggle_active_day(plan, 2)
    assert once['active_day_indices'] == [0, 5]
    twice = toggle_active_day(once, 2)
    assert twice['active_day_indices'] == [0, 2, 5]
    assert toggle_active_day(toggle_active_day(plan, 6), 6)['active_day_indices'] == [0, 2, 5]


def test_toggle_keeps_day_entries():
    plan = make_plan(days=[{'day_id': 3, 'recipe_id': 7, 'free_text': None}])
    off = toggle_active_day(plan, 3)
    assert 3 not in off['active_day_indices']
    assert get_day_plan(off, 3)['recipe_id'] == 7
    assert get_day_plan(toggle_active_day(off, 3), 3)['recipe_id'] == 7


def test_out_of_range_day_raises():
    with pytest.raises(ValueError):
        set_day_recipe(make_plan(), 7, 1)
    with pytest.raises(ValueError):
        toggle_active_day(make_plan(), -1)


def test_find_and_replace_week_plan():
    plans = [make_plan('2026-W03'), make_plan('2026-W01')]
    missing = find_week_plan(plans, '2026-W02')
    assert missing == make_plan('2026-W02')

    stored = replace_week_plan(plans, set_day_recipe(missing, 0, 1))
    assert [p['week_identifier'] for p in stored] == ['2026-W01', '2026-W02', '2026-W03']
    assert get_day_plan(find_week_plan(stored, '2026-W02'), 0)['recipe_id'] == 1
    assert len(plans) == 2
