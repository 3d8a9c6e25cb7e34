import pytest

from services.content import (
    normalize_category,
    normalize_ingredients,
    normalize_recipe_fields,
    normalize_servings,
    normalize_steps,
    scale_ingredients,
)
from services.parsing import float_to_fraction, format_amount, parse_amount, scale_amount
from utils.sanitizer import (
    sanitize_filename,
    sanitize_free_text,
    sanitize_line,
    sanitize_source,
    sanitize_text,
    sanitize_url,
)


@pytest.mark.parametrize('raw, expected', [
    ('2', 2.0),
    (3, 3.0),
    ('1.5', 1.5),
    ('1,5', 1.5),
    ('1/2', 0.5),
    ('1 1/2', 1.5),
    ('½', 0.5),
    ('1½', 1.5),
    ('2 ¼', 2.25),
])
def test_parse_amount(raw, expected):
    assert parse_amount(raw) == pytest.approx(expected)


@pytest.mark.parametrize('raw', [None, '', '   '])
def test_parse_amount_empty(raw):
    assert parse_amount(raw) is None


@pytest.mark.parametrize('raw', ['a pinch', '1/0', True, float('nan'), 'inf'])
def test_parse_amount_invalid(raw):
    with pytest.raises(ValueError):
        parse_amount(raw)


def test_fraction_display():
    assert float_to_fraction(2.0) == '2'
    assert float_to_fraction(1.5) == '1 1/2'
    assert float_to_fraction(1 / 3) == '1/3'
    assert float_to_fraction(0.1) == '0.1'
    assert format_amount(None) == ''


def test_scale_amount():
    assert scale_amount(2, 4, 6) == 3
    assert scale_amount(None, 4, 6) is None
    assert scale_amount(2, 0, 6) == 2


def test_normalize_category():
    assert normalize_category('fish') == 'Fish'
    assert normalize_category(' Weekend ') == 'Weekend'
    assert normalize_category('Dessert') == 'Other'
    assert normalize_category(None) == 'Other'


def test_normalize_servings():
    assert normalize_servings('6') == 6
    assert normalize_servings(None) == 4
    assert normalize_servings('many') == 4
    assert normalize_servings(0) == 1
    assert normalize_servings(500) == 100


def test_normalize_recipe_fields():
    fields = normalize_recipe_fields({
        'name': '  Lasagne\n',
        'category': 'pasta',
        'source': 'javascript:alert(1)',
        'base_servings': '2',
    })
    assert fields == {
        'name': 'Lasagne', 'category': 'Pasta', 'source': None, 'base_servings': 2, 'last_cooked': None,
    }


def test_normalize_recipe_fields_keeps_existing_values():
    existing = {'name': 'Soup', 'category': 'Other', 'source': 'Grandma', 'base_servings': 6,
                'last_cooked': '2026-01-05'}
    fields = normalize_recipe_fields({'category': 'Soup'}, existing=existing)
    assert fields == {'name': 'Soup', 'category': 'Soup', 'source': 'Grandma', 'base_servings': 6,
                      'last_cooked': '2026-01-05'}


def test_normalize_recipe_fields_last_cooked():
    existing = {'name': 'Soup', 'last_cooked': '2026-01-05'}
    assert normalize_recipe_fields({'last_cooked': None}, existing)['last_cooked'] is None
    assert normalize_recipe_fields({'last_cooked': ''}, existing)['last_cooked'] is None
    assert normalize_recipe_fields({'last_cooked': '2025-12-24'}, existing)['last_cooked'] == '2025-12-24'
    with pytest.raises(ValueError, match='last_cooked'):
        normalize_recipe_fields({'last_cooked': 'yesterday'}, existing)


def test_normalize_recipe_fields_requires_name():
    with pytest.raises(ValueError, match='name is required'):
        normalize_recipe_fields({'name': '   '})
    with pytest.raises(ValueError):
        normalize_recipe_fields({})


def test_normalize_ingredients():
    rows = normalize_ingredients([
        {'name': ' Flour ', 'amount': '1 1/2', 'unit': 'dl'},
        {'name': '', 'amount': '', 'unit': ''},
        {'name': 'Salt', 'optional': True},
    ])
    assert rows == [
        {'name': 'Flour', 'amount': 1.5, 'unit': 'dl', 'optional': False, 'sort_order': 0},
        {'name': 'Salt', 'amount': None, 'unit': None, 'optional': True, 'sort_order': 1},
    ]


def test_normalize_ingredients_bad_amount():
    with pytest.raises(ValueError, match='index 1'):
        normalize_ingredients([{'name': 'Eggs', 'amount': 2}, {'name': 'Milk', 'amount': 'lots'}])


def test_normalize_steps():
    steps = normalize_steps(['  Boil water ', {'text': ''}, {'text': 'Add pasta'}, None])
    assert steps == [
        {'text': 'Boil water', 'step_order': 1},
        {'text': 'Add pasta', 'step_order': 2},
    ]
    assert normalize_steps(None) == []


def test_scale_ingredients():
    rows = [{'name': 'Flour', 'amount': 1.0, 'unit': 'dl'}, {'name': 'Salt', 'amount': None, 'unit': None}]
    scaled = scale_ingredients(rows, 4, 6)
    assert scaled[0]['amount'] == 1.5
    assert scaled[0]['display_amount'] == '1 1/2'
    assert scaled[1]['display_amount'] == ''
    assert rows[0]['amount'] == 1.0


def test_sanitize_text_and_line():
    assert sanitize_text('a\x00b  ') == 'ab'
    assert sanitize_text(None) == ''
    assert sanitize_text('line one\nline two') == 'line one\nline two'
    assert sanitize_line('a\n   b') == 'a b'
    assert len(sanitize_free_text('x' * 300)) == 200


def test_sanitize_url():
    assert sanitize_url('https://example.com/recipe') == 'https://example.com/recipe'
    assert sanitize_url('ftp://example.com') == ''
    assert sanitize_url('javascript:alert(1)') == ''
    assert sanitize_url(None) == ''


def test_sanitize_source():
    assert sanitize_source('Source: page 12') == 'Source: page 12'
    assert sanitize_source("Grandma's notebook") == "Grandma's notebook"
    assert sanitize_source('https://example.com/x') == 'https://example.com/x'
    assert sanitize_source('data:text/html,hi') is None
    assert sanitize_source('   ') is None


def test_sanitize_filename():
    assert sanitize_filename('../ramen night') == 'ramen_night'
    assert sanitize_filename('week 2 (draft)') == 'week_2_draft'
    assert sanitize_filename(None) == ''
