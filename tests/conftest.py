import os
import sys
from datetime import date

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import create_app, init_db  # noqa: E402

TODAY = date(2026, 10, 19)


def make_recipe(recipe_id, category='Other', last_cooked=None, name=None, source=None):
    return {
        'id': recipe_id,
        'name': name or f"Recipe {recipe_id}",
        'category': category,
        'source': source,
        'base_servings': 4,
        'has_recipe_content': False,
        'last_cooked': last_cooked,
    }


def make_plan(week='2026-W02', days=None, active=None):
    return {
        'week_identifier': week,
        'days': days or [],
        'active_day_indices': list(range(7)) if active is None else active,
    }


@pytest.fixture
def app():
    app = create_app('testing')
    init_db(app)
    yield app


@pytest.fixture
def client(app):
    return app.test_client()
