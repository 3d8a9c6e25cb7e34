"""
Store Service

SQLAlchemy-backed persistence for the recipe catalog and week plans,
scoped to a single owner, plus the change feed that tells interested
parties when recipe or week-plan rows were committed.

Everything crossing this boundary is a plain dict; week plans are passed
through the normalization in services.plans on the way in and out.
"""

import itertools
import logging
from collections import defaultdict
from contextlib import contextmanager

from flask import current_app, has_app_context
from sqlalchemy import event, func
from sqlalchemy.exc import SQLAlchemyError

from models import db, utcnow, Recipe, RecipeIngredient, RecipeStep, WeekPlan
from .plans import normalize_active_days, normalize_day_plans, normalize_week_plan
from .weeks import parse_iso_date

logger = logging.getLogger(__name__)

RECIPES = 'recipes'
WEEK_PLANS = 'week_plans'

# Table name -> change-feed entity
ENTITY_TABLES = {
    'recipe': RECIPES,
    'recipe_ingredient': RECIPES,
    'recipe_step': RECIPES,
    'week_plan': WEEK_PLANS,
}

FEED_EXTENSION = 'mealplan_change_feed'


class StoreError(Exception):
    """Raised when the database rejects a read or write."""
    pass


class ChangeFeed:
    """Callbacks per entity ('recipes' or 'week_plans'), called after a commit touching it."""

    def __init__(self):
        self._callbacks = defaultdict(list)

    def subscribe(self, entity, callback):
        """Register callback(entity); returns a function that unsubscribes it."""
        if entity not in (RECIPES, WEEK_PLANS):
            raise ValueError(f"Unknown entity: {entity!r}")
        self._callbacks[entity].append(callback)

        def unsubscribe():
            if callback in self._callbacks[entity]:
                self._callbacks[entity].remove(callback)

        return unsubscribe

    def notify(self, entities):
        for entity in sorted(entities):
            for callback in list(self._callbacks[entity]):
                callback(entity)


def init_change_feed(app, feed=None):
    """Attach a ChangeFeed to the app; commits made inside its app context publish to it."""
    if feed is None:
        feed = ChangeFeed()
    app.extensions[FEED_EXTENSION] = feed
    return feed


@event.listens_for(db.session, 'after_flush')
def _collect_changes(session, flush_context):
    changed = session.info.setdefault('changed_entities', set())
    for obj in itertools.chain(session.new, session.dirty, session.deleted):
        entity = ENTITY_TABLES.get(getattr(obj, '__tablename__', None))
        if entity:
            changed.add(entity)


@event.listens_for(db.session, 'after_commit')
def _publish_changes(session):
    changed = session.info.pop('changed_entities', set())
    if not changed or not has_app_context():
        return
    feed = current_app.extensions.get(FEED_EXTENSION)
    if feed is not None:
        feed.notify(changed)


@event.listens_for(db.session, 'after_rollback')
def _discard_changes(session):
    session.info.pop('changed_entities', None)


class SqlStore:
    """Owner-scoped reads and writes; every public method raises StoreError on database failure."""

    def __init__(self, owner_id, session=None, feed=None):
        self.owner_id = owner_id
        self.session = session if session is not None else db.session
        self.feed = feed

    @contextmanager
    def _transaction(self, action):
        try:
            yield
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StoreError(f"Failed to {action}: {exc}") from exc

    @contextmanager
    def _reading(self, action):
        try:
            yield
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StoreError(f"Failed to {action}: {exc}") from exc

    def on_external_change(self, entity, callback):
        """Subscribe to committed changes of 'recipes' or 'week_plans'."""
        if self.feed is None:
            raise StoreError("No change feed configured")
        return self.feed.subscribe(entity, callback)

    def change_markers(self):
        """
        Fingerprint per entity that changes whenever its rows are written.

        Unlike the change feed this also sees commits from other processes
        sharing the database.
        """
        with self._reading('read change markers'):
            recipes = (
                self.session.query(func.count(Recipe.id), func.max(Recipe.id), func.max(Recipe.updated_at))
                .filter(Recipe.owner_id == self.owner_id)
                .one()
            )
            plans = (
                self.session.query(func.count(WeekPlan.id), func.max(WeekPlan.updated_at))
                .filter(WeekPlan.owner_id == self.owner_id)
                .one()
            )
        return {RECIPES: tuple(recipes), WEEK_PLANS: tuple(plans)}

    # ---- Recipes ----

    def _recipe_query(self):
        return self.session.query(Recipe).filter(Recipe.owner_id == self.owner_id)

    def load_recipes(self):
        with self._reading('load recipes'):
            return [r.to_dict() for r in self._recipe_query().order_by(Recipe.name, Recipe.id).all()]

    def get_recipe(self, recipe_id):
        with self._reading('load recipe'):
            recipe = self._recipe_query().filter(Recipe.id == recipe_id).first()
            return recipe.to_dict() if recipe else None

    def create_recipe(self, fields):
        """Insert a recipe and return it with its new id."""
        recipe = Recipe(
            owner_id=self.owner_id,
            name=fields['name'],
            category=fields.get('category') or 'Other',
            source=fields.get('source'),
            base_servings=fields.get('base_servings') or 4,
            has_recipe_content=bool(fields.get('has_recipe_content')),
            last_cooked=parse_iso_date(fields.get('last_cooked')),
        )
        with self._transaction('create recipe'):
            self.session.add(recipe)
        return recipe.to_dict()

    def save_recipes(self, recipes):
        """Upsert recipes by id; recipes without an id (or unknown ids) are inserted."""
        with self._transaction('save recipes'):
            for data in recipes:
                recipe = None
                if data.get('id') is not None:
                    recipe = self._recipe_query().filter(Recipe.id == data['id']).first()
                if recipe is None:
                    recipe = Recipe(owner_id=self.owner_id)
                    self.session.add(recipe)
                recipe.name = data['name']
                recipe.category = data.get('category') or 'Other'
                recipe.source = data.get('source')
                recipe.base_servings = data.get('base_servings') or 4
                recipe.has_recipe_content = bool(data.get('has_recipe_content'))
                recipe.last_cooked = parse_iso_date(data.get('last_cooked'))

    def delete_recipe(self, recipe_id):
        """Delete a recipe and its content. Returns False if it did not exist."""
        with self._transaction('delete recipe'):
            recipe = self._recipe_query().filter(Recipe.id == recipe_id).first()
            if recipe is None:
                return False
            self.session.delete(recipe)
        return True

    def update_last_cooked(self, updates):
        """Write only the last_cooked column for each {'id', 'last_cooked'} entry."""
        if not updates:
            return
        with self._transaction('update last cooked dates'):
            wanted = {u['id']: parse_iso_date(u['last_cooked']) for u in updates}
            for recipe in self._recipe_query().filter(Recipe.id.in_(list(wanted))).all():
                recipe.last_cooked = wanted[recipe.id]

    # ---- Recipe content ----

    def load_recipe_content(self, recipe_id):
        """{'recipe', 'ingredients', 'steps'} for a recipe, or None if it doesn't exist."""
        with self._reading('load recipe content'):
            recipe = self._recipe_query().filter(Recipe.id == recipe_id).first()
            if recipe is None:
                return None
            return {
                'recipe': recipe.to_dict(),
                'ingredients': [i.to_dict() for i in recipe.ingredients],
                'steps': [s.to_dict() for s in recipe.steps],
            }

    def save_recipe_content(self, recipe_id, ingredients, steps):
        """
        Replace a recipe's ingredients and steps with already-normalized rows.

        Returns the saved content, or None if the recipe doesn't exist.
        """
        with self._transaction('save recipe content'):
            recipe = self._recipe_query().filter(Recipe.id == recipe_id).first()
            if recipe is None:
                return None
            recipe.ingredients = [
                RecipeIngredient(owner_id=self.owner_id, name=row['name'], amount=row['amount'],
                                 unit=row['unit'], optional=row['optional'], sort_order=row['sort_order'])
                for row in ingredients
            ]
            recipe.steps = [
                RecipeStep(owner_id=self.owner_id, text=row['text'], step_order=row['step_order'])
                for row in steps
            ]
            recipe.has_recipe_content = bool(steps)
            # Content rows don't dirty the recipe row on their own
            recipe.updated_at = utcnow()
        return self.load_recipe_content(recipe_id)

    # ---- Week plans ----

    def _plan_query(self):
        return self.session.query(WeekPlan).filter(WeekPlan.owner_id == self.owner_id)

    def load_week_plans(self):
        with self._reading('load week plans'):
            rows = self._plan_query().order_by(WeekPlan.week_identifier).all()
            return [
                normalize_week_plan({
                    'week_identifier': row.week_identifier,
                    'days': row.days,
                    'active_day_indices': row.active_day_indices,
                })
                for row in rows
            ]

    def save_week_plans(self, plans):
        """Upsert week plans by (owner, week_identifier)."""
        with self._transaction('save week plans'):
            for plan in plans:
                row = self._plan_query().filter(WeekPlan.week_identifier == plan['week_identifier']).first()
                if row is None:
                    row = WeekPlan(owner_id=self.owner_id, week_identifier=plan['week_identifier'])
                    self.session.add(row)
                row.days = normalize_day_plans(plan.get('days'))
                row.active_day_indices = normalize_active_days(plan.get('active_day_indices'))
