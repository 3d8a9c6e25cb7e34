"""
Sync Service

Keeps the in-memory recipe catalog and week plans in step with the store.

Local state is changed first (optimistic update) and then persisted; if
persisting fails the authoritative state is reloaded from the store and
replaces the local copy. Change notifications that arrive while one of our
own writes is in flight, or shortly after, are ignored by the WriteGuard.
"""

import logging
import random
import time
from collections import namedtuple
from contextlib import contextmanager
from datetime import date

from .content import normalize_recipe_content, normalize_recipe_fields, scale_ingredients
from .export import (
    DEFAULT_CALENDAR_SETTINGS,
    apply_cooked_updates,
    export_day,
    export_week,
    mark_cooked_updates,
)
from .plans import (
    clear_day,
    find_week_plan,
    replace_week_plan,
    set_day_free_text,
    set_day_recipe,
    toggle_active_day,
)
from .recommend import randomize_all, randomize_day
from .store import RECIPES, WEEK_PLANS, StoreError

logger = logging.getLogger(__name__)

IDLE = 'idle'
WRITING = 'writing'
COOLING_DOWN = 'cooling_down'

SyncResult = namedtuple('SyncResult', ['ok', 'error', 'value'], defaults=(None, None))


class WriteGuard:
    """
    Idle -> Writing -> CoolingDown -> Idle.

    Writing lasts while at least one write is open; CoolingDown lasts
    `cooldown` seconds after the last write closed. Expiry is checked
    against the clock when the state is read.
    """

    def __init__(self, cooldown=0.35, clock=time.monotonic):
        self.cooldown = cooldown
        self._clock = clock
        self._open_writes = 0
        self._cooling_until = None

    @property
    def state(self):
        if self._open_writes:
            return WRITING
        if self._cooling_until is not None and self._clock() < self._cooling_until:
            return COOLING_DOWN
        return IDLE

    def begin(self):
        self._open_writes += 1

    def end(self):
        if self._open_writes == 0:
            raise RuntimeError("WriteGuard.end() called without begin()")
        self._open_writes -= 1
        if self._open_writes == 0:
            self._cooling_until = self._clock() + self.cooldown

    def suppresses(self):
        """True while change notifications should be ignored."""
        return self.state != IDLE

    @contextmanager
    def guarding(self):
        self.begin()
        try:
            yield
        finally:
            self.end()


def tentative_apply(apply, persist, revert, action='save'):
    """
    Apply a change locally, then persist it.

    On a StoreError the change is reverted by `revert` (normally a reload
    from the store). If the revert fails too, the optimistic local state is
    kept and only logged.
    """
    apply()
    try:
        value = persist()
    except StoreError as exc:
        logger.error("%s failed: %s", action, exc)
        try:
            revert()
        except StoreError as reload_exc:
            logger.error("Reload after failed %s also failed: %s", action, reload_exc)
        return SyncResult(False, exc)
    return SyncResult(True, None, value)


class PlannerSession:
    """
    Owns the local recipe catalog and week plans for one household.

    The planning functions in services.recommend, services.plans and
    services.export never see this object; they get copies and return
    new values, which are applied here.
    """

    def __init__(self, store, guard=None, rng=None, today=None, calendar_settings=None):
        self.store = store
        self.guard = guard if guard is not None else WriteGuard()
        self.rng = rng if rng is not None else random.Random()
        self._today = today if today is not None else date.today
        self.calendar_settings = calendar_settings or DEFAULT_CALENDAR_SETTINGS
        self.recipes = []
        self.plans = []
        self._stale = set()
        self._markers = {}
        self._unsubscribers = []

    def today(self):
        return self._today()

    # ---- Loading and change notifications ----

    def load(self):
        """Replace local state with the store's. Raises StoreError."""
        markers = self.store.change_markers()
        self.recipes = self.store.load_recipes()
        self.plans = self.store.load_week_plans()
        self._markers = markers
        self._stale.clear()

    def subscribe(self):
        """Listen for committed changes made outside this session."""
        for entity in (RECIPES, WEEK_PLANS):
            self._unsubscribers.append(self.store.on_external_change(entity, self._on_external_change))

    def unsubscribe(self):
        while self._unsubscribers:
            self._unsubscribers.pop()()

    def _on_external_change(self, entity):
        if self.guard.suppresses():
            logger.debug("Ignoring %s change during own write (%s)", entity, self.guard.state)
            return
        # Reloaded on the next sync(); SQL can't run inside the commit hook
        self._stale.add(entity)

    @property
    def stale(self):
        return frozenset(self._stale)

    def sync(self):
        """
        Reload whatever changed elsewhere since the last sync.

        Entities flagged by the change feed are reloaded, and so are entities
        whose change markers moved, which catches commits made by other
        processes sharing the database.
        """
        markers = self._check_markers()
        if RECIPES in self._stale:
            self._stale.discard(RECIPES)
            self._reload_recipes(markers.get(RECIPES))
        if WEEK_PLANS in self._stale:
            self._stale.discard(WEEK_PLANS)
            self._reload_plans(markers.get(WEEK_PLANS))

    def _check_markers(self):
        if self.guard.suppresses():
            return {}
        try:
            markers = self.store.change_markers()
        except StoreError as exc:
            logger.error("Reading change markers failed: %s", exc)
            return {}
        for entity, marker in markers.items():
            if marker != self._markers.get(entity):
                logger.debug("%s changed outside this session", entity)
                self._stale.add(entity)
        return markers

    def _reload_recipes(self, marker=None):
        try:
            self.recipes = self.store.load_recipes()
        except StoreError as exc:
            logger.error("Reloading recipes failed: %s", exc)
            return
        if marker is not None:
            self._markers[RECIPES] = marker

    def _reload_plans(self, marker=None):
        try:
            self.plans = self.store.load_week_plans()
        except StoreError as exc:
            logger.error("Reloading week plans failed: %s", exc)
            return
        if marker is not None:
            self._markers[WEEK_PLANS] = marker

    def _revert_recipes(self):
        self.recipes = self.store.load_recipes()

    def _revert_plans(self):
        self.plans = self.store.load_week_plans()

    # ---- Week plans ----

    def week(self, week_identifier):
        """Copy of the plan for a week (an empty plan if none is stored)."""
        return find_week_plan(self.plans, week_identifier)

    def _commit_plan(self, plan, action):
        new_plans = replace_week_plan(self.plans, plan)

        def apply():
            self.plans = new_plans

        def persist():
            with self.guard.guarding():
                self.store.save_week_plans([plan])
            return plan

        return tentative_apply(apply, persist, self._revert_plans, action)

    def randomize_all(self, week_identifier):
        plan = self.week(week_identifier)
        updated = randomize_all(plan, self.recipes, rng=self.rng, today=self.today())
        if updated == plan:
            return SyncResult(True, None, plan)
        return self._commit_plan(updated, 'randomize week')

    def randomize_day(self, week_identifier, day_id):
        plan = self.week(week_identifier)
        updated = randomize_day(plan, day_id, self.recipes, rng=self.rng, today=self.today())
        if updated == plan:
            return SyncResult(True, None, plan)
        return self._commit_plan(updated, 'randomize day')

    def set_day_recipe(self, week_identifier, day_id, recipe_id):
        plan = set_day_recipe(self.week(week_identifier), day_id, recipe_id)
        return self._commit_plan(plan, 'save day')

    def set_day_free_text(self, week_identifier, day_id, text):
        plan = set_day_free_text(self.week(week_identifier), day_id, text)
        return self._commit_plan(plan, 'save day')

    def clear_day(self, week_identifier, day_id):
        plan = clear_day(self.week(week_identifier), day_id)
        return self._commit_plan(plan, 'clear day')

    def toggle_active_day(self, week_identifier, day_id):
        plan = toggle_active_day(self.week(week_identifier), day_id)
        return self._commit_plan(plan, 'toggle day')

    # ---- Export and cooked dates ----

    def export_week(self, week_identifier, file_name=None):
        return export_week(self.week(week_identifier), self.recipes, settings=self.calendar_settings,
                           file_name=file_name, today=self.today())

    def export_day(self, week_identifier, day_id, file_name=None):
        return export_day(self.week(week_identifier), day_id, self.recipes, settings=self.calendar_settings,
                          file_name=file_name, today=self.today())

    def mark_cooked(self, week_identifier):
        """Set last_cooked for every recipe planned on an active day of the week."""
        updates = mark_cooked_updates(self.week(week_identifier), today=self.today())
        if not updates:
            return SyncResult(True, None, [])

        def apply():
            self.recipes = apply_cooked_updates(self.recipes, updates)

        def persist():
            with self.guard.guarding():
                self.store.update_last_cooked(updates)
            return updates

        return tentative_apply(apply, persist, self._revert_recipes, 'mark cooked')

    # ---- Recipe catalog ----

    def get_recipe(self, recipe_id):
        for recipe in self.recipes:
            if recipe['id'] == recipe_id:
                return dict(recipe)
        return None

    def create_recipe(self, data):
        """
        Insert a new recipe. The id comes from the store, so this one is not optimistic.

        Raises ValueError for invalid fields.
        """
        fields = normalize_recipe_fields(data)
        try:
            with self.guard.guarding():
                recipe = self.store.create_recipe(fields)
        except StoreError as exc:
            logger.error("create recipe failed: %s", exc)
            return SyncResult(False, exc)
        self.recipes = sorted(self.recipes + [recipe], key=lambda r: (r['name'], r['id']))
        return SyncResult(True, None, recipe)

    def update_recipe(self, recipe_id, data):
        """Returns None if the recipe is unknown. Raises ValueError for invalid fields."""
        existing = self.get_recipe(recipe_id)
        if existing is None:
            return None
        updated = dict(existing)
        updated.update(normalize_recipe_fields(data, existing))
        new_recipes = sorted(
            [updated if r['id'] == recipe_id else r for r in self.recipes],
            key=lambda r: (r['name'], r['id']),
        )

        def apply():
            self.recipes = new_recipes

        def persist():
            with self.guard.guarding():
                self.store.save_recipes([updated])
            return updated

        return tentative_apply(apply, persist, self._revert_recipes, 'save recipe')

    def delete_recipe(self, recipe_id):
        """Returns None if the recipe is unknown."""
        if self.get_recipe(recipe_id) is None:
            return None
        new_recipes = [r for r in self.recipes if r['id'] != recipe_id]

        def apply():
            self.recipes = new_recipes

        def persist():
            with self.guard.guarding():
                return self.store.delete_recipe(recipe_id)

        return tentative_apply(apply, persist, self._revert_recipes, 'delete recipe')

    def recipe_content(self, recipe_id, servings=None):
        """Recipe with ingredients and steps, amounts scaled to `servings`. Raises StoreError."""
        content = self.store.load_recipe_content(recipe_id)
        if content is None:
            return None
        base_servings = content['recipe']['base_servings']
        servings = servings or base_servings
        content['servings'] = servings
        content['ingredients'] = scale_ingredients(content['ingredients'], base_servings, servings)
        return content

    def save_recipe_content(self, recipe_id, ingredients, steps):
        """Replace ingredients and steps. Returns None if the recipe is unknown; raises ValueError for bad rows."""
        existing = self.get_recipe(recipe_id)
        if existing is None:
            return None
        ingredients, steps = normalize_recipe_content(ingredients, steps)
        updated = dict(existing, has_recipe_content=bool(steps))
        new_recipes = [updated if r['id'] == recipe_id else r for r in self.recipes]

        def apply():
            self.recipes = new_recipes

        def persist():
            with self.guard.guarding():
                return self.store.save_recipe_content(recipe_id, ingredients, steps)

        return tentative_apply(apply, persist, self._revert_recipes, 'save recipe content')
