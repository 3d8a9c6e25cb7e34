from flask import Flask, Response, request, jsonify, abort, current_app
from flask_migrate import Migrate
from sqlalchemy import event
from sqlalchemy.engine import Engine
import logging
import random
import sqlite3

from config import get_config
from constants import ALL_DAYS, DAY_NAMES, RECIPE_CATEGORIES
from models import db
from services import (
    PlannerSession,
    SqlStore,
    StoreError,
    WriteGuard,
    calendar_settings_from_config,
    current_week_identifier,
    init_change_feed,
    is_valid_week_identifier,
    normalize_servings,
    week_dates,
)
from utils.sanitizer import sanitize_filename, sanitize_free_text

logger = logging.getLogger(__name__)

migrate = Migrate()

SESSION_EXTENSION = 'planner_session'


def create_app(env=None, **overrides):
    app = Flask(__name__)
    app.config.from_object(get_config(env))
    app.config.update(overrides)

    log_level = str(app.config.get('LOG_LEVEL', 'INFO')).upper()
    logging.basicConfig(level=getattr(logging, log_level, logging.INFO))

    db.init_app(app)
    migrate.init_app(app, db)
    init_change_feed(app)

    register_routes(app)
    return app


def get_planner():
    """The app's PlannerSession, created and loaded on first use."""
    planner = current_app.extensions.get(SESSION_EXTENSION)
    if planner is None:
        store = SqlStore(
            current_app.config['OWNER_ID'],
            feed=current_app.extensions['mealplan_change_feed'],
        )
        planner = PlannerSession(
            store,
            guard=WriteGuard(cooldown=current_app.config['WRITE_GUARD_COOLDOWN']),
            rng=random.Random(),
            calendar_settings=calendar_settings_from_config(current_app.config),
        )
        planner.load()
        planner.subscribe()
        current_app.extensions[SESSION_EXTENSION] = planner
    return planner


# ============================================
# HELPERS
# ============================================

def check_week(week):
    if not is_valid_week_identifier(week):
        abort(400, description=f"Invalid week identifier {week!r}, expected YYYY-Www")
    return week


def check_day(day_id):
    if day_id not in ALL_DAYS:
        abort(404, description=f"No such day: {day_id}")
    return day_id


def json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        abort(400, description="Expected a JSON object")
    return data


def week_payload(planner, week):
    plan = planner.week(week)
    plan['days_of_week'] = [
        {'day_id': day_id, 'name': DAY_NAMES[day_id], 'date': day.isoformat()}
        for day_id, day in enumerate(week_dates(week))
    ]
    return plan


def save_failed(result):
    return jsonify(error='Could not save changes, showing the last saved state', detail=str(result.error)), 503


def calendar_response(export):
    if export is None:
        return '', 204
    filename, content = export
    return Response(
        content,
        mimetype='text/calendar',
        headers={'Content-Disposition': f'attachment; filename="{filename}"'},
    )


def export_file_name():
    return sanitize_filename(request.args.get('file_name')) or None


def register_routes(app):

    @app.before_request
    def sync_planner():
        try:
            get_planner().sync()
        except StoreError as exc:
            logger.error("Loading planner state failed: %s", exc)
            abort(503, description='Database unavailable')

    @app.errorhandler(400)
    @app.errorhandler(404)
    @app.errorhandler(503)
    def json_error(error):
        return jsonify(error=error.description), error.code

    # ============================================
    # ROUTES - RECIPES
    # ============================================

    @app.route('/api/categories')
    def categories():
        return jsonify(categories=list(RECIPE_CATEGORIES))

    @app.route('/api/recipes')
    def recipes_list():
        planner = get_planner()
        category = request.args.get('category', 'all')
        recipes = planner.recipes
        if category != 'all':
            recipes = [r for r in recipes if r['category'] == category]
        return jsonify(recipes=recipes)

    @app.route('/api/recipes', methods=['POST'])
    def recipe_add():
        try:
            result = get_planner().create_recipe(json_body())
        except ValueError as exc:
            abort(400, description=str(exc))
        if not result.ok:
            return save_failed(result)
        return jsonify(recipe=result.value), 201

    @app.route('/api/recipes/<int:recipe_id>')
    def recipe_view(recipe_id):
        recipe = get_planner().get_recipe(recipe_id)
        if recipe is None:
            abort(404, description='Recipe not found')
        return jsonify(recipe=recipe)

    @app.route('/api/recipes/<int:recipe_id>', methods=['PUT'])
    def recipe_edit(recipe_id):
        try:
            result = get_planner().update_recipe(recipe_id, json_body())
        except ValueError as exc:
            abort(400, description=str(exc))
        if result is None:
            abort(404, description='Recipe not found')
        if not result.ok:
            return save_failed(result)
        return jsonify(recipe=result.value)

    @app.route('/api/recipes/<int:recipe_id>', methods=['DELETE'])
    def recipe_delete(recipe_id):
        result = get_planner().delete_recipe(recipe_id)
        if result is None:
            abort(404, description='Recipe not found')
        if not result.ok:
            return save_failed(result)
        return '', 204

    @app.route('/api/recipes/<int:recipe_id>/content')
    def recipe_content(recipe_id):
        servings = request.args.get('servings')
        servings = normalize_servings(servings) if servings else None
        try:
            content = get_planner().recipe_content(recipe_id, servings=servings)
        except StoreError as exc:
            logger.error("Loading recipe content failed: %s", exc)
            abort(503, description='Database unavailable')
        if content is None:
            abort(404, description='Recipe not found')
        return jsonify(content)

    @app.route('/api/recipes/<int:recipe_id>/content', methods=['PUT'])
    def recipe_content_save(recipe_id):
        data = json_body()
        try:
            result = get_planner().save_recipe_content(
                recipe_id, data.get('ingredients') or [], data.get('steps') or []
            )
        except ValueError as exc:
            abort(400, description=str(exc))
        if result is None or (result.ok and result.value is None):
            abort(404, description='Recipe not found')
        if not result.ok:
            return save_failed(result)
        return jsonify(result.value)

    # ============================================
    # ROUTES - WEEK PLAN
    # ============================================

    @app.route('/api/weeks/current')
    def week_current():
        return jsonify(week_payload(get_planner(), current_week_identifier()))

    @app.route('/api/weeks/<week>')
    def week_view(week):
        return jsonify(week_payload(get_planner(), check_week(week)))

    @app.route('/api/weeks/<week>/randomize', methods=['POST'])
    def week_randomize(week):
        planner = get_planner()
        result = planner.randomize_all(check_week(week))
        if not result.ok:
            return save_failed(result)
        return jsonify(week_payload(planner, week))

    @app.route('/api/weeks/<week>/days/<int:day_id>/randomize', methods=['POST'])
    def day_randomize(week, day_id):
        planner = get_planner()
        result = planner.randomize_day(check_week(week), check_day(day_id))
        if not result.ok:
            return save_failed(result)
        return jsonify(week_payload(planner, week))

    @app.route('/api/weeks/<week>/days/<int:day_id>', methods=['PUT'])
    def day_update(week, day_id):
        planner = get_planner()
        check_week(week)
        check_day(day_id)
        data = json_body()

        if 'recipe_id' in data:
            recipe_id = data['recipe_id']
            if recipe_id is not None:
                if isinstance(recipe_id, bool) or not isinstance(recipe_id, int):
                    abort(400, description='recipe_id must be an integer or null')
                if planner.get_recipe(recipe_id) is None:
                    abort(404, description='Recipe not found')
            result = planner.set_day_recipe(week, day_id, recipe_id)
        elif 'free_text' in data:
            result = planner.set_day_free_text(week, day_id, sanitize_free_text(data['free_text']))
        else:
            abort(400, description='Expected recipe_id or free_text')

        if not result.ok:
            return save_failed(result)
        return jsonify(week_payload(planner, week))

    @app.route('/api/weeks/<week>/days/<int:day_id>', methods=['DELETE'])
    def day_clear(week, day_id):
        planner = get_planner()
        result = planner.clear_day(check_week(week), check_day(day_id))
        if not result.ok:
            return save_failed(result)
        return jsonify(week_payload(planner, week))

    @app.route('/api/weeks/<week>/days/<int:day_id>/toggle', methods=['POST'])
    def day_toggle(week, day_id):
        planner = get_planner()
        result = planner.toggle_active_day(check_week(week), check_day(day_id))
        if not result.ok:
            return save_failed(result)
        return jsonify(week_payload(planner, week))

    @app.route('/api/weeks/<week>/cooked', methods=['POST'])
    def week_cooked(week):
        result = get_planner().mark_cooked(check_week(week))
        if not result.ok:
            return save_failed(result)
        return jsonify(updates=result.value)

    # ============================================
    # ROUTES - CALENDAR EXPORT
    # ============================================

    @app.route('/api/weeks/<week>/export.ics')
    def week_export(week):
        export = get_planner().export_week(check_week(week), file_name=export_file_name())
        return calendar_response(export)

    @app.route('/api/weeks/<week>/days/<int:day_id>/export.ics')
    def day_export(week, day_id):
        export = get_planner().export_day(check_week(week), check_day(day_id), file_name=export_file_name())
        return calendar_response(export)


# ============================================
# INITIALIZE DATABASE
# ============================================

@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    # Enable SQLite foreign key enforcement
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def init_db(app):
    with app.app_context():
        db.create_all()


app = create_app()


if __name__ == '__main__':
    init_db(app)
    # Single-threaded: the planner session is shared by all requests
    app.run(debug=True, host='0.0.0.0', port=5000, use_reloader=False, threaded=False)
