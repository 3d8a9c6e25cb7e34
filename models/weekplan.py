"""
Week Plan Model

Contains the WeekPlan model: one row per owner and ISO week.
"""

from .base import db, utcnow


class WeekPlan(db.Model):
    """Day assignments and active days for one ISO week (e.g. '2026-W02')."""
    __table_args__ = (
        db.UniqueConstraint('owner_id', 'week_identifier', name='uq_week_plan_owner_week'),
    )

    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.String(64), nullable=False, index=True)
    week_identifier = db.Column(db.String(8), nullable=False, index=True)
    # [{'day_id': 0, 'recipe_id': 5, 'free_text': None}, ...]
    days = db.Column(db.JSON, nullable=False, default=list)
    active_day_indices = db.Column(db.JSON, nullable=False, default=lambda: [0, 1, 2, 3, 4, 5, 6])
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow)
