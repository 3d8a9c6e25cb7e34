"""
Recipe Models

Contains the Recipe catalog entry and its optional content
(ingredients and cooking steps).
"""

from .base import db, utcnow


class Recipe(db.Model):
    """Catalog entry with the metadata the planner scores on."""
    # AUTOINCREMENT so SQLite never hands out the id of a deleted recipe again
    __table_args__ = {'sqlite_autoincrement': True}

    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.String(64), nullable=False, index=True)
    name = db.Column(db.String(200), nullable=False)
    category = db.Column(db.String(50), default='Other', index=True)
    source = db.Column(db.String(500), nullable=True)  # URL or free-text provenance
    base_servings = db.Column(db.Integer, default=4, nullable=False)
    has_recipe_content = db.Column(db.Boolean, default=False, nullable=False)
    last_cooked = db.Column(db.Date, nullable=True)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow)
    ingredients = db.relationship('RecipeIngredient', backref='recipe', lazy=True,
                                  cascade='all, delete-orphan',
                                  order_by='RecipeIngredient.sort_order')
    steps = db.relationship('RecipeStep', backref='recipe', lazy=True,
                            cascade='all, delete-orphan',
                            order_by='RecipeStep.step_order')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'category': self.category or 'Other',
            'source': self.source or None,
            'base_servings': self.base_servings or 4,
            'has_recipe_content': bool(self.has_recipe_content),
            'last_cooked': self.last_cooked.isoformat() if self.last_cooked else None,
        }


class RecipeIngredient(db.Model):
    """One ingredient line of a recipe, in display order."""
    id = db.Column(db.Integer, primary_key=True)
    recipe_id = db.Column(db.Integer, db.ForeignKey('recipe.id', ondelete='CASCADE'), nullable=False, index=True)
    owner_id = db.Column(db.String(64), nullable=False)
    name = db.Column(db.String(200), nullable=False, default='')
    amount = db.Column(db.Float, nullable=True)
    unit = db.Column(db.String(20), nullable=True)
    optional = db.Column(db.Boolean, default=False, nullable=False)
    sort_order = db.Column(db.Integer, nullable=False, default=0)

    def to_dict(self):
        return {
            'name': self.name,
            'amount': self.amount,
            'unit': self.unit,
            'optional': bool(self.optional),
            'sort_order': self.sort_order,
        }


class RecipeStep(db.Model):
    """One cooking step; step_order starts at 1."""
    id = db.Column(db.Integer, primary_key=True)
    recipe_id = db.Column(db.Integer, db.ForeignKey('recipe.id', ondelete='CASCADE'), nullable=False, index=True)
    owner_id = db.Column(db.String(64), nullable=False)
    text = db.Column(db.Text, nullable=False, default='')
    step_order = db.Column(db.Integer, nullable=False, default=1)

    def to_dict(self):
        return {'text': self.text, 'step_order': self.step_order}
