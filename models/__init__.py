"""
Models Package

Exports all database models and the db instance for use throughout the application.
"""

from .base import db, utcnow

from .recipe import Recipe, RecipeIngredient, RecipeStep
from .weekplan import WeekPlan

__all__ = [
    'db',
    'utcnow',
    'Recipe',
    'RecipeIngredient',
    'RecipeStep',
    'WeekPlan',
]
