"""
Models Package

Exports all database models and the db instance for use throughout the application.
"""

from .base import db, fresh_id

from .ingredient import Ingredient
from .recipe import Recipe, RecipeIngredient, ContentState

__all__ = [
    'db',
    'fresh_id',
    'Ingredient',
    'Recipe',
    'RecipeIngredient',
    'ContentState',
]
