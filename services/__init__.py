"""
Services Package

Business logic modules for the recipe store.
"""

from .errors import (
    RecipeError,
    NotFoundError,
    AuthorizationError,
    ConflictError,
    ValidationError,
    InvariantError,
)

from .parsing import (
    IngredientParseError,
    normalize_fractions,
    parse_quantity,
    parse_ingredient_line,
    parse_ingredients_text,
)

from .catalog import IngredientCatalog

from .matching import (
    match_count,
    rank_by_overlap,
    find_recipes,
    scale_ingredients,
)

from .recipes import RecipeStore

__all__ = [
    # Errors
    'RecipeError',
    'NotFoundError',
    'AuthorizationError',
    'ConflictError',
    'ValidationError',
    'InvariantError',
    # Parsing
    'IngredientParseError',
    'normalize_fractions',
    'parse_quantity',
    'parse_ingredient_line',
    'parse_ingredients_text',
    # Stores
    'IngredientCatalog',
    'RecipeStore',
    # Matching
    'match_count',
    'rank_by_overlap',
    'find_recipes',
    'scale_ingredients',
]
