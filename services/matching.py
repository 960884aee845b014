"""
Recipe Matching Service

Read-only search over recipes: title substring matching, ingredient-overlap
ranking, and view-time ingredient scaling.

All six search variants go through find_recipes(), which takes:
- a candidate scope (every recipe, or a caller-supplied list of recipe ids)
- an optional title predicate
- an optional ingredient predicate (results ranked by overlap)
"""

import logging
import math

from models import Recipe

from .errors import ValidationError

logger = logging.getLogger(__name__)


def normalize_targets(ingredients):
    """
    Turn a list of ingredient names into the lowercase target set.

    Blank names are dropped; an empty result is a ValidationError, never
    "match everything" or "match nothing".
    """
    if ingredients is None or isinstance(ingredients, (str, bytes)):
        if isinstance(ingredients, str) and ingredients.strip():
            ingredients = [ingredients]
        else:
            raise ValidationError("Ingredients list cannot be empty.")

    targets = set()
    for name in ingredients:
        if not isinstance(name, str):
            raise ValidationError("Ingredient names must be strings")
        name = ' '.join(name.split()).lower()
        if name:
            targets.add(name)

    if not targets:
        raise ValidationError("Ingredients list cannot be empty.")
    return targets


def normalize_query(query):
    """Case-folded title query. Surrounding spaces are part of the substring."""
    if not isinstance(query, str) or not query.strip():
        raise ValidationError("Query cannot be empty.")
    return query.casefold()


def title_matches(recipe, query):
    return query in recipe.title.casefold()


def match_count(recipe, targets):
    """Number of the recipe's embedded ingredients whose name is in targets."""
    return sum(1 for ri in recipe.ingredients if ri.name.lower() in targets)


def rank_by_overlap(recipes, targets):
    """
    Keep recipes with at least one match, best match first.

    Python's sort is stable, so ties keep the candidates' incoming order.
    """
    scored = [(recipe, match_count(recipe, targets)) for recipe in recipes]
    scored = [entry for entry in scored if entry[1] > 0]
    scored.sort(key=lambda entry: entry[1], reverse=True)
    return [recipe for recipe, _ in scored]


def _candidates(session, query=None, recipe_ids=None):
    """
    Candidate recipes in creation order.

    Only the id scope is filtered in SQL. SQLite's lower() and LIKE fold
    ASCII only, so the title test runs on the loaded rows.
    """
    q = session.query(Recipe)
    if recipe_ids is not None:
        q = q.filter(Recipe.id.in_(recipe_ids))
    recipes = q.order_by(Recipe.created_at, Recipe.id).all()
    if query is not None:
        recipes = [recipe for recipe in recipes if title_matches(recipe, query)]
    return recipes


def find_recipes(session, query=None, ingredients=None, recipe_ids=None):
    """
    Parameterized search engine.

    Args:
        session: SQLAlchemy session to read from
        query: Title substring (case-insensitive), or None for no title filter
        ingredients: Ingredient names to rank by, or None for no overlap filter
        recipe_ids: Restrict candidates to these ids, or None for all recipes

    Returns:
        List of recipe ids. Ranked by match count when ingredients are given,
        otherwise in creation order.
    """
    if query is None and ingredients is None:
        raise ValidationError("Provide a query or ingredients to search by.")

    # Inputs are validated even when the scope is empty
    normalized_query = normalize_query(query) if query is not None else None
    targets = normalize_targets(ingredients) if ingredients is not None else None

    if recipe_ids is not None:
        if isinstance(recipe_ids, (str, bytes)):
            raise ValidationError("recipes must be a list of recipe ids")
        recipe_ids = list(recipe_ids)
        if not recipe_ids:
            return []

    candidates = _candidates(session, normalized_query, recipe_ids)
    if targets is not None:
        candidates = rank_by_overlap(candidates, targets)

    logger.debug(
        "Search query=%r ingredients=%s scope=%s -> %d results",
        normalized_query,
        sorted(targets) if targets else None,
        'all' if recipe_ids is None else len(recipe_ids),
        len(candidates),
    )
    return [recipe.id for recipe in candidates]


# The six search variants. Each requires the predicates it is named for;
# None is rejected like an empty value rather than dropping the predicate.

def find_recipe_by_ingredient(session, ingredients):
    return find_recipes(session, ingredients=_targets(ingredients))


def search(session, query):
    return find_recipes(session, query=normalize_query(query))


def find_recipe_by_ingredient_within_recipes(session, ingredients, recipe_ids):
    return find_recipes(session, ingredients=_targets(ingredients), recipe_ids=_scope(recipe_ids))


def search_within_recipes(session, query, recipe_ids):
    return find_recipes(session, query=normalize_query(query), recipe_ids=_scope(recipe_ids))


def filter_ingredient_and_search(session, query, ingredients):
    return find_recipes(session, query=normalize_query(query), ingredients=_targets(ingredients))


def filter_ingredient_and_search_within_recipes(session, query, ingredients, recipe_ids):
    return find_recipes(
        session,
        query=normalize_query(query),
        ingredients=_targets(ingredients),
        recipe_ids=_scope(recipe_ids),
    )


def _targets(ingredients):
    if ingredients is None:
        raise ValidationError("Ingredients list cannot be empty.")
    return ingredients


def _scope(recipe_ids):
    # A missing scope behaves like an empty one; it must not widen to all recipes.
    return [] if recipe_ids is None else recipe_ids


def clean_scale_factor(scale_factor):
    if isinstance(scale_factor, bool):
        raise ValidationError("Scale factor must be a number")
    try:
        factor = float(scale_factor)
    except (TypeError, ValueError):
        raise ValidationError("Scale factor must be a number") from None
    if not math.isfinite(factor) or factor <= 0:
        raise ValidationError("Scale factor must be greater than 0")
    return factor


def scale_ingredients(recipe, scale_factor):
    """
    Scaled copies of a recipe's ingredients.

    Returns new dicts; the recipe and its embedded ingredients are untouched,
    so concurrent viewers can each scale the same recipe differently.
    """
    factor = clean_scale_factor(scale_factor)
    scaled = []
    for ri in recipe.ingredients:
        item = ri.to_dict()
        item['quantity'] = ri.quantity * factor
        scaled.append(item)
    return scaled
