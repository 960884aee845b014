"""
Recipe Store Service

Owns recipe records and their embedded ingredient copies.

Every owner-gated mutation runs inside one transaction that:
1. loads the recipe with a row lock (NotFoundError if absent)
2. checks recipe.owner == requested_by (AuthorizationError otherwise)
3. validates and applies the change, then commits once

Any error rolls the transaction back, so a failed call never leaves a
partial write. Link/description removals also use a conditional UPDATE, so
two concurrent removals cannot both succeed and empty both slots.
"""

import logging
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError

from constants import MAX_LENGTHS
from models import Recipe, RecipeIngredient
from utils import sanitize_line, sanitize_multiline, validate_link, LinkValidationError, TextTooLongError

from . import matching
from .catalog import IngredientCatalog
from .errors import (
    NotFoundError, AuthorizationError, ConflictError, ValidationError, InvariantError
)
from .parsing import parse_ingredients_text, IngredientParseError

logger = logging.getLogger(__name__)


def _clean_line(value, field, key):
    if value is not None and not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    try:
        return sanitize_line(value, field=field, max_length=MAX_LENGTHS[key])
    except TextTooLongError as e:
        raise ValidationError(str(e)) from None


def _clean_text(value, field, key):
    if value is not None and not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    try:
        return sanitize_multiline(value, field=field, max_length=MAX_LENGTHS[key])
    except TextTooLongError as e:
        raise ValidationError(str(e)) from None


def _clean_link(link):
    link = _clean_line(link, 'link', 'link')
    if not link:
        raise ValidationError("Link cannot be empty.")
    try:
        return validate_link(link)
    except LinkValidationError as e:
        raise ValidationError(f"Invalid link format! {e}") from None


def _require(value, message):
    if not value:
        raise ValidationError(message)
    return value


class RecipeStore:
    """Recipe operations bound to one SQLAlchemy session and ingredient catalog."""

    def __init__(self, session, catalog=None):
        self.session = session
        self.catalog = IngredientCatalog(session) if catalog is None else catalog

    @contextmanager
    def _write(self):
        try:
            yield
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

    def _get(self, recipe_id, lock=False):
        recipe = None
        if recipe_id and isinstance(recipe_id, str):
            q = self.session.query(Recipe).filter(Recipe.id == recipe_id)
            if lock:
                q = q.with_for_update()
            recipe = q.first()
        if recipe is None:
            raise NotFoundError("Recipe not found")
        return recipe

    def _owned(self, requested_by, recipe_id):
        recipe = self._get(recipe_id, lock=True)
        if not requested_by or recipe.owner != requested_by:
            logger.warning("User %r denied access to recipe %s", requested_by, recipe_id)
            raise AuthorizationError(
                "Sorry, you are not the owner of this recipe. You cannot modify the recipe."
            )
        return recipe

    def _find(self, owner, title):
        return self.session.query(Recipe).filter_by(owner=owner, title=title).first()

    def _insert(self, recipe):
        self.session.add(recipe)
        try:
            self.session.flush()
        except IntegrityError:
            raise ConflictError(
                f'Recipe with title: "{recipe.title}" already exists for this user: {recipe.owner}'
            ) from None

    # Creation and deletion

    def create_recipe(self, owner, title, link=None, description=None):
        owner = _require(_clean_line(owner, 'owner', 'owner'), "Owner ID is required.")
        title = _require(_clean_line(title, 'title', 'title'), "Title cannot be empty.")
        link = _clean_line(link, 'link', 'link')
        description = _clean_text(description, 'description', 'description')

        with self._write():
            if self._find(owner, title):
                raise ConflictError(f'Recipe with title: "{title}" already exists for this user: {owner}')
            if not link and not description:
                raise ValidationError("Recipe must have at least a link or description!")
            if link:
                link = _clean_link(link)

            recipe = Recipe(
                owner=owner,
                title=title,
                link=link,
                description=description,
                image='',
                is_copy=False,
            )
            self._insert(recipe)

        logger.info("User %r created recipe %s (%r)", owner, recipe.id, title)
        return recipe

    def delete_recipe(self, requested_by, recipe_id):
        """
        Remove a recipe and its embedded ingredients.

        Removing the recipe from shared collections is the caller's job; this
        store knows nothing about collections.
        """
        with self._write():
            recipe = self._owned(requested_by, recipe_id)
            self.session.delete(recipe)
        logger.info("User %r deleted recipe %s", requested_by, recipe_id)

    def copy_recipe(self, requested_by, recipe_id):
        """
        Deep-copy any existing recipe into requested_by's recipes.

        The source need not belong to requested_by. Both the new recipe and
        the source end up with is_copy=True.
        """
        requested_by = _require(_clean_line(requested_by, 'owner', 'owner'), "Owner ID is required.")

        with self._write():
            source = self._get(recipe_id, lock=True)
            if self._find(requested_by, source.title):
                raise ConflictError(
                    f'Recipe with title: "{source.title}" already exists for this user: {requested_by}'
                )

            copy = Recipe(
                owner=requested_by,
                title=source.title,
                link=source.link or '',
                description=source.description or '',
                image=source.image or '',
                is_copy=True,
            )
            copy.ingredients = [
                RecipeIngredient.copy_of(ri, position=ri.position) for ri in source.ingredients
            ]
            self._insert(copy)
            source.is_copy = True

        logger.info("User %r copied recipe %s into %s", requested_by, recipe_id, copy.id)
        return copy

    # Ingredients

    def add_ingredient_to_recipe(self, requested_by, recipe_id, ingredient_id):
        """Append a copy of a catalog ingredient. Re-adding the same id is a no-op."""
        with self._write():
            recipe = self._owned(requested_by, recipe_id)
            ingredient = self.catalog.get(ingredient_id)
            if recipe.has_ingredient(ingredient.id):
                return

            position = max((ri.position for ri in recipe.ingredients), default=-1) + 1
            recipe.ingredients.append(RecipeIngredient.copy_of(ingredient, position=position))
            try:
                self.session.flush()
            except IntegrityError:
                # A concurrent attach of the same ingredient won the race
                self.session.rollback()
                if self._get(recipe_id).has_ingredient(ingredient_id):
                    return
                raise

        logger.info("Added ingredient %s to recipe %s", ingredient_id, recipe_id)

    def remove_ingredient_from_recipe(self, requested_by, recipe_id, ingredient_id):
        with self._write():
            recipe = self._owned(requested_by, recipe_id)
            embedded = next(
                (ri for ri in recipe.ingredients if ri.ingredient_id == ingredient_id), None
            )
            if embedded is None:
                raise NotFoundError("Ingredient doesn't exist in this recipe!")
            recipe.ingredients.remove(embedded)

        logger.info("Removed ingredient %s from recipe %s", ingredient_id, recipe_id)

    def parse_ingredients(self, requested_by, recipe_id, ingredients_text):
        """
        Replace the recipe's ingredient list with one parsed from text.

        Each "quantity,unit,name" line becomes a new catalog ingredient and an
        embedded copy of it. One malformed line fails the whole call.
        """
        with self._write():
            recipe = self._owned(requested_by, recipe_id)
            text = _clean_text(ingredients_text, 'ingredients text', 'ingredients_text')
            try:
                parsed = parse_ingredients_text(text)
            except IngredientParseError as e:
                raise ValidationError(str(e)) from None

            created = [self.catalog.build(name, quantity, unit) for quantity, unit, name in parsed]
            self.session.add_all(created)
            recipe.ingredients = [
                RecipeIngredient.copy_of(ingredient, position=position)
                for position, ingredient in enumerate(created)
            ]

        logger.info("Replaced ingredients of recipe %s with %d parsed lines", recipe_id, len(created))
        return recipe.ingredients

    # Link / description

    def set_link(self, requested_by, recipe_id, link):
        with self._write():
            recipe = self._owned(requested_by, recipe_id)
            recipe.link = _clean_link(link)

    def remove_link(self, requested_by, recipe_id):
        with self._write():
            recipe = self._owned(requested_by, recipe_id)
            if not recipe.description:
                raise InvariantError("Cannot remove link because the recipe has no description.")
            updated = (
                self.session.query(Recipe)
                .filter(Recipe.id == recipe.id, Recipe.owner == requested_by, Recipe.description != '')
                .update({'link': ''})
            )
            if not updated:
                raise InvariantError("Cannot remove link because the recipe has no description.")

    def set_description(self, requested_by, recipe_id, description):
        with self._write():
            recipe = self._owned(requested_by, recipe_id)
            description = _clean_text(description, 'description', 'description')
            if not description:
                raise ValidationError("Description must be more than just empty space")
            recipe.description = description

    def remove_description(self, requested_by, recipe_id):
        with self._write():
            recipe = self._owned(requested_by, recipe_id)
            if not recipe.link:
                raise InvariantError("Cannot remove description because the recipe has no link.")
            updated = (
                self.session.query(Recipe)
                .filter(Recipe.id == recipe.id, Recipe.owner == requested_by, Recipe.link != '')
                .update({'description': ''})
            )
            if not updated:
                raise InvariantError("Cannot remove description because the recipe has no link.")

    # Flags and image

    def set_recipe_copy(self, requested_by, recipe_id, is_copy):
        with self._write():
            recipe = self._owned(requested_by, recipe_id)
            if not isinstance(is_copy, bool):
                raise ValidationError("isCopy must be true or false")
            recipe.is_copy = is_copy

    def set_image(self, requested_by, recipe_id, image):
        with self._write():
            recipe = self._owned(requested_by, recipe_id)
            recipe.image = _clean_line(image, 'image', 'image')

    def delete_image(self, requested_by, recipe_id):
        with self._write():
            recipe = self._owned(requested_by, recipe_id)
            if recipe.image:
                recipe.image = ''

    # Queries

    def get_recipe(self, owner, title):
        """Exact (owner, title) lookup. Unlike search(), no substring matching."""
        owner = _require(_clean_line(owner, 'owner', 'owner'), "Owner ID is required.")
        title = _require(_clean_line(title, 'title', 'title'), "Title cannot be empty.")
        recipe = self._find(owner, title)
        if recipe is None:
            raise NotFoundError(f'Recipe with title "{title}" for this owner not found.')
        return recipe

    def get_recipe_by_id(self, recipe_id):
        return self._get(recipe_id)

    def get_all_recipes(self, owner):
        owner = _require(_clean_line(owner, 'owner', 'owner'), "Owner ID is required.")
        return (
            self.session.query(Recipe)
            .filter(Recipe.owner == owner)
            .order_by(Recipe.created_at, Recipe.id)
            .all()
        )

    def scale_ingredients(self, recipe_id, scale_factor):
        return matching.scale_ingredients(self._get(recipe_id), scale_factor)

    def find_recipe_by_ingredient(self, ingredients):
        return matching.find_recipe_by_ingredient(self.session, ingredients)

    def search(self, query):
        return matching.search(self.session, query)

    def find_recipe_by_ingredient_within_recipes(self, ingredients, recipe_ids):
        return matching.find_recipe_by_ingredient_within_recipes(self.session, ingredients, recipe_ids)

    def search_within_recipes(self, query, recipe_ids):
        return matching.search_within_recipes(self.session, query, recipe_ids)

    def filter_ingredient_and_search(self, query, ingredients):
        return matching.filter_ingredient_and_search(self.session, query, ingredients)

    def filter_ingredient_and_search_within_recipes(self, query, ingredients, recipe_ids):
        return matching.filter_ingredient_and_search_within_recipes(
            self.session, query, ingredients, recipe_ids
        )
