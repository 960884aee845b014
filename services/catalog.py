"""
Ingredient Catalog Service

Flat store of ingredient records. Entries are created standalone and copied
into recipes on attach, so nothing here ever cascades to a recipe.
"""

import logging
import math

from constants import MAX_LENGTHS
from models import Ingredient, fresh_id
from utils import sanitize_line, TextTooLongError

from .errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def clean_quantity(value, field='quantity'):
    """Coerce a quantity to a finite non-negative float."""
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    try:
        quantity = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a number") from None
    if not math.isfinite(quantity) or quantity < 0:
        raise ValidationError(f"{field} must be a non-negative number")
    return quantity


def clean_ingredient_name(name):
    try:
        name = sanitize_line(name, field='ingredient name', max_length=MAX_LENGTHS['ingredient_name'])
    except TextTooLongError as e:
        raise ValidationError(str(e)) from None
    return name.lower()


def clean_unit(unit):
    try:
        return sanitize_line(unit, field='unit', max_length=MAX_LENGTHS['unit'])
    except TextTooLongError as e:
        raise ValidationError(str(e)) from None


class IngredientCatalog:
    """Ingredient store bound to one SQLAlchemy session."""

    def __init__(self, session):
        self.session = session

    def _commit(self):
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

    def get(self, ingredient_id):
        ingredient = None
        if ingredient_id and isinstance(ingredient_id, str):
            ingredient = self.session.get(Ingredient, ingredient_id)
        if ingredient is None:
            raise NotFoundError(f"Ingredient {ingredient_id} not found")
        return ingredient

    def build(self, name, quantity, unit):
        """Validated, unsaved Ingredient."""
        name = clean_ingredient_name(name)
        if not name:
            raise ValidationError("Ingredient name cannot be empty")
        return Ingredient(
            id=fresh_id(),
            name=name,
            quantity=clean_quantity(quantity),
            unit=clean_unit(unit),
        )

    def create_ingredient(self, name, quantity, unit):
        ingredient = self.build(name, quantity, unit)
        self.session.add(ingredient)
        self._commit()
        logger.info("Created ingredient %s (%s)", ingredient.id, ingredient.name)
        return ingredient

    def delete_ingredient(self, ingredient_id):
        ingredient = self.get(ingredient_id)
        self.session.delete(ingredient)
        self._commit()
        logger.info("Deleted ingredient %s", ingredient_id)

    def edit_ingredient(self, ingredient_id, new_name=None, new_quantity=None, new_unit=None):
        """
        Partial update. None or empty-string name/unit mean "leave unchanged",
        so a partial form can never blank a field.
        """
        ingredient = self.get(ingredient_id)

        changes = {}
        if new_name:
            name = clean_ingredient_name(new_name)
            if name:
                changes['name'] = name
        if new_quantity is not None:
            changes['quantity'] = clean_quantity(new_quantity, field='newQuantity')
        if new_unit:
            unit = clean_unit(new_unit)
            if unit:
                changes['unit'] = unit

        if not changes:
            return ingredient

        for field, value in changes.items():
            setattr(ingredient, field, value)
        self._commit()
        logger.info("Edited ingredient %s: %s", ingredient_id, ', '.join(sorted(changes)))
        return ingredient

    # Queries

    def get_ingredients(self):
        return self.session.query(Ingredient).order_by(Ingredient.name, Ingredient.id).all()

    def get_ingredients_by_name(self, name):
        name = clean_ingredient_name(name)
        if not name:
            raise ValidationError("Ingredient name cannot be empty")
        return (
            self.session.query(Ingredient)
            .filter(Ingredient.name == name)
            .order_by(Ingredient.id)
            .all()
        )
