"""
Recipe Models

Contains the Recipe model and RecipeIngredient, the per-recipe copy of a
catalog ingredient.
"""

import enum
from datetime import datetime, timezone

from .base import db, fresh_id


def _utcnow():
    return datetime.now(timezone.utc)


class ContentState(enum.Enum):
    """
    Which of link/description a recipe currently holds.

    There is no NEITHER member: the recipe table's check constraint makes
    that state unstorable.
    """
    LINK_ONLY = 'link_only'
    DESCRIPTION_ONLY = 'description_only'
    BOTH = 'both'


class Recipe(db.Model):
    """Recipe owned by one user, with embedded ingredient copies."""
    __table_args__ = (
        db.UniqueConstraint('owner', 'title', name='uq_recipe_owner_title'),
        db.CheckConstraint("link != '' OR description != ''", name='ck_recipe_link_or_description'),
    )

    id = db.Column(db.String(32), primary_key=True, default=fresh_id)
    owner = db.Column(db.String(200), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    image = db.Column(db.String(2000), nullable=False, default='')
    link = db.Column(db.String(2000), nullable=False, default='')
    description = db.Column(db.Text, nullable=False, default='')
    is_copy = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow, index=True)
    ingredients = db.relationship(
        'RecipeIngredient',
        backref='recipe',
        lazy='selectin',
        order_by='RecipeIngredient.position',
        cascade='all, delete-orphan',
    )

    @property
    def content_state(self):
        has_link = bool(self.link)
        has_description = bool(self.description)
        if has_link and has_description:
            return ContentState.BOTH
        if has_link:
            return ContentState.LINK_ONLY
        if has_description:
            return ContentState.DESCRIPTION_ONLY
        raise ValueError(f'Recipe {self.id} has neither link nor description')

    def has_ingredient(self, ingredient_id):
        return any(ri.ingredient_id == ingredient_id for ri in self.ingredients)

    def to_dict(self):
        return {
            'id': self.id,
            'owner': self.owner,
            'title': self.title,
            'ingredients': [ri.to_dict() for ri in self.ingredients],
            'image': self.image,
            'link': self.link,
            'description': self.description,
            'isCopy': self.is_copy,
        }

    def __repr__(self):
        return f'<Recipe {self.id} {self.owner}/{self.title!r}>'


class RecipeIngredient(db.Model):
    """
    Value copy of a catalog ingredient, embedded in one recipe.

    ingredient_id records which catalog entry the copy came from. It is not a
    foreign key: editing or deleting the catalog entry never reaches the copy.
    """
    __table_args__ = (
        db.UniqueConstraint('recipe_id', 'ingredient_id', name='uq_recipe_ingredient'),
    )

    id = db.Column(db.Integer, primary_key=True)
    recipe_id = db.Column(
        db.String(32), db.ForeignKey('recipe.id', ondelete='CASCADE'), nullable=False, index=True
    )
    ingredient_id = db.Column(db.String(32), nullable=False, index=True)
    name = db.Column(db.String(200), nullable=False, index=True)
    quantity = db.Column(db.Float, nullable=False)
    unit = db.Column(db.String(50), nullable=False, default='')
    position = db.Column(db.Integer, nullable=False, default=0)

    @classmethod
    def copy_of(cls, source, position=0):
        """Snapshot a catalog Ingredient or another RecipeIngredient."""
        ingredient_id = getattr(source, 'ingredient_id', None) or source.id
        return cls(
            ingredient_id=ingredient_id,
            name=source.name,
            quantity=source.quantity,
            unit=source.unit,
            position=position,
        )

    def to_dict(self):
        return {
            'id': self.ingredient_id,
            'name': self.name,
            'quantity': self.quantity,
            'unit': self.unit,
        }
