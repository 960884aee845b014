"""
Shared fixtures: a fresh in-memory database per test.
"""

import pytest

from app import create_app
from models import db
from services import IngredientCatalog, RecipeStore


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def catalog(app):
    return IngredientCatalog(db.session)


@pytest.fixture
def store(app, catalog):
    return RecipeStore(db.session, catalog)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_recipe(store):
    """Create a recipe with a description unless told otherwise."""
    def _make(owner='alice', title='Spaghetti Carbonara', link=None, description='Boil pasta.'):
        return store.create_recipe(owner, title, link=link, description=description)
    return _make


@pytest.fixture
def attach(store, catalog):
    """Create a catalog ingredient and attach it to a recipe."""
    def _attach(recipe, name, quantity=1, unit='', requested_by=None):
        ingredient = catalog.create_ingredient(name, quantity, unit)
        store.add_ingredient_to_recipe(requested_by or recipe.owner, recipe.id, ingredient.id)
        return ingredient
    return _attach
