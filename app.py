"""
Recipe store application.

Exposes every recipe and ingredient-catalog operation as
POST /api/Recipe/<operationName> with a JSON body of named parameters.
Callers pass identities (owner, requestedBy) explicitly; there is no session
or authentication here.
"""

import logging
import sqlite3

from flask import Flask, Blueprint, request, jsonify
from flask_migrate import Migrate
from sqlalchemy import event
from sqlalchemy.engine import Engine

from config import get_config
from models import db
from services import IngredientCatalog, RecipeStore, RecipeError, ValidationError

logger = logging.getLogger(__name__)

migrate = Migrate()

api = Blueprint('recipe_api', __name__, url_prefix='/api/Recipe')


@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Enable SQLite foreign key enforcement so embedded copies cascade with their recipe."""
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def _stores():
    catalog = IngredientCatalog(db.session)
    return catalog, RecipeStore(db.session, catalog)


def _body():
    """JSON body as a dict; a missing body counts as {}."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def _list_param(data, key):
    value = data.get(key)
    if value is not None and not isinstance(value, list):
        raise ValidationError(f"{key} must be a list")
    return value


# ============================================
# ROUTES - INGREDIENT CATALOG
# ============================================

@api.route('/createIngredient', methods=['POST'])
def create_ingredient():
    data = _body()
    catalog, _ = _stores()
    ingredient = catalog.create_ingredient(data.get('name'), data.get('quantity'), data.get('unit'))
    return jsonify(ingredient=ingredient.to_dict())


@api.route('/deleteIngredient', methods=['POST'])
def delete_ingredient():
    data = _body()
    catalog, _ = _stores()
    catalog.delete_ingredient(data.get('ingredient'))
    return jsonify({})


@api.route('/editIngredient', methods=['POST'])
def edit_ingredient():
    data = _body()
    catalog, _ = _stores()
    ingredient = catalog.edit_ingredient(
        data.get('ingredient'),
        new_name=data.get('newName'),
        new_quantity=data.get('newQuantity'),
        new_unit=data.get('newUnit'),
    )
    return jsonify(ingredient=ingredient.to_dict())


@api.route('/_getIngredients', methods=['POST'])
def get_ingredients():
    catalog, _ = _stores()
    return jsonify(ingredients=[i.to_dict() for i in catalog.get_ingredients()])


@api.route('/_getIngredientsByName', methods=['POST'])
def get_ingredients_by_name():
    data = _body()
    catalog, _ = _stores()
    found = catalog.get_ingredients_by_name(data.get('name'))
    return jsonify(ingredients=[i.to_dict() for i in found])


# ============================================
# ROUTES - RECIPES
# ============================================

@api.route('/createRecipe', methods=['POST'])
def create_recipe():
    data = _body()
    _, store = _stores()
    recipe = store.create_recipe(
        data.get('owner'),
        data.get('title'),
        link=data.get('link'),
        description=data.get('description'),
    )
    return jsonify(recipe=recipe.id)


@api.route('/deleteRecipe', methods=['POST'])
def delete_recipe():
    data = _body()
    _, store = _stores()
    store.delete_recipe(data.get('requestedBy'), data.get('recipe'))
    return jsonify({})


@api.route('/copyRecipe', methods=['POST'])
def copy_recipe():
    data = _body()
    _, store = _stores()
    copy = store.copy_recipe(data.get('requestedBy'), data.get('recipe'))
    return jsonify(recipe=copy.id)


@api.route('/addIngredientToRecipe', methods=['POST'])
def add_ingredient_to_recipe():
    data = _body()
    _, store = _stores()
    store.add_ingredient_to_recipe(data.get('requestedBy'), data.get('recipe'), data.get('ingredient'))
    return jsonify({})


@api.route('/removeIngredientFromRecipe', methods=['POST'])
def remove_ingredient_from_recipe():
    data = _body()
    _, store = _stores()
    store.remove_ingredient_from_recipe(data.get('requestedBy'), data.get('recipe'), data.get('ingredient'))
    return jsonify({})


@api.route('/parseIngredients', methods=['POST'])
def parse_ingredients():
    data = _body()
    _, store = _stores()
    embedded = store.parse_ingredients(data.get('requestedBy'), data.get('recipe'), data.get('ingredientsText'))
    return jsonify(ingredients=[ri.to_dict() for ri in embedded])


@api.route('/setLink', methods=['POST'])
def set_link():
    data = _body()
    _, store = _stores()
    store.set_link(data.get('requestedBy'), data.get('recipe'), data.get('link'))
    return jsonify({})


@api.route('/removeLink', methods=['POST'])
def remove_link():
    data = _body()
    _, store = _stores()
    store.remove_link(data.get('requestedBy'), data.get('recipe'))
    return jsonify({})


@api.route('/setDescription', methods=['POST'])
def set_description():
    data = _body()
    _, store = _stores()
    store.set_description(data.get('requestedBy'), data.get('recipe'), data.get('description'))
    return jsonify({})


@api.route('/removeDescription', methods=['POST'])
def remove_description():
    data = _body()
    _, store = _stores()
    store.remove_description(data.get('requestedBy'), data.get('recipe'))
    return jsonify({})


@api.route('/setRecipeCopy', methods=['POST'])
def set_recipe_copy():
    data = _body()
    _, store = _stores()
    store.set_recipe_copy(data.get('requestedBy'), data.get('recipe'), data.get('isCopy'))
    return jsonify({})


@api.route('/setImage', methods=['POST'])
def set_image():
    data = _body()
    _, store = _stores()
    store.set_image(data.get('requestedBy'), data.get('recipe'), data.get('image'))
    return jsonify({})


@api.route('/deleteImage', methods=['POST'])
def delete_image():
    data = _body()
    _, store = _stores()
    store.delete_image(data.get('requestedBy'), data.get('recipe'))
    return jsonify({})


# ============================================
# ROUTES - QUERIES
# ============================================

@api.route('/_getRecipe', methods=['POST'])
def get_recipe():
    data = _body()
    _, store = _stores()
    recipe = store.get_recipe(data.get('owner'), data.get('title'))
    return jsonify(recipe=recipe.to_dict())


@api.route('/_getAllRecipes', methods=['POST'])
def get_all_recipes():
    data = _body()
    _, store = _stores()
    return jsonify(recipes=[r.to_dict() for r in store.get_all_recipes(data.get('owner'))])


@api.route('/_scaleIngredients', methods=['POST'])
def scale_ingredients():
    data = _body()
    _, store = _stores()
    return jsonify(ingredients=store.scale_ingredients(data.get('recipe'), data.get('scaleFactor')))


@api.route('/_findRecipeByIngredient', methods=['POST'])
def find_recipe_by_ingredient():
    data = _body()
    _, store = _stores()
    return jsonify(recipes=store.find_recipe_by_ingredient(_list_param(data, 'ingredients')))


@api.route('/_search', methods=['POST'])
def search():
    data = _body()
    _, store = _stores()
    return jsonify(recipes=store.search(data.get('query')))


@api.route('/_findRecipeByIngredientWithinRecipes', methods=['POST'])
def find_recipe_by_ingredient_within_recipes():
    data = _body()
    _, store = _stores()
    found = store.find_recipe_by_ingredient_within_recipes(
        _list_param(data, 'ingredients'), _list_param(data, 'recipes')
    )
    return jsonify(recipes=found)


@api.route('/_searchWithinRecipes', methods=['POST'])
def search_within_recipes():
    data = _body()
    _, store = _stores()
    found = store.search_within_recipes(data.get('query'), _list_param(data, 'recipes'))
    return jsonify(recipes=found)


@api.route('/_filterIngredientAndSearch', methods=['POST'])
def filter_ingredient_and_search():
    data = _body()
    _, store = _stores()
    found = store.filter_ingredient_and_search(data.get('query'), _list_param(data, 'ingredients'))
    return jsonify(recipes=found)


@api.route('/_filterIngredientAndSearchWithinRecipes', methods=['POST'])
def filter_ingredient_and_search_within_recipes():
    data = _body()
    _, store = _stores()
    found = store.filter_ingredient_and_search_within_recipes(
        data.get('query'), _list_param(data, 'ingredients'), _list_param(data, 'recipes')
    )
    return jsonify(recipes=found)


# ============================================
# APPLICATION FACTORY
# ============================================

def handle_recipe_error(error):
    logger.info("%s: %s", type(error).__name__, error.message)
    return jsonify(error.to_dict()), error.status_code


def create_app(config_name=None):
    app = Flask(__name__)
    app.config.from_object(get_config(config_name))

    logging.basicConfig(level=app.config['LOG_LEVEL'], format=app.config['LOG_FORMAT'])

    db.init_app(app)
    migrate.init_app(app, db)

    app.register_blueprint(api)
    app.register_error_handler(RecipeError, handle_recipe_error)

    @app.route('/')
    def index():
        return jsonify(service='recipe-store', status='ok')

    return app


def init_db(app):
    with app.app_context():
        db.create_all()


if __name__ == '__main__':
    app = create_app()
    init_db(app)
    # host='0.0.0.0' allows access from other devices on the network
    app.run(debug=True, host='0.0.0.0', port=5000, use_reloader=False)
