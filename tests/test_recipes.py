"""
Tests for recipe mutations: ownership, the link/description slots,
ingredient attachment, copying and text import.
"""

import pytest
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from models import ContentState, Recipe, RecipeIngredient
from services import (
    NotFoundError, AuthorizationError, ConflictError, ValidationError, InvariantError
)

LINK = "https://www.instagram.com/p/DQ7_kWPE2HN/?utm_source=ig_web_copy_link&igsh=MzRlODBiNWFlZA=="


# ============================================
# CREATE / DELETE
# ============================================

def test_create_with_description_only(store, make_recipe):
    recipe = make_recipe(description="Mix tomato and basil. Cook for 4 hours.")
    fetched = store.get_recipe('alice', 'Spaghetti Carbonara')
    assert fetched.id == recipe.id
    assert fetched.description == "Mix tomato and basil. Cook for 4 hours."
    assert fetched.link == ''
    assert fetched.ingredients == []
    assert fetched.is_copy is False
    assert fetched.content_state is ContentState.DESCRIPTION_ONLY


def test_create_with_link_only(store):
    recipe = store.create_recipe('alice', 'Yakult Matcha', link=LINK)
    assert recipe.link == LINK
    assert recipe.description == ''
    assert recipe.content_state is ContentState.LINK_ONLY


def test_create_with_both(store):
    recipe = store.create_recipe('alice', 'Soup', link='https://example.com/soup', description='hot')
    assert recipe.content_state is ContentState.BOTH


def test_create_requires_link_or_description(store):
    with pytest.raises(ValidationError):
        store.create_recipe('alice', 'Nothing')
    with pytest.raises(ValidationError):
        store.create_recipe('alice', 'Blank', link='', description='   ')
    assert store.get_all_recipes('alice') == []


@pytest.mark.parametrize('link', ['not a url', 'example.com/page', 'https://', 'javascript:alert(1)'])
def test_create_rejects_malformed_link(store, link):
    with pytest.raises(ValidationError):
        store.create_recipe('alice', 'Bad Link', link=link)


@pytest.mark.parametrize('owner,title', [('', 'Cake'), ('alice', ''), ('alice', '   ')])
def test_create_requires_owner_and_title(store, owner, title):
    with pytest.raises(ValidationError):
        store.create_recipe(owner, title, description='d')


def test_owner_title_pair_is_unique(store, make_recipe):
    make_recipe()
    with pytest.raises(ConflictError):
        make_recipe(description='another')
    # Other owners may reuse the title
    assert make_recipe(owner='bob').owner == 'bob'


def test_delete_recipe(store, make_recipe, attach):
    recipe = make_recipe()
    attach(recipe, 'eggs')
    store.delete_recipe('alice', recipe.id)
    with pytest.raises(NotFoundError):
        store.get_recipe('alice', 'Spaghetti Carbonara')
    assert store.session.query(RecipeIngredient).count() == 0


def test_delete_recipe_keeps_catalog(store, catalog, make_recipe, attach):
    recipe = make_recipe()
    attach(recipe, 'eggs')
    store.delete_recipe('alice', recipe.id)
    assert [i.name for i in catalog.get_ingredients()] == ['eggs']


def test_delete_requires_owner(store, make_recipe):
    recipe = make_recipe()
    with pytest.raises(AuthorizationError):
        store.delete_recipe('mallory', recipe.id)
    assert store.get_recipe('alice', 'Spaghetti Carbonara').id == recipe.id


def test_delete_missing_recipe(store):
    with pytest.raises(NotFoundError):
        store.delete_recipe('alice', 'missing')


@pytest.mark.parametrize(
    'operation,args',
    [
        ('set_link', ('https://example.com',)),
        ('remove_link', ()),
        ('set_description', ('new',)),
        ('remove_description', ()),
        ('set_recipe_copy', (True,)),
        ('set_image', ('cake.png',)),
        ('delete_image', ()),
        ('remove_ingredient_from_recipe', ('x',)),
        ('parse_ingredients', ('1,g,salt',)),
    ],
)
def test_mutations_are_owner_gated(store, make_recipe, operation, args):
    recipe = make_recipe(link='https://example.com/original')
    with pytest.raises(AuthorizationError):
        getattr(store, operation)('mallory', recipe.id, *args)
    with pytest.raises(NotFoundError):
        getattr(store, operation)('alice', 'missing-id', *args)

    unchanged = store.get_recipe_by_id(recipe.id)
    assert unchanged.link == 'https://example.com/original'
    assert unchanged.description == 'Boil pasta.'
    assert unchanged.image == ''
    assert unchanged.is_copy is False


# ============================================
# LINK / DESCRIPTION
# ============================================

def test_remove_link_requires_description(store):
    recipe = store.create_recipe('alice', 'Linked', link=LINK)
    with pytest.raises(InvariantError):
        store.remove_link('alice', recipe.id)
    assert store.get_recipe_by_id(recipe.id).link == LINK


def test_remove_description_requires_link(store, make_recipe):
    recipe = make_recipe()
    with pytest.raises(InvariantError):
        store.remove_description('alice', recipe.id)
    assert store.get_recipe_by_id(recipe.id).description == 'Boil pasta.'


def test_slot_transitions(store, make_recipe):
    recipe = make_recipe()
    store.set_link('alice', recipe.id, 'https://example.com/carbonara')
    assert store.get_recipe_by_id(recipe.id).content_state is ContentState.BOTH

    store.remove_description('alice', recipe.id)
    assert store.get_recipe_by_id(recipe.id).content_state is ContentState.LINK_ONLY

    store.set_description('alice', recipe.id, 'Fry pancetta.')
    store.remove_link('alice', recipe.id)
    recipe = store.get_recipe_by_id(recipe.id)
    assert recipe.content_state is ContentState.DESCRIPTION_ONLY
    assert recipe.description == 'Fry pancetta.'


def test_second_removal_fails(store, make_recipe):
    recipe = make_recipe(link='https://example.com')
    store.remove_link('alice', recipe.id)
    with pytest.raises(InvariantError):
        store.remove_description('alice', recipe.id)
    recipe = store.get_recipe_by_id(recipe.id)
    assert recipe.link == '' and recipe.description == 'Boil pasta.'


def test_set_link_validates(store, make_recipe):
    recipe = make_recipe()
    for bad in ['', 'nope', 'http://']:
        with pytest.raises(ValidationError):
            store.set_link('alice', recipe.id, bad)
    assert store.get_recipe_by_id(recipe.id).link == ''


def test_set_description_rejects_blank(store, make_recipe):
    recipe = make_recipe()
    with pytest.raises(ValidationError):
        store.set_description('alice', recipe.id, '   ')
    assert store.get_recipe_by_id(recipe.id).description == 'Boil pasta.'


def test_database_refuses_neither_state(store, make_recipe):
    recipe = make_recipe()
    with pytest.raises(IntegrityError):
        store.session.query(Recipe).filter(Recipe.id == recipe.id).update({'description': ''})
        store.session.flush()
    store.session.rollback()


@pytest.mark.parametrize('cleared,remove', [('link', 'remove_description'), ('description', 'remove_link')])
def test_removal_rechecks_the_stored_row(store, cleared, remove):
    """A concurrent removal that already emptied the other slot makes this one fail."""
    recipe = store.create_recipe('alice', 'Soup', link='https://example.com/soup', description='hot')
    loaded = store.get_recipe_by_id(recipe.id)
    assert loaded.content_state is ContentState.BOTH

    # Empty the other slot in the database while the loaded object still holds it
    store.session.execute(
        update(Recipe)
        .where(Recipe.id == recipe.id)
        .values({cleared: ''})
        .execution_options(synchronize_session=False)
    )
    assert getattr(loaded, cleared) != ''

    with pytest.raises(InvariantError):
        getattr(store, remove)('alice', recipe.id)

    fetched = store.get_recipe_by_id(recipe.id)
    assert fetched.link == 'https://example.com/soup'
    assert fetched.description == 'hot'
    assert fetched.content_state is ContentState.BOTH


# ============================================
# IMAGE AND COPY FLAG
# ============================================

def test_image_set_and_delete(store, make_recipe):
    recipe = make_recipe()
    store.set_image('alice', recipe.id, 'images/carbonara.jpg')
    assert store.get_recipe_by_id(recipe.id).image == 'images/carbonara.jpg'
    store.delete_image('alice', recipe.id)
    assert store.get_recipe_by_id(recipe.id).image == ''
    # Already absent
    store.delete_image('alice', recipe.id)
    assert store.get_recipe_by_id(recipe.id).image == ''


def test_set_recipe_copy(store, make_recipe):
    recipe = make_recipe()
    store.set_recipe_copy('alice', recipe.id, True)
    assert store.get_recipe_by_id(recipe.id).is_copy is True
    store.set_recipe_copy('alice', recipe.id, False)
    assert store.get_recipe_by_id(recipe.id).is_copy is False
    with pytest.raises(ValidationError):
        store.set_recipe_copy('alice', recipe.id, 'yes')


# ============================================
# INGREDIENTS
# ============================================

def test_add_ingredient_embeds_copy(store, make_recipe, attach):
    recipe = make_recipe()
    eggs = attach(recipe, 'Eggs', 3, 'large')
    embedded = store.get_recipe_by_id(recipe.id).ingredients
    assert [ri.to_dict() for ri in embedded] == [
        {'id': eggs.id, 'name': 'eggs', 'quantity': 3, 'unit': 'large'}
    ]


def test_add_ingredient_is_idempotent(store, catalog, make_recipe):
    recipe = make_recipe()
    eggs = catalog.create_ingredient('eggs', 3, '')
    store.add_ingredient_to_recipe('alice', recipe.id, eggs.id)
    store.add_ingredient_to_recipe('alice', recipe.id, eggs.id)
    assert [ri.ingredient_id for ri in store.get_recipe_by_id(recipe.id).ingredients] == [eggs.id]


def test_add_unknown_ingredient(store, make_recipe):
    recipe = make_recipe()
    with pytest.raises(NotFoundError):
        store.add_ingredient_to_recipe('alice', recipe.id, 'no-such-ingredient')


def test_add_ingredient_requires_owner(store, catalog, make_recipe):
    recipe = make_recipe()
    eggs = catalog.create_ingredient('eggs', 3, '')
    with pytest.raises(AuthorizationError):
        store.add_ingredient_to_recipe('mallory', recipe.id, eggs.id)
    assert store.get_recipe_by_id(recipe.id).ingredients == []


def test_ingredient_order_is_preserved(store, make_recipe, attach):
    recipe = make_recipe()
    for name in ['spaghetti', 'pancetta', 'eggs']:
        attach(recipe, name)
    names = [ri.name for ri in store.get_recipe_by_id(recipe.id).ingredients]
    assert names == ['spaghetti', 'pancetta', 'eggs']


def test_catalog_edit_does_not_reach_recipe(store, catalog, make_recipe, attach):
    recipe = make_recipe()
    flour = attach(recipe, 'flour', 100, 'g')
    catalog.edit_ingredient(flour.id, new_name='rye flour', new_quantity=900, new_unit='kg')
    embedded = store.get_recipe('alice', 'Spaghetti Carbonara').ingredients[0]
    assert (embedded.name, embedded.quantity, embedded.unit) == ('flour', 100, 'g')


def test_catalog_delete_does_not_reach_recipe(store, catalog, make_recipe, attach):
    recipe = make_recipe()
    flour = attach(recipe, 'flour', 100, 'g')
    catalog.delete_ingredient(flour.id)
    assert [ri.name for ri in store.get_recipe_by_id(recipe.id).ingredients] == ['flour']


def test_same_ingredient_in_two_recipes_is_independent(store, catalog, make_recipe):
    first = make_recipe(title='One')
    second = make_recipe(title='Two')
    salt = catalog.create_ingredient('salt', 1, 'tsp')
    store.add_ingredient_to_recipe('alice', first.id, salt.id)
    store.add_ingredient_to_recipe('alice', second.id, salt.id)

    store.remove_ingredient_from_recipe('alice', first.id, salt.id)
    assert store.get_recipe_by_id(first.id).ingredients == []
    assert [ri.name for ri in store.get_recipe_by_id(second.id).ingredients] == ['salt']


def test_remove_ingredient(store, make_recipe, attach):
    recipe = make_recipe()
    eggs = attach(recipe, 'eggs')
    bacon = attach(recipe, 'bacon')
    store.remove_ingredient_from_recipe('alice', recipe.id, eggs.id)
    assert [ri.ingredient_id for ri in store.get_recipe_by_id(recipe.id).ingredients] == [bacon.id]


def test_remove_ingredient_not_in_recipe(store, catalog, make_recipe):
    recipe = make_recipe()
    # Present in the catalog but never attached
    eggs = catalog.create_ingredient('eggs', 3, '')
    with pytest.raises(NotFoundError):
        store.remove_ingredient_from_recipe('alice', recipe.id, eggs.id)


# ============================================
# PARSE INGREDIENTS
# ============================================

def test_parse_ingredients_replaces_list(store, catalog, make_recipe, attach):
    recipe = make_recipe()
    attach(recipe, 'old ingredient')

    embedded = store.parse_ingredients('alice', recipe.id, "400,g,Spaghetti\n150,g,pancetta\n3,,eggs")

    assert [(ri.name, ri.quantity, ri.unit) for ri in embedded] == [
        ('spaghetti', 400, 'g'), ('pancetta', 150, 'g'), ('eggs', 3, ''),
    ]
    stored = store.get_recipe_by_id(recipe.id).ingredients
    assert [ri.name for ri in stored] == ['spaghetti', 'pancetta', 'eggs']
    catalog_ids = {i.id for i in catalog.get_ingredients()}
    assert all(ri.ingredient_id in catalog_ids for ri in stored)


def test_parse_ingredients_is_atomic(store, catalog, make_recipe, attach):
    recipe = make_recipe()
    attach(recipe, 'butter')

    with pytest.raises(ValidationError):
        store.parse_ingredients('alice', recipe.id, "400,g,spaghetti\nabc,g,pancetta")

    assert [ri.name for ri in store.get_recipe_by_id(recipe.id).ingredients] == ['butter']
    assert [i.name for i in catalog.get_ingredients()] == ['butter']


@pytest.mark.parametrize('text', ['', '400,g', '1,2,3,4', 'x,g,flour', '-1,g,flour'])
def test_parse_ingredients_rejects_malformed(store, make_recipe, text):
    recipe = make_recipe()
    with pytest.raises(ValidationError):
        store.parse_ingredients('alice', recipe.id, text)


# ============================================
# COPY
# ============================================

def test_copy_recipe_marks_both(store, catalog):
    cake = store.create_recipe('x', 'Cake', link='https://example.com/cake')
    flour = catalog.create_ingredient('flour', 200, 'g')
    store.add_ingredient_to_recipe('x', cake.id, flour.id)
    store.set_image('x', cake.id, 'cake.png')

    copy = store.copy_recipe('y', cake.id)

    assert copy.id != cake.id
    assert copy.owner == 'y'
    assert copy.is_copy is True
    assert (copy.title, copy.link, copy.description, copy.image) == ('Cake', 'https://example.com/cake', '', 'cake.png')
    assert [ri.to_dict() for ri in copy.ingredients] == [
        {'id': flour.id, 'name': 'flour', 'quantity': 200, 'unit': 'g'}
    ]
    assert store.get_recipe('x', 'Cake').is_copy is True


def test_copy_is_deep(store, catalog):
    cake = store.create_recipe('x', 'Cake', description='bake')
    flour = catalog.create_ingredient('flour', 200, 'g')
    store.add_ingredient_to_recipe('x', cake.id, flour.id)
    copy = store.copy_recipe('y', cake.id)

    store.remove_ingredient_from_recipe('y', copy.id, flour.id)
    assert [ri.name for ri in store.get_recipe('x', 'Cake').ingredients] == ['flour']
    assert store.get_recipe('y', 'Cake').ingredients == []


def test_copy_missing_recipe(store):
    with pytest.raises(NotFoundError):
        store.copy_recipe('y', 'missing')


def test_copy_respects_title_uniqueness(store):
    cake = store.create_recipe('x', 'Cake', description='bake')
    with pytest.raises(ConflictError):
        store.copy_recipe('x', cake.id)
    assert store.get_recipe('x', 'Cake').is_copy is False


# ============================================
# LOOKUPS
# ============================================

def test_get_recipe_uses_exact_title(store, make_recipe):
    make_recipe(title='Chocolate Cake')
    with pytest.raises(NotFoundError):
        store.get_recipe('alice', 'Cake')
    with pytest.raises(NotFoundError):
        store.get_recipe('bob', 'Chocolate Cake')


def test_get_all_recipes(store, make_recipe):
    make_recipe(title='One')
    make_recipe(title='Two')
    make_recipe(owner='bob', title='Three')
    assert sorted(r.title for r in store.get_all_recipes('alice')) == ['One', 'Two']
    assert store.get_all_recipes('nobody') == []
    with pytest.raises(ValidationError):
        store.get_all_recipes('')
