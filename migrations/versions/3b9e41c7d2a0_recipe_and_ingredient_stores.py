"""Recipe and ingredient stores

Revision ID: 3b9e41c7d2a0
Revises:
Create Date: 2026-10-16 09:12:44.104233

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3b9e41c7d2a0'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'ingredient',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('quantity', sa.Float(), nullable=False),
        sa.Column('unit', sa.String(length=50), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('ingredient', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_ingredient_name'), ['name'], unique=False)

    op.create_table(
        'recipe',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('owner', sa.String(length=200), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('image', sa.String(length=2000), nullable=False),
        sa.Column('link', sa.String(length=2000), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('is_copy', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("link != '' OR description != ''", name='ck_recipe_link_or_description'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('owner', 'title', name='uq_recipe_owner_title'),
    )
    with op.batch_alter_table('recipe', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_recipe_owner'), ['owner'], unique=False)
        batch_op.create_index(batch_op.f('ix_recipe_created_at'), ['created_at'], unique=False)

    op.create_table(
        'recipe_ingredient',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('recipe_id', sa.String(length=32), nullable=False),
        sa.Column('ingredient_id', sa.String(length=32), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('quantity', sa.Float(), nullable=False),
        sa.Column('unit', sa.String(length=50), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['recipe_id'], ['recipe.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('recipe_id', 'ingredient_id', name='uq_recipe_ingredient'),
    )
    with op.batch_alter_table('recipe_ingredient', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_recipe_ingredient_recipe_id'), ['recipe_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_recipe_ingredient_ingredient_id'), ['ingredient_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_recipe_ingredient_name'), ['name'], unique=False)


def downgrade():
    with op.batch_alter_table('recipe_ingredient', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_recipe_ingredient_name'))
        batch_op.drop_index(batch_op.f('ix_recipe_ingredient_ingredient_id'))
        batch_op.drop_index(batch_op.f('ix_recipe_ingredient_recipe_id'))
    op.drop_table('recipe_ingredient')

    with op.batch_alter_table('recipe', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_recipe_created_at'))
        batch_op.drop_index(batch_op.f('ix_recipe_owner'))
    op.drop_table('recipe')

    with op.batch_alter_table('ingredient', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_ingredient_name'))
    op.drop_table('ingredient')
