"""Recipes, recipe content and week plans

Revision ID: 3b7d2c91e4a0
Revises:
Create Date: 2026-10-19 09:12:40.118204

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3b7d2c91e4a0'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'recipe',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('category', sa.String(length=50), nullable=True),
        sa.Column('source', sa.String(length=500), nullable=True),
        sa.Column('base_servings', sa.Integer(), nullable=False),
        sa.Column('has_recipe_content', sa.Boolean(), nullable=False),
        sa.Column('last_cooked', sa.Date(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table('recipe', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_recipe_owner_id'), ['owner_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_recipe_category'), ['category'], unique=False)

    op.create_table(
        'recipe_ingredient',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('recipe_id', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('amount', sa.Float(), nullable=True),
        sa.Column('unit', sa.String(length=20), nullable=True),
        sa.Column('optional', sa.Boolean(), nullable=False),
        sa.Column('sort_order', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['recipe_id'], ['recipe.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('recipe_ingredient', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_recipe_ingredient_recipe_id'), ['recipe_id'], unique=False)

    op.create_table(
        'recipe_step',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('recipe_id', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.String(length=64), nullable=False),
        sa.Column('text', sa.Text(), nullable=False),
        sa.Column('step_order', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['recipe_id'], ['recipe.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('recipe_step', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_recipe_step_recipe_id'), ['recipe_id'], unique=False)

    op.create_table(
        'week_plan',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.String(length=64), nullable=False),
        sa.Column('week_identifier', sa.String(length=8), nullable=False),
        sa.Column('days', sa.JSON(), nullable=False),
        sa.Column('active_day_indices', sa.JSON(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('owner_id', 'week_identifier', name='uq_week_plan_owner_week'),
    )
    with op.batch_alter_table('week_plan', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_week_plan_owner_id'), ['owner_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_week_plan_week_identifier'), ['week_identifier'], unique=False)


def downgrade():
    op.drop_table('week_plan')
    op.drop_table('recipe_step')
    op.drop_table('recipe_ingredient')
    op.drop_table('recipe')
