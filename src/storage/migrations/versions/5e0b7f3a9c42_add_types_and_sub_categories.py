"""add types and sub_categories

Revision ID: 5e0b7f3a9c42
Revises: a1c4e9d20b17
Create Date: 2026-10-06 16:40:12.881930

Products are re-linked to the new levels by `storefront backfill-taxonomy`,
not here, so the command can be re-run on its own.

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5e0b7f3a9c42'
down_revision: Union[str, Sequence[str], None] = 'a1c4e9d20b17'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'types',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('image', sa.String(length=2000), nullable=True),
        sa.Column('category_id', sa.String(length=36), sa.ForeignKey('categories.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('category_id', 'slug', name='uq_types_category_slug'),
    )
    op.create_index(op.f('ix_types_category_id'), 'types', ['category_id'], unique=False)
    op.create_table(
        'sub_categories',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('image', sa.String(length=2000), nullable=True),
        sa.Column('type_id', sa.String(length=36), sa.ForeignKey('types.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('type_id', 'slug', name='uq_sub_categories_type_slug'),
    )
    op.create_index(op.f('ix_sub_categories_type_id'), 'sub_categories', ['type_id'], unique=False)

    with op.batch_alter_table('products') as batch_op:
        batch_op.add_column(sa.Column('sub_category_id', sa.String(length=36), nullable=True))
        batch_op.create_foreign_key(
            'fk_products_sub_category_id', 'sub_categories', ['sub_category_id'], ['id'],
        )
        batch_op.create_index(batch_op.f('ix_products_sub_category_id'), ['sub_category_id'], unique=False)
        batch_op.alter_column('category_id',
                   existing_type=sa.String(length=36),
                   nullable=True)


def downgrade() -> None:
    """Downgrade schema."""
    conn = op.get_bind()
    unassigned = conn.execute(
        sa.text("SELECT COUNT(*) FROM products WHERE category_id IS NULL")
    ).scalar()
    if unassigned:
        raise RuntimeError(
            f"{unassigned} products have no legacy category_id; "
            "cannot make the column NOT NULL again"
        )

    with op.batch_alter_table('products') as batch_op:
        batch_op.alter_column('category_id',
                   existing_type=sa.String(length=36),
                   nullable=False)
        batch_op.drop_index(batch_op.f('ix_products_sub_category_id'))
        batch_op.drop_constraint('fk_products_sub_category_id', type_='foreignkey')
        batch_op.drop_column('sub_category_id')

    op.drop_index(op.f('ix_sub_categories_type_id'), table_name='sub_categories')
    op.drop_table('sub_categories')
    op.drop_index(op.f('ix_types_category_id'), table_name='types')
    op.drop_table('types')
