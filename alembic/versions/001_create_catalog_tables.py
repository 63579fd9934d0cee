"""Create catalog tables.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create category, attribute and listing tables."""
    # Category tree
    op.create_table(
        'category_nodes',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('slug', sa.String(200), nullable=False, index=True),
        sa.Column('level', sa.Integer(), nullable=False, index=True),
        sa.Column('parent_id', sa.String(36),
                  sa.ForeignKey('category_nodes.id', ondelete='CASCADE'), nullable=True, index=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('synonyms', sa.JSON(), nullable=False),
        sa.Column('image_url', sa.String(1000), nullable=True),
        sa.Column('show_in_category_grid', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('display_order', sa.Integer(), nullable=False, server_default='0'),
    )

    op.create_table(
        'category_grid_images',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('category_id', sa.String(36),
                  sa.ForeignKey('category_nodes.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('image_url', sa.String(1000), nullable=False),
        sa.Column('button_text', sa.String(200), nullable=True),
        sa.Column('link', sa.String(1000), nullable=True),
        sa.Column('display_order', sa.Integer(), nullable=False, server_default='0'),
    )

    op.create_table(
        'category_filter_settings',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('level', sa.Integer(), nullable=False),
        sa.Column('category_id', sa.String(36),
                  sa.ForeignKey('category_nodes.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('show_brand_filter', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('show_size_filter', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('show_color_filter', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('show_price_filter', sa.Boolean(), nullable=False, server_default='true'),
    )

    # Attributes
    op.create_table(
        'attributes',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False, index=True),
        sa.Column('display_label', sa.String(200), nullable=False),
        sa.Column('data_type', sa.String(20), nullable=False, server_default='text'),
        sa.Column('display_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('show_in_top_line', sa.Boolean(), nullable=False, server_default='false'),
    )

    op.create_table(
        'attribute_options',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('attribute_id', sa.String(36),
                  sa.ForeignKey('attributes.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('value', sa.String(200), nullable=False),
        sa.Column('display_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
    )

    op.create_table(
        'attribute_scopes',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('attribute_id', sa.String(36),
                  sa.ForeignKey('attributes.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('level', sa.Integer(), nullable=False),
        sa.Column('category_id', sa.String(36),
                  sa.ForeignKey('category_nodes.id', ondelete='CASCADE'), nullable=False, index=True),
    )

    # Listings
    op.create_table(
        'sellers',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('is_suspended', sa.Boolean(), nullable=False, server_default='false', index=True),
    )

    op.create_table(
        'brands',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False, index=True),
    )

    op.create_table(
        'products',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.String(500), nullable=False),
        sa.Column('slug', sa.String(500), nullable=False),
        sa.Column('seller_id', sa.String(36), sa.ForeignKey('sellers.id'), nullable=False, index=True),
        sa.Column('brand_id', sa.String(36), sa.ForeignKey('brands.id'), nullable=True, index=True),
        sa.Column('category_id', sa.String(36), nullable=True, index=True),
        sa.Column('subcategory_id', sa.String(36), nullable=True, index=True),
        sa.Column('sub_subcategory_id', sa.String(36), nullable=True, index=True),
        sa.Column('sub_sub_subcategory_id', sa.String(36), nullable=True, index=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='draft', index=True),
        sa.Column('starting_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('discounted_price', sa.Numeric(10, 2), nullable=True),
        sa.Column('weight', sa.Numeric(10, 3), nullable=True),
        sa.Column('thumbnail', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
    )

    op.create_table(
        'product_attribute_values',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('product_id', sa.String(36),
                  sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('attribute_id', sa.String(36),
                  sa.ForeignKey('attributes.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('value_text', sa.Text(), nullable=True),
        sa.Column('value_number', sa.Numeric(12, 4), nullable=True),
        sa.Column('value_boolean', sa.Boolean(), nullable=True),
        sa.Column('value_date', sa.Date(), nullable=True),
    )


def downgrade() -> None:
    """Drop catalog tables."""
    op.drop_table('product_attribute_values')
    op.drop_table('products')
    op.drop_table('brands')
    op.drop_table('sellers')
    op.drop_table('attribute_scopes')
    op.drop_table('attribute_options')
    op.drop_table('attributes')
    op.drop_table('category_filter_settings')
    op.drop_table('category_grid_images')
    op.drop_table('category_nodes')
