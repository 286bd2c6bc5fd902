# alembic/versions/0001_initial.py
# initial tables; keep in sync with rentshare/db/models.py
from alembic import op
import sqlalchemy as sa

revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(length=255), nullable=False, unique=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('avatar', sa.String(length=512), nullable=True),
        sa.Column('password_hash', sa.String(length=255), nullable=True),
        sa.Column('favorites', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_users_email', 'users', ['email'])

    op.create_table('items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('owner_email', sa.String(length=255), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(length=50), nullable=False),
        sa.Column('subcategory', sa.String(length=50), nullable=True),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=False),
        sa.Column('images', sa.JSON(), nullable=False),
        sa.Column('features', sa.JSON(), nullable=False),
        sa.Column('included', sa.JSON(), nullable=False),
        sa.Column('rules', sa.JSON(), nullable=False),
        sa.Column('available_from', sa.Date(), nullable=True),
        sa.Column('available_until', sa.Date(), nullable=True),
        sa.Column('min_rental_days', sa.Integer(), nullable=False),
        sa.Column('max_rental_days', sa.Integer(), nullable=False),
        sa.Column('delivery_available', sa.Boolean(), nullable=False),
        sa.Column('pickup_available', sa.Boolean(), nullable=False),
        sa.Column('cancellation_policy', sa.String(length=255), nullable=False),
        sa.Column('availability_version', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_items_owner_email', 'items', ['owner_email'])
    op.create_index('ix_items_category', 'items', ['category'])

    op.create_table('bookings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('item_id', sa.Integer(), sa.ForeignKey('items.id', ondelete='CASCADE'), nullable=False),
        sa.Column('renter_email', sa.String(length=255), nullable=False),
        sa.Column('owner_email', sa.String(length=255), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('total_days', sa.Integer(), nullable=False),
        sa.Column('total_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_bookings_item_id', 'bookings', ['item_id'])
    op.create_index('ix_bookings_renter_email', 'bookings', ['renter_email'])
    op.create_index('ix_bookings_owner_email', 'bookings', ['owner_email'])
    op.create_index('ix_bookings_status', 'bookings', ['status'])

    op.create_table('unavailable_dates',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('item_id', sa.Integer(), sa.ForeignKey('items.id', ondelete='CASCADE'), nullable=False),
        sa.Column('unavailable_date', sa.Date(), nullable=False),
        sa.Column('reason', sa.String(length=255), nullable=True),
        sa.Column('is_recurring', sa.Boolean(), nullable=False),
        sa.Column('recurring_type', sa.String(length=20), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('item_id', 'unavailable_date', name='uq_unavailable_item_date'),
    )
    op.create_index('ix_unavailable_dates_item_id', 'unavailable_dates', ['item_id'])

    op.create_table('reviews',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('item_id', sa.Integer(), sa.ForeignKey('items.id', ondelete='CASCADE'), nullable=False),
        sa.Column('booking_id', sa.Integer(), sa.ForeignKey('bookings.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('reviewer_email', sa.String(length=255), nullable=False),
        sa.Column('owner_email', sa.String(length=255), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('review_title', sa.String(length=255), nullable=True),
        sa.Column('review_text', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_reviews_item_id', 'reviews', ['item_id'])
    op.create_index('ix_reviews_reviewer_email', 'reviews', ['reviewer_email'])


def downgrade():
    op.drop_table('reviews')
    op.drop_table('unavailable_dates')
    op.drop_table('bookings')
    op.drop_table('items')
    op.drop_table('users')
