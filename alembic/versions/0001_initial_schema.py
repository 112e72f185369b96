"""Initial schema: users, profiles, delivery orders, assignments, events, reviews

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None

user_role = sa.Enum('ADMIN', 'ESTABLISHMENT', 'MOTOBOY', name='userrole')
establishment_plan = sa.Enum('BASIC', 'PRO', 'ENTERPRISE', name='establishmentplan')
delivery_status = sa.Enum('PENDING', 'ASSIGNED', 'IN_TRANSIT', 'DELIVERED', 'CANCELLED', name='deliverystatus')
assignment_status = sa.Enum('ASSIGNED', 'ACCEPTED', 'REJECTED', 'IN_TRANSIT', 'COMPLETED', name='assignmentstatus')

ACTIVE_ASSIGNMENT_CLAUSE = sa.text("status IN ('ASSIGNED', 'ACCEPTED', 'IN_TRANSIT')")

def upgrade():
    op.create_table('users',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('password_hash', sa.String(), nullable=False),
        sa.Column('role', user_role, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.Column('last_login', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    op.create_table('establishment_profiles',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('cnpj', sa.String(length=18), nullable=False),
        sa.Column('contact_email', sa.String(), nullable=False),
        sa.Column('contact_phone', sa.String(), nullable=True),
        sa.Column('address_line1', sa.String(), nullable=False),
        sa.Column('address_line2', sa.String(), nullable=True),
        sa.Column('city', sa.String(), nullable=False),
        sa.Column('state', sa.String(length=2), nullable=False),
        sa.Column('postal_code', sa.String(), nullable=False),
        sa.Column('delivery_radius_km', sa.Float(), nullable=False),
        sa.Column('base_delivery_fee', sa.Float(), nullable=False),
        sa.Column('additional_per_km', sa.Float(), nullable=False),
        sa.Column('estimated_delivery_time_minutes', sa.Integer(), nullable=False),
        sa.Column('plan', establishment_plan, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.UniqueConstraint('user_id')
    )
    op.create_index(op.f('ix_establishment_profiles_id'), 'establishment_profiles', ['id'], unique=False)

    op.create_table('motoboy_profiles',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('full_name', sa.String(), nullable=False),
        sa.Column('cpf', sa.String(length=14), nullable=False),
        sa.Column('cnh_number', sa.String(), nullable=False),
        sa.Column('cnh_category', sa.String(), nullable=False),
        sa.Column('vehicle_type', sa.String(), nullable=False),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('work_schedule', sa.JSON(), nullable=True),
        sa.Column('verified_at', sa.DateTime(), nullable=True),
        sa.Column('hired_at', sa.DateTime(), nullable=True),
        sa.Column('is_available', sa.Boolean(), nullable=False),
        sa.Column('current_lat', sa.Float(), nullable=True),
        sa.Column('current_lng', sa.Float(), nullable=True),
        sa.Column('location_updated_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.UniqueConstraint('user_id')
    )
    op.create_index(op.f('ix_motoboy_profiles_id'), 'motoboy_profiles', ['id'], unique=False)

    op.create_table('delivery_orders',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('delivery_code', sa.String(length=16), nullable=False),
        sa.Column('establishment_id', sa.String(), nullable=False),
        sa.Column('customer_name', sa.String(), nullable=False),
        sa.Column('customer_phone', sa.String(), nullable=True),
        sa.Column('pickup_address', sa.String(), nullable=False),
        sa.Column('delivery_address', sa.String(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('distance_km', sa.Float(), nullable=True),
        sa.Column('delivery_fee', sa.Float(), nullable=True),
        sa.Column('scheduled_at', sa.DateTime(), nullable=True),
        sa.Column('status', delivery_status, nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['establishment_id'], ['establishment_profiles.id'], )
    )
    op.create_index(op.f('ix_delivery_orders_id'), 'delivery_orders', ['id'], unique=False)
    op.create_index(op.f('ix_delivery_orders_delivery_code'), 'delivery_orders', ['delivery_code'], unique=True)
    op.create_index(op.f('ix_delivery_orders_establishment_id'), 'delivery_orders', ['establishment_id'], unique=False)
    op.create_index(op.f('ix_delivery_orders_status'), 'delivery_orders', ['status'], unique=False)
    op.create_index(op.f('ix_delivery_orders_created_at'), 'delivery_orders', ['created_at'], unique=False)

    op.create_table('delivery_assignments',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('order_id', sa.String(), nullable=False),
        sa.Column('motoboy_id', sa.String(), nullable=False),
        sa.Column('status', assignment_status, nullable=False),
        sa.Column('assigned_at', sa.DateTime(), nullable=False),
        sa.Column('accepted_at', sa.DateTime(), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['order_id'], ['delivery_orders.id'], ),
        sa.ForeignKeyConstraint(['motoboy_id'], ['motoboy_profiles.id'], )
    )
    op.create_index(op.f('ix_delivery_assignments_id'), 'delivery_assignments', ['id'], unique=False)
    op.create_index(op.f('ix_delivery_assignments_order_id'), 'delivery_assignments', ['order_id'], unique=False)
    op.create_index(op.f('ix_delivery_assignments_motoboy_id'), 'delivery_assignments', ['motoboy_id'], unique=False)
    # at most one active assignment per order
    op.create_index(
        'uq_delivery_assignments_active_order',
        'delivery_assignments',
        ['order_id'],
        unique=True,
        sqlite_where=ACTIVE_ASSIGNMENT_CLAUSE,
        postgresql_where=ACTIVE_ASSIGNMENT_CLAUSE
    )

    op.create_table('delivery_events',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('order_id', sa.String(), nullable=False),
        sa.Column('status', delivery_status, nullable=False),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['order_id'], ['delivery_orders.id'], )
    )
    op.create_index(op.f('ix_delivery_events_order_id'), 'delivery_events', ['order_id'], unique=False)
    op.create_index(op.f('ix_delivery_events_created_at'), 'delivery_events', ['created_at'], unique=False)

    op.create_table('reviews',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('order_id', sa.String(), nullable=False),
        sa.Column('author_id', sa.String(), nullable=False),
        sa.Column('target_id', sa.String(), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('comment', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['order_id'], ['delivery_orders.id'], ),
        sa.ForeignKeyConstraint(['author_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['target_id'], ['users.id'], ),
        sa.UniqueConstraint('order_id', 'author_id', name='uq_reviews_order_author')
    )
    op.create_index(op.f('ix_reviews_id'), 'reviews', ['id'], unique=False)
    op.create_index(op.f('ix_reviews_order_id'), 'reviews', ['order_id'], unique=False)
    op.create_index(op.f('ix_reviews_author_id'), 'reviews', ['author_id'], unique=False)
    op.create_index(op.f('ix_reviews_target_id'), 'reviews', ['target_id'], unique=False)

def downgrade():
    op.drop_table('reviews')
    op.drop_table('delivery_events')
    op.drop_index('uq_delivery_assignments_active_order', table_name='delivery_assignments')
    op.drop_table('delivery_assignments')
    op.drop_table('delivery_orders')
    op.drop_table('motoboy_profiles')
    op.drop_table('establishment_profiles')
    op.drop_table('users')

    bind = op.get_bind()
    for enum_type in (assignment_status, delivery_status, establishment_plan, user_role):
        enum_type.drop(bind, checkfirst=True)
