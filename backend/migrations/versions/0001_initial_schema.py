"""Initial PolloPollo schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-18

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('first_name', sa.String(length=255), nullable=False),
        sa.Column('sur_name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=191), nullable=False),
        sa.Column('password', sa.String(length=255), nullable=False),
        sa.Column('country', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('thumbnail', sa.String(length=500), nullable=True),
        sa.Column('created', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table('user_roles',
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('user_role_enum', sa.String(length=50), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('user_id', 'user_role_enum', name='user_roles_pkey'),
        sa.UniqueConstraint('user_id')
    )

    op.create_table('producers',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('street', sa.String(length=255), nullable=True),
        sa.Column('street_number', sa.String(length=255), nullable=True),
        sa.Column('zipcode', sa.String(length=255), nullable=True),
        sa.Column('city', sa.String(length=255), nullable=True),
        sa.Column('pairing_secret', sa.String(length=255), nullable=False),
        sa.Column('device_address', sa.String(length=255), nullable=True),
        sa.Column('wallet_address', sa.String(length=255), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
        sa.UniqueConstraint('pairing_secret')
    )

    op.create_table('receivers',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id')
    )

    op.create_table('products',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('price', sa.Integer(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('country', sa.String(length=255), nullable=True),
        sa.Column('available', sa.Boolean(), nullable=False),
        sa.Column('rank', sa.Integer(), nullable=False),
        sa.Column('thumbnail', sa.String(length=500), nullable=True),
        sa.Column('created', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_products_user_id', 'products', ['user_id'])

    op.create_table('applications',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('motivation', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=50), nullable=False),
        sa.Column('created', sa.DateTime(), nullable=False),
        sa.Column('last_modified', sa.DateTime(), nullable=True),
        sa.Column('date_of_donation', sa.DateTime(), nullable=True),
        sa.Column('unit_id', sa.String(length=255), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_applications_user_id', 'applications', ['user_id'])
    op.create_index('ix_applications_product_id', 'applications', ['product_id'])

    op.create_table('contracts',
        sa.Column('application_id', sa.Integer(), nullable=False),
        sa.Column('creation_time', sa.DateTime(), nullable=True),
        sa.Column('confirm_key', sa.String(length=255), nullable=True),
        sa.Column('shared_address', sa.String(length=255), nullable=True),
        sa.Column('donor_device', sa.String(length=255), nullable=True),
        sa.Column('donor_wallet', sa.String(length=255), nullable=True),
        sa.Column('producer_device', sa.String(length=255), nullable=True),
        sa.Column('producer_wallet', sa.String(length=255), nullable=True),
        sa.Column('price', sa.Integer(), nullable=True),
        sa.Column('bytes', sa.Integer(), nullable=False),
        sa.Column('completed', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['application_id'], ['applications.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('application_id')
    )

    op.create_table('donors',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('aa_account', sa.String(length=128), nullable=False),
        sa.Column('wallet_address', sa.String(length=34), nullable=False),
        sa.Column('device_address', sa.String(length=34), nullable=True),
        sa.Column('email', sa.String(length=256), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_donors_aa_account', 'donors', ['aa_account'], unique=True)

    op.create_table('byte_exchange_rate',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('gbyte_usd', sa.Numeric(precision=18, scale=8), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )


def downgrade():
    op.drop_table('byte_exchange_rate')
    op.drop_index('ix_donors_aa_account', table_name='donors')
    op.drop_table('donors')
    op.drop_table('contracts')
    op.drop_index('ix_applications_product_id', table_name='applications')
    op.drop_index('ix_applications_user_id', table_name='applications')
    op.drop_table('applications')
    op.drop_index('ix_products_user_id', table_name='products')
    op.drop_table('products')
    op.drop_table('receivers')
    op.drop_table('producers')
    op.drop_table('user_roles')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
