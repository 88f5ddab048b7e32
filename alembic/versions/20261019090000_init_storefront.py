from alembic import op
import sqlalchemy as sa

revision = "20261019090000"
down_revision = None

UTC_NOW = sa.text("(now() at time zone 'utc')")

store_status = sa.Enum('PENDING', 'APPROVED', 'REJECTED', name='storestatus')
payment_method = sa.Enum('COD', 'STRIPE', name='paymentmethod')
order_status = sa.Enum('PENDING', 'PROCESSING', 'SHIPPED', 'DELIVERED', 'CANCELLED', name='orderstatus')

def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False, unique=True, index=True),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=32), nullable=False, server_default='customer'),
        sa.Column('image', sa.String(length=1024), nullable=False, server_default=''),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=UTC_NOW),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=UTC_NOW),
    )
    op.create_table(
        'refresh_tokens',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('jti', sa.String(length=64), nullable=False, unique=True),
        sa.Column('token_hash', sa.String(length=64), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('revoked', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=UTC_NOW),
    )
    op.create_table(
        'stores',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('username', sa.String(length=64), nullable=False, unique=True, index=True),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('contact', sa.String(length=32), nullable=False),
        sa.Column('address', sa.String(length=500), nullable=False),
        sa.Column('logo', sa.String(length=1024), nullable=False, server_default=''),
        sa.Column('status', store_status, nullable=False, server_default='PENDING'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=UTC_NOW),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=UTC_NOW),
    )
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('store_id', sa.Integer(), sa.ForeignKey('stores.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('name', sa.String(length=240), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('mrp_cents', sa.BigInteger(), nullable=False),
        sa.Column('price_cents', sa.BigInteger(), nullable=False),
        sa.Column('category', sa.String(length=120), nullable=False, index=True),
        sa.Column('images', sa.JSON(), nullable=False),
        sa.Column('in_stock', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=UTC_NOW),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=UTC_NOW),
    )
    op.create_table(
        'addresses',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=False),
        sa.Column('street', sa.String(length=255), nullable=False),
        sa.Column('city', sa.String(length=120), nullable=False),
        sa.Column('state', sa.String(length=120), nullable=False),
        sa.Column('zip', sa.String(length=32), nullable=False),
        sa.Column('country', sa.String(length=120), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=UTC_NOW),
    )
    op.create_table(
        'coupons',
        sa.Column('code', sa.String(length=64), primary_key=True),
        sa.Column('description', sa.String(length=500), nullable=False, server_default=''),
        sa.Column('discount', sa.Integer(), nullable=False),
        sa.Column('is_public', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=UTC_NOW),
    )
    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False, index=True),
        sa.Column('store_id', sa.Integer(), sa.ForeignKey('stores.id'), nullable=False, index=True),
        sa.Column('address_id', sa.Integer(), sa.ForeignKey('addresses.id'), nullable=False),
        sa.Column('payment_method', payment_method, nullable=False),
        sa.Column('total_cents', sa.BigInteger(), nullable=False),
        sa.Column('is_paid', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('status', order_status, nullable=False, server_default='PENDING'),
        sa.Column('is_coupon_used', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('coupon', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=UTC_NOW),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=UTC_NOW),
    )
    op.create_table(
        'order_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price_cents', sa.BigInteger(), nullable=False),
        sa.Column('name_snapshot', sa.String(length=240), nullable=False),
    )

def downgrade():
    op.drop_table('order_items')
    op.drop_table('orders')
    op.drop_table('coupons')
    op.drop_table('addresses')
    op.drop_table('products')
    op.drop_table('stores')
    op.drop_table('refresh_tokens')
    op.drop_table('users')
    order_status.drop(op.get_bind(), checkfirst=True)
    payment_method.drop(op.get_bind(), checkfirst=True)
    store_status.drop(op.get_bind(), checkfirst=True)
