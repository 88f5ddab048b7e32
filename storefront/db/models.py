from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import Integer, String, Text, Boolean, DateTime, ForeignKey, BigInteger, JSON, Enum as SAEnum
from datetime import datetime
from enum import Enum
from storefront.db.session import Base

class StoreStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

class PaymentMethod(str, Enum):
    COD = "COD"
    STRIPE = "STRIPE"

class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

class User(Base):
    __tablename__ = 'users'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(32), default='customer')
    image: Mapped[str] = mapped_column(String(1024), default='')
    created_at: Mapped[datetime] = mapped_column(DateTime(), default=lambda: datetime.utcnow())
    updated_at: Mapped[datetime] = mapped_column(DateTime(), default=lambda: datetime.utcnow())
    refresh_tokens = relationship('RefreshToken', back_populates='user', cascade='all, delete-orphan')
    store = relationship('Store', back_populates='owner', uselist=False)
    addresses = relationship('Address', back_populates='user', cascade='all, delete-orphan')

class RefreshToken(Base):
    __tablename__ = 'refresh_tokens'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey('users.id', ondelete='CASCADE'))
    jti: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    token_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(), nullable=False)
    revoked: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(), default=lambda: datetime.utcnow())
    user = relationship('User', back_populates='refresh_tokens')

class Store(Base):
    __tablename__ = 'stores'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    # one store per user
    user_id: Mapped[int] = mapped_column(ForeignKey('users.id', ondelete='CASCADE'), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    username: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, default='')
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    contact: Mapped[str] = mapped_column(String(32), nullable=False)
    address: Mapped[str] = mapped_column(String(500), nullable=False)
    logo: Mapped[str] = mapped_column(String(1024), default='')
    status: Mapped[StoreStatus] = mapped_column(SAEnum(StoreStatus), default=StoreStatus.PENDING)
    is_active: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(), default=lambda: datetime.utcnow())
    updated_at: Mapped[datetime] = mapped_column(DateTime(), default=lambda: datetime.utcnow())
    owner = relationship('User', back_populates='store')
    products = relationship('Product', back_populates='store', cascade='all, delete-orphan')

class Product(Base):
    __tablename__ = 'products'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    store_id: Mapped[int] = mapped_column(ForeignKey('stores.id', ondelete='CASCADE'), index=True)
    name: Mapped[str] = mapped_column(String(240), nullable=False)
    description: Mapped[str] = mapped_column(Text, default='')
    mrp_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    price_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    category: Mapped[str] = mapped_column(String(120), index=True)
    images: Mapped[list] = mapped_column(JSON, default=list)
    in_stock: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(), default=lambda: datetime.utcnow())
    updated_at: Mapped[datetime] = mapped_column(DateTime(), default=lambda: datetime.utcnow())
    store = relationship('Store', back_populates='products')

class Address(Base):
    __tablename__ = 'addresses'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey('users.id', ondelete='CASCADE'), index=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(32), nullable=False)
    street: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(120), nullable=False)
    state: Mapped[str] = mapped_column(String(120), nullable=False)
    zip: Mapped[str] = mapped_column(String(32), nullable=False)
    country: Mapped[str] = mapped_column(String(120), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(), default=lambda: datetime.utcnow())
    user = relationship('User', back_populates='addresses')

class Coupon(Base):
    __tablename__ = 'coupons'
    code: Mapped[str] = mapped_column(String(64), primary_key=True)
    description: Mapped[str] = mapped_column(String(500), default='')
    discount: Mapped[int] = mapped_column(Integer, nullable=False)  # percent
    is_public: Mapped[bool] = mapped_column(Boolean, default=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(), default=lambda: datetime.utcnow())

class Order(Base):
    __tablename__ = 'orders'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey('users.id'), index=True)
    store_id: Mapped[int] = mapped_column(ForeignKey('stores.id'), index=True)
    address_id: Mapped[int] = mapped_column(ForeignKey('addresses.id'))
    payment_method: Mapped[PaymentMethod] = mapped_column(SAEnum(PaymentMethod), nullable=False)
    total_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    is_paid: Mapped[bool] = mapped_column(Boolean, default=False)
    status: Mapped[OrderStatus] = mapped_column(SAEnum(OrderStatus), default=OrderStatus.PENDING)
    is_coupon_used: Mapped[bool] = mapped_column(Boolean, default=False)
    coupon: Mapped[dict] = mapped_column(JSON, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(), default=lambda: datetime.utcnow())
    updated_at: Mapped[datetime] = mapped_column(DateTime(), default=lambda: datetime.utcnow())

    items = relationship('OrderItem', back_populates='order', cascade='all, delete-orphan')
    store = relationship('Store')
    address = relationship('Address')

class OrderItem(Base):
    __tablename__ = 'order_items'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    order_id: Mapped[int] = mapped_column(ForeignKey('orders.id', ondelete='CASCADE'))
    product_id: Mapped[int] = mapped_column(Integer)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    # price at the time of the order; never recomputed
    price_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    name_snapshot: Mapped[str] = mapped_column(String(240), nullable=False)

    order = relationship('Order', back_populates='items')
