from pydantic import BaseModel, EmailStr, Field
from typing import Dict, Generic, List, Literal, Optional, TypeVar
from datetime import datetime
from storefront.db.models import OrderStatus, PaymentMethod, StoreStatus

T = TypeVar('T')

class Envelope(BaseModel, Generic[T]):
    status: str = 'success'
    message: str = 'Success'
    data: T

class PaginationMeta(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_more: bool

class PageEnvelope(BaseModel, Generic[T]):
    status: str = 'success'
    message: str = 'Success'
    data: List[T]
    pagination: PaginationMeta

# --- auth ---
class RegisterPayload(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(min_length=8)
    image: Optional[str] = None

class LoginPayload(BaseModel):
    email: EmailStr
    password: str

class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = 'bearer'

class RefreshRequest(BaseModel):
    refresh_token: str

class StoreSummary(BaseModel):
    id: int
    name: str
    username: str
    status: StoreStatus
    is_active: bool
    class Config: from_attributes = True

class UserRead(BaseModel):
    id: int
    name: str
    email: EmailStr
    role: str
    image: str = ''
    store: Optional[StoreSummary] = None
    class Config: from_attributes = True

# --- stores ---
class StoreCreate(BaseModel):
    name: str = Field(min_length=3, max_length=100)
    username: str = Field(min_length=3, max_length=50, pattern=r'^[a-zA-Z0-9_-]+$')
    description: str = Field(min_length=10, max_length=500)
    email: EmailStr
    contact: str = Field(pattern=r'^[0-9+\-\s()]+$')
    address: str = Field(min_length=1)
    logo: Optional[str] = None

class StoreUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=3, max_length=100)
    description: Optional[str] = Field(default=None, min_length=10, max_length=500)
    email: Optional[EmailStr] = None
    contact: Optional[str] = Field(default=None, pattern=r'^[0-9+\-\s()]+$')
    address: Optional[str] = None
    logo: Optional[str] = None

class StoreRead(BaseModel):
    id: int
    user_id: int
    name: str
    username: str
    description: str
    email: str
    contact: str
    address: str
    logo: str
    status: StoreStatus
    is_active: bool
    created_at: datetime
    class Config: from_attributes = True

class StoreStatusUpdate(BaseModel):
    status: Literal['approved', 'rejected']

# --- products ---
class ProductBase(BaseModel):
    name: str = Field(min_length=3, max_length=200)
    description: str = Field(min_length=10, max_length=2000)
    mrp_cents: int = Field(ge=0)
    price_cents: int = Field(ge=0)
    category: str = Field(min_length=1)
    images: List[str] = Field(min_length=1)
    in_stock: bool = True
class ProductCreate(ProductBase): pass
class ProductUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=3, max_length=200)
    description: Optional[str] = Field(default=None, min_length=10, max_length=2000)
    mrp_cents: Optional[int] = Field(default=None, ge=0)
    price_cents: Optional[int] = Field(default=None, ge=0)
    category: Optional[str] = None
    images: Optional[List[str]] = None
    in_stock: Optional[bool] = None
class ProductRead(BaseModel):
    id: int
    store_id: int
    name: str
    description: str
    mrp_cents: int
    price_cents: int
    category: str
    images: List[str] = []
    in_stock: bool
    created_at: datetime
    class Config: from_attributes = True

# --- addresses ---
class AddressCreate(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    phone: str = Field(pattern=r'^[0-9+\-\s()]+$')
    street: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    zip: str = Field(min_length=1)
    country: str = Field(min_length=1)
class AddressRead(AddressCreate):
    id: int
    class Config: from_attributes = True

# --- orders ---
class OrderItemIn(BaseModel):
    # any client-side price field is ignored
    product_id: int
    quantity: int = Field(ge=1)

class CouponRef(BaseModel):
    code: str = Field(min_length=1)

class OrderDraft(BaseModel):
    store_id: int
    address_id: int
    payment_method: PaymentMethod
    items: List[OrderItemIn]
    coupon: Optional[CouponRef] = None

class OrderItemRead(BaseModel):
    product_id: int
    quantity: int
    price_cents: int
    name_snapshot: str
    class Config: from_attributes = True

class OrderRead(BaseModel):
    id: int
    user_id: int
    store_id: int
    address_id: int
    payment_method: PaymentMethod
    total_cents: int
    is_paid: bool
    status: OrderStatus
    is_coupon_used: bool
    coupon: dict = {}
    created_at: datetime
    items: List[OrderItemRead] = []
    class Config: from_attributes = True

class OrderStatusUpdate(BaseModel):
    status: OrderStatus

# --- coupons ---
class CouponCreate(BaseModel):
    code: str = Field(min_length=3, max_length=64)
    description: str = ''
    discount: int = Field(ge=1, le=100)
    expires_at: datetime
    is_public: bool = False
class CouponRead(CouponCreate):
    class Config: from_attributes = True

# --- cart ---
class CartRead(BaseModel):
    items: Dict[str, int] = {}
    total: int = 0

# --- payments ---
class PaymentEvent(BaseModel):
    type: str
    order_id: int
    amount_cents: Optional[int] = None
