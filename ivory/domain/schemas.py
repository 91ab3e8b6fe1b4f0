# ivory/domain/schemas.py
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel
from typing import List, Optional
from decimal import Decimal
from datetime import datetime


class CamelModel(BaseModel):
    """API schemas: snake_case attributes in Python, camelCase keys in JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ---------------------------------------------------------------- auth


class SignupIn(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    address: Optional[str] = None
    phone: Optional[str] = None
    password: str = Field(..., min_length=6)
    confirm_password: str


class LoginIn(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class AdminSignupIn(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)
    admin_code: str


class UserOut(CamelModel):
    id: int
    name: Optional[str] = None
    email: str
    address: Optional[str] = None
    phone: Optional[str] = None


class AuthOut(CamelModel):
    success: bool = True
    message: str
    token: str
    user: UserOut


class MeData(CamelModel):
    user: UserOut


class MeOut(CamelModel):
    success: bool = True
    data: MeData


class AdminOut(CamelModel):
    id: int
    name: str
    email: str


class AdminAuthOut(CamelModel):
    success: bool = True
    token: str
    admin: AdminOut


# ---------------------------------------------------------------- cart


class CartAddIn(CamelModel):
    """Body of POST /cart/add."""

    product_id: int = Field(..., gt=0)
    quantity: int = Field(1, gt=0)


class CartUpdateIn(CamelModel):
    product_id: int = Field(..., gt=0)
    # checked in CartService so an unknown action reads "Invalid action"
    action: str


class CartRemoveIn(CamelModel):
    product_id: int = Field(..., gt=0)


class CartItemOut(CamelModel):
    name: str
    price: float
    quantity: int
    total: float
    product: int
    image_url: str


class CartOut(CamelModel):
    cart_items: List[CartItemOut]
    total: float
    cart_count: int


class CartMutationOut(CartOut):
    success: bool = True


class CartAddOut(CamelModel):
    success: bool = True
    cart_count: int


# ---------------------------------------------------------------- checkout / payments


class ShippingInfo(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None
    shipping_method: Optional[str] = None
    delivery_instructions: Optional[str] = None


class ShippingOption(CamelModel):
    method: str
    cost: float
    label: str


class CheckoutData(CamelModel):
    cart_items: List[CartItemOut]
    subtotal: float
    shipping_options: List[ShippingOption]


class CheckoutOut(CamelModel):
    success: bool = True
    data: CheckoutData


class PaymentInitiateIn(CamelModel):
    """
    Tax and shipping cost come from the client and are only range-checked.
    `total` is informational; the server computes its own.
    """

    shipping_info: ShippingInfo = Field(default_factory=ShippingInfo)
    shipping_cost: Decimal = Field(Decimal("0"), ge=0)
    tax: Decimal = Field(Decimal("0"), ge=0)
    total: Optional[Decimal] = Field(None, ge=0)


class PaymentInitiateOut(BaseModel):
    # snake_case on the wire, matches the gateway's field name
    success: bool = True
    authorization_url: str
    reference: str
    order_id: int


# ---------------------------------------------------------------- orders


class OrderStatusIn(CamelModel):
    status: Optional[str] = None


class OrderItemProductOut(CamelModel):
    id: Optional[int] = None
    name: str
    image_url: Optional[str] = None


class OrderItemOut(CamelModel):
    product: OrderItemProductOut
    quantity: int
    price_at_purchase: float
    total: float
    formatted_price: str
    formatted_total: str


class PaymentInfoOut(CamelModel):
    method: Optional[str] = None
    reference: Optional[str] = None
    channel: Optional[str] = None
    status: Optional[str] = None
    paid_at: Optional[datetime] = None


class OrderDetailOut(CamelModel):
    id: int
    created_at: datetime
    formatted_date: str
    status: str
    items: List[OrderItemOut]
    shipping_info: Optional[ShippingInfo] = None
    payment_info: PaymentInfoOut
    subtotal: float
    tax: float
    shipping_cost: float
    total: float
    formatted_subtotal: str
    formatted_tax: str
    formatted_shipping: str
    formatted_total: str


class OrderDetailEnvelope(CamelModel):
    success: bool = True
    data: OrderDetailOut


# ---------------------------------------------------------------- catalog


class CollectionIn(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None


class CollectionOut(CamelModel):
    id: int
    name: str
    description: Optional[str] = None


class CollectionWithCountOut(CollectionOut):
    product_count: int = 0


class ProductOut(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    price: float
    image_url: Optional[str] = None
    quantity: int
    sales_count: int
    collection_id: int
    collection: Optional[CollectionOut] = None


class CollectionsOut(CamelModel):
    success: bool = True
    data: List[CollectionOut]


class CollectionCountsOut(CamelModel):
    success: bool = True
    data: List[CollectionWithCountOut]


class CollectionEnvelope(CamelModel):
    success: bool = True
    data: CollectionOut


class ProductsOut(CamelModel):
    success: bool = True
    data: List[ProductOut]


class ProductEnvelope(CamelModel):
    success: bool = True
    data: ProductOut


class CollectionWithProductsOut(CollectionOut):
    products: List[ProductOut] = []


class LandingData(CamelModel):
    products: List[ProductOut]
    collections: List[CollectionWithProductsOut]
    cart_count: int = 0


class LandingOut(CamelModel):
    success: bool = True
    data: LandingData


class MessageOut(CamelModel):
    success: bool = True
    message: str


# ---------------------------------------------------------------- admin


class CustomerOut(UserOut):
    created_at: Optional[datetime] = None


class CustomersOut(CamelModel):
    success: bool = True
    data: List[CustomerOut]


class AdminOrderItemOut(CamelModel):
    product_id: Optional[int] = None
    name: str
    quantity: int
    price_at_purchase: float
    formatted_price: str
    formatted_total: str


class AdminOrderOut(CamelModel):
    id: int
    user_id: Optional[int] = None
    status: str
    created_at: datetime
    formatted_date: str
    customer_name: str
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_address: Optional[str] = None
    payment_method: Optional[str] = None
    payment_status: Optional[str] = None
    payment_reference: Optional[str] = None
    total: float
    formatted_total: str
    items: List[AdminOrderItemOut]


class AdminOrdersOut(CamelModel):
    success: bool = True
    data: List[AdminOrderOut]


class AdminOrderEnvelope(CamelModel):
    success: bool = True
    data: AdminOrderOut


class CollectionCount(CamelModel):
    id: int
    name: str
    count: int


class DashboardStats(CamelModel):
    total_products: int
    total_collections: int
    total_orders: int
    total_customers: int
    total_sales: str


class DashboardData(CamelModel):
    collections: List[CollectionOut]
    products: List[ProductOut]
    collection_counts: List[CollectionCount]
    stats: DashboardStats
    recent_orders: List[AdminOrderOut]


class DashboardOut(CamelModel):
    success: bool = True
    data: DashboardData
