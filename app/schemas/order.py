from pydantic import BaseModel, EmailStr, Field, computed_field
from typing import Optional, List
from datetime import datetime

from app.models.customer.order import OrderStatus, OrderType, OrderSource, PaymentMethod, PaymentStatus
from app.schemas.common import Money


# ---------- Checkout ----------
class OrderItemCreate(BaseModel):
    product_id: str
    quantity: int = Field(ge=1)
    notes: Optional[str] = None


class CustomerDetails(BaseModel):
    # Required-ness depends on the order type, checked in services/orders.py
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None


class OrderCreate(BaseModel):
    items: List[OrderItemCreate] = []
    type: OrderType
    source: OrderSource = OrderSource.WEBSITE
    customer: CustomerDetails
    payment_method: PaymentMethod = PaymentMethod.CASH
    cash_amount: Optional[Money] = None
    notes: Optional[str] = None
    scheduled_for: Optional[datetime] = None
    # Repeat customers are reused as-is unless the client asks for an update
    update_customer_details: bool = False


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    estimated_time: Optional[int] = Field(default=None, ge=0)
    notes: Optional[str] = None


# ---------- Read models ----------
class OrderItemRead(BaseModel):
    id: str
    product_id: Optional[str] = None
    name: str
    price: Money
    quantity: int
    notes: Optional[str] = None

    @computed_field
    @property
    def total(self) -> Money:
        return self.price * self.quantity

    class Config:
        from_attributes = True


class OrderRead(BaseModel):
    id: str
    order_number: str
    tenant_id: str
    customer_id: Optional[str] = None
    status: OrderStatus
    type: OrderType
    source: OrderSource
    subtotal: Money
    delivery_fee: Money
    tax: Money
    total: Money
    customer_name: str
    customer_email: str
    customer_phone: str
    delivery_address: Optional[str] = None
    delivery_city: Optional[str] = None
    delivery_postal: Optional[str] = None
    delivery_notes: Optional[str] = None
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    cash_amount: Optional[Money] = None
    estimated_time: Optional[int] = None
    scheduled_for: Optional[datetime] = None
    notes: Optional[str] = None
    status_changed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    items: List[OrderItemRead] = []

    class Config:
        from_attributes = True


class ReceiptCustomer(BaseModel):
    name: str
    email: str
    phone: str


class OrderReceipt(BaseModel):
    id: str
    order_number: str
    status: OrderStatus
    type: OrderType
    subtotal: Money
    delivery_fee: Money
    tax: Money
    total: Money
    estimated_time: Optional[int] = None
    customer: ReceiptCustomer
    items: List[OrderItemRead]
    payment_url: Optional[str] = None


class TrackedItem(BaseModel):
    name: str
    quantity: int

    class Config:
        from_attributes = True


class OrderTracking(BaseModel):
    order_number: str
    status: OrderStatus
    estimated_time: Optional[int] = None
    total: Money
    items: List[TrackedItem]
    created_at: datetime

    class Config:
        from_attributes = True
