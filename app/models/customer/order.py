from sqlalchemy import Column, String, Integer, ForeignKey, DateTime, Text, Enum, Numeric, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from datetime import datetime
from app.models.base import Base
import uuid, enum


class OrderStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PREPARING = "PREPARING"
    READY = "READY"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


# Canonical forward lifecycle; CANCELLED branches off any non-terminal state
STATUS_FLOW = [
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
    OrderStatus.READY,
    OrderStatus.COMPLETED,
]
TERMINAL_STATUSES = (OrderStatus.COMPLETED, OrderStatus.CANCELLED)


class OrderType(str, enum.Enum):
    DELIVERY = "DELIVERY"
    PICKUP = "PICKUP"
    DINE_IN = "DINE_IN"


class OrderSource(str, enum.Enum):
    WEBSITE = "WEBSITE"
    POS = "POS"
    PHONE = "PHONE"


class PaymentMethod(str, enum.Enum):
    CASH = "CASH"
    CARD = "CARD"
    IDEAL = "IDEAL"
    PAYPAL = "PAYPAL"
    BANCONTACT = "BANCONTACT"


class PaymentStatus(str, enum.Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    PAID = "PAID"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


class Order(Base):
    __tablename__ = "orders"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    order_number = Column(String, nullable=False)

    tenant_id = Column(String, ForeignKey("tenants.id"), nullable=False)
    tenant = relationship("Tenant", back_populates="orders")

    customer_id = Column(String, ForeignKey("customers.id"), nullable=True)
    customer = relationship("Customer", back_populates="orders")

    status = Column(Enum(OrderStatus), default=OrderStatus.PENDING, nullable=False)
    type = Column(Enum(OrderType), nullable=False)
    source = Column(Enum(OrderSource), default=OrderSource.WEBSITE, nullable=False)

    # Pricing, computed once at checkout
    subtotal = Column(Numeric(10, 2), nullable=False)
    delivery_fee = Column(Numeric(10, 2), nullable=False, default=0)
    tax = Column(Numeric(10, 2), nullable=False)
    total = Column(Numeric(10, 2), nullable=False)

    # Snapshot of the customer at checkout; later customer edits do not touch these
    customer_name = Column(String, nullable=False)
    customer_email = Column(String, nullable=False)
    customer_phone = Column(String, nullable=False)
    delivery_address = Column(String, nullable=True)
    delivery_city = Column(String, nullable=True)
    delivery_postal = Column(String, nullable=True)
    delivery_notes = Column(Text, nullable=True)

    payment_method = Column(Enum(PaymentMethod), default=PaymentMethod.CASH, nullable=False)
    payment_status = Column(Enum(PaymentStatus), default=PaymentStatus.PENDING, nullable=False)
    cash_amount = Column(Numeric(10, 2), nullable=True)

    estimated_time = Column(Integer, nullable=True)  # minutes
    scheduled_for = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=True)  # staff notes

    status_changed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")

    __table_args__ = (
        UniqueConstraint("tenant_id", "order_number", name="uq_order_tenant_number"),
        Index("idx_orders_tenant_created", "tenant_id", "created_at"),
        Index("idx_orders_tenant_status", "tenant_id", "status"),
    )


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    order_id = Column(String, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(String, ForeignKey("products.id"), nullable=True)

    # Snapshot pricing and name at time of order
    name = Column(String, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    order = relationship("Order", back_populates="items")
