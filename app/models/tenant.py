# app/models/tenant.py
from sqlalchemy import Column, Integer, String, DateTime, Boolean, Numeric, ForeignKey, Enum
from sqlalchemy.orm import relationship
from datetime import datetime
from app.models.base import Base
import uuid, enum


class TenantStatus(str, enum.Enum):
    TRIAL = "TRIAL"
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"
    CANCELLED = "CANCELLED"


# Tenants in these states may take orders and use the dashboards
SERVING_STATUSES = (TenantStatus.ACTIVE, TenantStatus.TRIAL)


class Tenant(Base):
    __tablename__ = "tenants"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    subdomain = Column(String, unique=True, nullable=False, index=True)
    email = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    status = Column(Enum(TenantStatus), default=TenantStatus.TRIAL, nullable=False)
    plan = Column(String, default="starter", nullable=False)
    trial_ends_at = Column(DateTime, nullable=True)

    # Only ever bumped with an atomic UPDATE ... RETURNING (see crud/tenant.py)
    last_order_number = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Back-populated relationships
    settings = relationship("TenantSettings", back_populates="tenant", uselist=False, cascade="all, delete-orphan")
    users = relationship("User", back_populates="tenant")
    categories = relationship("Category", back_populates="tenant")
    products = relationship("Product", back_populates="tenant")
    customers = relationship("Customer", back_populates="tenant")
    orders = relationship("Order", back_populates="tenant")


class TenantSettings(Base):
    __tablename__ = "tenant_settings"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    tenant_id = Column(String, ForeignKey("tenants.id"), unique=True, nullable=False)

    currency = Column(String, default="EUR", nullable=False)
    timezone = Column(String, default="Europe/Amsterdam", nullable=False)
    language = Column(String, default="nl", nullable=False)

    delivery_fee = Column(Numeric(10, 2), nullable=False, default=2.50)
    free_delivery_threshold = Column(Numeric(10, 2), nullable=True)
    tax_rate = Column(Numeric(5, 4), nullable=False, default=0.21)

    enable_delivery = Column(Boolean, default=True, nullable=False)
    enable_pickup = Column(Boolean, default=True, nullable=False)
    enable_dine_in = Column(Boolean, default=True, nullable=False)
    enable_cash_payment = Column(Boolean, default=True, nullable=False)
    enable_online_payment = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    tenant = relationship("Tenant", back_populates="settings")
