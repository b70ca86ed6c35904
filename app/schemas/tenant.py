from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime

from app.models.tenant import TenantStatus
from app.schemas.common import Money, Rate


# ---------- Tenant settings ----------
class TenantSettingsUpdate(BaseModel):
    currency: Optional[str] = None
    timezone: Optional[str] = None
    language: Optional[str] = None
    delivery_fee: Optional[Money] = Field(default=None, ge=0)
    free_delivery_threshold: Optional[Money] = Field(default=None, ge=0)
    tax_rate: Optional[Rate] = Field(default=None, ge=0, le=1)
    enable_delivery: Optional[bool] = None
    enable_pickup: Optional[bool] = None
    enable_dine_in: Optional[bool] = None
    enable_cash_payment: Optional[bool] = None
    enable_online_payment: Optional[bool] = None

    # free_delivery_threshold is the only setting that can be cleared
    @field_validator(
        "currency", "timezone", "language", "delivery_fee", "tax_rate",
        "enable_delivery", "enable_pickup", "enable_dine_in",
        "enable_cash_payment", "enable_online_payment",
    )
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("may not be null")
        return v


class TenantSettingsRead(BaseModel):
    currency: str
    timezone: str
    language: str
    delivery_fee: Money
    free_delivery_threshold: Optional[Money] = None
    tax_rate: Rate
    enable_delivery: bool
    enable_pickup: bool
    enable_dine_in: bool
    enable_cash_payment: bool
    enable_online_payment: bool

    class Config:
        from_attributes = True


# ---------- Tenant ----------
class TenantCreate(BaseModel):
    name: str = Field(min_length=1)
    subdomain: str = Field(min_length=2, max_length=63, pattern=r"^[a-z0-9](?:[a-z0-9-]*[a-z0-9])?$")
    email: EmailStr
    phone: Optional[str] = None
    plan: str = "starter"
    settings: Optional[TenantSettingsUpdate] = None


class TenantStatusUpdate(BaseModel):
    status: TenantStatus


class TenantRead(BaseModel):
    id: str
    name: str
    subdomain: str
    email: str
    phone: Optional[str] = None
    status: TenantStatus
    plan: str
    trial_ends_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    settings: Optional[TenantSettingsRead] = None

    class Config:
        from_attributes = True
