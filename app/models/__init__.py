from .base import Base
from .tenant import Tenant, TenantSettings, TenantStatus
from .user import User, UserRole
from .menu.category import Category
from .menu.product import Product
from .customer.customer import Customer
from .customer.order import Order, OrderItem, OrderStatus, OrderType, OrderSource, PaymentMethod, PaymentStatus
