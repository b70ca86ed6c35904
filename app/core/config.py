# app/core/config.py
from decimal import Decimal
from typing import List, Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment (.env.production wins when present, like alembic/env.py)
load_dotenv(dotenv_path=".env.production")
load_dotenv()


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///./fooddupe.db"
    sql_echo: bool = False
    log_level: str = "INFO"

    # Comma separated, e.g. "http://localhost:3000,http://localhost:3001"
    allowed_origins: str = "http://localhost:3000"

    # Tenant resolution
    tenant_base_domains: str = "localhost,fooddupe.nl"
    default_tenant: Optional[str] = None

    # Defaults copied into TenantSettings at signup
    default_tax_rate: Decimal = Decimal("0.21")
    default_delivery_fee: Decimal = Decimal("2.50")
    default_currency: str = "EUR"
    default_timezone: str = "Europe/Amsterdam"
    default_language: str = "nl"
    trial_period_days: int = 14

    # Estimated preparation time in minutes, per order type
    estimated_time_delivery: int = 45
    estimated_time_pickup: int = 25
    estimated_time_dine_in: int = 25

    # Status transition policy
    enforce_terminal_statuses: bool = True
    allow_status_jumps: bool = True

    order_list_limit: int = 20

    # Opening hours covered by the hourly analytics series (inclusive)
    analytics_first_hour: int = 9
    analytics_last_hour: int = 22

    model_config = SettingsConfigDict(env_file=".env", env_prefix="", case_sensitive=False, extra="ignore")

    @property
    def origins(self) -> List[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    @property
    def base_domains(self) -> List[str]:
        return [d.strip().lower().lstrip(".") for d in self.tenant_base_domains.split(",") if d.strip()]


settings = Settings()
