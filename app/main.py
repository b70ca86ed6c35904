### fooddupe-api/app/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from sqlalchemy.orm import configure_mappers

import app.models  # registers all models via models/__init__.py
from app.api import analytics_routes, order_routes, product_routes, realtime_routes, tenant_routes
from app.core.config import settings
from app.core.errors import register_exception_handlers
from app.db import create_db_and_tables
from app.middleware.tenant_middleware import TenantMiddleware

configure_mappers()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info("🔧 Starting DB setup...")
    await create_db_and_tables()
    log.info("✅ DB schema ready.")
    yield


# Create the FastAPI app
app = FastAPI(title="FoodDupe API", version="1.0.0", lifespan=lifespan)

# ✅ Tenant middleware (puts the tenant identifier on request.state)
app.add_middleware(TenantMiddleware)

# ✅ CORS for the ordering site, POS and dashboards
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


# ✅ Swagger Bearer token support for "Authorize" button
def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema
    openapi_schema = get_openapi(
        title="FoodDupe API",
        version="1.0.0",
        description="Multi-tenant ordering: checkout, order lifecycle, catalog and analytics.",
        routes=app.routes,
    )
    openapi_schema.setdefault("components", {})["securitySchemes"] = {
        "BearerAuth": {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT"
        }
    }
    app.openapi_schema = openapi_schema
    return app.openapi_schema

app.openapi = custom_openapi


@app.get("/health")
async def health():
    return {"status": "ok"}


# ✅ Core app routers
app.include_router(order_routes.router, prefix="/orders", tags=["orders"])
app.include_router(product_routes.router, prefix="/products", tags=["products"])
app.include_router(tenant_routes.router, prefix="/tenants", tags=["tenants"])
app.include_router(analytics_routes.router, prefix="/analytics", tags=["analytics"])
app.include_router(realtime_routes.router)
