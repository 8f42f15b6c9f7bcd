import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from petcare.core.config import settings
from petcare.core.database import init_db
from petcare.core.errors import register_exception_handlers
from petcare.routers import (
    auth, customer_auth, user, branch, category, product, stock,
    customer, supplier, sale, storefront, online_order, dashboard,
    procurement, stock_transfer, report,
)

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# ---------------------------------------------------------
# 1. LIFESPAN MANAGER
# ---------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    # --- STARTUP ---
    logger.info("Initialization started")
    try:
        await init_db()
        logger.info("Connected to database '%s'", settings.DATABASE_NAME)
    except Exception:
        logger.exception("Could not connect to database '%s'", settings.DATABASE_NAME)

    yield

    # --- SHUTDOWN ---
    logger.info("System shutting down")

# ---------------------------------------------------------
# 2. APP INITIALIZATION
# ---------------------------------------------------------
app = FastAPI(
    title=settings.APP_NAME,
    lifespan=lifespan,
    debug=settings.DEBUG,
    description="API for the multi-branch pet supply and veterinary POS"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# ---------------------------------------------------------
# 3. ROUTERS
# ---------------------------------------------------------
app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(customer_auth.router, prefix="/customer", tags=["Customer Accounts"])
app.include_router(user.router, prefix="/users", tags=["User Management"])
app.include_router(branch.router, prefix="/branches", tags=["Branch Management"])
app.include_router(category.router, prefix="/categories", tags=["Category Management"])
app.include_router(product.router, prefix="/products", tags=["Product Management"])
app.include_router(stock_transfer.router, prefix="/stock", tags=["Stock Transfers"])
app.include_router(stock.router, prefix="/stock", tags=["Stock Management"])
app.include_router(customer.router, prefix="/customers", tags=["Customer Management"])
app.include_router(supplier.router, prefix="/suppliers", tags=["Supplier Management"])
app.include_router(procurement.router, prefix="/purchase-orders", tags=["Procurement"])
app.include_router(sale.router, prefix="/sales", tags=["Sales Management"])
app.include_router(storefront.router, prefix="/online", tags=["Storefront"])
app.include_router(online_order.router, prefix="/online", tags=["Online Orders"])
app.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
app.include_router(report.router, prefix="/reports", tags=["Reports"])

# ---------------------------------------------------------
# 4. BASIC ROUTES (Health Checks)
# ---------------------------------------------------------
@app.get("/", tags=["System"])
async def root():
    """Root endpoint to verify the API is online."""
    return {
        "success": True,
        "system": settings.APP_NAME,
        "status": "Online",
        "documentation": "/docs"
    }

@app.get("/health", tags=["System"])
async def health_check():
    return {"success": True, "status": "ok"}
