from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from erp_ledger.common.error_handlers import register_error_handlers
from erp_ledger.core.config import settings
from erp_ledger.api.v1 import accounts, catalog, inventory, journal, orders, production, purchases, reports

app = FastAPI(title="ERP Ledger", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Register API routers
app.include_router(catalog.router, prefix="/api/v1/catalog", tags=["catalog"])
app.include_router(accounts.router, prefix="/api/v1/accounts", tags=["accounts"])
app.include_router(journal.router, prefix="/api/v1/journal-entries", tags=["journal"])
app.include_router(orders.router, prefix="/api/v1/orders", tags=["orders"])
app.include_router(
    purchases.router, prefix="/api/v1/purchase-orders", tags=["purchases"])
app.include_router(
    inventory.router, prefix="/api/v1/inventory", tags=["inventory"])
app.include_router(
    production.router, prefix="/api/v1/production", tags=["production"])
app.include_router(reports.router, prefix="/api/v1/reports", tags=["reports"])


@app.get("/")
def read_root():
    return {"message": "Welcome to the ERP Ledger APIs!"}
