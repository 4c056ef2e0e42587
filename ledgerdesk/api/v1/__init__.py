# ledgerdesk/api/v1/__init__.py
"""
Versioned API v1: aggregates all sub-routers under ``/api/v1``.

Usage in ``main.py``::

    from ledgerdesk.api.v1 import v1_router
    app.include_router(v1_router)
"""

from fastapi import APIRouter

from ledgerdesk.api.v1.routes.bills import router as bills_router
from ledgerdesk.api.v1.routes.invoices import router as invoices_router
from ledgerdesk.api.v1.routes.payments_made import router as payments_made_router
from ledgerdesk.api.v1.routes.quotes import router as quotes_router
from ledgerdesk.api.v1.routes.sales_orders import router as sales_orders_router
from ledgerdesk.api.v1.routes.vendors import router as vendors_router

v1_router = APIRouter(prefix="/api/v1")

# Sales
v1_router.include_router(invoices_router)
v1_router.include_router(sales_orders_router)
v1_router.include_router(quotes_router)

# Purchases
v1_router.include_router(bills_router)
v1_router.include_router(payments_made_router)
v1_router.include_router(vendors_router)
