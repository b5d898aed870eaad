"""Main API router that includes all endpoint routers."""

from fastapi import APIRouter

from app.api.v1 import admin, admin_payouts, bookings, disputes, payouts, reports

api_router = APIRouter()

# Host payouts
api_router.include_router(payouts.router, prefix="/payouts", tags=["Payouts"])

# Disputes
api_router.include_router(disputes.router, prefix="/disputes", tags=["Disputes"])

# Admin: settings and audit trail
api_router.include_router(admin.router, prefix="/admin", tags=["Admin"])

# Admin: financial calculations and reports
api_router.include_router(reports.router, prefix="/admin/financials", tags=["Financials"])

# Admin: payouts
api_router.include_router(admin_payouts.router, prefix="/admin/payouts", tags=["Admin Payouts"])

# Admin: bookings and refunds
api_router.include_router(bookings.router, prefix="/admin/bookings", tags=["Admin Bookings"])

# Admin: disputes
api_router.include_router(disputes.admin_router, prefix="/admin/disputes", tags=["Admin Disputes"])
