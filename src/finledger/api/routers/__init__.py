"""API routers package."""

from finledger.api.routers.transactions import router as transactions_router
from finledger.api.routers.reports import router as reports_router
from finledger.api.routers.investments import router as investments_router
from finledger.api.routers.actions import router as actions_router

__all__ = [
    "transactions_router",
    "reports_router",
    "investments_router",
    "actions_router",
]
