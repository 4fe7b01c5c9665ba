"""
URL configuration for the ledger API.

Every resource is a router-registered ViewSet; custom endpoints are
ViewSet actions (accounts/summary/, budgets/progress/, ...).
"""

import logging

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from . import views

logger = logging.getLogger(__name__)

router = DefaultRouter()

# Accounts with balance summary
router.register(r"accounts", views.AccountViewSet, basename="account")

# System and user categories with spending breakdown
router.register(r"categories", views.CategoryViewSet, basename="category")

# Journal entries with totals, trends and recent feed
router.register(r"transactions", views.TransactionViewSet, basename="transaction")

# Monthly budgets with live spent amounts
router.register(r"budgets", views.BudgetViewSet, basename="budget")

# Recurring schedules and due processing
router.register(
    r"recurring-transactions",
    views.RecurringTransactionViewSet,
    basename="recurring-transaction",
)

# Display preferences
router.register(r"user-settings", views.UserSettingsViewSet, basename="user-settings")

# Read-only assistant summaries
router.register(r"summaries", views.SummaryViewSet, basename="summary")

urlpatterns = [
    path("", include(router.urls)),
]

logger.info(
    "Ledger API URLs configured successfully",
    extra={
        "viewset_endpoints": len(router.registry),
        "action": "url_configuration_loaded",
        "component": "urls",
    },
)
