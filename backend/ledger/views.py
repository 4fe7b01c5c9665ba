"""
API views for the personal finance ledger.

ViewSets are THIN: they scope querysets to the requesting user, validate
query parameters and delegate every write and aggregate to the ledger
services through ServiceExceptionHandlerMixin.
"""

import logging

from django.conf import settings
from django.utils import timezone
from rest_framework import mixins, serializers, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .mixins.service_exception_handler import ServiceExceptionHandlerMixin
from .models import Budget, UserSettings
from .permissions import CanEditSystemCategoryCosmetics, IsRecordOwner
from .serializers import (AccountSerializer, BudgetProgressSerializer,
                          BudgetSerializer, CategorySerializer,
                          CategorySpendingSerializer, DateRangeQuerySerializer,
                          MonthlyTrendSerializer, MonthSelectionSerializer,
                          RecurringTransactionSerializer,
                          TransactionFilterSerializer, TransactionSerializer,
                          UserSettingsSerializer)
from .services.account_service import AccountService
from .services.budget_service import BudgetService
from .services.category_service import CategoryService
from .services.recurring_service import RecurringTransactionService
from .services.summary_service import FinancialSummaryService
from .services.transaction_service import TransactionService
from .utils.formatting import FormattingConfig

logger = logging.getLogger(__name__)


def _validated_query(serializer_class, request):
    serializer = serializer_class(data=request.query_params)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


def _int_param(request, name, default, lower, upper):
    """Read an integer query parameter, clamped into ``[lower, upper]``."""
    field = serializers.IntegerField(required=False)
    raw = request.query_params.get(name)
    if raw in (None, ""):
        return default
    try:
        value = field.run_validation(raw)
    except serializers.ValidationError as e:
        raise serializers.ValidationError({name: e.detail})
    return max(lower, min(value, upper))


def _month_to_date():
    today = timezone.localdate()
    return today.replace(day=1), today


# -------------------------------------------------------------------
# ACCOUNTS
# -------------------------------------------------------------------


class AccountViewSet(ServiceExceptionHandlerMixin, viewsets.ModelViewSet):
    """Accounts of the authenticated user with balance summary."""

    serializer_class = AccountSerializer
    permission_classes = [IsAuthenticated, IsRecordOwner]

    def get_queryset(self):
        return AccountService.list_accounts(self.request.user)

    def perform_destroy(self, instance):
        deleted = self.handle_service_call(
            AccountService.delete_account, instance.id, self.request.user
        )
        if not deleted:
            raise NotFound("Account not found.")

    @action(detail=False, methods=["get"])
    def summary(self, request):
        """Total balance of included active accounts and totals per type."""
        total = self.handle_service_call(AccountService.total_balance, request.user)
        by_type = self.handle_service_call(
            AccountService.balances_by_type, request.user
        )
        return Response(
            {
                "total_balance": str(total),
                "balances_by_type": {
                    account_type: str(amount) for account_type, amount in by_type.items()
                },
            }
        )


# -------------------------------------------------------------------
# CATEGORIES
# -------------------------------------------------------------------


class CategoryViewSet(ServiceExceptionHandlerMixin, viewsets.ModelViewSet):
    """
    System categories plus the user's own.

    System categories accept cosmetic edits only and can never be deleted.
    """

    serializer_class = CategorySerializer
    permission_classes = [IsAuthenticated, CanEditSystemCategoryCosmetics]

    def get_queryset(self):
        if self.action == "list":
            return CategoryService.list_categories(
                self.request.user, self.request.query_params.get("type") or None
            )
        return CategoryService.visible_categories(self.request.user)

    def perform_destroy(self, instance):
        deleted = self.handle_service_call(
            CategoryService.delete_category, instance.id, self.request.user
        )
        if not deleted:
            raise NotFound("Category not found.")

    @action(detail=False, methods=["get"])
    def spending(self, request):
        """
        Per-category totals for a window (defaults to month to date).

        ``type=income`` switches from expense to income categories.
        """
        params = _validated_query(DateRangeQuerySerializer, request)
        default_start, default_end = _month_to_date()
        start = params.get("start_date", default_start)
        end = params.get("end_date", default_end)

        if request.query_params.get("type") == "income":
            service_call = CategoryService.income_by_category
        else:
            service_call = CategoryService.category_spending

        rows = self.handle_service_call(service_call, request.user, start, end)
        return Response(CategorySpendingSerializer(rows, many=True).data)


# -------------------------------------------------------------------
# TRANSACTIONS
# -------------------------------------------------------------------


class TransactionViewSet(ServiceExceptionHandlerMixin, viewsets.ModelViewSet):
    """Journal entries; every write keeps account balances consistent."""

    serializer_class = TransactionSerializer
    permission_classes = [IsAuthenticated, IsRecordOwner]

    def get_queryset(self):
        if self.action != "list":
            return TransactionService.list_transactions(self.request.user)

        filters = _validated_query(TransactionFilterSerializer, self.request)
        return TransactionService.list_transactions(
            self.request.user,
            start_date=filters.get("start_date"),
            end_date=filters.get("end_date"),
            category_id=filters.get("category"),
            account_id=filters.get("account"),
            transaction_type=filters.get("type"),
        )

    def perform_destroy(self, instance):
        deleted = self.handle_service_call(
            TransactionService.delete_transaction, instance.id, self.request.user
        )
        if not deleted:
            raise NotFound("Transaction not found.")

    @action(detail=False, methods=["get"])
    def totals(self, request):
        params = _validated_query(DateRangeQuerySerializer, request)
        start, end = params.get("start_date"), params.get("end_date")

        income = self.handle_service_call(
            TransactionService.total_income, request.user, start, end
        )
        expenses = self.handle_service_call(
            TransactionService.total_expenses, request.user, start, end
        )
        return Response(
            {
                "total_income": str(income),
                "total_expenses": str(expenses),
                "net_amount": str(income - expenses),
            }
        )

    @action(detail=False, methods=["get"], url_path="monthly-trends")
    def monthly_trends(self, request):
        months = _int_param(
            request, "months", 12, 1, settings.LEDGER["MONTHLY_TRENDS_MAX"]
        )
        rows = self.handle_service_call(
            TransactionService.monthly_trends, request.user, months
        )
        return Response(MonthlyTrendSerializer(rows, many=True).data)

    @action(detail=False, methods=["get"])
    def recent(self, request):
        count = _int_param(
            request, "count", 10, 1, settings.LEDGER["RECENT_TRANSACTIONS_MAX"]
        )
        transactions = self.handle_service_call(
            TransactionService.recent_transactions, request.user, count
        )
        serializer = self.get_serializer(transactions, many=True)
        return Response(serializer.data)


# -------------------------------------------------------------------
# BUDGETS
# -------------------------------------------------------------------


class BudgetViewSet(ServiceExceptionHandlerMixin, viewsets.ModelViewSet):
    """
    Monthly category budgets.

    List and retrieve go through BudgetService so ``spent_amount`` always
    reflects the current journal.
    """

    serializer_class = BudgetSerializer
    permission_classes = [IsAuthenticated, IsRecordOwner]

    def get_queryset(self):
        return Budget.objects.filter(user=self.request.user).select_related(
            "category"
        )

    def list(self, request, *args, **kwargs):
        year = _int_param(request, "year", None, 2000, 2100)
        month = _int_param(request, "month", None, 1, 12)
        budgets = self.handle_service_call(
            BudgetService.list_budgets, request.user, year, month
        )
        return Response(self.get_serializer(budgets, many=True).data)

    def retrieve(self, request, *args, **kwargs):
        budget = self.get_object()
        budget = self.handle_service_call(
            BudgetService.get_budget, budget.id, request.user
        )
        return Response(self.get_serializer(budget).data)

    def perform_destroy(self, instance):
        deleted = self.handle_service_call(
            BudgetService.delete_budget, instance.id, self.request.user
        )
        if not deleted:
            raise NotFound("Budget not found.")

    @action(detail=False, methods=["get"])
    def progress(self, request):
        """Progress rows for a month (defaults to the current month)."""
        today = timezone.localdate()
        year = _int_param(request, "year", today.year, 2000, 2100)
        month = _int_param(request, "month", today.month, 1, 12)
        rows = self.handle_service_call(
            BudgetService.budget_progress, request.user, year, month
        )
        return Response(BudgetProgressSerializer(rows, many=True).data)

    @action(detail=False, methods=["post"], url_path="copy-to-next-month")
    def copy_to_next_month(self, request):
        selection = MonthSelectionSerializer(data=request.data)
        selection.is_valid(raise_exception=True)

        created = self.handle_service_call(
            BudgetService.copy_to_next_month,
            request.user,
            selection.validated_data["year"],
            selection.validated_data["month"],
        )
        return Response(
            {
                "created_count": len(created),
                "budgets": self.get_serializer(created, many=True).data,
            },
            status=status.HTTP_201_CREATED,
        )


# -------------------------------------------------------------------
# RECURRING TRANSACTIONS
# -------------------------------------------------------------------


class RecurringTransactionViewSet(ServiceExceptionHandlerMixin, viewsets.ModelViewSet):
    serializer_class = RecurringTransactionSerializer
    permission_classes = [IsAuthenticated, IsRecordOwner]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.recurring_service = RecurringTransactionService()

    def get_queryset(self):
        return self.recurring_service.list_recurring(self.request.user)

    def perform_destroy(self, instance):
        deleted = self.handle_service_call(
            self.recurring_service.delete_recurring, instance.id, self.request.user
        )
        if not deleted:
            raise NotFound("Recurring transaction not found.")

    @action(detail=False, methods=["get"])
    def due(self, request):
        schedules = self.handle_service_call(
            self.recurring_service.due_schedules, request.user
        )
        return Response(self.get_serializer(schedules, many=True).data)

    @action(detail=False, methods=["post"], url_path="process-due")
    def process_due(self, request):
        """Create the journal entries of every due schedule."""
        result = self.handle_service_call(
            self.recurring_service.process_due, request.user
        )

        logger.info(
            "Recurring processing requested via API",
            extra={
                "user_id": request.user.id,
                "processed_count": result["processed_count"],
                "created_count": result["created_count"],
                "action": "recurring_process_api",
                "component": "RecurringTransactionViewSet",
            },
        )
        return Response(
            {
                "processed_count": result["processed_count"],
                "created_count": result["created_count"],
                "transactions": TransactionSerializer(
                    result["transactions"],
                    many=True,
                    context=self.get_serializer_context(),
                ).data,
            }
        )


# -------------------------------------------------------------------
# USER SETTINGS
# -------------------------------------------------------------------


class UserSettingsViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    viewsets.GenericViewSet,
):
    """Display preferences; users only ever see their own row."""

    serializer_class = UserSettingsSerializer
    permission_classes = [IsAuthenticated, IsRecordOwner]

    def get_queryset(self):
        return UserSettings.objects.filter(user=self.request.user)


# -------------------------------------------------------------------
# ASSISTANT SUMMARIES
# -------------------------------------------------------------------


class SummaryViewSet(ServiceExceptionHandlerMixin, viewsets.ViewSet):
    """
    Read-only plain-text summaries, one per tool name.

    GET /summaries/ lists the tools, GET /summaries/<tool>/ runs one.
    """

    permission_classes = [IsAuthenticated]

    TOOL_PARAMS = {
        "recent_transactions": ("count",),
        "top_expense_categories": ("count",),
        "monthly_trends": ("months",),
        "total_income": ("start_date", "end_date"),
        "total_expenses": ("start_date", "end_date"),
    }

    def _summary_service(self, request):
        user_settings, _ = UserSettings.objects.get_or_create(user=request.user)
        return FinancialSummaryService(
            request.user, FormattingConfig.from_user_settings(user_settings)
        )

    def _tool_params(self, request, tool):
        accepted = self.TOOL_PARAMS.get(tool, ())
        params = {}
        if "count" in accepted:
            params["count"] = _int_param(request, "count", 10, 1, 1000)
        if "months" in accepted:
            params["months"] = _int_param(request, "months", 6, 1, 1000)
        if "start_date" in accepted:
            params.update(_validated_query(DateRangeQuerySerializer, request))
        if tool == "top_expense_categories" and "count" not in request.query_params:
            params["count"] = 5
        return params

    def list(self, request):
        return Response({"tools": list(FinancialSummaryService.TOOLS)})

    def retrieve(self, request, pk=None):
        if pk not in FinancialSummaryService.TOOLS:
            raise NotFound(f"Unknown summary tool: {pk}")

        summaries = self._summary_service(request)
        text = self.handle_service_call(
            summaries.run_tool, pk, **self._tool_params(request, pk)
        )
        return Response({"tool": pk, "result": text})
