"""
Serializers for the personal finance ledger API.

Architecture Pattern:
Serializer (field validation) → Ledger Services → Database
         ↓
ServiceExceptionHandlerMixin (Unified Error Handling)

Model serializers never write ledger rows themselves; create/update delegate
to the service layer so balance and budget rules apply to every write path.
"""

import logging

from rest_framework import serializers

from .mixins.owner import OwnerAssignmentMixin
from .mixins.service_exception_handler import ServiceExceptionHandlerMixin
from .models import (Account, Budget, Category, RecurringTransaction,
                     Transaction, UserSettings)
from .services.account_service import AccountService
from .services.budget_service import BudgetService
from .services.category_service import CategoryService
from .services.recurring_service import RecurringTransactionService
from .services.transaction_service import TransactionService

logger = logging.getLogger(__name__)


def _request_user(serializer):
    request = serializer.context.get("request")
    return getattr(request, "user", None)


# -------------------------------------------------------------------
# USER SETTINGS SERIALIZER
# -------------------------------------------------------------------


class UserSettingsSerializer(serializers.ModelSerializer):
    """Display preferences of the authenticated user."""

    class Meta:
        model = UserSettings
        fields = ["id", "user", "preferred_currency", "date_format"]
        read_only_fields = ["id", "user"]


# -------------------------------------------------------------------
# ACCOUNT SERIALIZER
# -------------------------------------------------------------------


class AccountSerializer(
    OwnerAssignmentMixin, ServiceExceptionHandlerMixin, serializers.ModelSerializer
):
    """
    Account serializer.

    ``current_balance`` is always read-only; ``initial_balance`` is only
    honoured on create.
    """

    class Meta:
        model = Account
        fields = [
            "id",
            "name",
            "description",
            "account_type",
            "initial_balance",
            "current_balance",
            "currency",
            "color",
            "icon",
            "is_active",
            "include_in_total",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "current_balance", "created_at", "updated_at"]

    def validate_currency(self, value):
        value = (value or "").upper()
        if len(value) != 3 or not value.isalpha():
            raise serializers.ValidationError("Currency must be a 3-letter code.")
        return value

    def validate_name(self, value):
        if not value.strip():
            raise serializers.ValidationError("Account name is required.")
        return value.strip()

    def create(self, validated_data):
        user = validated_data.pop("user")
        return self.handle_service_call(
            AccountService.create_account, validated_data, user
        )

    def update(self, instance, validated_data):
        validated_data.pop("user", None)
        if "initial_balance" in validated_data:
            logger.debug(
                "Ignoring initial balance change on account update",
                extra={
                    "account_id": instance.id,
                    "action": "account_initial_balance_ignored",
                    "component": "AccountSerializer",
                },
            )
            validated_data.pop("initial_balance")
        return self.handle_service_call(
            AccountService.update_account, instance.id, validated_data, instance.user
        )


# -------------------------------------------------------------------
# CATEGORY SERIALIZER
# -------------------------------------------------------------------


class CategorySerializer(
    OwnerAssignmentMixin, ServiceExceptionHandlerMixin, serializers.ModelSerializer
):
    """Category serializer; parents are limited to categories the user can see."""

    parent = serializers.PrimaryKeyRelatedField(
        queryset=Category.objects.none(), required=False, allow_null=True
    )

    class Meta:
        model = Category
        fields = [
            "id",
            "name",
            "description",
            "type",
            "color",
            "icon",
            "parent",
            "is_system",
            "is_active",
            "sort_order",
            "created_at",
        ]
        read_only_fields = ["id", "is_system", "created_at"]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        user = _request_user(self)
        if user is not None and user.is_authenticated:
            self.fields["parent"].queryset = CategoryService.visible_categories(user)

    def create(self, validated_data):
        user = validated_data.pop("user")
        return self.handle_service_call(
            CategoryService.create_category, validated_data, user
        )

    def update(self, instance, validated_data):
        user = validated_data.pop("user", None) or _request_user(self)
        return self.handle_service_call(
            CategoryService.update_category, instance.id, validated_data, user
        )


class CategorySpendingSerializer(serializers.Serializer):
    category_id = serializers.IntegerField()
    category_name = serializers.CharField()
    color = serializers.CharField()
    total_amount = serializers.DecimalField(max_digits=18, decimal_places=2)
    transaction_count = serializers.IntegerField()
    percentage = serializers.DecimalField(max_digits=5, decimal_places=1)


# -------------------------------------------------------------------
# TRANSACTION SERIALIZER
# -------------------------------------------------------------------


class TransactionSerializer(
    OwnerAssignmentMixin, ServiceExceptionHandlerMixin, serializers.ModelSerializer
):
    """
    Journal entry serializer.

    Related accounts and categories are scoped to the requesting user.
    Type-specific rules are checked by TransactionService against the
    merged (stored + submitted) values, so partial updates are validated as
    a whole.
    """

    account = serializers.PrimaryKeyRelatedField(queryset=Account.objects.none())
    destination_account = serializers.PrimaryKeyRelatedField(
        queryset=Account.objects.none(), required=False, allow_null=True
    )
    category = serializers.PrimaryKeyRelatedField(
        queryset=Category.objects.none(), required=False, allow_null=True
    )
    account_name = serializers.CharField(source="account.name", read_only=True)
    destination_account_name = serializers.CharField(
        source="destination_account.name", read_only=True, default=None
    )
    category_name = serializers.CharField(
        source="category.name", read_only=True, default=None
    )
    tag_list = serializers.ListField(child=serializers.CharField(), read_only=True)

    class Meta:
        model = Transaction
        fields = [
            "id",
            "amount",
            "type",
            "description",
            "notes",
            "date",
            "account",
            "account_name",
            "destination_account",
            "destination_account_name",
            "category",
            "category_name",
            "tags",
            "tag_list",
            "is_reconciled",
            "recurring_transaction",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "recurring_transaction",
            "created_at",
            "updated_at",
        ]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        user = _request_user(self)
        if user is not None and user.is_authenticated:
            accounts = Account.objects.filter(user=user)
            self.fields["account"].queryset = accounts
            self.fields["destination_account"].queryset = accounts
            self.fields["category"].queryset = CategoryService.visible_categories(user)

    def validate(self, attrs):
        attrs = super().validate(attrs)
        user = attrs.get("user") or getattr(self.instance, "user", None)

        merged = dict(attrs)
        if self.instance is not None:
            for field in (
                "amount",
                "type",
                "description",
                "date",
                "account",
                "destination_account",
                "category",
            ):
                merged.setdefault(field, getattr(self.instance, field))

        self.handle_service_call(
            TransactionService.validate_transaction_data, merged, user
        )
        return attrs

    def create(self, validated_data):
        user = validated_data.pop("user")
        return self.handle_service_call(
            TransactionService.create_transaction, validated_data, user
        )

    def update(self, instance, validated_data):
        validated_data.pop("user", None)
        return self.handle_service_call(
            TransactionService.update_transaction,
            instance.id,
            validated_data,
            instance.user,
        )


class MonthlyTrendSerializer(serializers.Serializer):
    year = serializers.IntegerField()
    month = serializers.IntegerField()
    month_name = serializers.CharField()
    total_income = serializers.DecimalField(max_digits=18, decimal_places=2)
    total_expenses = serializers.DecimalField(max_digits=18, decimal_places=2)
    net_amount = serializers.DecimalField(max_digits=18, decimal_places=2)


# -------------------------------------------------------------------
# BUDGET SERIALIZERS
# -------------------------------------------------------------------


class BudgetSerializer(
    OwnerAssignmentMixin, ServiceExceptionHandlerMixin, serializers.ModelSerializer
):
    """
    Budget serializer.

    ``spent_amount`` and the derived fields are read-only; the views hand in
    budgets whose spent amount was just recomputed by BudgetService.
    Category, year and month are fixed once the budget exists.
    """

    category = serializers.PrimaryKeyRelatedField(queryset=Category.objects.none())
    category_name = serializers.CharField(source="category.name", read_only=True)
    name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    remaining_amount = serializers.DecimalField(
        max_digits=18, decimal_places=2, read_only=True
    )
    percentage_used = serializers.DecimalField(
        max_digits=20, decimal_places=1, read_only=True
    )
    is_over_budget = serializers.BooleanField(read_only=True)

    class Meta:
        model = Budget
        fields = [
            "id",
            "name",
            "category",
            "category_name",
            "amount",
            "spent_amount",
            "remaining_amount",
            "percentage_used",
            "is_over_budget",
            "year",
            "month",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "spent_amount", "created_at", "updated_at"]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        user = _request_user(self)
        if user is not None and user.is_authenticated:
            self.fields["category"].queryset = CategoryService.visible_categories(
                user
            ).filter(type="expense")

    def create(self, validated_data):
        user = validated_data.pop("user")
        return self.handle_service_call(
            BudgetService.create_budget, validated_data, user
        )

    def update(self, instance, validated_data):
        validated_data.pop("user", None)
        return self.handle_service_call(
            BudgetService.update_budget, instance.id, validated_data, instance.user
        )


class BudgetProgressSerializer(serializers.Serializer):
    budget_id = serializers.IntegerField()
    category_id = serializers.IntegerField()
    category_name = serializers.CharField()
    category_color = serializers.CharField()
    budget_amount = serializers.DecimalField(max_digits=18, decimal_places=2)
    spent_amount = serializers.DecimalField(max_digits=18, decimal_places=2)
    remaining_amount = serializers.DecimalField(max_digits=18, decimal_places=2)
    percentage_used = serializers.DecimalField(max_digits=20, decimal_places=1)
    is_over_budget = serializers.BooleanField()
    status = serializers.CharField()


class MonthSelectionSerializer(serializers.Serializer):
    """Year/month pair used by budget progress and rollover endpoints."""

    year = serializers.IntegerField(min_value=2000, max_value=2100)
    month = serializers.IntegerField(min_value=1, max_value=12)


# -------------------------------------------------------------------
# RECURRING TRANSACTION SERIALIZER
# -------------------------------------------------------------------


class RecurringTransactionSerializer(
    OwnerAssignmentMixin, ServiceExceptionHandlerMixin, serializers.ModelSerializer
):
    """Recurring schedule serializer; due dates are managed by the service."""

    account = serializers.PrimaryKeyRelatedField(queryset=Account.objects.none())
    destination_account = serializers.PrimaryKeyRelatedField(
        queryset=Account.objects.none(), required=False, allow_null=True
    )
    category = serializers.PrimaryKeyRelatedField(
        queryset=Category.objects.none(), required=False, allow_null=True
    )

    class Meta:
        model = RecurringTransaction
        fields = [
            "id",
            "amount",
            "type",
            "description",
            "notes",
            "frequency",
            "start_date",
            "end_date",
            "next_due_date",
            "last_processed_date",
            "is_active",
            "auto_create",
            "account",
            "destination_account",
            "category",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "next_due_date",
            "last_processed_date",
            "created_at",
            "updated_at",
        ]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.recurring_service = RecurringTransactionService()
        user = _request_user(self)
        if user is not None and user.is_authenticated:
            accounts = Account.objects.filter(user=user)
            self.fields["account"].queryset = accounts
            self.fields["destination_account"].queryset = accounts
            self.fields["category"].queryset = CategoryService.visible_categories(user)

    def create(self, validated_data):
        user = validated_data.pop("user")
        return self.handle_service_call(
            self.recurring_service.create_recurring, validated_data, user
        )

    def update(self, instance, validated_data):
        validated_data.pop("user", None)
        return self.handle_service_call(
            self.recurring_service.update_recurring,
            instance.id,
            validated_data,
            instance.user,
        )


# -------------------------------------------------------------------
# QUERY PARAMETER SERIALIZERS
# -------------------------------------------------------------------


class DateRangeQuerySerializer(serializers.Serializer):
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)

    def validate(self, attrs):
        start, end = attrs.get("start_date"), attrs.get("end_date")
        if start and end and start > end:
            raise serializers.ValidationError(
                {"end_date": "End date cannot be before start date."}
            )
        return attrs


class TransactionFilterSerializer(DateRangeQuerySerializer):
    category = serializers.IntegerField(required=False)
    account = serializers.IntegerField(required=False)
    type = serializers.ChoiceField(
        choices=Transaction.TRANSACTION_TYPES, required=False
    )
