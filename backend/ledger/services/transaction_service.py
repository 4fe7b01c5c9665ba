"""
Service for the transaction journal with balance-safe mutations.

Every journal write goes through TransactionService so the account balance
invariant holds: a create applies the transaction's effect, an update
reverses the stored effect before applying the new one, and a delete
reverses the stored effect. Each of these runs inside one database
transaction, so a failure at any step leaves no partial balance change.
"""

import logging
from datetime import date
from decimal import Decimal, InvalidOperation

from django.core.exceptions import ValidationError
from django.db import transaction as db_transaction
from django.db.models import Q, Sum
from django.db.models.functions import ExtractMonth, ExtractYear
from django.utils import timezone

from ..exceptions import RecordNotFoundError
from ..models import Transaction
from ..utils.dates import trend_window_start
from .account_service import AccountService

# Get structured logger for this module
logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("amount", "type", "description", "date", "account")

# Fields copied onto the stored record by an update
UPDATABLE_FIELDS = (
    "amount",
    "type",
    "description",
    "notes",
    "date",
    "account",
    "destination_account",
    "category",
    "tags",
    "is_reconciled",
)


def normalize_tags(tags):
    """Accept a list or a comma separated string and return the stored form."""
    if tags is None:
        return ""
    if isinstance(tags, (list, tuple)):
        names = tags
    else:
        names = str(tags).split(",")
    return ",".join(name.strip() for name in names if name and name.strip())


class TransactionService:
    """
    Service for journal CRUD, balance effects and journal aggregates.
    """

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @staticmethod
    def validate_transaction_data(data, user):
        """
        Validate a complete set of transaction values before any mutation.

        Args:
            data: Transaction values; account/category values are model instances
            user: Owner the transaction is written for

        Raises:
            ValidationError: If a rule for the transaction's type is violated
        """
        for field in REQUIRED_FIELDS:
            value = data.get(field)
            if value is None or (isinstance(value, str) and not value.strip()):
                raise ValidationError(f"Missing required field: {field}")

        try:
            amount = Decimal(str(data["amount"]))
        except (InvalidOperation, ValueError, TypeError):
            raise ValidationError("Amount must be a valid number")
        if amount <= 0:
            raise ValidationError("Amount must be positive")

        transaction_type = data["type"]
        if transaction_type not in dict(Transaction.TRANSACTION_TYPES):
            raise ValidationError(
                "Transaction type must be 'expense', 'income' or 'transfer'"
            )

        account = data["account"]
        destination = data.get("destination_account")
        category = data.get("category")

        if account.user_id != user.id:
            raise ValidationError("Account not found for this user")

        if transaction_type == Transaction.TRANSFER:
            if destination is None:
                raise ValidationError("Transfer requires a destination account")
            if destination.pk == account.pk:
                raise ValidationError(
                    "Destination account must differ from the source account"
                )
            if destination.user_id != user.id:
                raise ValidationError("Destination account not found for this user")
            if category is not None:
                raise ValidationError("Transfer transactions cannot have a category")
        else:
            if destination is not None:
                raise ValidationError(
                    f"{transaction_type.capitalize()} transactions cannot have a destination account"
                )
            if category is None:
                raise ValidationError(
                    f"{transaction_type.capitalize()} transactions require a category"
                )
            if not category.is_system and category.user_id != user.id:
                raise ValidationError("Category not found for this user")
            if category.type != transaction_type:
                raise ValidationError(
                    f"{transaction_type.capitalize()} transaction cannot have {category.type} category"
                )

        logger.debug(
            "Transaction data validated",
            extra={
                "user_id": user.id,
                "transaction_type": transaction_type,
                "account_id": account.pk,
                "action": "transaction_validation_success",
                "component": "TransactionService",
            },
        )

    # ------------------------------------------------------------------
    # Balance effects
    # ------------------------------------------------------------------

    @staticmethod
    def _apply_effect(transaction, reverse=False):
        """
        Apply (or reverse) a transaction's effect on its accounts.

        Income credits the source; expense and transfer debit it; a transfer
        also credits its destination. Reversal flips every direction.
        """
        credit_source = transaction.type == Transaction.INCOME
        if reverse:
            credit_source = not credit_source

        AccountService.adjust_balance(
            transaction.account_id, transaction.amount, credit_source
        )

        if (
            transaction.type == Transaction.TRANSFER
            and transaction.destination_account_id
        ):
            AccountService.adjust_balance(
                transaction.destination_account_id, transaction.amount, not reverse
            )

    @staticmethod
    def _reverse_effect(transaction):
        TransactionService._apply_effect(transaction, reverse=True)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @staticmethod
    @db_transaction.atomic
    def create_transaction(data, user):
        """
        Validate, apply the balance effect and persist a journal entry.

        Returns:
            Transaction: The stored entry

        Raises:
            ValidationError: If the data violates a rule for its type
        """
        TransactionService.validate_transaction_data(data, user)

        transaction = Transaction(
            user=user,
            amount=Decimal(str(data["amount"])),
            type=data["type"],
            description=data["description"].strip(),
            notes=data.get("notes") or "",
            date=data["date"],
            account=data["account"],
            destination_account=data.get("destination_account"),
            category=data.get("category"),
            recurring_transaction=data.get("recurring_transaction"),
            tags=normalize_tags(data.get("tags")),
            is_reconciled=data.get("is_reconciled", False),
        )

        TransactionService._apply_effect(transaction)
        transaction.save()

        logger.info(
            "Transaction created",
            extra={
                "user_id": user.id,
                "transaction_id": transaction.id,
                "transaction_type": transaction.type,
                "amount": str(transaction.amount),
                "account_id": transaction.account_id,
                "action": "transaction_created",
                "component": "TransactionService",
            },
        )
        return transaction

    @staticmethod
    @db_transaction.atomic
    def update_transaction(transaction_id, data, user):
        """
        Reverse the stored effect, apply the new values and persist.

        Partial ``data`` is merged over the stored values before validation.

        Raises:
            RecordNotFoundError: If the transaction does not exist for ``user``
            ValidationError: If the merged values are invalid
        """
        try:
            transaction = Transaction.objects.select_for_update().get(
                pk=transaction_id, user=user
            )
        except Transaction.DoesNotExist:
            raise RecordNotFoundError("Transaction", transaction_id)

        merged = {
            field: data[field] if field in data else getattr(transaction, field)
            for field in UPDATABLE_FIELDS
        }
        TransactionService.validate_transaction_data(merged, user)

        old_snapshot = {
            "amount": str(transaction.amount),
            "type": transaction.type,
            "account_id": transaction.account_id,
        }

        TransactionService._reverse_effect(transaction)

        for field in UPDATABLE_FIELDS:
            value = merged[field]
            if field == "amount":
                value = Decimal(str(value))
            elif field == "tags":
                value = normalize_tags(value)
            elif field == "notes" and value is None:
                value = ""
            setattr(transaction, field, value)

        TransactionService._apply_effect(transaction)
        transaction.save()

        logger.info(
            "Transaction updated",
            extra={
                "user_id": user.id,
                "transaction_id": transaction.id,
                "previous": old_snapshot,
                "transaction_type": transaction.type,
                "amount": str(transaction.amount),
                "action": "transaction_updated",
                "component": "TransactionService",
            },
        )
        return transaction

    @staticmethod
    @db_transaction.atomic
    def delete_transaction(transaction_id, user):
        """
        Reverse the stored effect and remove the entry.

        Returns:
            bool: False if the transaction does not exist for ``user``
        """
        transaction = (
            Transaction.objects.select_for_update()
            .filter(pk=transaction_id, user=user)
            .first()
        )
        if transaction is None:
            return False

        TransactionService._reverse_effect(transaction)
        transaction.delete()

        logger.info(
            "Transaction deleted",
            extra={
                "user_id": user.id,
                "transaction_id": transaction_id,
                "action": "transaction_deleted",
                "component": "TransactionService",
            },
        )
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @staticmethod
    def list_transactions(
        user,
        start_date=None,
        end_date=None,
        category_id=None,
        account_id=None,
        transaction_type=None,
    ):
        """
        Journal entries of ``user`` newest first.

        ``account_id`` matches either the source or the destination account.
        """
        qs = Transaction.objects.filter(user=user).select_related(
            "account", "destination_account", "category"
        )
        if start_date:
            qs = qs.filter(date__gte=start_date)
        if end_date:
            qs = qs.filter(date__lte=end_date)
        if category_id:
            qs = qs.filter(category_id=category_id)
        if account_id:
            qs = qs.filter(
                Q(account_id=account_id) | Q(destination_account_id=account_id)
            )
        if transaction_type:
            qs = qs.filter(type=transaction_type)
        return qs.order_by("-date", "-created_at")

    @staticmethod
    def get_transaction(transaction_id, user):
        try:
            return Transaction.objects.select_related(
                "account", "destination_account", "category"
            ).get(pk=transaction_id, user=user)
        except Transaction.DoesNotExist:
            raise RecordNotFoundError("Transaction", transaction_id)

    @staticmethod
    def recent_transactions(user, count=10):
        return TransactionService.list_transactions(user)[:count]

    @staticmethod
    def _sum_by_type(user, transaction_type, start_date=None, end_date=None):
        qs = Transaction.objects.filter(user=user, type=transaction_type)
        if start_date:
            qs = qs.filter(date__gte=start_date)
        if end_date:
            qs = qs.filter(date__lte=end_date)
        return qs.aggregate(total=Sum("amount"))["total"] or Decimal("0")

    @staticmethod
    def total_income(user, start_date=None, end_date=None):
        """Income total within the inclusive date window."""
        return TransactionService._sum_by_type(
            user, Transaction.INCOME, start_date, end_date
        )

    @staticmethod
    def total_expenses(user, start_date=None, end_date=None):
        """Expense total within the inclusive date window."""
        return TransactionService._sum_by_type(
            user, Transaction.EXPENSE, start_date, end_date
        )

    @staticmethod
    def expenses_by_category(user, start_date=None, end_date=None):
        qs = Transaction.objects.filter(
            user=user, type=Transaction.EXPENSE, category__isnull=False
        )
        if start_date:
            qs = qs.filter(date__gte=start_date)
        if end_date:
            qs = qs.filter(date__lte=end_date)
        rows = qs.values("category_id").annotate(total=Sum("amount")).order_by()
        return {row["category_id"]: row["total"] for row in rows}

    @staticmethod
    def monthly_trends(user, months=12, today=None):
        """
        Income and expense totals per calendar month, oldest first.

        Covers the current (partial) month and the ``months - 1`` before it.
        Transfers are excluded. Months without entries are omitted.
        """
        today = today or timezone.localdate()
        window_start = trend_window_start(today, months)

        rows = (
            Transaction.objects.filter(user=user, date__gte=window_start)
            .exclude(type=Transaction.TRANSFER)
            .annotate(year=ExtractYear("date"), month=ExtractMonth("date"))
            .values("year", "month", "type")
            .annotate(total=Sum("amount"))
            .order_by("year", "month")
        )

        buckets = {}
        for row in rows:
            key = (row["year"], row["month"])
            bucket = buckets.setdefault(
                key, {"total_income": Decimal("0"), "total_expenses": Decimal("0")}
            )
            if row["type"] == Transaction.INCOME:
                bucket["total_income"] += row["total"]
            else:
                bucket["total_expenses"] += row["total"]

        trends = []
        for (year, month), totals in sorted(buckets.items()):
            trends.append(
                {
                    "year": year,
                    "month": month,
                    "month_name": date(year, month, 1).strftime("%b %Y"),
                    "total_income": totals["total_income"],
                    "total_expenses": totals["total_expenses"],
                    "net_amount": totals["total_income"] - totals["total_expenses"],
                }
            )
        return trends
