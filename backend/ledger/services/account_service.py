"""
Service for account operations and balance maintenance.

AccountService owns every write to ``Account.current_balance``. The journal
calls ``adjust_balance`` to apply and reverse transaction effects; nothing
else touches the stored balance.
"""

import logging
from decimal import Decimal

from django.db import IntegrityError
from django.db import transaction as db_transaction
from django.db.models import Q, Sum

from ..exceptions import ConflictError, RecordNotFoundError
from ..models import Account, Transaction

# Get structured logger for this module
logger = logging.getLogger(__name__)

# Descriptive fields a caller may change after creation
UPDATABLE_FIELDS = (
    "name",
    "description",
    "account_type",
    "currency",
    "color",
    "icon",
    "is_active",
    "include_in_total",
)


class AccountService:
    """
    Service for account CRUD, balance adjustments and balance aggregates.
    """

    @staticmethod
    def list_accounts(user):
        """All accounts of ``user`` ordered by type, then name."""
        return Account.objects.filter(user=user).order_by("account_type", "name")

    @staticmethod
    def get_account(account_id, user):
        try:
            return Account.objects.get(pk=account_id, user=user)
        except Account.DoesNotExist:
            raise RecordNotFoundError("Account", account_id)

    @staticmethod
    @db_transaction.atomic
    def create_account(data, user):
        """
        Create an account whose current balance starts at its initial balance.

        Args:
            data: Account field values (name, account_type, initial_balance, ...)
            user: Owning user

        Returns:
            Account: The created account

        Raises:
            ConflictError: If the user already has an account with this name
        """
        name = (data.get("name") or "").strip()

        if Account.objects.filter(user=user, name=name).exists():
            logger.warning(
                "Account creation rejected - duplicate name",
                extra={
                    "user_id": user.id,
                    "account_name": name,
                    "action": "account_create_conflict",
                    "component": "AccountService",
                    "severity": "low",
                },
            )
            raise ConflictError(
                f"An account with the name '{name}' already exists. "
                "Please use a different name.",
                field="name",
            )

        initial_balance = Decimal(str(data.get("initial_balance") or "0"))
        account = Account(
            user=user,
            name=name,
            description=data.get("description", ""),
            account_type=data.get("account_type", "checking"),
            initial_balance=initial_balance,
            current_balance=initial_balance,
            currency=data.get("currency", "USD"),
            color=data.get("color", "#1b6ec2"),
            icon=data.get("icon", ""),
            is_active=data.get("is_active", True),
            include_in_total=data.get("include_in_total", True),
        )

        try:
            # Savepoint keeps the outer transaction usable after a unique violation
            with db_transaction.atomic():
                account.save()
        except IntegrityError as e:
            logger.warning(
                "Account creation hit unique constraint",
                extra={
                    "user_id": user.id,
                    "account_name": name,
                    "error_message": str(e),
                    "action": "account_create_integrity_error",
                    "component": "AccountService",
                    "severity": "medium",
                },
            )
            raise ConflictError(
                f"An account with the name '{name}' already exists. "
                "Please use a different name.",
                field="name",
            ) from e

        logger.info(
            "Account created",
            extra={
                "user_id": user.id,
                "account_id": account.id,
                "account_type": account.account_type,
                "action": "account_created",
                "component": "AccountService",
            },
        )
        return account

    @staticmethod
    @db_transaction.atomic
    def update_account(account_id, data, user):
        """
        Update descriptive fields of an account.

        Balances are not editable here; they only move through the journal.

        Raises:
            RecordNotFoundError: If the account does not exist for ``user``
            ConflictError: If the new name is taken by another account
        """
        account = AccountService.get_account(account_id, user)

        if "name" in data:
            name = (data["name"] or "").strip()
            if (
                Account.objects.filter(user=user, name=name)
                .exclude(pk=account.pk)
                .exists()
            ):
                raise ConflictError(
                    f"Another account with the name '{name}' already exists. "
                    "Please use a different name.",
                    field="name",
                )
            data = {**data, "name": name}

        changed = [field for field in UPDATABLE_FIELDS if field in data]
        for field in changed:
            setattr(account, field, data[field])

        try:
            with db_transaction.atomic():
                account.save()
        except IntegrityError as e:
            raise ConflictError(
                f"Another account with the name '{account.name}' already exists. "
                "Please use a different name.",
                field="name",
            ) from e

        logger.info(
            "Account updated",
            extra={
                "user_id": user.id,
                "account_id": account.id,
                "updated_fields": changed,
                "action": "account_updated",
                "component": "AccountService",
            },
        )
        return account

    @staticmethod
    @db_transaction.atomic
    def delete_account(account_id, user):
        """
        Delete an account, or deactivate it when the journal still references it.

        Returns:
            bool: False if the account does not exist for ``user``
        """
        account = Account.objects.filter(pk=account_id, user=user).first()
        if account is None:
            return False

        referenced = Transaction.objects.filter(
            Q(account=account) | Q(destination_account=account)
        ).exists()

        if referenced or account.recurring_transactions.exists():
            account.is_active = False
            account.save(update_fields=["is_active", "updated_at"])
            logger.info(
                "Account deactivated instead of deleted - referenced by transactions",
                extra={
                    "user_id": user.id,
                    "account_id": account.id,
                    "action": "account_soft_deleted",
                    "component": "AccountService",
                },
            )
        else:
            account.delete()
            logger.info(
                "Account deleted",
                extra={
                    "user_id": user.id,
                    "account_id": account_id,
                    "action": "account_deleted",
                    "component": "AccountService",
                },
            )
        return True

    @staticmethod
    def adjust_balance(account_id, amount, is_credit):
        """
        Credit or debit an account's current balance.

        The row is locked for the rest of the enclosing transaction so two
        concurrent journal mutations on one account serialize.

        Args:
            account_id: Account primary key
            amount: Positive magnitude to apply
            is_credit: True adds ``amount``, False subtracts it

        Returns:
            Account: The account with its new balance

        Raises:
            RecordNotFoundError: If the account does not exist
        """
        with db_transaction.atomic():
            try:
                account = Account.objects.select_for_update().get(pk=account_id)
            except Account.DoesNotExist:
                logger.error(
                    "Balance adjustment failed - account missing",
                    extra={
                        "account_id": account_id,
                        "amount": str(amount),
                        "is_credit": is_credit,
                        "action": "balance_adjust_failed",
                        "component": "AccountService",
                        "severity": "high",
                    },
                )
                raise RecordNotFoundError("Account", account_id)

            delta = Decimal(str(amount))
            if is_credit:
                account.current_balance += delta
            else:
                account.current_balance -= delta
            account.save(update_fields=["current_balance", "updated_at"])

        logger.debug(
            "Account balance adjusted",
            extra={
                "account_id": account_id,
                "amount": str(amount),
                "is_credit": is_credit,
                "new_balance": str(account.current_balance),
                "action": "balance_adjusted",
                "component": "AccountService",
            },
        )
        return account

    @staticmethod
    def total_balance(user):
        """Sum of balances of active accounts flagged include-in-total."""
        total = Account.objects.filter(
            user=user, is_active=True, include_in_total=True
        ).aggregate(total=Sum("current_balance"))["total"]
        return total or Decimal("0")

    @staticmethod
    def balances_by_type(user):
        """Mapping of account type to summed balance over active accounts."""
        rows = (
            Account.objects.filter(user=user, is_active=True)
            .values("account_type")
            .annotate(total=Sum("current_balance"))
            .order_by("account_type")
        )
        return {row["account_type"]: row["total"] or Decimal("0") for row in rows}
