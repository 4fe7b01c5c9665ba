"""
Database models for the personal finance ledger.

This module defines the owner-scoped ledger records: accounts, categories,
transactions, monthly budgets, recurring schedules and per-user display
settings.
"""

import logging
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

# Get structured logger for this module
logger = logging.getLogger(__name__)

TRANSACTION_TYPES = [
    ("expense", "Expense"),
    ("income", "Income"),
    ("transfer", "Transfer"),
]

# -------------------------------------------------------------------
# USER SETTINGS
# -------------------------------------------------------------------
# Display preferences used to build the formatting configuration


class UserSettings(models.Model):
    """
    User-specific display preferences.

    Currency and date format drive how summaries render amounts and dates.
    """

    CURRENCY_CHOICES = [
        ("USD", "US Dollar"),
        ("EUR", "Euro"),
        ("GBP", "British Pound"),
        ("CHF", "Swiss Franc"),
        ("PLN", "Polish Zloty"),
        ("CZK", "Czech Koruna"),
    ]
    DATE_FORMAT_CHOICES = [
        ("MMM DD, YYYY", "MMM DD, YYYY"),
        ("DD.MM.YYYY", "DD.MM.YYYY"),
        ("MM/DD/YYYY", "MM/DD/YYYY"),
        ("YYYY-MM-DD", "YYYY-MM-DD"),
    ]

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="settings"
    )
    preferred_currency = models.CharField(
        max_length=3, choices=CURRENCY_CHOICES, default="USD"
    )
    date_format = models.CharField(
        max_length=12, choices=DATE_FORMAT_CHOICES, default="MMM DD, YYYY"
    )

    class Meta:
        verbose_name_plural = "User settings"

    def __str__(self):
        """String representation of UserSettings."""
        return f"{self.user.username} settings"


# -------------------------------------------------------------------
# ACCOUNTS
# -------------------------------------------------------------------
# Money containers whose balance is maintained by the transaction journal


class Account(models.Model):
    """
    Financial account owned by a single user.

    ``current_balance`` equals ``initial_balance`` plus the signed effect of
    every transaction referencing the account. It is maintained incrementally
    by the journal and is never edited directly.
    """

    ACCOUNT_TYPES = [
        ("checking", "Checking"),
        ("savings", "Savings"),
        ("credit_card", "Credit Card"),
        ("cash", "Cash"),
        ("investment", "Investment"),
        ("loan", "Loan"),
        ("other", "Other"),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="accounts"
    )
    name = models.CharField(max_length=100)
    description = models.CharField(max_length=500, blank=True)
    account_type = models.CharField(
        max_length=20, choices=ACCOUNT_TYPES, default="checking"
    )
    initial_balance = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )
    current_balance = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )
    currency = models.CharField(max_length=3, default="USD")
    color = models.CharField(max_length=7, default="#1b6ec2")
    icon = models.CharField(max_length=50, blank=True)
    is_active = models.BooleanField(default=True)
    include_in_total = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["account_type", "name"]
        indexes = [
            models.Index(fields=["user", "is_active"], name="ledger_acct_user_active_idx"),
            models.Index(fields=["user", "account_type"], name="ledger_acct_user_type_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["user", "name"], name="unique_account_name_per_user"
            )
        ]

    def __str__(self):
        """String representation of Account."""
        return f"{self.name} ({self.get_account_type_display()})"

    def clean(self):
        """Validate account data."""
        super().clean()

        if not self.name or not self.name.strip():
            raise ValidationError({"name": "Account name is required."})

        if len(self.currency or "") != 3 or not self.currency.isalpha():
            logger.warning(
                "Account validation failed - invalid currency code",
                extra={
                    "account_id": self.id if self.id else "new",
                    "currency": self.currency,
                    "action": "account_validation_failed",
                    "component": "Account",
                    "severity": "low",
                },
            )
            raise ValidationError({"currency": "Currency must be a 3-letter code."})


# -------------------------------------------------------------------
# CATEGORIES
# -------------------------------------------------------------------
# Shared system categories plus user-defined ones, single-level hierarchy


class Category(models.Model):
    """
    Expense or income category.

    System categories have no owner, are visible to everyone and only their
    cosmetic fields may change. A category may have one parent of the same
    type, and the parent itself must be top level.
    """

    CATEGORY_TYPES = [
        ("expense", "Expense"),
        ("income", "Income"),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="categories",
        null=True,
        blank=True,
    )
    name = models.CharField(max_length=100)
    description = models.CharField(max_length=500, blank=True)
    type = models.CharField(max_length=10, choices=CATEGORY_TYPES)
    color = models.CharField(max_length=7, default="#6c757d")
    icon = models.CharField(max_length=50, blank=True)
    parent = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="subcategories",
    )
    is_system = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    sort_order = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name_plural = "Categories"
        ordering = ["type", "sort_order", "name"]
        indexes = [
            models.Index(fields=["user", "type"], name="ledger_cat_user_type_idx"),
            models.Index(fields=["is_system", "type"], name="ledger_cat_system_type_idx"),
        ]

    def __str__(self):
        """String representation of Category."""
        return f"{self.name} ({self.type})"

    def clean(self):
        """Validate category type and hierarchy rules."""
        super().clean()

        if self.parent_id is None:
            return

        parent = self.parent
        if self.pk and parent.pk == self.pk:
            raise ValidationError({"parent": "A category cannot be its own parent."})

        if parent.type != self.type:
            logger.warning(
                "Category validation failed - parent type mismatch",
                extra={
                    "category_id": self.id if self.id else "new",
                    "parent_id": parent.id,
                    "category_type": self.type,
                    "parent_type": parent.type,
                    "action": "category_validation_failed",
                    "component": "Category",
                    "severity": "medium",
                },
            )
            raise ValidationError(
                {"parent": "Parent category must have the same type."}
            )

        if parent.parent_id is not None:
            raise ValidationError(
                {"parent": "Categories support a single level of nesting."}
            )


# -------------------------------------------------------------------
# RECURRING SCHEDULES
# -------------------------------------------------------------------
# Templates that spawn journal entries on a fixed calendar cadence


class RecurringTransaction(models.Model):
    """
    Recurring transaction schedule.

    ``next_due_date`` starts at ``start_date`` and is advanced by the
    recurring processor, one frequency increment at a time, until it is no
    longer in the past.
    """

    FREQUENCY_CHOICES = [
        ("daily", "Daily"),
        ("weekly", "Weekly"),
        ("biweekly", "Bi-weekly"),
        ("monthly", "Monthly"),
        ("quarterly", "Quarterly"),
        ("yearly", "Yearly"),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="recurring_transactions",
    )
    amount = models.DecimalField(max_digits=18, decimal_places=2)
    type = models.CharField(max_length=10, choices=TRANSACTION_TYPES)
    description = models.CharField(max_length=200)
    notes = models.CharField(max_length=1000, blank=True)
    frequency = models.CharField(max_length=10, choices=FREQUENCY_CHOICES)
    start_date = models.DateField()
    end_date = models.DateField(null=True, blank=True)
    next_due_date = models.DateField()
    last_processed_date = models.DateField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    auto_create = models.BooleanField(default=False)
    account = models.ForeignKey(
        Account, on_delete=models.PROTECT, related_name="recurring_transactions"
    )
    destination_account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="incoming_recurring_transactions",
    )
    category = models.ForeignKey(
        Category,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="recurring_transactions",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["next_due_date"]
        indexes = [
            models.Index(
                fields=["user", "is_active", "next_due_date"],
                name="ledger_rec_user_due_idx",
            ),
        ]

    def __str__(self):
        """String representation of RecurringTransaction."""
        return f"{self.description} ({self.frequency}, next {self.next_due_date})"

    def clean(self):
        """Validate schedule dates."""
        super().clean()

        if self.end_date and self.start_date and self.end_date < self.start_date:
            raise ValidationError(
                {"end_date": "End date cannot be before the start date."}
            )


# -------------------------------------------------------------------
# TRANSACTIONS
# -------------------------------------------------------------------
# Journal entries; each one moves money in or out of one or two accounts


class Transaction(models.Model):
    """
    Journal entry.

    ``amount`` is a positive magnitude; direction comes from ``type``.
    Transfers move money from ``account`` to ``destination_account`` and
    carry no category.
    """

    EXPENSE = "expense"
    INCOME = "income"
    TRANSFER = "transfer"

    TRANSACTION_TYPES = TRANSACTION_TYPES

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="transactions"
    )
    amount = models.DecimalField(max_digits=18, decimal_places=2)
    type = models.CharField(max_length=10, choices=TRANSACTION_TYPES)
    description = models.CharField(max_length=200)
    notes = models.CharField(max_length=1000, blank=True)
    date = models.DateField()
    account = models.ForeignKey(
        Account, on_delete=models.PROTECT, related_name="transactions"
    )
    destination_account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="incoming_transactions",
    )
    category = models.ForeignKey(
        Category,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="transactions",
    )
    recurring_transaction = models.ForeignKey(
        RecurringTransaction,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="generated_transactions",
    )
    tags = models.CharField(max_length=500, blank=True)
    is_reconciled = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["user", "date"], name="ledger_txn_user_date_idx"),
            models.Index(
                fields=["user", "type", "date"], name="ledger_txn_user_type_date_idx"
            ),
            models.Index(
                fields=["user", "category", "date"], name="ledger_txn_user_cat_date_idx"
            ),
            models.Index(fields=["account", "date"], name="ledger_txn_account_date_idx"),
        ]
        ordering = ["-date", "-created_at"]

    @property
    def tag_list(self):
        """Tags as a list of trimmed, non-empty names."""
        return [tag.strip() for tag in (self.tags or "").split(",") if tag.strip()]

    def clean(self):
        """Validate amount sign; type-specific rules live in TransactionService."""
        super().clean()

        if self.amount is not None and self.amount <= 0:
            logger.warning(
                "Transaction validation failed - invalid amount",
                extra={
                    "transaction_id": self.id if self.id else "new",
                    "amount": str(self.amount),
                    "action": "transaction_validation_failed",
                    "component": "Transaction",
                    "severity": "medium",
                },
            )
            raise ValidationError("Transaction amount must be positive")

    def __str__(self):
        """String representation of Transaction."""
        return f"{self.date} | {self.type} | {self.amount} | {self.description}"


# -------------------------------------------------------------------
# BUDGETS
# -------------------------------------------------------------------
# Monthly spending limits per expense category


class Budget(models.Model):
    """
    Monthly budget for one expense category.

    ``spent_amount`` is only a display snapshot. BudgetService overwrites it
    with the live journal aggregate on every read.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="budgets"
    )
    name = models.CharField(max_length=100)
    category = models.ForeignKey(
        Category, on_delete=models.PROTECT, related_name="budgets"
    )
    amount = models.DecimalField(max_digits=18, decimal_places=2)
    spent_amount = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )
    year = models.PositiveIntegerField(
        validators=[MinValueValidator(2000), MaxValueValidator(2100)]
    )
    month = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(12)]
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["category__name"]
        indexes = [
            models.Index(
                fields=["user", "year", "month"], name="ledger_budget_user_month_idx"
            ),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["user", "category", "year", "month"],
                name="unique_budget_per_category_month",
            )
        ]

    @property
    def remaining_amount(self):
        return self.amount - self.spent_amount

    @property
    def percentage_used(self):
        if not self.amount:
            return Decimal("0")
        return self.spent_amount / self.amount * 100

    @property
    def is_over_budget(self):
        return self.spent_amount > self.amount

    def __str__(self):
        """String representation of Budget."""
        return f"{self.name} {self.year}-{self.month:02d}: {self.amount}"
