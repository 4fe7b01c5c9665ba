"""
Service for monthly budgets.

The spent amount of a budget is a projection of the journal: every read path
recomputes it from expense transactions of the budget's category and month.
The stored ``spent_amount`` column is only a display snapshot.
"""

import logging
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import IntegrityError
from django.db import transaction as db_transaction
from django.db.models import Sum

from ..exceptions import ConflictError, RecordNotFoundError
from ..models import Budget, Transaction
from ..utils.dates import month_bounds, next_month
from ..utils.formatting import round_percentage

# Get structured logger for this module
logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("name", "amount", "is_active")

STATUS_OVER_BUDGET = "Over Budget"
STATUS_WARNING = "Warning"
STATUS_ON_TRACK = "On Track"


def _warning_threshold():
    return Decimal(str(settings.LEDGER.get("BUDGET_WARNING_PERCENTAGE", 80)))


class BudgetService:
    """
    Service for budget CRUD, live spending and month rollover.
    """

    @staticmethod
    def calculate_spent_amount(user, category_id, year, month):
        """
        Sum of expense amounts for the category within the calendar month.

        Both the first and the last day of the month are included.
        """
        first_day, last_day = month_bounds(year, month)
        total = Transaction.objects.filter(
            user=user,
            category_id=category_id,
            type=Transaction.EXPENSE,
            date__gte=first_day,
            date__lte=last_day,
        ).aggregate(total=Sum("amount"))["total"]
        return total or Decimal("0")

    @staticmethod
    def _with_live_spending(budget):
        budget.spent_amount = BudgetService.calculate_spent_amount(
            budget.user, budget.category_id, budget.year, budget.month
        )
        return budget

    @staticmethod
    def list_budgets(user, year=None, month=None):
        """
        Budgets of ``user`` ordered by category name, with live spent amounts.

        Returns:
            list: Budget instances; ``spent_amount`` reflects the journal now
        """
        qs = Budget.objects.filter(user=user).select_related("category", "user")
        if year is not None:
            qs = qs.filter(year=year)
        if month is not None:
            qs = qs.filter(month=month)
        return [
            BudgetService._with_live_spending(budget)
            for budget in qs.order_by("category__name")
        ]

    @staticmethod
    def get_budget(budget_id, user):
        try:
            budget = Budget.objects.select_related("category", "user").get(
                pk=budget_id, user=user
            )
        except Budget.DoesNotExist:
            raise RecordNotFoundError("Budget", budget_id)
        return BudgetService._with_live_spending(budget)

    @staticmethod
    def get_budget_for_category(user, category_id, year, month):
        budget = (
            Budget.objects.select_related("category", "user")
            .filter(user=user, category_id=category_id, year=year, month=month)
            .first()
        )
        if budget is None:
            return None
        return BudgetService._with_live_spending(budget)

    @staticmethod
    @db_transaction.atomic
    def create_budget(data, user):
        """
        Create a budget and store the current spent amount as a snapshot.

        Raises:
            ValidationError: If the category is not a visible expense category
            ConflictError: If a budget for the category and month already exists
        """
        category = data.get("category")
        year = data.get("year")
        month = data.get("month")

        if category is None:
            raise ValidationError({"category": "Budget requires a category."})
        if not category.is_system and category.user_id != user.id:
            raise ValidationError({"category": "Category not found for this user."})
        if category.type != "expense":
            raise ValidationError(
                {"category": "Budgets can only track expense categories."}
            )
        if not month or not 1 <= int(month) <= 12:
            raise ValidationError({"month": "Month must be between 1 and 12."})

        amount = Decimal(str(data.get("amount", "0")))
        if amount < 0:
            raise ValidationError({"amount": "Budget amount cannot be negative."})

        if Budget.objects.filter(
            user=user, category=category, year=year, month=month
        ).exists():
            raise ConflictError(
                f"A budget for '{category.name}' in {year}-{int(month):02d} already exists.",
                field="category",
            )

        budget = Budget(
            user=user,
            name=(data.get("name") or category.name).strip(),
            category=category,
            amount=amount,
            year=year,
            month=month,
            is_active=data.get("is_active", True),
            spent_amount=BudgetService.calculate_spent_amount(
                user, category.id, year, month
            ),
        )
        try:
            with db_transaction.atomic():
                budget.save()
        except IntegrityError as e:
            raise ConflictError(
                f"A budget for '{category.name}' in {year}-{int(month):02d} already exists.",
                field="category",
            ) from e

        logger.info(
            "Budget created",
            extra={
                "user_id": user.id,
                "budget_id": budget.id,
                "category_id": category.id,
                "year": year,
                "month": month,
                "action": "budget_created",
                "component": "BudgetService",
            },
        )
        return budget

    @staticmethod
    @db_transaction.atomic
    def update_budget(budget_id, data, user):
        """
        Update name, amount or active flag of a budget.

        Raises:
            RecordNotFoundError: If the budget does not exist for ``user``
        """
        try:
            budget = Budget.objects.select_related("category").get(
                pk=budget_id, user=user
            )
        except Budget.DoesNotExist:
            raise RecordNotFoundError("Budget", budget_id)

        if "amount" in data and Decimal(str(data["amount"])) < 0:
            raise ValidationError({"amount": "Budget amount cannot be negative."})

        changed = [field for field in UPDATABLE_FIELDS if field in data]
        for field in changed:
            setattr(budget, field, data[field])
        budget.save()

        logger.info(
            "Budget updated",
            extra={
                "user_id": user.id,
                "budget_id": budget.id,
                "updated_fields": changed,
                "action": "budget_updated",
                "component": "BudgetService",
            },
        )
        return BudgetService._with_live_spending(budget)

    @staticmethod
    @db_transaction.atomic
    def delete_budget(budget_id, user):
        deleted, _ = Budget.objects.filter(pk=budget_id, user=user).delete()
        if deleted:
            logger.info(
                "Budget deleted",
                extra={
                    "user_id": user.id,
                    "budget_id": budget_id,
                    "action": "budget_deleted",
                    "component": "BudgetService",
                },
            )
        return bool(deleted)

    @staticmethod
    def budget_progress(user, year, month):
        """
        Progress rows for every budget of the month.

        Status is "Over Budget" when spent exceeds the amount, "Warning" from
        the configured percentage upward, otherwise "On Track".
        """
        threshold = _warning_threshold()
        progress = []
        for budget in BudgetService.list_budgets(user, year, month):
            percentage = budget.percentage_used
            if budget.is_over_budget:
                status = STATUS_OVER_BUDGET
            elif percentage >= threshold:
                status = STATUS_WARNING
            else:
                status = STATUS_ON_TRACK

            progress.append(
                {
                    "budget_id": budget.id,
                    "category_id": budget.category_id,
                    "category_name": budget.category.name,
                    "category_color": budget.category.color,
                    "budget_amount": budget.amount,
                    "spent_amount": budget.spent_amount,
                    "remaining_amount": budget.remaining_amount,
                    "percentage_used": round_percentage(percentage),
                    "is_over_budget": budget.is_over_budget,
                    "status": status,
                }
            )
        return progress

    @staticmethod
    @db_transaction.atomic
    def refresh_budget_spending(user, category_id, year, month):
        """Re-snapshot the stored spent amount of one budget, if it exists."""
        budget = Budget.objects.filter(
            user=user, category_id=category_id, year=year, month=month
        ).first()
        if budget is None:
            return None
        budget.spent_amount = BudgetService.calculate_spent_amount(
            user, category_id, year, month
        )
        budget.save(update_fields=["spent_amount", "updated_at"])
        return budget

    @staticmethod
    @db_transaction.atomic
    def copy_to_next_month(user, from_year, from_month):
        """
        Copy the month's budgets into the following month.

        Categories that already have a budget in the target month are left
        untouched. December rolls over into January of the next year.

        Returns:
            list: Newly created budgets
        """
        to_year, to_month = next_month(from_year, from_month)

        existing_categories = set(
            Budget.objects.filter(user=user, year=to_year, month=to_month).values_list(
                "category_id", flat=True
            )
        )

        created = []
        for source in Budget.objects.filter(
            user=user, year=from_year, month=from_month
        ).select_related("category"):
            if source.category_id in existing_categories:
                continue

            budget = Budget.objects.create(
                user=user,
                name=source.name,
                category=source.category,
                amount=source.amount,
                year=to_year,
                month=to_month,
                is_active=True,
                spent_amount=BudgetService.calculate_spent_amount(
                    user, source.category_id, to_year, to_month
                ),
            )
            existing_categories.add(source.category_id)
            created.append(budget)

        logger.info(
            "Budgets copied to next month",
            extra={
                "user_id": user.id,
                "from_year": from_year,
                "from_month": from_month,
                "to_year": to_year,
                "to_month": to_month,
                "created_count": len(created),
                "action": "budgets_copied",
                "component": "BudgetService",
            },
        )
        return created
