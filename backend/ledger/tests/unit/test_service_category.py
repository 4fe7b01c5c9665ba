# ledger/tests/unit/test_service_category.py
from datetime import date
from decimal import Decimal
from unittest.mock import patch

import pytest
from django.core.exceptions import ValidationError

from ledger.exceptions import RecordNotFoundError
from ledger.models import Category
from ledger.services.category_service import (SYSTEM_EXPENSE_CATEGORIES,
                                              SYSTEM_INCOME_CATEGORIES,
                                              CategoryService)
from ledger.services.transaction_service import TransactionService

from ..factories import BudgetFactory, CategoryFactory, RecurringTransactionFactory


def _record(user, account, category, amount, transaction_type="expense", day=None):
    return TransactionService.create_transaction(
        {
            "amount": Decimal(amount),
            "type": transaction_type,
            "description": "Entry",
            "date": day or date(2024, 3, 10),
            "account": account,
            "category": category,
        },
        user,
    )


class TestCategoryVisibility:
    def test_user_sees_system_and_own(
        self, test_user, system_categories, expense_category, other_user_category
    ):
        visible = CategoryService.visible_categories(test_user)

        assert expense_category in visible
        assert other_user_category not in visible
        assert visible.filter(is_system=True).count() == system_categories.count()

    def test_list_filters_type_and_inactive(self, test_user, expense_category, income_category):
        CategoryFactory(user=test_user, name="Archived", is_active=False)

        expenses = CategoryService.list_categories(test_user, "expense")

        assert list(expenses) == [expense_category]

    def test_get_foreign_category(self, test_user, other_user_category):
        with pytest.raises(RecordNotFoundError):
            CategoryService.get_category(other_user_category.id, test_user)


class TestCategoryCommands:
    def test_create_user_category(self, test_user):
        category = CategoryService.create_category(
            {"name": "  Pets ", "type": "expense", "color": "#123456", "is_system": True},
            test_user,
        )

        assert category.name == "Pets"
        assert category.user == test_user
        assert category.is_system is False

    def test_create_requires_name(self, test_user):
        with pytest.raises(ValidationError, match="Category name is required"):
            CategoryService.create_category({"name": " ", "type": "expense"}, test_user)

    def test_create_rejects_unknown_type(self, test_user):
        with pytest.raises(ValidationError, match="Category type must be"):
            CategoryService.create_category({"name": "X", "type": "transfer"}, test_user)

    def test_create_subcategory(self, test_user, expense_category):
        child = CategoryService.create_category(
            {"name": "Organic", "type": "expense", "parent": expense_category}, test_user
        )

        assert child.parent == expense_category
        assert list(expense_category.subcategories.all()) == [child]

    def test_parent_type_must_match(self, test_user, income_category):
        with pytest.raises(ValidationError, match="same type"):
            CategoryService.create_category(
                {"name": "Snacks", "type": "expense", "parent": income_category}, test_user
            )

    def test_single_level_nesting(self, test_user, expense_category):
        child = CategoryFactory(user=test_user, type="expense", parent=expense_category)

        with pytest.raises(ValidationError, match="single level"):
            CategoryService.create_category(
                {"name": "Grandchild", "type": "expense", "parent": child}, test_user
            )

    def test_foreign_parent_rejected(self, test_user, other_user_category):
        with pytest.raises(ValidationError, match="Parent category not found"):
            CategoryService.create_category(
                {"name": "Mine", "type": "expense", "parent": other_user_category}, test_user
            )

    def test_update_system_category_cosmetics_only(self, test_user, system_categories):
        travel = system_categories.get(name="Travel")

        updated = CategoryService.update_category(
            travel.id, {"name": "Trips", "color": "#abcdef", "type": "income"}, test_user
        )

        assert updated.name == "Travel"
        assert updated.type == "expense"
        assert updated.color == "#abcdef"

    def test_update_user_category(self, test_user, expense_category):
        updated = CategoryService.update_category(
            expense_category.id, {"name": "Food", "is_active": False}, test_user
        )

        assert updated.name == "Food"
        assert updated.is_active is False

    def test_type_change_blocked_when_used(
        self, test_user, checking_account, expense_category
    ):
        _record(test_user, checking_account, expense_category, "5.00")

        with pytest.raises(ValidationError, match="Cannot change the type"):
            CategoryService.update_category(
                expense_category.id, {"type": "income"}, test_user
            )

    def test_type_change_blocked_when_scheduled(self, test_user, expense_category):
        RecurringTransactionFactory(user=test_user, category=expense_category)

        with pytest.raises(ValidationError, match="recurring transactions"):
            CategoryService.update_category(
                expense_category.id, {"type": "income"}, test_user
            )

        expense_category.refresh_from_db()
        assert expense_category.type == "expense"

    def test_type_change_blocked_when_budgeted(self, test_user, expense_category):
        BudgetFactory(user=test_user, category=expense_category)

        with pytest.raises(ValidationError, match="budgets"):
            CategoryService.update_category(
                expense_category.id, {"type": "income"}, test_user
            )

    def test_type_change_blocked_for_parent(self, test_user, expense_category):
        child = CategoryFactory(user=test_user, type="expense", parent=expense_category)

        with pytest.raises(ValidationError, match="subcategories"):
            CategoryService.update_category(
                expense_category.id, {"type": "income"}, test_user
            )

        expense_category.refresh_from_db()
        child.refresh_from_db()
        assert expense_category.type == child.type == "expense"

    def test_type_change_allowed_when_unused(self, test_user, expense_category):
        updated = CategoryService.update_category(
            expense_category.id, {"type": "income"}, test_user
        )

        assert updated.type == "income"

    @patch("ledger.services.category_service.logger")
    def test_rejected_type_change_is_logged(self, mock_logger, test_user, expense_category):
        BudgetFactory(user=test_user, category=expense_category)

        with pytest.raises(ValidationError):
            CategoryService.update_category(
                expense_category.id, {"type": "income"}, test_user
            )

        mock_logger.warning.assert_called_once()
        extra = mock_logger.warning.call_args.kwargs["extra"]
        assert extra["action"] == "category_type_change_rejected"
        assert extra["used_by"] == ["budgets"]

    def test_update_foreign_category(self, test_user, other_user_category):
        with pytest.raises(RecordNotFoundError):
            CategoryService.update_category(
                other_user_category.id, {"name": "Mine now"}, test_user
            )

    def test_delete_unused_category(self, test_user, expense_category):
        assert CategoryService.delete_category(expense_category.id, test_user) is True
        assert not Category.objects.filter(pk=expense_category.id).exists()

    def test_delete_used_category_deactivates(
        self, test_user, checking_account, expense_category
    ):
        _record(test_user, checking_account, expense_category, "5.00")

        assert CategoryService.delete_category(expense_category.id, test_user) is True
        expense_category.refresh_from_db()
        assert expense_category.is_active is False

    def test_delete_budgeted_category_deactivates(self, test_user, expense_category):
        BudgetFactory(user=test_user, category=expense_category)

        CategoryService.delete_category(expense_category.id, test_user)
        expense_category.refresh_from_db()
        assert expense_category.is_active is False

    def test_delete_scheduled_category_deactivates(self, test_user, expense_category):
        RecurringTransactionFactory(user=test_user, category=expense_category)

        CategoryService.delete_category(expense_category.id, test_user)
        expense_category.refresh_from_db()
        assert expense_category.is_active is False

    def test_system_category_cannot_be_deleted(self, test_user, system_categories):
        travel = system_categories.get(name="Travel")

        assert CategoryService.delete_category(travel.id, test_user) is False
        assert Category.objects.filter(pk=travel.id).exists()


class TestCategoryReports:
    def test_category_spending_sorted_with_percentages(
        self, test_user, checking_account, expense_category, second_expense_category, income_category
    ):
        _record(test_user, checking_account, expense_category, "25.00")
        _record(test_user, checking_account, expense_category, "50.00")
        _record(test_user, checking_account, second_expense_category, "225.00")
        _record(test_user, checking_account, income_category, "999.00", "income")
        _record(test_user, checking_account, expense_category, "10.00", day=date(2024, 4, 1))

        rows = CategoryService.category_spending(
            test_user, date(2024, 3, 1), date(2024, 3, 31)
        )

        assert [row["category_name"] for row in rows] == ["Rent", "Groceries"]
        assert rows[0]["total_amount"] == Decimal("225.00")
        assert rows[0]["percentage"] == Decimal("75.0")
        assert rows[1]["transaction_count"] == 2
        assert rows[1]["percentage"] == Decimal("25.0")
        assert rows[1]["color"] == "#ff0000"

    def test_income_by_category(self, test_user, checking_account, income_category):
        _record(test_user, checking_account, income_category, "100.00", "income")

        (row,) = CategoryService.income_by_category(
            test_user, date(2024, 3, 1), date(2024, 3, 31)
        )

        assert row["category_id"] == income_category.id
        assert row["percentage"] == Decimal("100.0")

    def test_empty_window(self, test_user):
        assert CategoryService.category_spending(
            test_user, date(2024, 3, 1), date(2024, 3, 31)
        ) == []


class TestSeedSystemCategories:
    def test_seed_is_idempotent(self, db):
        created = CategoryService.seed_system_categories()

        assert created == len(SYSTEM_EXPENSE_CATEGORIES) + len(SYSTEM_INCOME_CATEGORIES)
        assert CategoryService.seed_system_categories() == 0
        assert Category.objects.filter(is_system=True, user__isnull=True).count() == created

    def test_system_categories_ordered(self, system_categories):
        names = [c.name for c in CategoryService.system_categories().filter(type="income")]

        assert names[0] == "Salary"
        assert names[-1] == "Other Income"
