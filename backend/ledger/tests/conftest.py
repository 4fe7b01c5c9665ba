# ledger/tests/conftest.py
from datetime import date
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model

from ledger.models import Account, Category
from ledger.services.category_service import CategoryService

User = get_user_model()

# =============================================================================
# USER FIXTURES
# =============================================================================


@pytest.fixture
def test_user(db):
    """Primary test user"""
    return User.objects.create_user(
        username="testuser", email="test@example.com", password="testpass123"
    )


@pytest.fixture
def test_user2(db):
    """Second user for ownership isolation checks"""
    return User.objects.create_user(
        username="testuser2", email="test2@example.com", password="testpass123"
    )


@pytest.fixture
def user_settings(db, test_user):
    """UserSettings are created by the post_save signal."""
    return test_user.settings


# =============================================================================
# ACCOUNT FIXTURES
# =============================================================================


@pytest.fixture
def checking_account(db, test_user):
    """Checking account starting at 1000.00"""
    return Account.objects.create(
        user=test_user,
        name="Main Checking",
        account_type="checking",
        initial_balance=Decimal("1000.00"),
        current_balance=Decimal("1000.00"),
    )


@pytest.fixture
def savings_account(db, test_user):
    """Savings account starting at 200.00"""
    return Account.objects.create(
        user=test_user,
        name="Savings",
        account_type="savings",
        initial_balance=Decimal("200.00"),
        current_balance=Decimal("200.00"),
    )


@pytest.fixture
def other_user_account(db, test_user2):
    return Account.objects.create(
        user=test_user2,
        name="Foreign Checking",
        initial_balance=Decimal("50.00"),
        current_balance=Decimal("50.00"),
    )


# =============================================================================
# CATEGORY FIXTURES
# =============================================================================


@pytest.fixture
def system_categories(db):
    """Default shared categories"""
    CategoryService.seed_system_categories()
    return Category.objects.filter(is_system=True)


@pytest.fixture
def expense_category(db, test_user):
    return Category.objects.create(
        user=test_user, name="Groceries", type="expense", color="#ff0000"
    )


@pytest.fixture
def second_expense_category(db, test_user):
    return Category.objects.create(
        user=test_user, name="Rent", type="expense", color="#00ff00"
    )


@pytest.fixture
def income_category(db, test_user):
    return Category.objects.create(
        user=test_user, name="Paycheck", type="income", color="#0000ff"
    )


@pytest.fixture
def other_user_category(db, test_user2):
    return Category.objects.create(user=test_user2, name="Hobby", type="expense")


# =============================================================================
# DATES
# =============================================================================


@pytest.fixture
def march_2024():
    return date(2024, 3, 15)
