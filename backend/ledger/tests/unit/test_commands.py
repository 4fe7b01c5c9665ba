# ledger/tests/unit/test_commands.py
from datetime import date
from decimal import Decimal
from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from ledger.models import Category, Transaction

from ..factories import RecurringTransactionFactory


class TestSeedSystemCategoriesCommand:
    def test_seeds_then_reports_nothing_to_do(self, db):
        out = StringIO()

        call_command("seed_system_categories", stdout=out)
        call_command("seed_system_categories", stdout=out)

        output = out.getvalue()
        assert "Created" in output
        assert "nothing to do" in output
        assert Category.objects.filter(is_system=True).exists()


class TestProcessRecurringCommand:
    def test_processes_all_users(self, test_user, test_user2):
        RecurringTransactionFactory(user=test_user, amount=Decimal("10.00"))
        RecurringTransactionFactory(user=test_user2, amount=Decimal("20.00"))
        out = StringIO()

        call_command("process_recurring", "--date", "2024-01-15", stdout=out)

        assert Transaction.objects.count() == 2
        assert "Processed 2 schedules, created 2 transactions as of 2024-01-15" in out.getvalue()

    def test_limits_to_one_user(self, test_user, test_user2):
        RecurringTransactionFactory(user=test_user)
        RecurringTransactionFactory(user=test_user2)

        call_command(
            "process_recurring", "--date", "2024-01-15", "--user", "testuser2", stdout=StringIO()
        )

        assert list(Transaction.objects.values_list("user__username", flat=True)) == ["testuser2"]

    def test_nothing_due(self, test_user):
        RecurringTransactionFactory(user=test_user, start_date=date(2024, 6, 1))
        out = StringIO()

        call_command("process_recurring", "--date", "2024-01-15", stdout=out)

        assert "Processed 0 schedules" in out.getvalue()
        assert Transaction.objects.count() == 0

    @pytest.mark.parametrize("value", ["tomorrow", "2024-02-30"])
    def test_invalid_date(self, db, value):
        with pytest.raises(CommandError, match="Invalid date"):
            call_command("process_recurring", "--date", value, stdout=StringIO())
