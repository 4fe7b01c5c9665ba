# ledger/tests/unit/test_service_summary.py
from datetime import date
from decimal import Decimal

import pytest

from ledger.services.summary_service import FinancialSummaryService
from ledger.services.transaction_service import TransactionService
from ledger.utils.formatting import FormattingConfig

from ..factories import BudgetFactory

TODAY = date(2024, 3, 20)


@pytest.fixture
def summaries(test_user):
    return FinancialSummaryService(test_user, FormattingConfig(), today=TODAY)


@pytest.fixture
def march_activity(test_user, checking_account, savings_account, expense_category, income_category):
    def record(amount, transaction_type, category, day, description):
        return TransactionService.create_transaction(
            {
                "amount": Decimal(amount),
                "type": transaction_type,
                "description": description,
                "date": day,
                "account": checking_account,
                "category": category,
            },
            test_user,
        )

    record("2000.00", "income", income_category, date(2024, 3, 1), "Salary")
    record("150.00", "expense", expense_category, date(2024, 3, 5), "Groceries run")
    record("50.00", "expense", expense_category, date(2024, 3, 12), "Farmers market")
    TransactionService.create_transaction(
        {
            "amount": Decimal("300.00"),
            "type": "transfer",
            "description": "Save",
            "date": date(2024, 3, 15),
            "account": checking_account,
            "destination_account": savings_account,
        },
        test_user,
    )


class TestAccountSummaries:
    def test_no_accounts(self, summaries):
        assert summaries.accounts() == "No accounts found."

    def test_accounts_listing(self, summaries, checking_account, savings_account):
        assert summaries.accounts() == (
            "User's accounts:\n"
            "- Main Checking (Checking): $1,000.00\n"
            "- Savings (Savings): $200.00"
        )

    def test_total_balance(self, summaries, checking_account, savings_account):
        assert summaries.total_balance() == "Total balance across all accounts: $1,200.00"

    def test_balances_by_type(self, summaries, checking_account, savings_account):
        assert summaries.balances_by_type() == (
            "Balances by account type:\n- Checking: $1,000.00\n- Savings: $200.00"
        )

    def test_currency_follows_config(self, test_user, checking_account):
        summaries = FinancialSummaryService(
            test_user, FormattingConfig(currency_code="EUR"), today=TODAY
        )

        assert summaries.total_balance().endswith("€1,000.00")


class TestJournalSummaries:
    def test_recent_transactions(self, summaries, march_activity):
        text = summaries.recent_transactions(2)

        assert text == (
            "Last 2 transactions:\n"
            "- Mar 15, 2024: ↔$300.00 - Save [Uncategorized]\n"
            "- Mar 12, 2024: -$50.00 - Farmers market [Groceries]"
        )

    def test_recent_transactions_empty(self, summaries):
        assert summaries.recent_transactions() == "No recent transactions found."

    def test_recent_transactions_count_is_clamped(self, summaries, march_activity):
        assert summaries.recent_transactions(0).startswith("Last 1 transactions:")

    def test_date_format_follows_config(self, test_user, march_activity):
        summaries = FinancialSummaryService(
            test_user, FormattingConfig(date_pattern="%d.%m.%Y"), today=TODAY
        )

        assert "- 15.03.2024:" in summaries.recent_transactions(1)

    def test_category_spending(self, summaries, march_activity):
        assert summaries.category_spending() == (
            "Spending by category for March 2024:\n"
            "- Groceries: $200.00 (2 transactions, 100.0%)\n\n"
            "Total spent: $200.00"
        )

    def test_category_spending_empty(self, summaries):
        assert summaries.category_spending() == "No spending data found for this month."

    def test_totals_default_to_month_to_date(self, summaries, march_activity):
        assert summaries.total_income() == (
            "Total income from Mar 01, 2024 to Mar 20, 2024: $2,000.00"
        )
        assert summaries.total_expenses(date(2024, 3, 10), date(2024, 3, 31)) == (
            "Total expenses from Mar 10, 2024 to Mar 31, 2024: $50.00"
        )

    def test_net_savings(self, summaries, march_activity):
        assert summaries.net_savings() == (
            "For March 2024:\n"
            "- Income: $2,000.00\n"
            "- Expenses: $200.00\n"
            "- Net: $1,800.00 (saved)"
        )

    def test_net_savings_overspent(self, summaries, test_user, checking_account, expense_category):
        TransactionService.create_transaction(
            {
                "amount": Decimal("10.00"),
                "type": "expense",
                "description": "Snack",
                "date": date(2024, 3, 2),
                "account": checking_account,
                "category": expense_category,
            },
            test_user,
        )

        assert summaries.net_savings().endswith("- Net: -$10.00 (overspent)")

    def test_monthly_trends(self, summaries, march_activity):
        text = summaries.monthly_trends(3)

        assert text.startswith("Monthly trends (last 1 months):\n")
        assert "- Mar 2024: Income $2,000.00, Expenses $200.00, Net $1,800.00" in text
        assert text.endswith("Averages: Income $2,000.00/month, Expenses $200.00/month")

    def test_monthly_trends_empty(self, summaries):
        assert summaries.monthly_trends() == "No transaction history found."

    def test_top_expense_categories(self, summaries, march_activity):
        assert summaries.top_expense_categories(5) == (
            "Top 1 expense categories for March 2024:\n1. Groceries: $200.00 (100.0%)"
        )


class TestBudgetSummary:
    def test_budget_status(self, summaries, test_user, march_activity, expense_category, second_expense_category):
        BudgetFactory(user=test_user, category=expense_category, amount=Decimal("150.00"))
        BudgetFactory(user=test_user, category=second_expense_category, amount=Decimal("800.00"))

        text = summaries.budget_status()

        assert text.startswith("Budget status for March 2024:\n")
        assert "- Groceries: $200.00 of $150.00 (133% used) - Over Budget" in text
        assert "- Rent: $0.00 of $800.00 (0% used) - On Track" in text
        assert text.endswith("Summary: 1 over budget, 0 approaching limit, 1 on track.")

    def test_budget_status_without_budgets(self, summaries):
        assert summaries.budget_status() == "No budgets set up for this month."


class TestRunTool:
    def test_dispatches_with_params(self, summaries, march_activity):
        assert summaries.run_tool("recent_transactions", count=1).startswith(
            "Last 1 transactions:"
        )

    def test_unknown_tool(self, summaries):
        with pytest.raises(ValueError, match="Unknown summary tool"):
            summaries.run_tool("delete_everything")

    def test_every_tool_answers(self, summaries, march_activity):
        for tool in FinancialSummaryService.TOOLS:
            assert isinstance(summaries.run_tool(tool), str)
