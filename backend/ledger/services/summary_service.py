"""
Read-only financial summaries for the assistant tool layer.

Each public method returns a short plain-text answer built from the ledger
services. Nothing here writes to the database. Amounts and dates are rendered
through the FormattingConfig handed to the service.
"""

import logging
from decimal import Decimal

from django.conf import settings
from django.utils import timezone

from ..models import Account, Transaction
from ..utils.formatting import (FormattingConfig, format_currency, format_date,
                                format_month)
from .account_service import AccountService
from .budget_service import STATUS_OVER_BUDGET, STATUS_WARNING, BudgetService
from .category_service import CategoryService
from .transaction_service import TransactionService

logger = logging.getLogger(__name__)

TRANSACTION_SIGNS = {
    Transaction.INCOME: "+",
    Transaction.EXPENSE: "-",
    Transaction.TRANSFER: "↔",
}


def _clamp(value, lower, upper):
    return max(lower, min(int(value), upper))


class FinancialSummaryService:
    """
    Natural-language projections over one user's ledger.

    Usage:
        summaries = FinancialSummaryService(user, FormattingConfig("USD"))
        text = summaries.total_balance()
    """

    TOOLS = (
        "accounts",
        "total_balance",
        "balances_by_type",
        "recent_transactions",
        "category_spending",
        "budget_status",
        "monthly_trends",
        "total_income",
        "total_expenses",
        "net_savings",
        "top_expense_categories",
    )

    def __init__(self, user, config=None, today=None):
        self.user = user
        self.config = config or FormattingConfig()
        self.today = today or timezone.localdate()

    def _money(self, amount):
        return format_currency(amount, self.config)

    def _month_to_date(self):
        return self.today.replace(day=1), self.today

    def accounts(self):
        accounts = AccountService.list_accounts(self.user)
        if not accounts.exists():
            return "No accounts found."
        type_labels = dict(Account.ACCOUNT_TYPES)
        lines = [
            f"- {account.name} ({type_labels.get(account.account_type, account.account_type)}): "
            f"{self._money(account.current_balance)}"
            for account in accounts
        ]
        return "User's accounts:\n" + "\n".join(lines)

    def total_balance(self):
        balance = AccountService.total_balance(self.user)
        return f"Total balance across all accounts: {self._money(balance)}"

    def balances_by_type(self):
        balances = AccountService.balances_by_type(self.user)
        if not balances:
            return "No account balances found."
        type_labels = dict(Account.ACCOUNT_TYPES)
        lines = [
            f"- {type_labels.get(account_type, account_type)}: {self._money(total)}"
            for account_type, total in balances.items()
        ]
        return "Balances by account type:\n" + "\n".join(lines)

    def recent_transactions(self, count=10):
        count = _clamp(count, 1, settings.LEDGER["RECENT_TRANSACTIONS_MAX"])
        transactions = list(TransactionService.recent_transactions(self.user, count))
        if not transactions:
            return "No recent transactions found."

        lines = []
        for txn in transactions:
            sign = TRANSACTION_SIGNS.get(txn.type, "")
            category = txn.category.name if txn.category else "Uncategorized"
            lines.append(
                f"- {format_date(txn.date, self.config)}: {sign}{self._money(txn.amount)}"
                f" - {txn.description} [{category}]"
            )
        return f"Last {len(transactions)} transactions:\n" + "\n".join(lines)

    def category_spending(self):
        start, end = self._month_to_date()
        spending = CategoryService.category_spending(self.user, start, end)
        if not spending:
            return "No spending data found for this month."

        total = sum((row["total_amount"] for row in spending), Decimal("0"))
        lines = [
            f"- {row['category_name']}: {self._money(row['total_amount'])} "
            f"({row['transaction_count']} transactions, {row['percentage']}%)"
            for row in spending
        ]
        return (
            f"Spending by category for {format_month(self.today, self.config)}:\n"
            + "\n".join(lines)
            + f"\n\nTotal spent: {self._money(total)}"
        )

    def budget_status(self):
        progress = BudgetService.budget_progress(
            self.user, self.today.year, self.today.month
        )
        if not progress:
            return "No budgets set up for this month."

        lines = [
            f"- {row['category_name']}: {self._money(row['spent_amount'])} of "
            f"{self._money(row['budget_amount'])} "
            f"({row['percentage_used']:.0f}% used) - {row['status']}"
            for row in progress
        ]
        over = sum(1 for row in progress if row["status"] == STATUS_OVER_BUDGET)
        warning = sum(1 for row in progress if row["status"] == STATUS_WARNING)
        on_track = len(progress) - over - warning
        return (
            f"Budget status for {format_month(self.today, self.config)}:\n"
            + "\n".join(lines)
            + f"\n\nSummary: {over} over budget, {warning} approaching limit, "
            f"{on_track} on track."
        )

    def monthly_trends(self, months=6):
        months = _clamp(months, 1, settings.LEDGER["MONTHLY_TRENDS_MAX"])
        trends = TransactionService.monthly_trends(self.user, months, today=self.today)
        if not trends:
            return "No transaction history found."

        lines = [
            f"- {row['month_name']}: Income {self._money(row['total_income'])}, "
            f"Expenses {self._money(row['total_expenses'])}, "
            f"Net {self._money(row['net_amount'])}"
            for row in trends
        ]
        average_income = sum(row["total_income"] for row in trends) / len(trends)
        average_expenses = sum(row["total_expenses"] for row in trends) / len(trends)
        return (
            f"Monthly trends (last {len(trends)} months):\n"
            + "\n".join(lines)
            + f"\n\nAverages: Income {self._money(average_income)}/month, "
            f"Expenses {self._money(average_expenses)}/month"
        )

    def _window(self, start_date, end_date):
        default_start, default_end = self._month_to_date()
        return start_date or default_start, end_date or default_end

    def total_income(self, start_date=None, end_date=None):
        start, end = self._window(start_date, end_date)
        income = TransactionService.total_income(self.user, start, end)
        return (
            f"Total income from {format_date(start, self.config)} to "
            f"{format_date(end, self.config)}: {self._money(income)}"
        )

    def total_expenses(self, start_date=None, end_date=None):
        start, end = self._window(start_date, end_date)
        expenses = TransactionService.total_expenses(self.user, start, end)
        return (
            f"Total expenses from {format_date(start, self.config)} to "
            f"{format_date(end, self.config)}: {self._money(expenses)}"
        )

    def net_savings(self):
        start, end = self._month_to_date()
        income = TransactionService.total_income(self.user, start, end)
        expenses = TransactionService.total_expenses(self.user, start, end)
        net = income - expenses
        status = "saved" if net >= 0 else "overspent"
        return (
            f"For {format_month(self.today, self.config)}:\n"
            f"- Income: {self._money(income)}\n"
            f"- Expenses: {self._money(expenses)}\n"
            f"- Net: {self._money(net)} ({status})"
        )

    def top_expense_categories(self, count=5):
        count = _clamp(count, 1, settings.LEDGER["TOP_CATEGORIES_MAX"])
        start, end = self._month_to_date()
        top = CategoryService.category_spending(self.user, start, end)[:count]
        if not top:
            return "No spending data found."

        lines = [
            f"{index}. {row['category_name']}: {self._money(row['total_amount'])} "
            f"({row['percentage']}%)"
            for index, row in enumerate(top, start=1)
        ]
        return (
            f"Top {len(top)} expense categories for "
            f"{format_month(self.today, self.config)}:\n" + "\n".join(lines)
        )

    def run_tool(self, name, **params):
        """
        Dispatch a tool by name with already-parsed parameters.

        Raises:
            ValueError: If ``name`` is not a known tool
        """
        if name not in self.TOOLS:
            raise ValueError(f"Unknown summary tool: {name}")

        logger.debug(
            "Summary tool invoked",
            extra={
                "user_id": self.user.id,
                "tool": name,
                "params": sorted(params),
                "action": "summary_tool_invoked",
                "component": "FinancialSummaryService",
            },
        )
        return getattr(self, name)(**params)
