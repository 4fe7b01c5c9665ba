# ledger/services/__init__.py
from .account_service import AccountService
from .budget_service import BudgetService
from .category_service import CategoryService
from .recurring_service import RecurringTransactionService
from .summary_service import FinancialSummaryService
from .transaction_service import TransactionService

__all__ = [
    "AccountService",
    "BudgetService",
    "CategoryService",
    "FinancialSummaryService",
    "RecurringTransactionService",
    "TransactionService",
]
