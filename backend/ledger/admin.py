from django.contrib import admin

from .models import (Account, Budget, Category, RecurringTransaction,
                     Transaction, UserSettings)


@admin.register(UserSettings)
class UserSettingsAdmin(admin.ModelAdmin):
    list_display = ("user", "preferred_currency", "date_format")
    search_fields = ("user__username", "user__email")


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "user",
        "account_type",
        "current_balance",
        "currency",
        "is_active",
    )
    list_filter = ("account_type", "is_active", "include_in_total")
    search_fields = ("name", "user__username")
    # Balances only move through the transaction journal
    readonly_fields = ("current_balance", "created_at", "updated_at")


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "type", "user", "parent", "is_system", "is_active")
    list_filter = ("type", "is_system", "is_active")
    search_fields = ("name",)


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = ("date", "description", "type", "amount", "account", "category", "user")
    list_filter = ("type", "is_reconciled")
    search_fields = ("description", "notes", "tags")
    date_hierarchy = "date"
    readonly_fields = (
        "amount",
        "type",
        "account",
        "destination_account",
        "created_at",
        "updated_at",
    )


@admin.register(Budget)
class BudgetAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "year", "month", "amount", "spent_amount", "user")
    list_filter = ("year", "month", "is_active")


@admin.register(RecurringTransaction)
class RecurringTransactionAdmin(admin.ModelAdmin):
    list_display = (
        "description",
        "type",
        "amount",
        "frequency",
        "next_due_date",
        "is_active",
        "user",
    )
    list_filter = ("frequency", "type", "is_active", "auto_create")
