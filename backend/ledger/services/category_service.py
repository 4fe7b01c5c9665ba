"""
Service for category operations, spending breakdowns and system seeding.

Visibility rule used everywhere: a user sees the shared system categories
plus the categories they own.
"""

import logging
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction as db_transaction
from django.db.models import Count, Q, Sum

from ..exceptions import RecordNotFoundError
from ..models import Category, Transaction
from ..utils.formatting import round_percentage

# Get structured logger for this module
logger = logging.getLogger(__name__)

# (name, color, icon, sort_order)
SYSTEM_EXPENSE_CATEGORIES = [
    ("Food & Dining", "#FF6B6B", "restaurant", 1),
    ("Transportation", "#4ECDC4", "car", 2),
    ("Housing", "#45B7D1", "home", 3),
    ("Utilities", "#96CEB4", "bolt", 4),
    ("Healthcare", "#FFEAA7", "medical", 5),
    ("Entertainment", "#DDA0DD", "movie", 6),
    ("Shopping", "#98D8C8", "shopping-cart", 7),
    ("Education", "#F7DC6F", "school", 8),
    ("Personal Care", "#BB8FCE", "spa", 9),
    ("Insurance", "#85C1E9", "shield", 10),
    ("Subscriptions", "#F1948A", "repeat", 11),
    ("Travel", "#82E0AA", "airplane", 12),
    ("Gifts & Donations", "#F5B7B1", "gift", 13),
    ("Other Expense", "#AEB6BF", "more-horizontal", 99),
]

SYSTEM_INCOME_CATEGORIES = [
    ("Salary", "#27AE60", "briefcase", 1),
    ("Freelance", "#2ECC71", "laptop", 2),
    ("Investments", "#1ABC9C", "trending-up", 3),
    ("Rental Income", "#3498DB", "home", 4),
    ("Business", "#9B59B6", "building", 5),
    ("Refunds", "#E74C3C", "refresh", 6),
    ("Other Income", "#95A5A6", "plus-circle", 99),
]

SYSTEM_EDITABLE_FIELDS = ("color", "icon", "sort_order")
USER_EDITABLE_FIELDS = (
    "name",
    "description",
    "type",
    "color",
    "icon",
    "parent",
    "sort_order",
    "is_active",
)


class CategoryService:
    """
    Service for category CRUD, reports and the default category set.
    """

    @staticmethod
    def visible_categories(user):
        """System categories plus those owned by ``user``, active or not."""
        return Category.objects.filter(Q(is_system=True) | Q(user=user))

    @staticmethod
    def list_categories(user, category_type=None):
        qs = CategoryService.visible_categories(user).filter(is_active=True)
        if category_type:
            qs = qs.filter(type=category_type)
        return qs.order_by("type", "sort_order", "name")

    @staticmethod
    def get_category(category_id, user):
        try:
            return CategoryService.visible_categories(user).get(pk=category_id)
        except Category.DoesNotExist:
            raise RecordNotFoundError("Category", category_id)

    @staticmethod
    def system_categories():
        return Category.objects.filter(is_system=True).order_by(
            "type", "sort_order", "name"
        )

    @staticmethod
    def _validate_parent(parent, category_type, user, category=None):
        """Parent must be visible, share the type and be top level."""
        if parent is None:
            return
        if not parent.is_system and parent.user_id != user.id:
            raise ValidationError({"parent": "Parent category not found."})
        if category is not None and parent.pk == category.pk:
            raise ValidationError({"parent": "A category cannot be its own parent."})
        if parent.type != category_type:
            raise ValidationError({"parent": "Parent category must have the same type."})
        if parent.parent_id is not None:
            raise ValidationError(
                {"parent": "Categories support a single level of nesting."}
            )

    @staticmethod
    def _check_type_change_allowed(category, user):
        """
        A category's type is fixed once anything depends on it.

        Transactions, recurring schedules and budgets all require a matching
        category type, and subcategories must share their parent's type.
        """
        blockers = {
            "transactions": Transaction.objects.filter(category=category).exists(),
            "recurring transactions": category.recurring_transactions.exists(),
            "budgets": category.budgets.exists(),
            "subcategories": category.subcategories.exists(),
        }
        in_use = [label for label, used in blockers.items() if used]
        if not in_use:
            return

        logger.warning(
            "Category type change rejected - category in use",
            extra={
                "user_id": user.id,
                "category_id": category.id,
                "used_by": in_use,
                "action": "category_type_change_rejected",
                "component": "CategoryService",
                "severity": "low",
            },
        )
        raise ValidationError(
            {
                "type": "Cannot change the type of a category used by "
                + ", ".join(in_use)
                + "."
            }
        )

    @staticmethod
    @db_transaction.atomic
    def create_category(data, user):
        """
        Create a user-owned category. Callers can never create system ones.

        Raises:
            ValidationError: If the name is blank or the parent is invalid
        """
        name = (data.get("name") or "").strip()
        if not name:
            raise ValidationError({"name": "Category name is required."})

        category_type = data.get("type")
        if category_type not in dict(Category.CATEGORY_TYPES):
            raise ValidationError({"type": "Category type must be 'expense' or 'income'."})

        parent = data.get("parent")
        CategoryService._validate_parent(parent, category_type, user)

        category = Category.objects.create(
            user=user,
            name=name,
            description=data.get("description", ""),
            type=category_type,
            color=data.get("color", "#6c757d"),
            icon=data.get("icon", ""),
            parent=parent,
            sort_order=data.get("sort_order", 0),
            is_active=data.get("is_active", True),
            is_system=False,
        )

        logger.info(
            "Category created",
            extra={
                "user_id": user.id,
                "category_id": category.id,
                "category_type": category.type,
                "action": "category_created",
                "component": "CategoryService",
            },
        )
        return category

    @staticmethod
    @db_transaction.atomic
    def update_category(category_id, data, user):
        """
        Update a category.

        System categories only accept cosmetic changes (color, icon, sort
        order); other submitted fields are ignored.

        Raises:
            RecordNotFoundError: If the category is not visible to ``user``
        """
        category = CategoryService.get_category(category_id, user)

        if category.is_system:
            allowed = SYSTEM_EDITABLE_FIELDS
        elif category.user_id == user.id:
            allowed = USER_EDITABLE_FIELDS
        else:
            raise RecordNotFoundError("Category", category_id)

        changed = [field for field in allowed if field in data]
        if "name" in changed and not (data["name"] or "").strip():
            raise ValidationError({"name": "Category name is required."})

        if "type" in changed and data["type"] != category.type:
            CategoryService._check_type_change_allowed(category, user)

        if "parent" in changed or "type" in changed:
            CategoryService._validate_parent(
                data.get("parent", category.parent),
                data.get("type", category.type),
                user,
                category=category,
            )

        for field in changed:
            setattr(category, field, data[field])
        category.save()

        logger.info(
            "Category updated",
            extra={
                "user_id": user.id,
                "category_id": category.id,
                "is_system": category.is_system,
                "updated_fields": changed,
                "action": "category_updated",
                "component": "CategoryService",
            },
        )
        return category

    @staticmethod
    @db_transaction.atomic
    def delete_category(category_id, user):
        """
        Delete a user category, deactivating it instead when it is in use.

        Returns:
            bool: False for missing, foreign or system categories
        """
        category = Category.objects.filter(
            pk=category_id, user=user, is_system=False
        ).first()
        if category is None:
            return False

        in_use = (
            Transaction.objects.filter(category=category).exists()
            or category.budgets.exists()
            or category.recurring_transactions.exists()
        )

        if in_use:
            category.is_active = False
            category.save(update_fields=["is_active"])
            logger.info(
                "Category deactivated instead of deleted - in use",
                extra={
                    "user_id": user.id,
                    "category_id": category.id,
                    "action": "category_soft_deleted",
                    "component": "CategoryService",
                },
            )
        else:
            category.delete()
            logger.info(
                "Category deleted",
                extra={
                    "user_id": user.id,
                    "category_id": category_id,
                    "action": "category_deleted",
                    "component": "CategoryService",
                },
            )
        return True

    @staticmethod
    def _breakdown(user, transaction_type, start_date, end_date):
        rows = list(
            Transaction.objects.filter(
                user=user,
                type=transaction_type,
                category__isnull=False,
                date__gte=start_date,
                date__lte=end_date,
            )
            .values("category_id", "category__name", "category__color")
            .annotate(total=Sum("amount"), count=Count("id"))
            .order_by("-total")
        )

        grand_total = sum((row["total"] for row in rows), Decimal("0"))
        return [
            {
                "category_id": row["category_id"],
                "category_name": row["category__name"],
                "color": row["category__color"],
                "total_amount": row["total"],
                "transaction_count": row["count"],
                "percentage": (
                    round_percentage(row["total"] / grand_total * 100)
                    if grand_total > 0
                    else Decimal("0.0")
                ),
            }
            for row in rows
        ]

    @staticmethod
    def category_spending(user, start_date, end_date):
        """Expense totals per category in the inclusive window, largest first."""
        return CategoryService._breakdown(
            user, Transaction.EXPENSE, start_date, end_date
        )

    @staticmethod
    def income_by_category(user, start_date, end_date):
        """Income totals per category in the inclusive window, largest first."""
        return CategoryService._breakdown(
            user, Transaction.INCOME, start_date, end_date
        )

    @staticmethod
    @db_transaction.atomic
    def seed_system_categories():
        """
        Insert the default system categories that are not present yet.

        Returns:
            int: Number of categories created
        """
        created = 0
        for category_type, definitions in (
            ("expense", SYSTEM_EXPENSE_CATEGORIES),
            ("income", SYSTEM_INCOME_CATEGORIES),
        ):
            for name, color, icon, sort_order in definitions:
                _, was_created = Category.objects.get_or_create(
                    is_system=True,
                    user=None,
                    type=category_type,
                    name=name,
                    defaults={
                        "color": color,
                        "icon": icon,
                        "sort_order": sort_order,
                        "is_active": True,
                    },
                )
                created += int(was_created)

        logger.info(
            "System categories seeded",
            extra={
                "created_count": created,
                "action": "system_categories_seeded",
                "component": "CategoryService",
            },
        )
        return created
