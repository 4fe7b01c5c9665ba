"""
Service for recurring transaction schedules.

A processing pass spawns at most one journal entry per due schedule, dated at
the schedule's old next-due date, then moves the next-due date forward to the
first occurrence that is not in the past. Schedules that missed several
periods are therefore caught up without a burst of back-dated entries.
"""

import logging
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction as db_transaction
from django.db.models import Q
from django.utils import timezone

from ..exceptions import RecordNotFoundError
from ..models import RecurringTransaction
from ..utils.dates import advance_until
from .transaction_service import TransactionService

# Get structured logger for this module
logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "amount",
    "type",
    "description",
    "notes",
    "frequency",
    "start_date",
    "end_date",
    "is_active",
    "auto_create",
    "account",
    "destination_account",
    "category",
)


class RecurringTransactionService:
    """
    Service for schedule CRUD and the due-processing pass.
    """

    def __init__(self, transaction_service=None):
        self.transaction_service = transaction_service or TransactionService()

    @staticmethod
    def calculate_next_due_date(schedule, today=None):
        """
        Next occurrence after the last processed date (or the start date).

        Periods are added until the result is on or after ``today``.
        """
        today = today or timezone.localdate()
        base = schedule.last_processed_date or schedule.start_date
        return advance_until(base, schedule.frequency, today)

    def _validate_template(self, values, user):
        if values.get("frequency") not in dict(RecurringTransaction.FREQUENCY_CHOICES):
            raise ValidationError({"frequency": "Unknown recurrence frequency."})
        if values.get("start_date") is None:
            raise ValidationError("Missing required field: start_date")
        if values.get("end_date") and values["end_date"] < values["start_date"]:
            raise ValidationError(
                {"end_date": "End date cannot be before the start date."}
            )

        # Spawned entries must pass journal validation later, so check now
        self.transaction_service.validate_transaction_data(
            {**values, "date": values["start_date"]}, user
        )

    def list_recurring(self, user):
        return (
            RecurringTransaction.objects.filter(user=user)
            .select_related("account", "destination_account", "category")
            .order_by("next_due_date")
        )

    def get_recurring(self, schedule_id, user):
        try:
            return RecurringTransaction.objects.get(pk=schedule_id, user=user)
        except RecurringTransaction.DoesNotExist:
            raise RecordNotFoundError("RecurringTransaction", schedule_id)

    @db_transaction.atomic
    def create_recurring(self, data, user):
        """
        Create a schedule; its first due date is its start date.

        Raises:
            ValidationError: If the template would not produce valid entries
        """
        values = {field: data.get(field) for field in UPDATABLE_FIELDS}
        self._validate_template(values, user)

        schedule = RecurringTransaction.objects.create(
            user=user,
            amount=Decimal(str(values["amount"])),
            type=values["type"],
            description=values["description"].strip(),
            notes=values.get("notes") or "",
            frequency=values["frequency"],
            start_date=values["start_date"],
            end_date=values.get("end_date"),
            next_due_date=values["start_date"],
            is_active=data.get("is_active", True),
            auto_create=data.get("auto_create", False),
            account=values["account"],
            destination_account=values.get("destination_account"),
            category=values.get("category"),
        )

        logger.info(
            "Recurring schedule created",
            extra={
                "user_id": user.id,
                "schedule_id": schedule.id,
                "frequency": schedule.frequency,
                "next_due_date": str(schedule.next_due_date),
                "action": "recurring_created",
                "component": "RecurringTransactionService",
            },
        )
        return schedule

    @db_transaction.atomic
    def update_recurring(self, schedule_id, data, user, today=None):
        """
        Update a schedule.

        A next-due date left in the past is recomputed from the new values.

        Raises:
            RecordNotFoundError: If the schedule does not exist for ``user``
        """
        today = today or timezone.localdate()
        try:
            schedule = RecurringTransaction.objects.select_for_update().get(
                pk=schedule_id, user=user
            )
        except RecurringTransaction.DoesNotExist:
            raise RecordNotFoundError("RecurringTransaction", schedule_id)

        merged = {
            field: data[field] if field in data else getattr(schedule, field)
            for field in UPDATABLE_FIELDS
        }
        self._validate_template(merged, user)

        for field, value in merged.items():
            if field == "amount":
                value = Decimal(str(value))
            elif field == "notes" and value is None:
                value = ""
            setattr(schedule, field, value)

        if schedule.next_due_date < today:
            schedule.next_due_date = self.calculate_next_due_date(schedule, today)

        schedule.save()

        logger.info(
            "Recurring schedule updated",
            extra={
                "user_id": user.id,
                "schedule_id": schedule.id,
                "next_due_date": str(schedule.next_due_date),
                "action": "recurring_updated",
                "component": "RecurringTransactionService",
            },
        )
        return schedule

    @db_transaction.atomic
    def delete_recurring(self, schedule_id, user):
        deleted, _ = RecurringTransaction.objects.filter(
            pk=schedule_id, user=user
        ).delete()
        return bool(deleted)

    def due_schedules(self, user, today=None):
        """Active schedules due on or before ``today`` that have not ended."""
        today = today or timezone.localdate()
        return (
            RecurringTransaction.objects.filter(
                user=user, is_active=True, next_due_date__lte=today
            )
            .filter(Q(end_date__isnull=True) | Q(end_date__gte=today))
            .select_related("account", "destination_account", "category")
            .order_by("next_due_date")
        )

    @db_transaction.atomic
    def process_due(self, user, today=None):
        """
        Run one processing pass over the user's due schedules.

        Returns:
            dict: ``processed_count``, ``created_count`` and the created
                  ``transactions``
        """
        today = today or timezone.localdate()
        created = []
        processed = 0

        for schedule in self.due_schedules(user, today).select_for_update(of=("self",)):
            due_date = schedule.next_due_date

            if schedule.auto_create:
                transaction = self.transaction_service.create_transaction(
                    {
                        "amount": schedule.amount,
                        "type": schedule.type,
                        "description": schedule.description,
                        "notes": schedule.notes,
                        "date": due_date,
                        "account": schedule.account,
                        "destination_account": schedule.destination_account,
                        "category": schedule.category,
                        "recurring_transaction": schedule,
                    },
                    user,
                )
                created.append(transaction)

            schedule.last_processed_date = due_date
            schedule.next_due_date = self.calculate_next_due_date(schedule, today)
            schedule.save(
                update_fields=["last_processed_date", "next_due_date", "updated_at"]
            )
            processed += 1

            logger.info(
                "Recurring schedule processed",
                extra={
                    "user_id": user.id,
                    "schedule_id": schedule.id,
                    "processed_date": str(due_date),
                    "next_due_date": str(schedule.next_due_date),
                    "auto_created": schedule.auto_create,
                    "action": "recurring_processed",
                    "component": "RecurringTransactionService",
                },
            )

        return {
            "processed_count": processed,
            "created_count": len(created),
            "transactions": created,
        }
