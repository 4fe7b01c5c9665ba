from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone
from django.utils.dateparse import parse_date

from ledger.models import RecurringTransaction
from ledger.services.recurring_service import RecurringTransactionService

User = get_user_model()


class Command(BaseCommand):
    help = "Process due recurring transactions for every user"

    def add_arguments(self, parser):
        parser.add_argument(
            "--date",
            help="Process as of this date (YYYY-MM-DD); defaults to today",
        )
        parser.add_argument(
            "--user",
            help="Only process schedules of this username",
        )

    def handle(self, *args, **options):
        today = timezone.localdate()
        if options.get("date"):
            try:
                today = parse_date(options["date"])
            except ValueError:
                today = None
            if today is None:
                raise CommandError(f"Invalid date: {options['date']}")

        user_ids = RecurringTransaction.objects.filter(
            is_active=True, next_due_date__lte=today
        ).values_list("user_id", flat=True).distinct()
        users = User.objects.filter(pk__in=user_ids)
        if options.get("user"):
            users = users.filter(username=options["user"])

        service = RecurringTransactionService()
        total_processed = 0
        total_created = 0

        for user in users:
            result = service.process_due(user, today=today)
            total_processed += result["processed_count"]
            total_created += result["created_count"]
            self.stdout.write(
                f"{user.username}: processed {result['processed_count']}, "
                f"created {result['created_count']} transactions"
            )

        self.stdout.write(
            self.style.SUCCESS(
                f"Processed {total_processed} schedules, "
                f"created {total_created} transactions as of {today}"
            )
        )
