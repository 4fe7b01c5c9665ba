from django.core.management.base import BaseCommand

from ledger.services.category_service import CategoryService


class Command(BaseCommand):
    help = "Create the shared system expense and income categories if missing"

    def handle(self, *args, **options):
        created = CategoryService.seed_system_categories()
        if created:
            self.stdout.write(
                self.style.SUCCESS(f"Created {created} system categories")
            )
        else:
            self.stdout.write("System categories already present, nothing to do")
