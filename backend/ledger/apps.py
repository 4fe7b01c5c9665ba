import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class LedgerConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "ledger"

    def ready(self):
        """Import signals so their receivers are connected."""
        import ledger.signals  # noqa: F401

        logger.debug("Ledger signals imported.")
