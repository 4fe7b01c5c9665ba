"""
Explicit formatting configuration for human-readable ledger output.

Presentation code receives a FormattingConfig instead of reading a
process-wide locale, so two users with different preferences can be served
by the same worker.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
}

DATE_FORMAT_PATTERNS = {
    "MMM DD, YYYY": "%b %d, %Y",
    "DD.MM.YYYY": "%d.%m.%Y",
    "MM/DD/YYYY": "%m/%d/%Y",
    "YYYY-MM-DD": "%Y-%m-%d",
}

CENTS = Decimal("0.01")


@dataclass(frozen=True)
class FormattingConfig:
    """Currency and date rendering preferences."""

    currency_code: str = "USD"
    date_pattern: str = "%b %d, %Y"
    month_pattern: str = "%B %Y"
    short_month_pattern: str = "%b %Y"

    @property
    def currency_symbol(self):
        return CURRENCY_SYMBOLS.get(self.currency_code, f"{self.currency_code} ")

    @classmethod
    def from_user_settings(cls, user_settings):
        """Build a config from a UserSettings row (or the defaults when None)."""
        if user_settings is None:
            return cls()
        return cls(
            currency_code=user_settings.preferred_currency,
            date_pattern=DATE_FORMAT_PATTERNS.get(
                user_settings.date_format, cls.date_pattern
            ),
        )


def format_currency(amount, config):
    """
    Render an amount with the configured currency symbol and two decimals.

    Negative values carry a leading minus: ``-$1,234.50``.
    """
    value = Decimal(amount).quantize(CENTS, rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    return f"{sign}{config.currency_symbol}{abs(value):,.2f}"


def format_date(value, config):
    return value.strftime(config.date_pattern)


def format_month(value, config, short=False):
    pattern = config.short_month_pattern if short else config.month_pattern
    return value.strftime(pattern)


def round_percentage(value, places=1):
    """Round a percentage half-up to ``places`` decimals."""
    quantum = Decimal(1).scaleb(-places)
    return Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP)
