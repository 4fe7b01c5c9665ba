#!/usr/bin/env python
"""
Command-line entry point for the finance tracker backend.

Defaults to the development settings; set DJANGO_SETTINGS_MODULE to run
against production or test settings.
"""

import os
import sys


def main():
    """Run Django management commands such as migrate or process_recurring."""
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "tracker.settings.dev")

    try:
        from django.core.management import execute_from_command_line
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Are you sure it's installed and "
            "available on your PYTHONPATH environment variable? Did you "
            "forget to activate a virtual environment?"
        ) from exc

    execute_from_command_line(sys.argv)


if __name__ == "__main__":
    main()
