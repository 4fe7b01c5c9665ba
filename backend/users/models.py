"""
User model for the finance tracker.

The ledger only needs an owning-user identity; authentication flows live
outside this project.
"""

from django.contrib.auth.models import AbstractUser
from django.db import models


class CustomUser(AbstractUser):
    """
    Custom user model extending Django's AbstractUser.

    Every ledger record is owned by exactly one user and is removed together
    with it.
    """

    # Email field - unique and required for all users
    email = models.EmailField(
        unique=True,
        blank=False,
        help_text="User's unique email address, required for all accounts",
    )

    def __str__(self):
        """String representation of the user model."""
        return self.username or f"User {self.id} ({self.email})"
