"""
Domain exceptions raised by the ledger service layer.

Validation failures use Django's ValidationError; the classes below cover the
remaining error kinds so views can map them onto HTTP status codes.
"""

from django.core.exceptions import ObjectDoesNotExist


class ConflictError(Exception):
    """Raised when a write would violate an owner-level uniqueness rule."""

    def __init__(self, message, field=None):
        super().__init__(message)
        self.message = message
        self.field = field


class RecordNotFoundError(ObjectDoesNotExist):
    """Raised when a record does not exist or is not owned by the caller."""

    def __init__(self, model_name, record_id):
        self.model_name = model_name
        self.record_id = record_id
        super().__init__(f"{model_name} not found.")
