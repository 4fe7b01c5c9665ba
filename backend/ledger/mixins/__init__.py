# ledger/mixins/__init__.py
from .owner import OwnerAssignmentMixin
from .service_exception_handler import (ConflictAPIException,
                                        ServiceExceptionHandlerMixin)

__all__ = [
    "ConflictAPIException",
    "OwnerAssignmentMixin",
    "ServiceExceptionHandlerMixin",
]
