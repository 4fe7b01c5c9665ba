# permissions.py
import logging

from rest_framework import permissions

logger = logging.getLogger(__name__)


class IsRecordOwner(permissions.BasePermission):
    """
    Object-level ownership check for ledger records.

    Read access is granted to the owner and, for records without an owner
    (system categories), to every authenticated user. Writes require
    ownership, so shared system records stay read-only through the generic
    update/delete endpoints.
    """

    message = "You do not have permission to modify this record."

    def has_object_permission(self, request, view, obj):
        owner_id = getattr(obj, "user_id", None)

        if request.method in permissions.SAFE_METHODS:
            return owner_id is None or owner_id == request.user.id

        if owner_id == request.user.id:
            return True

        logger.warning(
            "Record modification denied - not the owner",
            extra={
                "user_id": request.user.id,
                "record_type": obj.__class__.__name__,
                "record_id": getattr(obj, "pk", None),
                "owner_id": owner_id,
                "http_method": request.method,
                "action": "record_modification_denied",
                "component": "IsRecordOwner",
                "severity": "medium",
            },
        )
        return False


class CanEditSystemCategoryCosmetics(IsRecordOwner):
    """
    Owner rule plus cosmetic edits of system categories.

    PATCH/PUT on a system category is allowed; CategoryService drops every
    field except color, icon and sort order. DELETE stays forbidden.
    """

    def has_object_permission(self, request, view, obj):
        if getattr(obj, "is_system", False) and request.method in ("PUT", "PATCH"):
            return True
        return super().has_object_permission(request, view, obj)
