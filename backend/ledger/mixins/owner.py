# ledger/mixins/owner.py
"""
Serializer mixin that assigns the authenticated user as the record owner.
"""

import logging

logger = logging.getLogger(__name__)


class OwnerAssignmentMixin:
    """
    Put ``request.user`` into validated data as ``user``.

    Clients never choose the owner; any submitted value is overwritten.
    """

    def validate(self, attrs):
        attrs = super().validate(attrs)
        request = self.context.get("request")

        if request is not None and request.user.is_authenticated:
            attrs["user"] = request.user
            logger.debug(
                "Owner assignment from request completed",
                extra={
                    "user_id": request.user.id,
                    "serializer": self.__class__.__name__,
                    "action": "owner_assignment",
                    "component": "OwnerAssignmentMixin",
                },
            )

        return attrs
