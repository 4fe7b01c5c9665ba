"""
Service exception handler mixin.

Translates ledger service exceptions into DRF exceptions with structured
logging, so views and serializers stay free of try/except blocks.
"""

import logging

from django.core.exceptions import ObjectDoesNotExist
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status
from rest_framework.exceptions import APIException, NotFound
from rest_framework.exceptions import PermissionDenied as DRFPermissionDenied
from rest_framework.exceptions import ValidationError as DRFValidationError

from ..exceptions import ConflictError

logger = logging.getLogger(__name__)


class ConflictAPIException(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "The request conflicts with existing data."
    default_code = "conflict"


class ServiceExceptionHandlerMixin:
    """
    Mixin for handling service layer exceptions in views and serializers.

    Mapping:
    - Django ValidationError -> 400
    - PermissionError -> 403
    - RecordNotFoundError / ObjectDoesNotExist -> 404
    - ConflictError -> 409
    - anything unexpected -> 500 with the stack trace logged

    Usage:
        account = self.handle_service_call(
            AccountService.create_account, data, user
        )
    """

    def _log_context(self, service_call):
        service_name = getattr(service_call, "__qualname__", "").split(".")[0] or (
            getattr(service_call, "__self__", self).__class__.__name__
        )
        method_name = getattr(service_call, "__name__", str(service_call))
        request = getattr(self, "request", None) or getattr(
            self, "context", {}
        ).get("request")
        user_id = getattr(getattr(request, "user", None), "id", None)
        return {
            "service_name": service_name,
            "method_name": method_name,
            "user_id": user_id,
        }

    def handle_service_call(self, service_call, *args, **kwargs):
        """
        Execute a service call and translate its exceptions.

        Args:
            service_call: Service method to execute
            *args: Positional arguments for service call
            **kwargs: Keyword arguments for service call

        Returns:
            Any: Result from service call
        """
        context = self._log_context(service_call)

        logger.debug(
            "Service call execution initiated",
            extra={
                **context,
                "args_count": len(args),
                "kwargs_keys": list(kwargs.keys()),
                "action": "service_call_start",
                "component": "ServiceExceptionHandlerMixin",
            },
        )

        try:
            return service_call(*args, **kwargs)

        except (DRFValidationError, DRFPermissionDenied, NotFound) as e:
            logger.warning(
                "Service raised DRF exception",
                extra={
                    **context,
                    "error_type": type(e).__name__,
                    "error_detail": e.detail,
                    "action": "service_drf_exception",
                    "component": "ServiceExceptionHandlerMixin",
                    "severity": "medium",
                },
            )
            raise

        except DjangoValidationError as e:
            if hasattr(e, "error_dict"):
                detail = e.message_dict
            else:
                detail = e.messages

            logger.warning(
                "Service validation error (Django)",
                extra={
                    **context,
                    "error_type": "DjangoValidationError",
                    "error_messages": detail,
                    "action": "service_validation_error_django",
                    "component": "ServiceExceptionHandlerMixin",
                    "severity": "medium",
                },
            )
            raise DRFValidationError(detail)

        except ConflictError as e:
            logger.warning(
                "Service conflict",
                extra={
                    **context,
                    "error_type": "ConflictError",
                    "error_message": e.message,
                    "field": e.field,
                    "action": "service_conflict",
                    "component": "ServiceExceptionHandlerMixin",
                    "severity": "low",
                },
            )
            raise ConflictAPIException(detail=e.message)

        except ObjectDoesNotExist as e:
            logger.warning(
                "Service record not found",
                extra={
                    **context,
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                    "action": "service_not_found",
                    "component": "ServiceExceptionHandlerMixin",
                    "severity": "low",
                },
            )
            raise NotFound(str(e) or "Not found.")

        except PermissionError as e:
            logger.warning(
                "Service permission denied (Python)",
                extra={
                    **context,
                    "error_type": "PermissionError",
                    "error_message": str(e),
                    "action": "service_permission_denied_python",
                    "component": "ServiceExceptionHandlerMixin",
                    "severity": "high",
                },
            )
            raise DRFPermissionDenied(str(e))

        except APIException as e:
            logger.error(
                "Service API exception",
                extra={
                    **context,
                    "error_type": "APIException",
                    "error_detail": e.detail,
                    "status_code": e.status_code,
                    "action": "service_api_exception",
                    "component": "ServiceExceptionHandlerMixin",
                    "severity": "high",
                },
            )
            raise

        except Exception as e:
            logger.error(
                "Service operation failed unexpectedly",
                extra={
                    **context,
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                    "args_count": len(args),
                    "kwargs_keys": list(kwargs.keys()),
                    "action": "service_unexpected_error",
                    "component": "ServiceExceptionHandlerMixin",
                    "severity": "critical",
                },
                exc_info=True,
            )
            # Generic message so internals never leak to the client
            raise APIException(detail="Service operation failed", code="service_error")
