# ledger/tests/unit/test_service_exception_handler.py
from unittest.mock import Mock, patch

import pytest
from django.core.exceptions import ObjectDoesNotExist
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework.exceptions import APIException, NotFound
from rest_framework.exceptions import PermissionDenied as DRFPermissionDenied
from rest_framework.exceptions import ValidationError as DRFValidationError

from ledger.exceptions import ConflictError, RecordNotFoundError
from ledger.mixins.service_exception_handler import (
    ConflictAPIException, ServiceExceptionHandlerMixin)


class MockService:
    """Simulates the exception kinds raised by ledger services."""

    def method_success(self, value=None):
        return value or "success"

    def method_drf_validation_error(self):
        raise DRFValidationError("DRF validation error")

    def method_django_validation_error(self):
        raise DjangoValidationError("Django validation error")

    def method_django_field_error(self):
        raise DjangoValidationError({"amount": "Amount must be positive"})

    def method_conflict(self):
        raise ConflictError("Duplicate name", field="name")

    def method_not_found(self):
        raise RecordNotFoundError("Account", 7)

    def method_does_not_exist(self):
        raise ObjectDoesNotExist()

    def method_python_permission_error(self):
        raise PermissionError("Python permission error")

    def method_api_exception(self):
        raise APIException("API exception")

    def method_generic_exception(self):
        raise Exception("Generic service error")


class TestServiceExceptionHandlerMixin:
    def setup_method(self, method):
        self.mixin_instance = ServiceExceptionHandlerMixin()
        self.mixin_instance.request = Mock()
        self.mixin_instance.request.user = Mock(id=1)
        self.mock_service = MockService()

    @patch("ledger.mixins.service_exception_handler.logger")
    def test_success_passes_arguments(self, mock_logger):
        result = self.mixin_instance.handle_service_call(
            self.mock_service.method_success, value="done"
        )

        assert result == "done"
        extra = mock_logger.debug.call_args[1]["extra"]
        assert extra["method_name"] == "method_success"
        assert extra["user_id"] == 1

    @patch("ledger.mixins.service_exception_handler.logger")
    def test_drf_validation_error_reraised(self, mock_logger):
        with pytest.raises(DRFValidationError):
            self.mixin_instance.handle_service_call(
                self.mock_service.method_drf_validation_error
            )
        mock_logger.warning.assert_called_once()

    @patch("ledger.mixins.service_exception_handler.logger")
    def test_django_validation_error_converted(self, mock_logger):
        with pytest.raises(DRFValidationError) as exc_info:
            self.mixin_instance.handle_service_call(
                self.mock_service.method_django_validation_error
            )
        assert exc_info.value.detail == ["Django validation error"]

    @patch("ledger.mixins.service_exception_handler.logger")
    def test_django_field_error_keeps_fields(self, mock_logger):
        with pytest.raises(DRFValidationError) as exc_info:
            self.mixin_instance.handle_service_call(
                self.mock_service.method_django_field_error
            )
        assert exc_info.value.detail == {"amount": ["Amount must be positive"]}

    @patch("ledger.mixins.service_exception_handler.logger")
    def test_conflict_maps_to_409(self, mock_logger):
        with pytest.raises(ConflictAPIException) as exc_info:
            self.mixin_instance.handle_service_call(self.mock_service.method_conflict)

        assert exc_info.value.status_code == 409
        assert str(exc_info.value.detail) == "Duplicate name"

    @patch("ledger.mixins.service_exception_handler.logger")
    def test_record_not_found_maps_to_404(self, mock_logger):
        with pytest.raises(NotFound) as exc_info:
            self.mixin_instance.handle_service_call(self.mock_service.method_not_found)

        assert str(exc_info.value.detail) == "Account not found."

    @patch("ledger.mixins.service_exception_handler.logger")
    def test_plain_does_not_exist_maps_to_404(self, mock_logger):
        with pytest.raises(NotFound):
            self.mixin_instance.handle_service_call(
                self.mock_service.method_does_not_exist
            )

    @patch("ledger.mixins.service_exception_handler.logger")
    def test_python_permission_error_converted(self, mock_logger):
        with pytest.raises(DRFPermissionDenied):
            self.mixin_instance.handle_service_call(
                self.mock_service.method_python_permission_error
            )

    @patch("ledger.mixins.service_exception_handler.logger")
    def test_api_exception_reraised(self, mock_logger):
        with pytest.raises(APIException):
            self.mixin_instance.handle_service_call(self.mock_service.method_api_exception)
        mock_logger.error.assert_called_once()

    @patch("ledger.mixins.service_exception_handler.logger")
    def test_generic_exception_hidden(self, mock_logger):
        with pytest.raises(APIException) as exc_info:
            self.mixin_instance.handle_service_call(
                self.mock_service.method_generic_exception
            )

        assert str(exc_info.value.detail) == "Service operation failed"
        assert mock_logger.error.call_args[1]["exc_info"] is True

    @patch("ledger.mixins.service_exception_handler.logger")
    def test_request_taken_from_serializer_context(self, mock_logger):
        handler = ServiceExceptionHandlerMixin()
        handler.context = {"request": Mock(user=Mock(id=42))}

        handler.handle_service_call(self.mock_service.method_success)

        assert mock_logger.debug.call_args[1]["extra"]["user_id"] == 42
