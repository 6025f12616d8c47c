"""Request logging and exception-to-JSON translation."""

import logging
from collections.abc import Callable
from typing import Final

from django.core.exceptions import (
    BadRequest,
    PermissionDenied,
    SuspiciousOperation,
)
from django.http import Http404, HttpRequest, HttpResponse
from django.http.multipartparser import MultiPartParserError

from server.apps.accounts.exceptions import (
    AuthError,
    RegistrationError,
    UserAlreadyExistsError,
)
from server.apps.core.http import MalformedJSONError, json_error
from server.apps.files.exceptions import (
    FileRecordNotFoundError,
    StoreError,
    UploadValidationError,
)

logger = logging.getLogger(__name__)

_INTERNAL_ERROR_MESSAGE: Final = 'Internal server error'

# Exceptions whose message is safe to show to the client
_CLIENT_ERRORS: Final = (
    (UploadValidationError, 400),
    (RegistrationError, 400),
    (MalformedJSONError, 400),
    (AuthError, 401),
    (FileRecordNotFoundError, 404),
    (UserAlreadyExistsError, 409),
)

# Django's own client errors, answered with a fixed message
_FRAMEWORK_CLIENT_ERRORS: Final = (
    (MultiPartParserError, 400, 'Malformed request body'),
    (BadRequest, 400, 'Bad request'),
    (SuspiciousOperation, 400, 'Bad request'),
    (PermissionDenied, 403, 'Forbidden'),
)


class RequestLoggingMiddleware:
    """Log method, path and status of every request."""

    def __init__(
        self,
        get_response: Callable[[HttpRequest], HttpResponse],
    ) -> None:
        """Initialize the middleware.

        Args:
            get_response: Next handler in the middleware chain.
        """
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        """Handle the request and log the outcome."""
        response = self.get_response(request)
        logger.info(
            '%s %s %d',
            request.method,
            request.get_full_path(),
            response.status_code,
        )
        return response


class ApiErrorMiddleware:
    """Turn exceptions raised by views into ``{"error": ...}`` responses.

    Client errors keep their message, Django's own request errors get
    a fixed one. Everything else becomes a generic 500 and the details
    go to the server log only.
    """

    def __init__(
        self,
        get_response: Callable[[HttpRequest], HttpResponse],
    ) -> None:
        """Initialize the middleware.

        Args:
            get_response: Next handler in the middleware chain.
        """
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        """Pass the request through unchanged."""
        return self.get_response(request)

    def process_exception(
        self,
        request: HttpRequest,
        exception: Exception,
    ) -> HttpResponse:
        """Map an exception to a JSON error response.

        Args:
            request: Request that failed.
            exception: Exception raised by the view.

        Returns:
            JSON error response.
        """
        for exception_class, status in _CLIENT_ERRORS:
            if isinstance(exception, exception_class):
                logger.info(
                    '%s %s rejected (%d): %s',
                    request.method,
                    request.path,
                    status,
                    exception,
                )
                return json_error(str(exception), status=status)

        for exception_class, status, message in _FRAMEWORK_CLIENT_ERRORS:
            if isinstance(exception, exception_class):
                logger.warning(
                    '%s %s rejected (%d): %s',
                    request.method,
                    request.path,
                    status,
                    exception,
                )
                return json_error(message, status=status)

        if isinstance(exception, Http404):
            return json_error('Not found', status=404)

        if isinstance(exception, StoreError):
            logger.error(
                'Store failure on %s %s: %s',
                request.method,
                request.path,
                exception,
            )
        else:
            logger.exception(
                'Unhandled error on %s %s',
                request.method,
                request.path,
            )
        return json_error(_INTERNAL_ERROR_MESSAGE, status=500)
