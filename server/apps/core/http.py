"""JSON request and response helpers for the API views."""

import json
from collections.abc import Callable
from functools import wraps
from typing import Any, Final

from django.http import HttpRequest, HttpResponse, JsonResponse

_NOT_FOUND_MESSAGE: Final = 'Not found'


class MalformedJSONError(Exception):
    """Raised when a request body is not a JSON object (HTTP 400)."""

    def __init__(self) -> None:
        """Initialize MalformedJSONError."""
        super().__init__('Request body must be a JSON object')


def json_error(message: str, status: int) -> JsonResponse:
    """Build an error response in the API's ``{"error": ...}`` shape.

    Args:
        message: Client-safe error description.
        status: HTTP status code.

    Returns:
        JsonResponse carrying the message.
    """
    return JsonResponse({'error': message}, status=status)


def parse_json_body(request: HttpRequest) -> dict[str, Any]:
    """Decode a JSON object request body.

    An empty body decodes to an empty dict so handlers can report
    missing fields themselves.

    Args:
        request: Incoming request.

    Returns:
        Decoded body.

    Raises:
        MalformedJSONError: If the body is not valid JSON or not an object.
    """
    if not request.body:
        return {}

    try:
        payload = json.loads(request.body)
    except (ValueError, UnicodeDecodeError) as error:
        raise MalformedJSONError from error

    if not isinstance(payload, dict):
        raise MalformedJSONError
    return payload


def allow_methods(
    *methods: str,
) -> Callable[[Callable[..., HttpResponse]], Callable[..., HttpResponse]]:
    """Restrict a view to the given HTTP methods with a JSON 405.

    Args:
        methods: Allowed method names in upper case.

    Returns:
        View decorator.
    """
    def decorator(
        view: Callable[..., HttpResponse],
    ) -> Callable[..., HttpResponse]:
        @wraps(view)
        def wrapper(
            request: HttpRequest,
            *args: Any,
            **kwargs: Any,
        ) -> HttpResponse:
            if request.method not in methods:
                response = json_error('Method not allowed', status=405)
                response['Allow'] = ', '.join(methods)
                return response
            return view(request, *args, **kwargs)
        return wrapper
    return decorator


def not_found(request: HttpRequest, exception: Exception) -> JsonResponse:
    """JSON replacement for Django's 404 page."""
    return json_error(_NOT_FOUND_MESSAGE, status=404)


def server_error(request: HttpRequest) -> JsonResponse:
    """JSON replacement for Django's 500 page."""
    return json_error('Internal server error', status=500)
