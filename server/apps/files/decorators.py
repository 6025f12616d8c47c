"""Authentication step of the file routes' request pipeline."""

import logging
from collections.abc import Callable
from functools import wraps
from typing import Any

from django.http import HttpRequest, HttpResponse

from server.apps.accounts.logic.identity import Identity, verify_token
from server.apps.files.infrastructure.clients import ScopedClient, scope_client

logger = logging.getLogger(__name__)


class AuthenticatedRequest(HttpRequest):
    """Request that passed require_bearer_auth."""

    identity: Identity
    client: ScopedClient


def require_bearer_auth(
    view: Callable[..., HttpResponse],
) -> Callable[..., HttpResponse]:
    """Verify the bearer token and attach a scoped client to the request.

    The view gets ``request.identity`` and ``request.client``; the
    client is the only data access the view is given. Auth failures
    propagate as AuthError and are rendered as 401 by the middleware.

    Args:
        view: View to protect.

    Returns:
        Wrapped view.
    """
    @wraps(view)
    def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> HttpResponse:
        identity = verify_token(request.headers.get('Authorization'))
        request.identity = identity  # type: ignore[attr-defined]
        request.client = scope_client(identity)  # type: ignore[attr-defined]
        logger.debug('Request authenticated for user %d', identity.user_id)
        return view(request, *args, **kwargs)
    return wrapper
