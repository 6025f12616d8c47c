"""Identity provider operations: register, login, logout, verify.

The verifier turns an ``Authorization`` header into an ``Identity``.
The identity keeps the raw token so a scoped data client can be
built from it for the rest of the request.
"""

import logging
from typing import TYPE_CHECKING, Any, Final, NamedTuple

from django.contrib.auth import authenticate, get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import IntegrityError, transaction

from server.apps.accounts.exceptions import (
    InvalidCredentialsError,
    InvalidTokenError,
    MissingTokenError,
    RegistrationError,
    UserAlreadyExistsError,
)
from server.apps.accounts.logic.tokens import (
    get_active_token,
    get_token_ttl,
    issue_token,
    revoke_token,
)

if TYPE_CHECKING:
    from django.contrib.auth.models import User

logger = logging.getLogger(__name__)

_BEARER_SCHEME: Final = 'bearer'


class Identity(NamedTuple):
    """Verified caller of a request."""

    user_id: int
    email: str
    token: str


def extract_bearer_token(authorization_header: str | None) -> str | None:
    """Pull the token out of an ``Authorization: Bearer <token>`` value.

    Args:
        authorization_header: Raw header value, possibly None.

    Returns:
        The token, or None when the header is absent or malformed.
    """
    if not authorization_header:
        return None

    parts = authorization_header.split()
    if len(parts) != 2 or parts[0].lower() != _BEARER_SCHEME:
        return None
    return parts[1]


def verify_token(authorization_header: str | None) -> Identity:
    """Validate a bearer credential and resolve the caller.

    Args:
        authorization_header: Raw ``Authorization`` header value.

    Returns:
        Identity of the token owner.

    Raises:
        MissingTokenError: If no token is present.
        InvalidTokenError: If the token is unknown, expired, or its
            user is inactive.
    """
    raw_token = extract_bearer_token(authorization_header)
    if raw_token is None:
        raise MissingTokenError

    access_token = get_active_token(raw_token)
    if access_token is None:
        logger.warning('Rejected unknown or expired bearer token')
        raise InvalidTokenError

    user = access_token.user
    if not user.is_active:
        logger.warning('Inactive user presented a token: %s', user.username)
        raise InvalidTokenError

    return Identity(user_id=user.id, email=user.email, token=raw_token)


def register_user(email: Any, password: Any) -> 'User':
    """Create a user account identified by email.

    Args:
        email: Email address from the request body.
        password: Plain password from the request body.

    Returns:
        Created user.

    Raises:
        RegistrationError: If fields are missing or fail validation.
        UserAlreadyExistsError: If the email is already registered.
    """
    if not email or not password:
        raise RegistrationError('Email and password required')
    if not isinstance(email, str) or not isinstance(password, str):
        raise RegistrationError('Email and password must be strings')

    email = email.strip().lower()
    try:
        validate_email(email)
        validate_password(password)
    except ValidationError as error:
        raise RegistrationError(' '.join(error.messages)) from error

    user_model = get_user_model()
    if user_model.objects.filter(username=email).exists():
        raise UserAlreadyExistsError(email)

    try:
        with transaction.atomic():
            user = user_model.objects.create_user(
                username=email,
                email=email,
                password=password,
            )
    except IntegrityError as error:
        # Lost a race with a concurrent registration
        raise UserAlreadyExistsError(email) from error

    logger.info('User registered: %s (ID: %d)', email, user.id)
    return user


def login_user(email: Any, password: Any) -> dict[str, Any]:
    """Check credentials and open a session.

    Args:
        email: Email address from the request body.
        password: Plain password from the request body.

    Returns:
        Session payload with the bearer token and user summary.

    Raises:
        RegistrationError: If fields are missing.
        InvalidCredentialsError: If the credentials do not match.
    """
    if not email or not password:
        raise RegistrationError('Missing credentials')
    if not isinstance(email, str) or not isinstance(password, str):
        raise InvalidCredentialsError

    username = email.strip().lower()
    user = authenticate(username=username, password=password)
    if user is None:
        logger.warning('Login failed for: %s', username)
        raise InvalidCredentialsError

    raw_token, access_token = issue_token(user)
    logger.info('User logged in: %s', username)

    return {
        'access_token': raw_token,
        'token_type': _BEARER_SCHEME,
        'expires_in': get_token_ttl(),
        'expires_at': int(access_token.expires_at.timestamp()),
        'user': {
            'id': user.id,
            'email': user.email,
        },
    }


def logout_user(authorization_header: str | None) -> bool:
    """End the session behind the presented bearer token, if any.

    Args:
        authorization_header: Raw ``Authorization`` header value.

    Returns:
        True if a token was revoked, False if there was nothing to revoke.
    """
    raw_token = extract_bearer_token(authorization_header)
    if raw_token is None:
        return False
    return revoke_token(raw_token)
