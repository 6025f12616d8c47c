"""JSON views for registration and sessions."""

import logging

from django.db import DatabaseError
from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt

from server.apps.accounts.logic.identity import (
    login_user,
    logout_user,
    register_user,
)
from server.apps.core.http import allow_methods, json_error, parse_json_body

logger = logging.getLogger(__name__)


@csrf_exempt
@allow_methods('POST')
def register(request: HttpRequest) -> JsonResponse:
    """POST /register: create an account from ``{email, password}``."""
    payload = parse_json_body(request)
    register_user(payload.get('email'), payload.get('password'))
    return JsonResponse({'message': 'User created successfully'}, status=201)


@csrf_exempt
@allow_methods('POST')
def login(request: HttpRequest) -> JsonResponse:
    """POST /login: exchange ``{email, password}`` for a bearer session."""
    payload = parse_json_body(request)
    session = login_user(payload.get('email'), payload.get('password'))
    return JsonResponse({'message': 'Login ok', 'session': session})


@csrf_exempt
@allow_methods('POST')
def logout(request: HttpRequest) -> JsonResponse:
    """POST /logout: revoke the presented bearer token, if any."""
    try:
        logout_user(request.headers.get('Authorization'))
    except DatabaseError:
        logger.exception('Failed to revoke access token')
        return json_error('Could not log out', status=500)
    return JsonResponse({'message': 'Logged out'})
