"""JSON views for the file routes."""

from typing import Final

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt

from server.apps.core.http import allow_methods
from server.apps.files.decorators import AuthenticatedRequest, require_bearer_auth
from server.apps.files.exceptions import FileTooLargeError
from server.apps.files.logic.file_operations import (
    delete_file,
    get_max_upload_size,
    get_multipart_overhead,
    list_files,
    upload_file,
)

_UPLOAD_FIELD: Final = 'file'


def _content_length(request: HttpRequest) -> int:
    try:
        return int(request.META.get('CONTENT_LENGTH') or 0)
    except ValueError:
        return 0


def _check_request_size(request: HttpRequest) -> None:
    """Reject oversized bodies before the multipart parser reads them."""
    max_size = get_max_upload_size()
    body_size = _content_length(request)
    if body_size > max_size + get_multipart_overhead():
        raise FileTooLargeError(body_size, max_size)


@csrf_exempt
@allow_methods('GET')
@require_bearer_auth
def files_list(request: AuthenticatedRequest) -> JsonResponse:
    """GET /files: the caller's file records, newest first."""
    records = list_files(request.client)
    return JsonResponse([record.to_dict() for record in records], safe=False)


@csrf_exempt
@allow_methods('POST')
@require_bearer_auth
def files_upload(request: AuthenticatedRequest) -> JsonResponse:
    """POST /upload: store the multipart ``file`` field."""
    _check_request_size(request)
    result = upload_file(request.client, request.FILES.get(_UPLOAD_FIELD))
    return JsonResponse({'message': 'Upload successful', 'path': result.path})


@csrf_exempt
@allow_methods('DELETE')
@require_bearer_auth
def files_delete(request: AuthenticatedRequest, file_id: str) -> JsonResponse:
    """DELETE /files/<id>: remove one of the caller's files."""
    delete_file(request.client, file_id)
    return JsonResponse({'message': 'File deleted'})
