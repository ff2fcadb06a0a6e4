from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from common.exceptions import (
    AuthorizationError,
    ConflictError,
    DispatchError,
    NotFoundError,
    ValidationError,
)

STATUS_BY_ERROR = [
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (AuthorizationError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
]


def dispatch_exception_handler(exc, context):
    """
    Map dispatch errors to HTTP responses; everything else goes to DRF's default handler.
    Conflicts are flagged retryable: the client should refresh its list and pick again.
    """
    if isinstance(exc, DispatchError):
        for error_cls, http_status in STATUS_BY_ERROR:
            if isinstance(exc, error_cls):
                body = {"error": exc.message}
                if error_cls is ConflictError:
                    body["retry"] = True
                return Response(body, status=http_status)

    return exception_handler(exc, context)
