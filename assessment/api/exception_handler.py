"""
DRF Exception Handler

Renders every ``AssessmentException`` as

    {"success": false, "error": {"kind": ..., "message": ..., "details": {...}}}

with the HTTP status derived from its ``ErrorKind``. All other exceptions are
handed to DRF's default handler.

Author: DSP Development Team
Version: 1.0.0
"""

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from ..exceptions import AssessmentException, ErrorKind

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.NOT_PUBLISHED: status.HTTP_403_FORBIDDEN,
    ErrorKind.OUT_OF_TIME_WINDOW: status.HTTP_403_FORBIDDEN,
    ErrorKind.ATTEMPT_LIMIT_REACHED: status.HTTP_409_CONFLICT,
    ErrorKind.INSUFFICIENT_QUESTIONS: status.HTTP_409_CONFLICT,
    ErrorKind.INVALID_STATE: status.HTTP_409_CONFLICT,
    ErrorKind.ANSWER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.ATTEMPT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.NOT_GRADABLE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.OUT_OF_RANGE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_CONFIGURATION: status.HTTP_422_UNPROCESSABLE_ENTITY,
}


def assessment_exception_handler(exc, context):
    if isinstance(exc, AssessmentException):
        status_code = STATUS_BY_KIND.get(exc.kind, status.HTTP_400_BAD_REQUEST)
        logger.info(f"{exc.kind.value}: {exc.message}")
        return Response({"success": False, "error": exc.to_dict()}, status=status_code)
    return exception_handler(exc, context)
