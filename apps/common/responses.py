"""
HTTP translation of household service errors.

Views catch ``HouseholdServiceError`` around service calls and hand it to
``service_error_response``; the status follows the error's root class.
"""

from rest_framework import status
from rest_framework.response import Response

from .exceptions import AdapterError, HouseholdServiceError, NotFoundError, ValidationError


def status_for(error: HouseholdServiceError) -> int:
    if isinstance(error, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(error, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(error, AdapterError):
        return status.HTTP_503_SERVICE_UNAVAILABLE
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def service_error_response(error: HouseholdServiceError) -> Response:
    return Response({'error': str(error)}, status=status_for(error))
