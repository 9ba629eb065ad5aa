import logging

from django.db import DatabaseError, connection
from django.http import JsonResponse

logger = logging.getLogger(__name__)


def health_check(request):
    """Liveness probe that also checks the database backing the document store."""
    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
    except DatabaseError as e:
        logger.error("Health check failed: %s", e)
        return JsonResponse({'status': 'unavailable', 'database': 'error'}, status=503)

    return JsonResponse({'status': 'ok', 'database': 'ok'})


def error_404(request, exception):
    """Custom 404 handler."""
    return JsonResponse({
        'error': 'Not found',
        'status': 404
    }, status=404)


def error_500(request):
    """Custom 500 handler."""
    return JsonResponse({
        'error': 'Internal server error',
        'status': 500
    }, status=500)
