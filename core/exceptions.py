import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from grading.exceptions import InvalidInput, NotFound

logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    """Erreurs du moteur -> {"detail": ...} en 404 / 400 ; le reste à DRF."""
    if isinstance(exc, NotFound):
        return Response({"detail": str(exc)}, status=status.HTTP_404_NOT_FOUND)
    if isinstance(exc, InvalidInput):
        logger.info("Rejected request on %s: %s", context.get("view").__class__.__name__, exc)
        return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
    return exception_handler(exc, context)
