import logging
from django.db import DatabaseError
from rest_framework import exceptions, status
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class NotFoundError(exceptions.NotFound):
    default_detail = "Requested record was not found"
    default_code = "not_found"


class ValidationError(exceptions.ValidationError):
    default_code = "invalid"


class InvalidTransition(exceptions.APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Status transition is not allowed"
    default_code = "invalid_transition"


class PersistenceError(exceptions.APIException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "The record could not be saved; please resubmit"
    default_code = "persistence_error"


def api_exception_handler(exc, context):
    if isinstance(exc, DatabaseError):
        view = context.get("view")
        logger.exception("Database failure in %s", view.__class__.__name__ if view else "unknown view")
        exc = PersistenceError()
    elif isinstance(exc, InvalidTransition):
        logger.warning("Rejected transition: %s", exc.detail)

    return exception_handler(exc, context)
