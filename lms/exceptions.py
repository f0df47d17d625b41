import logging

from rest_framework import exceptions
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def first_message(detail):
    """Return the first human-readable message inside a DRF error detail."""
    if isinstance(detail, dict):
        for value in detail.values():
            msg = first_message(value)
            if msg:
                return msg
        return None
    if isinstance(detail, (list, tuple)):
        for value in detail:
            msg = first_message(value)
            if msg:
                return msg
        return None
    return str(detail) if detail is not None else None


def envelope_exception_handler(exc, context):
    """Wrap every API error as ``{success: false, message, ...}``."""
    response = exception_handler(exc, context)
    if response is None:
        return None

    detail = getattr(exc, "detail", response.data)
    body = {"success": False, "message": first_message(detail) or "Request failed"}
    if isinstance(exc, exceptions.ValidationError) and isinstance(detail, dict):
        body["errors"] = {k: first_message(v) for k, v in detail.items()}

    view = context.get("view")
    logger.info(
        "%s %s -> %s: %s",
        getattr(context.get("request"), "method", "?"),
        view.__class__.__name__ if view is not None else "?",
        response.status_code,
        body["message"],
    )
    response.data = body
    return response
