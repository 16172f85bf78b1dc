# utils/rpc.py
"""JSON procedure plumbing shared by the ``/api`` blueprints.

A procedure is a POST endpoint whose body is validated by a pydantic model
and whose return value is dumped through an output model into the
``{"ok": true, "data": ...}`` envelope. Errors are rendered by the handlers
installed with :func:`register_error_handlers`.
"""
import logging
from functools import wraps

from flask import jsonify, request
from flask_login import current_user
from pydantic import ValidationError
from pydantic_core import to_jsonable_python
from werkzeug.exceptions import HTTPException

from configs import db
from utils.errors import AppError, Unauthorized

logger = logging.getLogger(__name__)

HTTP_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    412: "PRECONDITION_FAILED",
    415: "BAD_REQUEST",
}


def ok(data=None, status: int = 200):
    return jsonify({"ok": True, "data": data}), status


def fail(code: str, message: str, status: int, details=None):
    body = {"ok": False, "error": {"code": code, "message": message, "details": details}}
    return jsonify(body), status


def _is_page(result) -> bool:
    return isinstance(result, dict) and "items" in result and "total_pages" in result


def dump(result, out=None):
    """Serialize a DAO result through ``out`` (pages and lists item by item)."""
    if result is None:
        return None
    if out is None:
        return to_jsonable_python(result)
    if _is_page(result):
        page = {k: v for k, v in result.items() if k != "items"}
        page["items"] = [dump(r, out) for r in result["items"]]
        return page
    if isinstance(result, (list, tuple)):
        return [dump(r, out) for r in result]
    return out.model_validate(result, from_attributes=True).model_dump(mode="json")


def procedure(schema=None, out=None):
    """Login-protected JSON procedure.

    The view receives the validated ``schema`` instance (when given) and
    returns a model, a list, a page dict or a plain value.
    """

    def deco(fn):
        @wraps(fn)
        def inner(*a, **kw):
            if not current_user.is_authenticated:
                raise Unauthorized("Authentication required")
            if schema is not None:
                data = schema.model_validate(request.get_json(silent=True) or {})
                result = fn(data, *a, **kw)
            else:
                result = fn(*a, **kw)
            return ok(dump(result, out))

        return inner

    return deco


def _wants_json() -> bool:
    return request.path.startswith(("/api", "/auth"))


def register_error_handlers(app):
    @app.errorhandler(AppError)
    def handle_app_error(exc: AppError):
        if exc.http_status >= 500:
            logger.error("%s %s: %s", request.path, exc.code, exc.message)
        else:
            logger.warning("%s %s: %s", request.path, exc.code, exc.message)
        return fail(exc.code, exc.message, exc.http_status, exc.details)

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        details = to_jsonable_python(exc.errors(include_url=False, include_context=False))
        first = details[0] if details else {}
        where = ".".join(str(p) for p in first.get("loc", ()))
        message = f"{where}: {first.get('msg')}" if where else str(first.get("msg", "Invalid request"))
        logger.warning("%s BAD_REQUEST: %s", request.path, message)
        return fail("BAD_REQUEST", message, 400, details)

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        if not _wants_json():
            return exc
        code = HTTP_CODES.get(exc.code, "INTERNAL_SERVER_ERROR")
        return fail(code, exc.description or exc.name, exc.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        db.session.rollback()
        logger.exception("Unhandled error on %s", request.path)
        return fail("INTERNAL_SERVER_ERROR", "Internal server error", 500)
