# utils/errors.py
"""Typed application errors.

Every DAO raises one of these instead of returning flags; the RPC layer maps
``code`` and ``http_status`` onto the JSON error envelope.
"""


class AppError(ValueError):
    code = "INTERNAL_SERVER_ERROR"
    http_status = 500

    def __init__(self, message: str, details=None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        payload = {"code": self.code, "message": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class BadRequest(AppError):
    code = "BAD_REQUEST"
    http_status = 400


class Unauthorized(AppError):
    code = "UNAUTHORIZED"
    http_status = 401


class Forbidden(AppError):
    code = "FORBIDDEN"
    http_status = 403


class NotFound(AppError):
    code = "NOT_FOUND"
    http_status = 404


class Conflict(AppError):
    code = "CONFLICT"
    http_status = 409


class PreconditionFailed(AppError):
    code = "PRECONDITION_FAILED"
    http_status = 412
