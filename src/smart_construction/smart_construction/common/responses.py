from __future__ import annotations

from typing import Any

from flask import jsonify

from ..core.exceptions import (
    DomainError,
    ExternalServiceError,
    NotFoundError,
    PartialWriteError,
    ValidationError,
    WriteVerificationError,
)
from .serialization import to_primitive


def ok(data: Any = None, *, message: str = "", status: int = 200):
    body: dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = to_primitive(data)
    return jsonify(body), status


def fail(message: str, status: int = 400, **extra):
    body = {"success": False, "message": message}
    body.update({k: to_primitive(v) for k, v in extra.items()})
    return jsonify(body), status


def domain_error(e: DomainError):
    """Map a business error to a JSON response."""
    if isinstance(e, ValidationError):
        return fail(str(e), 400, issues=e.issues)
    if isinstance(e, NotFoundError):
        return fail(str(e), 404)
    if isinstance(e, WriteVerificationError):
        return fail(str(e), 409, stored=e.stored)
    if isinstance(e, PartialWriteError):
        return fail(str(e), 500, written_id=e.written_id)
    if isinstance(e, ExternalServiceError):
        return fail(str(e), 502, code=e.code)
    return fail(str(e), 400)
