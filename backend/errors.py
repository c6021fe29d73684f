"""
Error taxonomy shared by the stores and the HTTP layer.

Stores raise these; ``backend.main`` registers one handler that turns them
into ``{"message": ...}`` responses with the matching status code.
"""
from typing import Any, Dict, Iterable, List


class AcadriveError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message}


class BadRequest(AcadriveError):
    status_code = 400


class ValidationFailed(BadRequest):
    """Carries every field violation, not just the first one."""

    def __init__(self, errors: List[Dict[str, str]], message: str = "Validation failed"):
        super().__init__(message)
        self.errors = errors

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "errors": self.errors}


class Unauthorized(AcadriveError):
    status_code = 401


class NotFound(AcadriveError):
    status_code = 404


class Conflict(AcadriveError):
    status_code = 409


class PayloadTooLarge(AcadriveError):
    status_code = 413


def field_errors(errors: Iterable[Dict[str, Any]]) -> List[Dict[str, str]]:
    """Flatten pydantic error dicts into ``[{"field": ..., "message": ...}]``.

    The leading location part FastAPI adds (``body``, ``query``, ``path``,
    ``form``) is dropped so the field path matches the submitted payload.
    """
    formatted = []
    for err in errors:
        loc = list(err.get("loc", ()))
        if loc and loc[0] in ("body", "query", "path", "form", "header"):
            loc = loc[1:]
        formatted.append({
            "field": ".".join(str(part) for part in loc),
            "message": err.get("msg", "Invalid value"),
        })
    return formatted
