"""JSON error bodies shared by the API routers."""

from fastapi.responses import JSONResponse

from app.services.time_utils import now_ms

VALIDATION_ERROR = "VALIDATION_ERROR"
INTERNAL_ERROR = "INTERNAL_ERROR"


def error_response(status_code: int, code: str, error: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "code": code,
            "message": message,
            "timestamp": now_ms(),
        },
    )


def validation_error(error: str, message: str) -> JSONResponse:
    return error_response(400, VALIDATION_ERROR, error, message)


def internal_error(error: str) -> JSONResponse:
    return error_response(500, INTERNAL_ERROR, error, "An unexpected error occurred")


def describe_validation_errors(errors) -> str:
    """Flatten pydantic error dicts into ``field: message`` pairs."""
    parts = []
    for err in errors:
        # Drop the "body" / "query" prefix from the location
        loc = [str(part) for part in err.get("loc", ())[1:]]
        field = ".".join(loc) or "request"
        parts.append(f"{field}: {err.get('msg', 'invalid value')}")
    return "; ".join(parts) or "Invalid request"
