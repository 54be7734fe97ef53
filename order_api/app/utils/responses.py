from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from ..schemas import ErrorResponse


def err(
    status: int,
    error: str,
    message: str,
    path: str,
    details: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """Return an error envelope; ``details`` is omitted when empty."""
    body = ErrorResponse(
        timestamp=datetime.now(timezone.utc),
        status=status,
        error=error,
        message=message,
        path=path,
        details=details or None,
    )
    return jsonable_encoder(body, exclude_none=True)


def error_response(
    status: int,
    error: str,
    message: str,
    path: str,
    details: Optional[List[str]] = None,
) -> JSONResponse:
    """Return a :class:`JSONResponse` carrying the error envelope."""
    return JSONResponse(err(status, error, message, path, details), status_code=status)
