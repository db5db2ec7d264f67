"""Response error extraction for load test observability.

Parses Order Desk API error responses into human-readable messages.
Handles three response shapes:

- Pydantic validation (422): {"detail": [{"loc": [...], "msg": "...", "type": "..."}]}
- Missing caller headers (401): {"detail": "Authentication required"}
- Domain errors (400/403/404/409): {"error": "msg", "error_type": "...", "detail": {field: [msg]}}
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def extract_error_detail(response: Response) -> str:
    """Extract a human-readable error message from an API error response.

    Returns a compact string suitable for Locust failure messages and log lines.
    """
    try:
        body = response.json()
    except ValueError:
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    if "detail" in body and isinstance(body["detail"], list):
        parts = []
        for err in body["detail"]:
            loc = ".".join(str(p) for p in err.get("loc", []))
            msg = err.get("msg", str(err))
            parts.append(f"{loc}: {msg}" if loc else msg)
        return " | ".join(parts)

    if isinstance(body.get("detail"), str):
        return f"{response.status_code}: {body['detail']}"

    if "error" in body:
        error_type = body.get("error_type")
        return f"{error_type}: {body['error']}" if error_type else str(body["error"])

    return str(body)[:300]


def error_type(response: Response) -> str | None:
    """The ``error_type`` of a domain error response, or None."""
    try:
        return response.json().get("error_type")
    except (ValueError, AttributeError):
        return None
