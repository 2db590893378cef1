"""Response error extraction for load test observability.

Parses FreshDrop API error responses into human-readable messages.
Handles two response shapes:

- Pydantic validation (422): {"detail": [{"loc": [...], "msg": "...", "type": "..."}]}
- Domain errors (400/404): {"error": "msg"} or {"error": {"code": ["Reason"], "field": ["msg"]}}
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def _flatten(value) -> str:
    if isinstance(value, list):
        return "; ".join(str(v) for v in value)
    return str(value)


def extract_error_detail(response: Response) -> str:
    """Compact error message for Locust failure messages and log lines."""
    try:
        body = response.json()
    except Exception:
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    if "detail" in body and isinstance(body["detail"], list):
        parts = []
        for err in body["detail"]:
            loc = ".".join(str(p) for p in err.get("loc", []))
            msg = err.get("msg", str(err))
            parts.append(f"{loc}: {msg}" if loc else msg)
        return " | ".join(parts)

    if "error" in body:
        error = body["error"]
        if isinstance(error, dict):
            # Lead with the reason code so failures group by cause
            code = _flatten(error.get("code", ""))
            rest = " | ".join(f"{k}: {_flatten(v)}" for k, v in error.items() if k != "code")
            return f"[{code}] {rest}" if code else rest
        return str(error)

    if "detail" in body:
        return str(body["detail"])
    return str(body)[:300]


def reason_code(response: Response) -> str | None:
    """The domain reason code of an error response, if it carries one."""
    try:
        error = response.json().get("error")
    except Exception:
        return None
    if isinstance(error, dict) and error.get("code"):
        return _flatten(error["code"])
    return None
