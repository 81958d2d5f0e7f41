# This project was developed with assistance from AI tools.
"""PII masking middleware and utilities for statewide read-only roles.

Masks owner identifiers (Aadhaar, mobile number) in JSON response bodies
when the authenticated user's data scope has ``pii_mask=True``.  The
middleware runs after every response so new endpoints get automatic
coverage without per-route masking logic.

The ``request.state.pii_mask`` flag is set by ``get_current_user`` in
``middleware/auth.py``.
"""

import json
import logging
import re
from collections.abc import Callable
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)


def mask_aadhaar(value: str | None) -> str | None:
    """Mask Aadhaar to XXXX-XXXX-1234 format (last 4 visible)."""
    if value is None:
        return None
    digits = re.sub(r"\D", "", value)
    if len(digits) >= 4:
        return f"XXXX-XXXX-{digits[-4:]}"
    return "XXXX-XXXX-XXXX"


def mask_mobile(value: str | None) -> str | None:
    """Mask a mobile number to ******7890 format (last 4 visible)."""
    if value is None:
        return None
    digits = re.sub(r"\D", "", value)
    if len(digits) >= 4:
        return f"{'*' * (len(digits) - 4)}{digits[-4:]}"
    return "**********"


_PII_FIELD_MASKERS: dict[str, Callable[[str | None], str | None]] = {
    "aadhaar": mask_aadhaar,
    "owner_aadhaar": mask_aadhaar,
    "mobile": mask_mobile,
    "owner_mobile": mask_mobile,
}


def _mask_pii_recursive(obj: Any) -> Any:
    """Walk a JSON-compatible structure and mask known PII fields."""
    if isinstance(obj, dict):
        result = {}
        for key, value in obj.items():
            masker = _PII_FIELD_MASKERS.get(key)
            if masker and isinstance(value, str | None):
                result[key] = masker(value)
            else:
                result[key] = _mask_pii_recursive(value)
        return result
    if isinstance(obj, list):
        return [_mask_pii_recursive(item) for item in obj]
    return obj


def mask_application_pii(app_dict: dict) -> dict:
    """Apply PII masking to a serialized application (returns a copy)."""
    return _mask_pii_recursive(app_dict)


class PIIMaskingMiddleware(BaseHTTPMiddleware):
    """Intercept JSON responses and mask PII when ``request.state.pii_mask`` is set."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)

        if not getattr(request.state, "pii_mask", False):
            return response

        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            return response

        body_bytes = b""
        async for chunk in response.body_iterator:
            if isinstance(chunk, str):
                body_bytes += chunk.encode("utf-8")
            else:
                body_bytes += chunk

        try:
            masked = _mask_pii_recursive(json.loads(body_bytes))
            new_body = json.dumps(masked).encode("utf-8")
        except (json.JSONDecodeError, TypeError):
            logger.warning("PII masking skipped: response body is not valid JSON")
            new_body = body_bytes

        headers = dict(response.headers)
        headers.pop("content-length", None)
        return Response(
            content=new_body,
            status_code=response.status_code,
            headers=headers,
            media_type=response.media_type,
        )
