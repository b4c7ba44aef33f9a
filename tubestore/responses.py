"""JSON responses and response middleware."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Iterable, Optional

from werkzeug.wrappers import Response

logger = logging.getLogger(__name__)

_CACHE_CONTROL = "max-age=3600"


def _encode(value: Any) -> Any:
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def json_response(payload: Any, status: int) -> Response:
    """Serialise ``payload`` as compact JSON; a payload that cannot be encoded gives 500."""
    try:
        body = json.dumps(payload, default=_encode, separators=(",", ":"))
    except (TypeError, ValueError) as err:
        logger.error("Error marshalling JSON: %s", err)
        return Response(status=500, content_type="application/json")
    return Response(body, status=status, content_type="application/json")


def error_response(status: int, message: str, error: Optional[BaseException]) -> Response:
    """JSON body ``{"error": message}``; the error and any 5XX status are logged."""
    if error is not None:
        logger.error("%s", error)
    if status > 499:
        logger.error("Responding with 5XX error: %s", message)
    return json_response({"error": message}, status)


def cache_middleware(app: Callable) -> Callable:
    """Wrap a WSGI app so that its responses may be cached for an hour."""

    def wrapped(environ: dict, start_response: Callable) -> Iterable[bytes]:
        def cached_start_response(status, headers, exc_info=None):
            headers = [(name, value) for name, value in headers if name.lower() != "cache-control"]
            headers.append(("Cache-Control", _CACHE_CONTROL))
            return start_response(status, headers, exc_info)

        return app(environ, cached_start_response)

    return wrapped