"""Request logging middleware for the TLD config API."""

import json
import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("tldconfig.requests")

MAX_DETAIL = 500


def summarize_error_body(body: bytes) -> str:
    """Render an error body as ``<kind>: <detail>`` when it is one of ours.

    Anything else (validation errors from FastAPI, plain text) is returned
    as-is, trimmed to MAX_DETAIL characters.
    """
    text = body.decode("utf-8", errors="replace")
    try:
        data = json.loads(text)
    except ValueError:
        data = None
    if isinstance(data, dict) and "error" in data:
        text = f"{data['error']}: {data.get('detail', '')}"
    if len(text) > MAX_DETAIL:
        text = text[:MAX_DETAIL] + "..."
    return text


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with method, path, status, and duration.

    Failed requests also log the error kind and message so rejected TLD
    mutations are visible in the server log.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start = time.monotonic()
        response = await call_next(request)
        duration_ms = (time.monotonic() - start) * 1000

        status = response.status_code
        target = request.url.path
        if request.url.query:
            target = f"{target}?{request.url.query}"
        line = f"{request.method} {target} -> {status} ({duration_ms:.0f}ms)"

        if status < 400 or not hasattr(response, "body_iterator"):
            logger.info(line)
            return response

        # The body has to be consumed to log it, so rebuild the response.
        body = b""
        async for chunk in response.body_iterator:
            body += chunk.encode("utf-8") if isinstance(chunk, str) else chunk

        log = logger.warning if status < 500 else logger.error
        log(f"{line}: {summarize_error_body(body)}")

        return Response(
            content=body,
            status_code=status,
            headers=dict(response.headers),
            media_type=response.media_type,
        )
