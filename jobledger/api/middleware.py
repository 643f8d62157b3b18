import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from jobledger.common.logging import get_logger

logger = get_logger("middleware")


class AuditMiddleware(BaseHTTPMiddleware):
    """Logs every request with its caller profile, status and duration."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - started) * 1000

        # 5xx here means an integrity or store-availability failure
        log = logger.warning if response.status_code >= 500 else logger.info
        log(
            "%s %s -> %d in %.1fms (profile %s)",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            request.headers.get("profile_id", "anonymous"),
        )

        response.headers["X-Request-Duration-Ms"] = f"{duration_ms:.1f}"
        return response
