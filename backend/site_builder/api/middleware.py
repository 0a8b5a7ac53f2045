import logging
import time
import uuid

from fastapi import FastAPI, Request

logger = logging.getLogger("site_builder.requests")

REQUEST_ID_HEADER = "X-Request-ID"


def register_middleware(app: FastAPI) -> None:
    """Tag every request with an id and log method, path, status and latency."""

    @app.middleware("http")
    async def log_request(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        start = time.perf_counter()
        response = None
        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            duration_ms = int((time.perf_counter() - start) * 1000)
            logger.info(
                "rid=%s method=%s path=%s status=%s dur_ms=%d",
                request_id,
                request.method,
                request.url.path,
                getattr(response, "status_code", "?"),
                duration_ms,
            )
