# seasonbudget/observability.py
import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware

from seasonbudget.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging() -> None:
    """Set up root logging once, at the level from settings."""
    level = get_settings().log_level.upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("sb").setLevel(level)


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        ms = (time.perf_counter() - start) * 1000
        logging.getLogger("sb.req").info(
            "%s %s -> %s in %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            ms,
        )
        return response
