import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from .friendly_msg import get_friendly_message

logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            logger.exception("Unhandled server error on %s", request.url.path)
            return JSONResponse(
                status_code=500,
                content={
                    "success": False,
                    "error": get_friendly_message(e),
                    "code": "INTERNAL_ERROR",
                    "details": {},
                },
            )
