import hmac
from typing import Optional
from fastapi import Request, status
from starlette.middleware.base import BaseHTTPMiddleware
from skolara.common.constants import request_id_ctx
from skolara.common.utils import build_error, json_error
from skolara.middlewares.constants import logger

ADMIN_SECRET_HEADER = "X-Admin-Secret"


class AdminGuardMiddleware(BaseHTTPMiddleware):
    """Requires a shared secret header on admin paths when a secret is configured."""

    def __init__(self, app, *, secret: Optional[str], path_prefix: str):
        super().__init__(app)
        self.secret = secret
        self.path_prefix = path_prefix

    async def dispatch(self, request: Request, call_next):
        if not self.secret or not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        provided = request.headers.get(ADMIN_SECRET_HEADER, "")
        if not hmac.compare_digest(provided.encode(), self.secret.encode()):
            logger.warning("admin.guard.rejected", extra={"path": request.url.path,
                                                          "header_present": bool(provided)})
            payload = build_error(code=f"HTTP_{status.HTTP_401_UNAUTHORIZED}",
                                  details={"message": "Admin authentication required"},
                                  request_id=request_id_ctx.get(None))
            return json_error(payload, status_code=status.HTTP_401_UNAUTHORIZED)

        return await call_next(request)
