import time
from typing import Callable, Optional
from fastapi import Depends, HTTPException, Request, status
from skolara.rate_limiting.constants import DEFAULT_LIMIT, DEFAULT_WINDOW, RATE_LIMIT_PREFIX, logger
from skolara.rate_limiting.rate_limit_fixed_window import redis_allow
from skolara.rate_limiting.utils import _identifier_from_request


async def _enforce(request: Request, scope: str, identifier: str, route: str, limit: int, window: int):
    key = f"{RATE_LIMIT_PREFIX}:{scope}:{identifier}:{route}"
    allowed, remaining, reset = await redis_allow(key, limit, window)
    request.state.rate_limit = {"limit": limit, "remaining": remaining, "reset": reset}
    if not allowed:
        retry_after = max(0, reset - int(time.time()))
        logger.warning("rate_limit.exceeded", extra={"scope": scope, "route": route})
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests",
            headers={"Retry-After": str(retry_after)},
        )


def rate_limit_dependency(limit: int = DEFAULT_LIMIT, window: int = DEFAULT_WINDOW, route_key: Optional[str] = None):
    """Fixed window limit per client ip and route."""
    async def _dep(request: Request):
        identifier, scope = _identifier_from_request(request)
        await _enforce(request, scope, identifier, route_key or request.url.path, limit, window)
    return _dep


def keyed_rate_limit_dependency(identifier_dependency: Callable, scope: str, limit: int = DEFAULT_LIMIT,
                                window: int = DEFAULT_WINDOW, route_key: Optional[str] = None):
    """
    Fixed window limit keyed by a value another dependency resolves (e.g. the
    formatted phone number), so rotating client addresses does not reset it.
    """
    async def _dep(request: Request, identifier: str = Depends(identifier_dependency)):
        await _enforce(request, scope, identifier, route_key or request.url.path, limit, window)
    return _dep
