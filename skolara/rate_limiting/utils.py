import time
from fastapi import Request
from skolara.rate_limiting.constants import TRUSTED_PROXY_HOPS, _in_memory_counters, _in_memory_lock


def _identifier_from_request(request: Request):
    """
    Client ip. X-Forwarded-For is only read behind TRUSTED_PROXY_HOPS proxies, and then
    the address appended by the outermost trusted proxy is used, never the client supplied head.
    """
    client_host = request.client.host if request.client else None
    xff = request.headers.get("X-Forwarded-For")
    if TRUSTED_PROXY_HOPS > 0 and xff:
        hops = [hop.strip() for hop in xff.split(",") if hop.strip()]
        if len(hops) >= TRUSTED_PROXY_HOPS:
            client_host = hops[-TRUSTED_PROXY_HOPS]
    return client_host or "unknown", "ip"


async def _in_memory_allow(key: str, limit: int, window: int):
    """
    Per-process fixed-window counter.
    Returns (allowed, remaining, reset_ts).
    """
    async with _in_memory_lock:
        now = int(time.time())
        existing = _in_memory_counters.get(key)
        if not existing or existing["expires_at"] <= now:
            _in_memory_counters[key] = {"count": 1, "expires_at": now + window}
            return True, max(0, limit - 1), now + window

        if existing["count"] >= limit:
            return False, 0, existing["expires_at"]

        existing["count"] += 1
        return True, max(0, limit - existing["count"]), existing["expires_at"]
