import time
import weakref
from redis.exceptions import RedisError
from skolara.cache._cache import redis_client
from skolara.rate_limiting.constants import FAIL_OPEN, USE_IN_MEMORY_FALLBACK, USE_REDIS, logger
from skolara.rate_limiting.lua_scripts import LUA_FIXED_WINDOW_INCR_AND_PEXPIRE
from skolara.rate_limiting.utils import _in_memory_allow

_scripts = weakref.WeakKeyDictionary()


def _fixed_window_script(client):
    # register_script caches the sha and falls back to EVAL on NOSCRIPT
    script = _scripts.get(client)
    if script is None:
        script = client.register_script(LUA_FIXED_WINDOW_INCR_AND_PEXPIRE)
        _scripts[client] = script
    return script


async def redis_allow(key: str, limit: int, window: int, client=None):
    """
    Returns (allowed: bool, remaining: int, reset_ts: int)
    """
    if not USE_REDIS and client is None:
        return await _in_memory_allow(key, limit, window)

    rc = client or redis_client
    pexpire_ms = int(window * 1000)

    try:
        res = await _fixed_window_script(rc)(keys=[key], args=[pexpire_ms])
    except (RedisError, OSError) as e:
        logger.warning("rate_limit.redis_unavailable", extra={"key": key, "error": str(e)})
        if USE_IN_MEMORY_FALLBACK:
            return await _in_memory_allow(key, limit, window)
        now = int(time.time())
        if FAIL_OPEN:
            return True, max(0, limit - 1), now + window
        return False, 0, now + window

    now = int(time.time())
    if not res or len(res) < 2:
        return True, max(0, limit - 1), now + window

    count = int(res[0])
    ttl_ms = int(res[1])
    reset_ts = now + (ttl_ms // 1000) if ttl_ms > 0 else now + window
    allowed = count <= limit
    remaining = max(0, limit - count) if allowed else 0
    return allowed, remaining, reset_ts
