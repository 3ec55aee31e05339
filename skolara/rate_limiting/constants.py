import asyncio
from skolara.common.logging_setup import get_logger
from skolara.config.settings import config_settings

logger = get_logger("skolara.rate_limiting")

DEFAULT_LIMIT = 20         # requests
DEFAULT_WINDOW = 60         # seconds
RATE_LIMIT_PREFIX = "rl"    # redis key prefix
USE_REDIS = config_settings.RATE_LIMIT_USE_REDIS
TRUSTED_PROXY_HOPS = config_settings.TRUSTED_PROXY_HOPS
FAIL_OPEN = True                  # when neither redis nor the local counter works, allow the request
USE_IN_MEMORY_FALLBACK = True     # per-process counter while redis is down, not distributed

_in_memory_counters = {}
_in_memory_lock = asyncio.Lock()
