import redis.asyncio as redis
from skolara.config.settings import config_settings

redis_client = redis.Redis.from_url(config_settings.REDIS_URL, decode_responses=False,
                                    socket_timeout=0.5, socket_connect_timeout=0.5)
