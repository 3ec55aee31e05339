import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from starlette.requests import Request
from skolara.rate_limiting import utils as rl_utils
from skolara.rate_limiting.constants import _in_memory_counters
from skolara.rate_limiting.rate_limit_fixed_window import redis_allow
from skolara.rate_limiting.utils import _in_memory_allow
from tests.utils import url_prefix


class ScriptedRedis:
    """Just enough of redis.asyncio.Redis for the fixed window script."""

    def __init__(self, responses=None, error=None):
        self.responses = list(responses or [])
        self.error = error
        self.calls = []

    def register_script(self, script):
        async def run(keys=None, args=None):
            self.calls.append((keys, args))
            if self.error:
                raise self.error
            return self.responses.pop(0)
        return run


async def test_send_otp_is_rate_limited(ac_client):
    for _ in range(5):
        resp = await ac_client.post(f"{url_prefix}/auth/send-otp", json={"phone_number": "+14155550100"})
        assert resp.status_code == 200

    resp = await ac_client.post(f"{url_prefix}/auth/send-otp", json={"phone_number": "+14155550100"})
    assert resp.status_code == 429
    assert resp.json()["error"]["code"] == "HTTP_429"
    assert 0 <= int(resp.headers["Retry-After"]) <= 60


async def test_rate_limit_is_per_route(ac_client):
    for _ in range(5):
        await ac_client.post(f"{url_prefix}/auth/send-otp", json={"phone_number": "+14155550100"})

    resp = await ac_client.post(f"{url_prefix}/auth/verify-otp", json={"phone_number": "+14155550100", "otp": "1"})
    assert resp.status_code != 429


async def test_rotating_forwarded_for_does_not_reset_limit(ac_client):
    codes = []
    for i in range(8):
        resp = await ac_client.post(f"{url_prefix}/auth/send-otp", json={"phone_number": "+14155550100"},
                                    headers={"X-Forwarded-For": f"10.0.0.{i}"})
        codes.append(resp.status_code)
    assert codes == [200] * 5 + [429] * 3


async def test_send_otp_is_limited_per_phone_across_clients(ac_client, monkeypatch):
    monkeypatch.setattr(rl_utils, "TRUSTED_PROXY_HOPS", 1)
    for i in range(5):
        resp = await ac_client.post(f"{url_prefix}/auth/send-otp", json={"phone_number": "+14155550100"},
                                    headers={"X-Forwarded-For": f"198.51.100.{i}"})
        assert resp.status_code == 200

    resp = await ac_client.post(f"{url_prefix}/auth/send-otp", json={"phone_number": "(415) 555-0100"},
                                headers={"X-Forwarded-For": "198.51.100.99"})
    assert resp.status_code == 429


async def test_rate_limit_is_per_client_behind_trusted_proxy(ac_client, monkeypatch):
    monkeypatch.setattr(rl_utils, "TRUSTED_PROXY_HOPS", 1)
    for _ in range(5):
        await ac_client.post(f"{url_prefix}/auth/send-otp", json={"phone_number": "+14155550100"},
                             headers={"X-Forwarded-For": "203.0.113.9"})

    resp = await ac_client.post(f"{url_prefix}/auth/send-otp", json={"phone_number": "+14155550111"},
                                headers={"X-Forwarded-For": "spoofed, 203.0.113.10"})
    assert resp.status_code == 200


@pytest.mark.parametrize("hops, xff, expected", [
    (0, "203.0.113.9", "127.0.0.1"),
    (1, "spoofed, 203.0.113.9", "203.0.113.9"),
    (2, "spoofed, 203.0.113.9, 10.0.0.2", "203.0.113.9"),
    (2, "203.0.113.9", "127.0.0.1"),
])
def test_identifier_from_request(monkeypatch, hops, xff, expected):
    monkeypatch.setattr(rl_utils, "TRUSTED_PROXY_HOPS", hops)
    request = Request({"type": "http", "headers": [(b"x-forwarded-for", xff.encode())],
                       "client": ("127.0.0.1", 5000)})
    assert rl_utils._identifier_from_request(request) == (expected, "ip")


async def test_in_memory_window():
    key = "rl:test:window"
    results = [await _in_memory_allow(key, 2, 60) for _ in range(3)]
    assert [allowed for allowed, _, _ in results] == [True, True, False]
    assert [remaining for _, remaining, _ in results] == [1, 0, 0]


async def test_in_memory_window_resets_after_expiry():
    key = "rl:test:reset"
    await _in_memory_allow(key, 1, 60)
    _in_memory_counters[key]["expires_at"] = 0

    allowed, remaining, _ = await _in_memory_allow(key, 1, 60)
    assert allowed is True
    assert remaining == 0


async def test_redis_counter_decides():
    client = ScriptedRedis(responses=[[1, 60000], [4, 30000]])
    allowed, remaining, _ = await redis_allow("rl:k", 3, 60, client=client)
    assert (allowed, remaining) == (True, 2)

    allowed, remaining, _ = await redis_allow("rl:k", 3, 60, client=client)
    assert (allowed, remaining) == (False, 0)
    assert client.calls[0] == (["rl:k"], [60000])


async def test_redis_outage_falls_back_to_memory():
    client = ScriptedRedis(error=RedisConnectionError("connection refused"))
    results = [await redis_allow("rl:down", 1, 60, client=client) for _ in range(2)]
    assert [allowed for allowed, _, _ in results] == [True, False]
    assert "rl:down" in _in_memory_counters
