from photovault.core.cache import TTLCache, build_cache_key


class FakeTime:
    def __init__(self):
        self.value = 1000.0

    def __call__(self):
        return self.value


def test_entry_expires_after_ttl():
    now = FakeTime()
    cache = TTLCache(default_ttl=60, clock=now)

    cache.set("jwks:tenant", ["key"])
    assert cache.get("jwks:tenant") == ["key"]

    now.value += 59
    assert cache.get("jwks:tenant") == ["key"]

    now.value += 1
    assert cache.get("jwks:tenant") is None


def test_per_entry_ttl_overrides_default():
    now = FakeTime()
    cache = TTLCache(default_ttl=60, clock=now)

    cache.set("short", 1, ttl=5)
    cache.set("long", 2)

    now.value += 10
    assert cache.get("short") is None
    assert cache.get("long") == 2


def test_missing_key_returns_none():
    cache = TTLCache(clock=FakeTime())
    assert cache.get("absent") is None


def test_build_cache_key():
    assert build_cache_key("jwks", "tenant.auth0.com") == "jwks:tenant.auth0.com"
