from decimal import Decimal
from unittest.mock import MagicMock

import redis

from app.services.tax_cache import RedisTaxRateCache, TaxRateCache
from app.services.tax_inference import TaxRateInference
from app.services.tax_rate_service import TaxRateService
from tests.fakes import FakeCatalog, pair


class Clock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_cache_expires_after_ttl():
    clock = Clock()
    cache = TaxRateCache(ttl_seconds=300, clock=clock)
    cache.set(Decimal("18"))

    clock.now += 299
    assert cache.get() == Decimal("18")

    clock.now += 1
    assert cache.get() is None


def test_cache_without_ttl_lives_until_invalidated():
    clock = Clock()
    cache = TaxRateCache(ttl_seconds=0, clock=clock)
    cache.set(Decimal("12"))

    clock.now += 10**6
    assert cache.get() == Decimal("12")

    cache.invalidate()
    assert cache.get() is None


def test_service_computes_once_and_reuses_cached_rate():
    catalog = FakeCatalog(sample=[pair("100", "118")])
    service = TaxRateService(TaxRateInference(catalog), TaxRateCache(ttl_seconds=0))

    assert service.get_effective_tax_rate() == Decimal("18")
    assert service.get_effective_tax_rate() == Decimal("18")
    assert catalog.calls.count("get_explicit_tax_rates") == 1


def test_invalidation_triggers_recomputation():
    catalog = FakeCatalog(sample=[pair("100", "118")])
    service = TaxRateService(TaxRateInference(catalog), TaxRateCache(ttl_seconds=0))
    service.get_effective_tax_rate()

    catalog.sample = [pair("100", "112")]
    assert service.get_effective_tax_rate() == Decimal("18")

    service.invalidate_tax_rate_cache()
    assert service.get_effective_tax_rate() == Decimal("12")


def test_unreachable_catalog_fallback_is_cached():
    catalog = FakeCatalog(unreachable=True)
    service = TaxRateService(TaxRateInference(catalog), TaxRateCache(ttl_seconds=0))

    assert service.get_effective_tax_rate() == Decimal("18")
    calls = len(catalog.calls)
    service.get_effective_tax_rate()
    assert len(catalog.calls) == calls


def test_redis_cache_reads_and_writes_with_expiry():
    client = MagicMock()
    client.get.return_value = "18"
    cache = RedisTaxRateCache(client=client, key="pos:tax_rate", ttl_seconds=300)

    assert cache.get() == Decimal("18")

    cache.set(Decimal("12"))
    client.set.assert_called_once_with(name="pos:tax_rate", value="12", ex=300)

    cache.invalidate()
    client.delete.assert_called_once_with("pos:tax_rate")


def test_redis_cache_without_ttl_sets_no_expiry():
    client = MagicMock()
    RedisTaxRateCache(client=client, key="k", ttl_seconds=0).set(Decimal("5"))
    client.set.assert_called_once_with(name="k", value="5", ex=None)


def test_redis_errors_are_cache_misses():
    client = MagicMock()
    client.get.side_effect = redis.ConnectionError("down")
    client.set.side_effect = redis.ConnectionError("down")
    cache = RedisTaxRateCache(client=client)

    assert cache.get() is None
    cache.set(Decimal("18"))


def test_garbage_in_redis_is_a_miss():
    client = MagicMock()
    client.get.return_value = "eighteen"
    assert RedisTaxRateCache(client=client).get() is None


def test_redis_invalidate_error_is_logged_not_raised():
    client = MagicMock()
    client.delete.side_effect = redis.ConnectionError("down")

    RedisTaxRateCache(client=client).invalidate()

    client.delete.assert_called_once()
