# app/services/tax_cache.py
import time
from decimal import Decimal, InvalidOperation
from typing import Callable, Protocol

import redis
from redis.exceptions import RedisError

from app.utils.retry import redis_retry
from app.utils.settings import REDIS_URL, TAX_RATE_CACHE_KEY, TAX_RATE_CACHE_TTL_SECONDS
from app.utils.logging import get_logger

logger = get_logger(__name__)


class RateCache(Protocol):
    def get(self) -> Decimal | None: ...

    def set(self, rate: Decimal) -> None: ...

    def invalidate(self) -> None: ...


class TaxRateCache:
    """
    Cache stawki w pamieci procesu.
    Jeden zapisujacy / wielu czytajacych, last-write-wins, bez locka -
    kilka sekund nieaktualnej stawki jest akceptowalne.
    ttl_seconds <= 0 -> wartosc zyje do recznej invalidacji.
    """

    def __init__(
        self,
        ttl_seconds: int = TAX_RATE_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._entry: tuple[Decimal, float] | None = None

    def get(self) -> Decimal | None:
        entry = self._entry
        if entry is None:
            return None

        rate, stored_at = entry
        if self.ttl_seconds > 0 and self.clock() - stored_at >= self.ttl_seconds:
            return None
        return rate

    def set(self, rate: Decimal) -> None:
        self._entry = (rate, self.clock())

    def invalidate(self) -> None:
        self._entry = None


class RedisTaxRateCache:
    """Cache stawki w Redis, wspolny dla wszystkich workerow API."""

    def __init__(
        self,
        client: redis.Redis | None = None,
        key: str = TAX_RATE_CACHE_KEY,
        ttl_seconds: int = TAX_RATE_CACHE_TTL_SECONDS,
    ):
        self.redis = client or redis.Redis.from_url(REDIS_URL, decode_responses=True)
        self.key = key
        self.ttl_seconds = ttl_seconds

    @redis_retry()
    def _read(self):
        return self.redis.get(self.key)

    def get(self) -> Decimal | None:
        try:
            raw = self._read()
        except RedisError as e:
            #brak redisa = cache miss, stawka zostanie policzona od nowa
            logger.warning(f"Redis niedostepny przy odczycie stawki: {e}")
            return None

        if raw is None:
            return None
        try:
            return Decimal(raw)
        except InvalidOperation:
            logger.warning(f"Niepoprawna stawka w cache {self.key}: {raw!r}")
            return None

    @redis_retry()
    def _write(self, rate: Decimal):
        #EX wygasa samo, bez recznego czyszczenia
        ex = self.ttl_seconds if self.ttl_seconds > 0 else None
        return self.redis.set(name=self.key, value=str(rate), ex=ex)

    def set(self, rate: Decimal) -> None:
        try:
            self._write(rate)
        except RedisError as e:
            logger.warning(f"Nie udalo sie zapisac stawki w Redis: {e}")

    @redis_retry()
    def _delete(self):
        return self.redis.delete(self.key)

    def invalidate(self) -> None:
        logger.info(f"Invalidate {self.key}")
        try:
            self._delete()
        except RedisError as e:
            #stary wpis i tak wygasnie po TTL
            logger.warning(f"Nie udalo sie usunac stawki z Redis: {e}")


def build_cache(backend: str) -> RateCache:
    if backend == "redis":
        return RedisTaxRateCache()
    return TaxRateCache()
