import json
import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from domain.exceptions.currency import CacheCorruptError, CacheWriteError
from domain.models.currency import RateSnapshot
from infrastructure.cache.base import CacheStore

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def _parse_timestamp(value: str | int | float) -> datetime:
    # Numeric timestamps are epoch milliseconds
    if isinstance(value, bool):
        raise TypeError(f'not a timestamp: {value!r}')
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=UTC)
    parsed = datetime.fromisoformat(value)
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def serialize_snapshot(snapshot: RateSnapshot) -> str:
    entry = {
        'rates': dict(snapshot.rates),
        'baseCurrency': snapshot.base_currency,
        'timestamp': snapshot.timestamp.isoformat(),
        'providerTimestamp': (
            snapshot.provider_timestamp.isoformat() if snapshot.provider_timestamp else None
        ),
    }
    return json.dumps(entry)


def deserialize_snapshot(data: str) -> RateSnapshot:
    try:
        entry = json.loads(data)
        provider_ts = entry.get('providerTimestamp')
        return RateSnapshot(
            base_currency=entry['baseCurrency'],
            rates=entry['rates'],
            timestamp=_parse_timestamp(entry['timestamp']),
            provider_timestamp=_parse_timestamp(provider_ts) if provider_ts is not None else None,
        )
    except (ValueError, TypeError, KeyError, AttributeError, OverflowError) as e:
        raise CacheCorruptError(f'Invalid cache entry: {e}') from e


class RateCache:
    """Single-slot cache of the latest RateSnapshot, valid for ``cache_duration``.

    Caching is best effort: read and write problems are logged and treated as a
    miss or a no-op, never raised to the caller.
    """

    def __init__(
        self,
        store: CacheStore,
        key: str = 'quickcurrency_rates',
        cache_duration: timedelta = timedelta(hours=1),
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.cache_store = store
        self.key = key
        self.cache_duration = cache_duration
        self.clock = clock

    async def _read(self) -> RateSnapshot | None:
        try:
            data = await self.cache_store.get(self.key)
        except Exception as e:
            logger.error(f'Error reading cache key {self.key}: {e}')
            return None

        if not data:
            logger.debug(f'Cache miss for {self.key}')
            return None

        try:
            return deserialize_snapshot(data)
        except CacheCorruptError as e:
            logger.warning(f'Ignoring corrupt cache entry {self.key}: {e}')
            return None

    async def load(self) -> RateSnapshot | None:
        snapshot = await self._read()
        if snapshot is None:
            return None

        age = self.clock() - snapshot.timestamp
        if age >= self.cache_duration:
            logger.info(f'Cached {snapshot.base_currency} rates expired ({age} old)')
            return None

        remaining_minutes = round((self.cache_duration - age).total_seconds() / 60)
        logger.info(
            f'Using cached {snapshot.base_currency} rates '
            f'(valid for {remaining_minutes} more minutes)'
        )
        return snapshot

    async def store(self, snapshot: RateSnapshot) -> None:
        try:
            await self.cache_store.set(self.key, serialize_snapshot(snapshot))
        except Exception as e:
            error = CacheWriteError(f'Failed to write cache key {self.key}: {e}')
            logger.error(str(error))
            return

        logger.info(f'Cached {len(snapshot.rates)} {snapshot.base_currency} rates')
