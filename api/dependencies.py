import logging
from typing import Annotated

from fastapi import Depends

from application.services import ConversionService, MarketService, RefreshCoordinator
from config.settings import CURRENCY_NAMES, POPULAR_PAIRS, Settings, get_settings
from domain.exceptions.currency import RatesUnavailableError
from infrastructure.cache.base import CacheStore
from infrastructure.cache.rate_cache import RateCache
from infrastructure.cache.redis_cache import RedisCacheStore
from infrastructure.cache.stores import FileCacheStore, InMemoryCacheStore
from infrastructure.providers import ExchangeRateAPIProvider, RateSource

logger = logging.getLogger(__name__)


class AppDependencies:
	"""Container for application-wide singleton dependencies."""

	cache_store: CacheStore | None = None
	source: RateSource | None = None
	coordinator: RefreshCoordinator | None = None


deps = AppDependencies()


def build_cache_store(settings: Settings) -> CacheStore:
	if settings.CACHE_BACKEND == 'redis':
		return RedisCacheStore.from_url(settings.REDIS_URL)
	if settings.CACHE_BACKEND == 'file':
		return FileCacheStore(settings.CACHE_DIRECTORY)
	return InMemoryCacheStore()


def init_dependencies() -> None:
	"""Initialize all singleton dependencies. Called at app startup."""
	logger.info('Initializing dependencies...')
	settings = get_settings()

	deps.cache_store = build_cache_store(settings)
	deps.source = ExchangeRateAPIProvider(
		base_url=settings.RATES_API_URL,
		timeout=settings.REQUEST_TIMEOUT_SECONDS,
		max_attempts=settings.FETCH_MAX_ATTEMPTS,
	)
	cache = RateCache(
		store=deps.cache_store,
		key=settings.CACHE_KEY,
		cache_duration=settings.cache_duration,
	)
	deps.coordinator = RefreshCoordinator(
		source=deps.source,
		cache=cache,
		base_currency=settings.DEFAULT_BASE_CURRENCY,
		refresh_interval=settings.refresh_interval,
		fetch_timeout=settings.FETCH_TIMEOUT_SECONDS,
	)
	logger.info(f'Dependencies initialized ({settings.CACHE_BACKEND} cache)')


async def bootstrap() -> None:
	"""Load the first snapshot. Called after init_dependencies() at startup."""
	logger.info('Bootstrapping application...')

	if deps.coordinator is None:
		raise RuntimeError('Dependencies not initialized. Call init_dependencies() first.')

	try:
		await deps.coordinator.start()
	except RatesUnavailableError as e:
		# Served as 503 until a manual or periodic refresh succeeds
		logger.error(f'Starting without exchange rates: {e}')

	if get_settings().AUTO_REFRESH:
		deps.coordinator.start_auto_refresh()

	logger.info('Bootstrap complete')


async def cleanup_dependencies() -> None:
	logger.info('Cleaning up dependencies...')

	if deps.coordinator:
		await deps.coordinator.stop()
	if deps.source:
		await deps.source.close()
	if isinstance(deps.cache_store, RedisCacheStore):
		await deps.cache_store.close()

	logger.info('Cleanup complete')


def get_coordinator() -> RefreshCoordinator:
	if deps.coordinator is None:
		raise RuntimeError('Refresh coordinator not initialized')
	return deps.coordinator


def get_conversion_service(
	coordinator: Annotated[RefreshCoordinator, Depends(get_coordinator)],
) -> ConversionService:
	return ConversionService(coordinator=coordinator)


def get_market_service(
	coordinator: Annotated[RefreshCoordinator, Depends(get_coordinator)],
) -> MarketService:
	return MarketService(
		coordinator=coordinator,
		popular_pairs=POPULAR_PAIRS,
		currency_names=CURRENCY_NAMES,
	)
