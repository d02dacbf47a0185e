import asyncio
import logging
from collections.abc import Callable
from datetime import timedelta
from enum import Enum

from domain.exceptions.currency import FetchError, RatesUnavailableError
from domain.models.currency import RateSnapshot, RefreshStatus
from domain.models.result import Err, FetchResult, Ok
from infrastructure.cache.rate_cache import RateCache
from infrastructure.providers.base import RateSource

logger = logging.getLogger(__name__)


class RefreshState(Enum):
	EMPTY = 'EMPTY'
	CACHED = 'CACHED'
	FRESH = 'FRESH'
	REFRESHING = 'REFRESHING'


class RefreshCoordinator:
	"""Owns the active RateSnapshot and decides when to fetch a new one.

	Startup serves a valid cached snapshot immediately and refreshes it in the
	background; without one it blocks on the first fetch. Later refreshes
	(periodic or manual) never discard the last good snapshot on failure.
	At most one fetch runs at a time: a request for the base already being
	fetched joins that fetch, a request for another base waits for it to finish.
	"""

	def __init__(
		self,
		source: RateSource,
		cache: RateCache,
		base_currency: str = 'USD',
		refresh_interval: timedelta = timedelta(hours=1),
		fetch_timeout: float | None = 60.0,
	):
		self.source = source
		self.cache = cache
		self.base_currency = base_currency
		self.refresh_interval = refresh_interval
		self.fetch_timeout = fetch_timeout

		self.state = RefreshState.EMPTY
		self.last_error: FetchError | None = None
		self._snapshot: RateSnapshot | None = None
		self._in_flight: asyncio.Task | None = None
		self._in_flight_base: str | None = None
		self._background: set[asyncio.Task] = set()
		self._auto_refresh_task: asyncio.Task | None = None
		self._update_listeners: list[Callable[[RateSnapshot], None]] = []
		self._error_listeners: list[Callable[[FetchError], None]] = []

	@property
	def snapshot(self) -> RateSnapshot | None:
		return self._snapshot

	@property
	def is_loading(self) -> bool:
		return self._in_flight is not None and not self._in_flight.done()

	def require_snapshot(self) -> RateSnapshot:
		if self._snapshot is None:
			raise RatesUnavailableError('No exchange rates available')
		return self._snapshot

	def on_update(self, callback: Callable[[RateSnapshot], None]) -> None:
		self._update_listeners.append(callback)

	def on_error(self, callback: Callable[[FetchError], None]) -> None:
		self._error_listeners.append(callback)

	def status(self) -> RefreshStatus:
		snapshot = self._snapshot
		return RefreshStatus(
			state=self.state.value,
			base_currency=snapshot.base_currency if snapshot else None,
			is_loading=self.is_loading,
			timestamp=snapshot.timestamp if snapshot else None,
			provider_timestamp=snapshot.provider_timestamp if snapshot else None,
			last_error=str(self.last_error) if self.last_error else None,
			currencies=snapshot.currencies() if snapshot else [],
		)

	# Fetching

	async def _fetch_with_timeout(self, base_currency: str) -> FetchResult[RateSnapshot]:
		try:
			return await asyncio.wait_for(self.source.fetch(base_currency), self.fetch_timeout)
		except TimeoutError:
			return Err(
				FetchError(f'Fetching {base_currency} rates timed out after {self.fetch_timeout}s')
			)

	async def _refresh_cycle(self, base_currency: str) -> FetchResult[RateSnapshot]:
		result = await self._fetch_with_timeout(base_currency)

		if isinstance(result, Ok):
			snapshot = result.value
			self._snapshot = snapshot
			self.base_currency = snapshot.base_currency
			self.state = RefreshState.FRESH
			self.last_error = None
			await self.cache.store(snapshot)
			self._notify_update(snapshot)
			return result

		self.last_error = result.error
		if self._snapshot is not None:
			logger.warning(
				f'Rate refresh for {base_currency} failed, keeping last known rates: {result.error}'
			)
		else:
			fallback = await self.cache.load()
			if fallback is not None:
				logger.info('Rate fetch failed, using cached rates')
				self._snapshot = fallback
				self.base_currency = fallback.base_currency
				self.state = RefreshState.CACHED
			else:
				self.state = RefreshState.EMPTY

		self._notify_error(result.error)
		return result

	async def _run_refresh(self, base_currency: str) -> FetchResult[RateSnapshot]:
		"""Run one refresh cycle, joining the in-flight one when it is for the same base."""
		while self.is_loading:
			task = self._in_flight
			if self._in_flight_base == base_currency:
				logger.debug(f'Joining in-flight fetch for {base_currency}')
				# A cancelled waiter must not cancel the shared fetch
				return await asyncio.shield(task)
			logger.debug(f'Waiting for {self._in_flight_base} fetch before fetching {base_currency}')
			await asyncio.wait({task})

		task = asyncio.ensure_future(self._refresh_cycle(base_currency))
		self._in_flight = task
		self._in_flight_base = base_currency
		task.add_done_callback(self._clear_in_flight)
		return await asyncio.shield(task)

	def _clear_in_flight(self, task: asyncio.Task) -> None:
		if self._in_flight is task:
			self._in_flight = None
			self._in_flight_base = None

	def _notify_update(self, snapshot: RateSnapshot) -> None:
		for callback in self._update_listeners:
			try:
				callback(snapshot)
			except Exception as e:
				logger.error(f'Rate update listener failed: {e}', exc_info=True)

	def _notify_error(self, error: FetchError) -> None:
		for callback in self._error_listeners:
			try:
				callback(error)
			except Exception as e:
				logger.error(f'Rate error listener failed: {e}', exc_info=True)

	# Lifecycle

	async def start(self) -> RateSnapshot:
		"""Load the active snapshot, from cache if possible.

		Raises RatesUnavailableError when neither the cache nor the source can
		provide rates.
		"""
		cached = await self.cache.load()
		if cached is not None:
			logger.info('Instant load from cache, refreshing in background')
			self._snapshot = cached
			self.base_currency = cached.base_currency
			self.state = RefreshState.CACHED
			self._spawn(self.refresh())
			return cached

		logger.info(f'No cached rates, fetching {self.base_currency} rates')
		self.state = RefreshState.REFRESHING
		result = await self._run_refresh(self.base_currency)
		if isinstance(result, Ok):
			return result.value
		if self._snapshot is not None:
			return self._snapshot

		logger.error(f'Initial rate fetch failed: {result.error}')
		raise RatesUnavailableError(
			f'Unable to fetch exchange rates: {result.error}'
		) from result.error

	async def refresh(self, base_currency: str | None = None) -> FetchResult[RateSnapshot]:
		"""Fetch fresh rates, keeping the last good snapshot if that fails."""
		base = base_currency or self.base_currency
		if self._snapshot is None:
			self.state = RefreshState.REFRESHING
		return await self._run_refresh(base)

	def _spawn(self, coro) -> asyncio.Task:
		task = asyncio.ensure_future(coro)
		self._background.add(task)
		task.add_done_callback(self._background.discard)
		return task

	async def _auto_refresh_loop(self) -> None:
		interval = self.refresh_interval.total_seconds()
		while True:
			try:
				await asyncio.sleep(interval)
				logger.info('Auto-refreshing rates...')
				await self.refresh()
			except asyncio.CancelledError:
				logger.info('Auto-refresh stopped')
				raise
			except Exception as e:
				logger.error(f'Auto-refresh cycle failed: {e}', exc_info=True)

	def start_auto_refresh(self) -> asyncio.Task:
		if self._auto_refresh_task is None or self._auto_refresh_task.done():
			self._auto_refresh_task = asyncio.ensure_future(self._auto_refresh_loop())
		return self._auto_refresh_task

	async def wait_idle(self) -> None:
		"""Wait for background refreshes started by ``start`` to finish."""
		while self._background:
			await asyncio.gather(*list(self._background), return_exceptions=True)

	async def stop(self) -> None:
		tasks = list(self._background)
		if self._auto_refresh_task is not None:
			tasks.append(self._auto_refresh_task)
			self._auto_refresh_task = None
		if self._in_flight is not None:
			tasks.append(self._in_flight)

		for task in tasks:
			task.cancel()
		await asyncio.gather(*tasks, return_exceptions=True)
