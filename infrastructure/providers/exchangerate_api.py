import logging
from collections.abc import Callable
from datetime import UTC, datetime

import httpx
from tenacity import (
	AsyncRetrying,
	retry_if_exception_type,
	stop_after_attempt,
	wait_exponential,
)
from tenacity.wait import wait_base

from domain.exceptions.currency import FetchError
from domain.models.currency import RateSnapshot
from domain.models.result import Err, FetchResult, Ok

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
	return datetime.now(tz=UTC)


def parse_provider_timestamp(value) -> datetime | None:
	"""Accepts unix seconds or an ISO-8601 string; anything else is ignored."""
	if value is None or isinstance(value, bool):
		return None
	try:
		if isinstance(value, (int, float)):
			return datetime.fromtimestamp(value, tz=UTC)
		if isinstance(value, str):
			parsed = datetime.fromisoformat(value)
			return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
	except (ValueError, OverflowError, OSError):
		logger.warning(f'Ignoring unparsable provider timestamp: {value!r}')
	return None


class ExchangeRateAPIProvider:
	BASE_URL = 'https://api.exchangerate-api.com/v4/latest/'

	def __init__(
		self,
		base_url: str = BASE_URL,
		client: httpx.AsyncClient | None = None,
		timeout: float = 10,
		max_attempts: int = 3,
		retry_wait: wait_base | None = None,
		clock: Callable[[], datetime] = _utc_now,
	):
		self.base_url = base_url if base_url.endswith('/') else f'{base_url}/'
		self._client = client or httpx.AsyncClient(timeout=timeout)
		self.max_attempts = max_attempts
		self.retry_wait = retry_wait or wait_exponential(multiplier=1, min=1, max=10)
		self.clock = clock

	@property
	def name(self) -> str:
		return 'exchangerate-api'

	async def _get(self, url: str) -> httpx.Response:
		async for attempt in AsyncRetrying(
			stop=stop_after_attempt(self.max_attempts),
			wait=self.retry_wait,
			retry=retry_if_exception_type(httpx.TransportError),
			reraise=True,
		):
			with attempt:
				response = await self._client.get(url)
		return response

	async def _request(self, base_currency: str) -> dict:
		url = f'{self.base_url}{base_currency}'

		try:
			response = await self._get(url)
			response.raise_for_status()
			data = response.json()
		except httpx.HTTPStatusError as e:
			raise FetchError(
				f'ExchangeRate-API HTTP error {e.response.status_code}: {e.response.text[:200]}'
			) from e
		except httpx.RequestError as e:
			raise FetchError(f'ExchangeRate-API request failed: {e.__class__.__name__}') from e
		except Exception as e:
			raise FetchError(f'ExchangeRate-API response parsing error: {str(e)}') from e

		if not isinstance(data, dict):
			raise FetchError('ExchangeRate-API response parsing error: payload is not an object')
		return data

	def _to_snapshot(self, base_currency: str, data: dict) -> RateSnapshot:
		rates = data.get('rates')
		if not isinstance(rates, dict) or not rates:
			raise FetchError(f'Missing rates for {base_currency}')

		reported_base = data.get('base')
		if reported_base is not None and reported_base != base_currency:
			raise FetchError(f'Requested {base_currency} rates but received {reported_base}')

		try:
			return RateSnapshot.from_raw(
				base_currency=base_currency,
				rates=rates,
				timestamp=self.clock(),
				provider_timestamp=parse_provider_timestamp(data.get('time_last_updated')),
			)
		except ValueError as e:
			raise FetchError(f'Invalid rates for {base_currency}: {e}') from e

	async def fetch(self, base_currency: str) -> FetchResult[RateSnapshot]:
		try:
			data = await self._request(base_currency)
			snapshot = self._to_snapshot(base_currency, data)
		except FetchError as e:
			logger.warning(f'Provider {self.name} failed for {base_currency}: {e}')
			return Err(e)

		logger.info(f'Fetched {len(snapshot.rates)} rates for {base_currency} from {self.name}')
		return Ok(snapshot)

	async def close(self) -> None:
		await self._client.aclose()
