from typing import Protocol

from domain.models.currency import RateSnapshot
from domain.models.result import FetchResult


class RateSource(Protocol):
	@property
	def name(self) -> str: ...

	async def fetch(self, base_currency: str) -> FetchResult[RateSnapshot]: ...

	async def close(self) -> None: ...
