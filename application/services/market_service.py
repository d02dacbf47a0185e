import logging
from collections.abc import Iterable, Mapping

from application.services.conversion_service import rate_between
from application.services.refresh_coordinator import RefreshCoordinator
from domain.exceptions.currency import UnknownCurrencyError
from domain.models.currency import CurrencyPair, PairQuote, RateRow, RateSnapshot

logger = logging.getLogger(__name__)


def popular_quotes(snapshot: RateSnapshot, pairs: Iterable[CurrencyPair]) -> list[PairQuote]:
	quotes = []
	for pair in pairs:
		try:
			rate = rate_between(snapshot, pair.from_currency, pair.to_currency)
		except UnknownCurrencyError as e:
			logger.debug(f'Skipping popular pair {pair.label}: {e}')
			continue
		quotes.append(PairQuote(pair=pair, rate=rate))
	return quotes


def rates_table(snapshot: RateSnapshot, currency_names: Mapping[str, str]) -> list[RateRow]:
	"""One row per display currency, quoted against the snapshot's base."""
	rows = []
	for code, name in currency_names.items():
		if code == snapshot.base_currency:
			continue
		rate = snapshot.rates.get(code)
		if rate is None:
			continue
		rows.append(RateRow(code=code, name=name, rate=rate))
	return rows


class MarketService:
	def __init__(
		self,
		coordinator: RefreshCoordinator,
		popular_pairs: Iterable[CurrencyPair],
		currency_names: Mapping[str, str],
	):
		self.coordinator = coordinator
		self.popular_pairs = tuple(popular_pairs)
		self.currency_names = dict(currency_names)

	def get_popular_quotes(self) -> tuple[list[PairQuote], RateSnapshot]:
		snapshot = self.coordinator.require_snapshot()
		return popular_quotes(snapshot, self.popular_pairs), snapshot

	def get_rates_table(self) -> tuple[list[RateRow], RateSnapshot]:
		snapshot = self.coordinator.require_snapshot()
		return rates_table(snapshot, self.currency_names), snapshot

	def currency_name(self, code: str) -> str | None:
		return self.currency_names.get(code)
