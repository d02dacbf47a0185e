from application.services.refresh_coordinator import RefreshCoordinator
from domain.exceptions.currency import UnknownCurrencyError
from domain.models.currency import ConversionResult, RateSnapshot


def _rate_for(snapshot: RateSnapshot, code: str) -> float:
	try:
		return snapshot.rates[code]
	except KeyError:
		raise UnknownCurrencyError(code) from None


def rate_between(snapshot: RateSnapshot, from_currency: str, to_currency: str) -> float:
	"""Units of ``to_currency`` per 1 unit of ``from_currency``.

	Non-base pairs are crossed through the base currency.
	"""
	if from_currency == to_currency:
		return 1.0
	if from_currency == snapshot.base_currency:
		return _rate_for(snapshot, to_currency)
	if to_currency == snapshot.base_currency:
		return 1 / _rate_for(snapshot, from_currency)
	from_rate = _rate_for(snapshot, from_currency)
	return _rate_for(snapshot, to_currency) / from_rate


def convert(snapshot: RateSnapshot, amount: float, from_currency: str, to_currency: str) -> float:
	# No validation or rounding of amount here; negative values pass straight through.
	return amount * rate_between(snapshot, from_currency, to_currency)


class ConversionService:
	def __init__(self, coordinator: RefreshCoordinator):
		self.coordinator = coordinator

	def get_rate(self, from_currency: str, to_currency: str) -> tuple[float, RateSnapshot]:
		snapshot = self.coordinator.require_snapshot()
		return rate_between(snapshot, from_currency, to_currency), snapshot

	def convert(self, amount: float, from_currency: str, to_currency: str) -> ConversionResult:
		snapshot = self.coordinator.require_snapshot()
		rate = rate_between(snapshot, from_currency, to_currency)

		return ConversionResult(
			from_currency=from_currency,
			to_currency=to_currency,
			original_amount=amount,
			converted_amount=amount * rate,
			rate=rate,
			base_currency=snapshot.base_currency,
			timestamp=snapshot.timestamp,
		)
