from .requests import RefreshRequest
from .responses import (
	ConversionResponse,
	ExchangeRateResponse,
	PopularPairResponse,
	PopularPairsResponse,
	RatesTableResponse,
	RateRowResponse,
	RefreshResponse,
	StatusResponse,
)

__all__ = [
	'ConversionResponse',
	'ExchangeRateResponse',
	'PopularPairResponse',
	'PopularPairsResponse',
	'RateRowResponse',
	'RatesTableResponse',
	'RefreshRequest',
	'RefreshResponse',
	'StatusResponse',
]
