from datetime import datetime

from pydantic import BaseModel, Field


class ConversionResponse(BaseModel):
	from_currency: str = Field(..., description='Source currency code')
	to_currency: str = Field(..., description='Target currency code')
	original_amount: float = Field(..., description='Original amount requested')
	converted_amount: float = Field(..., description='Converted amount, unrounded')
	exchange_rate: float = Field(..., description='Exchange rate used for conversion')
	rate_text: str = Field(..., description='Rate line, e.g. "1 USD = 0.9200 EUR"')
	base_currency: str = Field(..., description='Base currency of the rate snapshot')
	timestamp: datetime = Field(..., description='When the rates were fetched')

	class ConfigDict:
		json_schema_extra = {
			'example': {
				'from_currency': 'USD',
				'to_currency': 'EUR',
				'original_amount': 100.0,
				'converted_amount': 92.0,
				'exchange_rate': 0.92,
				'rate_text': '1 USD = 0.9200 EUR',
				'base_currency': 'USD',
				'timestamp': '2025-09-27T10:30:00Z',
			}
		}


class ExchangeRateResponse(BaseModel):
	from_currency: str = Field(..., description='Source currency code')
	to_currency: str = Field(..., description='Target currency code')
	rate: float = Field(..., description='Units of to_currency per 1 from_currency')
	base_currency: str = Field(..., description='Base currency of the rate snapshot')
	timestamp: datetime = Field(..., description='When the rates were fetched')


class PopularPairResponse(BaseModel):
	pair: str = Field(..., description='Pair label, e.g. USD/EUR')
	from_currency: str
	to_currency: str
	from_flag: str
	to_flag: str
	rate: float


class PopularPairsResponse(BaseModel):
	base_currency: str
	timestamp: datetime
	pairs: list[PopularPairResponse]


class RateRowResponse(BaseModel):
	code: str
	name: str
	rate: float


class RatesTableResponse(BaseModel):
	base_currency: str
	timestamp: datetime
	rates: list[RateRowResponse]


class StatusResponse(BaseModel):
	state: str = Field(..., description='EMPTY, CACHED, FRESH or REFRESHING')
	base_currency: str | None
	is_loading: bool
	timestamp: datetime | None = Field(None, description='When the active rates were fetched')
	provider_timestamp: datetime | None = Field(
		None, description='Last update time reported by the rate provider'
	)
	last_updated: str | None = Field(None, description='e.g. "5 minutes ago"')
	last_error: str | None = None
	currencies: list[str] = Field(default_factory=list)


class RefreshResponse(BaseModel):
	refreshed: bool
	error: str | None = None
	status: StatusResponse
