from typing import Annotated

from fastapi import APIRouter, Depends, Path, status

from api.dependencies import get_conversion_service, get_coordinator, get_market_service
from api.schemas import (
	ConversionResponse,
	ExchangeRateResponse,
	PopularPairResponse,
	PopularPairsResponse,
	RateRowResponse,
	RatesTableResponse,
	RefreshRequest,
	RefreshResponse,
	StatusResponse,
)
from application.services import ConversionService, MarketService, RefreshCoordinator
from application.utils.time import format_last_updated
from domain.models.result import Ok

router = APIRouter(prefix='/api', tags=['currency'])

CurrencyCode = Annotated[str, Path(min_length=3, max_length=5)]


def _status_response(coordinator: RefreshCoordinator) -> StatusResponse:
	current = coordinator.status()
	return StatusResponse(
		state=current.state,
		base_currency=current.base_currency,
		is_loading=current.is_loading,
		timestamp=current.timestamp,
		provider_timestamp=current.provider_timestamp,
		last_updated=format_last_updated(current.timestamp) if current.timestamp else None,
		last_error=current.last_error,
		currencies=current.currencies,
	)


@router.get(
	'/convert/{from_currency}/{to_currency}/{amount}',
	response_model=ConversionResponse,
	status_code=status.HTTP_200_OK,
	summary='Convert currency amount',
)
async def convert_currency(
	from_currency: CurrencyCode,
	to_currency: CurrencyCode,
	amount: Annotated[float, Path(ge=0, allow_inf_nan=False)],
	service: Annotated[ConversionService, Depends(get_conversion_service)],
) -> ConversionResponse:
	from_currency = from_currency.upper()
	to_currency = to_currency.upper()
	result = service.convert(amount, from_currency, to_currency)
	return ConversionResponse(
		from_currency=result.from_currency,
		to_currency=result.to_currency,
		original_amount=result.original_amount,
		converted_amount=result.converted_amount,
		exchange_rate=result.rate,
		rate_text=f'1 {result.from_currency} = {result.rate:.4f} {result.to_currency}',
		base_currency=result.base_currency,
		timestamp=result.timestamp,
	)


@router.get(
	'/rate/{from_currency}/{to_currency}',
	response_model=ExchangeRateResponse,
	status_code=status.HTTP_200_OK,
	summary='Get current exchange rate',
)
async def get_exchange_rate(
	from_currency: CurrencyCode,
	to_currency: CurrencyCode,
	service: Annotated[ConversionService, Depends(get_conversion_service)],
) -> ExchangeRateResponse:
	from_currency = from_currency.upper()
	to_currency = to_currency.upper()

	rate, snapshot = service.get_rate(from_currency, to_currency)
	return ExchangeRateResponse(
		from_currency=from_currency,
		to_currency=to_currency,
		rate=rate,
		base_currency=snapshot.base_currency,
		timestamp=snapshot.timestamp,
	)


@router.get(
	'/popular',
	response_model=PopularPairsResponse,
	status_code=status.HTTP_200_OK,
	summary='Rates for the popular currency pairs',
)
async def get_popular_pairs(
	service: Annotated[MarketService, Depends(get_market_service)],
) -> PopularPairsResponse:
	quotes, snapshot = service.get_popular_quotes()
	return PopularPairsResponse(
		base_currency=snapshot.base_currency,
		timestamp=snapshot.timestamp,
		pairs=[
			PopularPairResponse(
				pair=quote.pair.label,
				from_currency=quote.pair.from_currency,
				to_currency=quote.pair.to_currency,
				from_flag=quote.pair.from_flag,
				to_flag=quote.pair.to_flag,
				rate=quote.rate,
			)
			for quote in quotes
		],
	)


@router.get(
	'/rates',
	response_model=RatesTableResponse,
	status_code=status.HTTP_200_OK,
	summary='Rates table against the base currency',
)
async def get_rates_table(
	service: Annotated[MarketService, Depends(get_market_service)],
) -> RatesTableResponse:
	rows, snapshot = service.get_rates_table()
	return RatesTableResponse(
		base_currency=snapshot.base_currency,
		timestamp=snapshot.timestamp,
		rates=[RateRowResponse(code=row.code, name=row.name, rate=row.rate) for row in rows],
	)


@router.get(
	'/status',
	response_model=StatusResponse,
	status_code=status.HTTP_200_OK,
	summary='Freshness of the active rates',
)
async def get_status(
	coordinator: Annotated[RefreshCoordinator, Depends(get_coordinator)],
) -> StatusResponse:
	return _status_response(coordinator)


@router.post(
	'/refresh',
	response_model=RefreshResponse,
	status_code=status.HTTP_200_OK,
	summary='Fetch fresh rates now',
)
async def refresh_rates(
	coordinator: Annotated[RefreshCoordinator, Depends(get_coordinator)],
	request: RefreshRequest | None = None,
) -> RefreshResponse:
	base_currency = request.base_currency if request else None
	result = await coordinator.refresh(base_currency)

	if isinstance(result, Ok):
		return RefreshResponse(refreshed=True, status=_status_response(coordinator))
	return RefreshResponse(
		refreshed=False, error=str(result.error), status=_status_response(coordinator)
	)
