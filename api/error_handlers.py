import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from domain.exceptions.currency import FetchError, UnknownCurrencyError

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
	@app.exception_handler(UnknownCurrencyError)
	async def unknown_currency_handler(request: Request, exc: UnknownCurrencyError):
		return JSONResponse(status_code=400, content={'detail': str(exc), 'currency': exc.code})

	@app.exception_handler(FetchError)
	async def fetch_error_handler(request: Request, exc: FetchError):
		logger.error(f'Rates unavailable: {exc}')
		return JSONResponse(
			status_code=503, content={'detail': 'Exchange rate service unavailable'}
		)
