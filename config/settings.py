from datetime import timedelta
from functools import lru_cache
from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from domain.models.currency import CurrencyPair


class Settings(BaseSettings):
	RATES_API_URL: str = 'https://api.exchangerate-api.com/v4/latest/'
	DEFAULT_BASE_CURRENCY: str = 'USD'

	# Durations are in milliseconds
	CACHE_DURATION_MS: int = 3_600_000
	REFRESH_INTERVAL_MS: int = 3_600_000

	# Per HTTP request; a fetch makes up to FETCH_MAX_ATTEMPTS of them
	REQUEST_TIMEOUT_SECONDS: float = 10.0
	FETCH_MAX_ATTEMPTS: int = 3
	# Whole fetch, retries and backoff included
	FETCH_TIMEOUT_SECONDS: float = 60.0

	CACHE_BACKEND: Literal['memory', 'file', 'redis'] = 'file'
	CACHE_KEY: str = 'quickcurrency_rates'
	CACHE_DIRECTORY: str = '.cache'
	REDIS_URL: str = 'redis://localhost:6379'

	AUTO_REFRESH: bool = True

	# Application
	APP_NAME: str = 'Quick Currency API'

	model_config = SettingsConfigDict(env_file='.env', case_sensitive=False, extra='ignore')

	@model_validator(mode='after')
	def check_fetch_timeout(self) -> 'Settings':
		request_budget = self.REQUEST_TIMEOUT_SECONDS * self.FETCH_MAX_ATTEMPTS
		if self.FETCH_TIMEOUT_SECONDS <= request_budget:
			raise ValueError(
				f'FETCH_TIMEOUT_SECONDS ({self.FETCH_TIMEOUT_SECONDS}) must exceed '
				f'REQUEST_TIMEOUT_SECONDS x FETCH_MAX_ATTEMPTS ({request_budget})'
			)
		return self

	@property
	def cache_duration(self) -> timedelta:
		return timedelta(milliseconds=self.CACHE_DURATION_MS)

	@property
	def refresh_interval(self) -> timedelta:
		return timedelta(milliseconds=self.REFRESH_INTERVAL_MS)


@lru_cache
def get_settings() -> Settings:
	return Settings()


POPULAR_PAIRS: tuple[CurrencyPair, ...] = (
	CurrencyPair('USD', 'EUR', '🇺🇸', '🇪🇺'),
	CurrencyPair('GBP', 'USD', '🇬🇧', '🇺🇸'),
	CurrencyPair('EUR', 'GBP', '🇪🇺', '🇬🇧'),
	CurrencyPair('USD', 'JPY', '🇺🇸', '🇯🇵'),
	CurrencyPair('USD', 'CAD', '🇺🇸', '🇨🇦'),
	CurrencyPair('USD', 'AUD', '🇺🇸', '🇦🇺'),
)

CURRENCY_NAMES: dict[str, str] = {
	'USD': 'US Dollar',
	'EUR': 'Euro',
	'GBP': 'British Pound',
	'JPY': 'Japanese Yen',
	'AUD': 'Australian Dollar',
	'CAD': 'Canadian Dollar',
	'CHF': 'Swiss Franc',
	'CNY': 'Chinese Yuan',
	'INR': 'Indian Rupee',
	'MXN': 'Mexican Peso',
	'BRL': 'Brazilian Real',
	'ZAR': 'South African Rand',
	'SGD': 'Singapore Dollar',
	'HKD': 'Hong Kong Dollar',
	'SEK': 'Swedish Krona',
	'NOK': 'Norwegian Krone',
	'DKK': 'Danish Krone',
	'NZD': 'New Zealand Dollar',
	'KRW': 'South Korean Won',
	'TRY': 'Turkish Lira',
	'RUB': 'Russian Ruble',
	'PLN': 'Polish Zloty',
	'THB': 'Thai Baht',
	'MYR': 'Malaysian Ringgit',
	'IDR': 'Indonesian Rupiah',
	'PHP': 'Philippine Peso',
	'CZK': 'Czech Koruna',
	'ILS': 'Israeli Shekel',
	'AED': 'UAE Dirham',
	'SAR': 'Saudi Riyal',
	'DOP': 'Dominican Peso',
}
