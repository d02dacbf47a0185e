from .base import RateSource
from .exchangerate_api import ExchangeRateAPIProvider

__all__ = ['RateSource', 'ExchangeRateAPIProvider']
