from .conversion_service import ConversionService, convert, rate_between
from .market_service import MarketService
from .refresh_coordinator import RefreshCoordinator, RefreshState

__all__ = [
	'ConversionService',
	'MarketService',
	'RefreshCoordinator',
	'RefreshState',
	'convert',
	'rate_between',
]
