import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType


@dataclass(frozen=True)
class RateSnapshot:
    """One base currency, the rates of its siblings and when they were obtained.

    Rates are units of the target currency per 1 unit of ``base_currency``.
    The base itself is never stored; its rate to itself is always 1.
    """

    base_currency: str
    rates: Mapping[str, float]
    timestamp: datetime
    provider_timestamp: datetime | None = None

    def __post_init__(self):
        if self.base_currency in self.rates:
            raise ValueError(f'Rates must not contain the base currency {self.base_currency}')
        for code, rate in self.rates.items():
            if not isinstance(rate, (int, float)) or isinstance(rate, bool):
                raise ValueError(f'Rate for {code} is not a number: {rate!r}')
            if not math.isfinite(rate) or rate <= 0:
                raise ValueError(f'Rate for {code} must be positive and finite, got {rate}')
        object.__setattr__(
            self, 'rates', MappingProxyType({code: float(rate) for code, rate in self.rates.items()})
        )

    @classmethod
    def from_raw(
        cls,
        base_currency: str,
        rates: Mapping[str, float],
        timestamp: datetime,
        provider_timestamp: datetime | None = None,
    ) -> 'RateSnapshot':
        """Build a snapshot from an API style table, which usually lists the base at 1."""
        return cls(
            base_currency=base_currency,
            rates={code: rate for code, rate in rates.items() if code != base_currency},
            timestamp=timestamp,
            provider_timestamp=provider_timestamp,
        )

    def currencies(self) -> list[str]:
        return [self.base_currency, *self.rates.keys()]

    def __hash__(self):
        # rates is a mapping proxy, which is unhashable
        return hash((self.base_currency, self.timestamp))


@dataclass(frozen=True)
class ConversionResult:
    from_currency: str
    to_currency: str
    original_amount: float
    converted_amount: float
    rate: float
    base_currency: str
    timestamp: datetime


@dataclass(frozen=True)
class CurrencyPair:
    from_currency: str
    to_currency: str
    from_flag: str = ''
    to_flag: str = ''

    @property
    def label(self) -> str:
        return f'{self.from_currency}/{self.to_currency}'


@dataclass(frozen=True)
class PairQuote:
    pair: CurrencyPair
    rate: float


@dataclass(frozen=True)
class RateRow:
    code: str
    name: str
    rate: float


@dataclass(frozen=True)
class RefreshStatus:
    state: str
    base_currency: str | None
    is_loading: bool
    timestamp: datetime | None
    provider_timestamp: datetime | None
    last_error: str | None = None
    currencies: list[str] = field(default_factory=list)
