from dataclasses import dataclass
from typing import Generic, TypeVar

from domain.exceptions.currency import FetchError

T = TypeVar('T')


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    error: FetchError


# Rate sources return one of these instead of raising
FetchResult = Ok[T] | Err
