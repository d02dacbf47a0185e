class CurrencyException(Exception):
    pass


class UnknownCurrencyError(CurrencyException):
    def __init__(self, code: str):
        self.code = code
        super().__init__(f'Unsupported currency: {code}')


class FetchError(CurrencyException):
    pass


class RatesUnavailableError(FetchError):
    pass


class CacheError(CurrencyException):
    pass


class CacheCorruptError(CacheError):
    pass


class CacheWriteError(CacheError):
    pass
