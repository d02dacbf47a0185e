from typing import Protocol


class CacheStore(Protocol):
    """Key/value string store holding serialized cache entries."""

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...
