from redis import asyncio as redis


class RedisCacheStore:
    def __init__(self, redis_client: redis.Redis):
        self.redis = redis_client

    @classmethod
    def from_url(cls, redis_url: str) -> 'RedisCacheStore':
        return cls(redis.Redis.from_url(redis_url, decode_responses=True))

    async def get(self, key: str) -> str | None:
        data = await self.redis.get(key)
        if data is None:
            return None
        if isinstance(data, bytes):
            return data.decode('utf-8')
        return data

    async def set(self, key: str, value: str) -> None:
        # No TTL: expiry is decided by RateCache from the stored timestamp
        await self.redis.set(key, value)

    async def close(self) -> None:
        await self.redis.aclose()
