import asyncio
import re
from pathlib import Path


class InMemoryCacheStore:
    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value


class FileCacheStore:
    """One JSON file per key under ``directory``; survives process restarts."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def _path_for(self, key: str) -> Path:
        safe_key = re.sub(r'[^A-Za-z0-9_.-]', '_', key)
        return self.directory / f'{safe_key}.json'

    def _read(self, key: str) -> str | None:
        path = self._path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding='utf-8')

    def _write(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path_for(key)
        tmp_path = path.with_suffix('.tmp')
        tmp_path.write_text(value, encoding='utf-8')
        tmp_path.replace(path)

    async def get(self, key: str) -> str | None:
        return await asyncio.to_thread(self._read, key)

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._write, key, value)
