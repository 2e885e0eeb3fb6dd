"""
Record storage - whole-collection JSON files with per-collection serialization
"""
from abc import abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, List
import asyncio
import copy
import json
import logging
import os
import tempfile

from ..config import settings
from ..domain.errors import StorageError
from ..domain.models import Record
from ..domain.repositories import IRecordStore, Mutation, R

logger = logging.getLogger(__name__)


class SerializedRecordStore(IRecordStore):
    """
    Runs every load, save and mutate of a collection under that collection's lock

    Readers therefore never see a mutation half applied.
    """

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}

    def _lock_for(self, collection: str) -> asyncio.Lock:
        lock = self._locks.get(collection)
        if lock is None:
            lock = self._locks[collection] = asyncio.Lock()
        return lock

    @abstractmethod
    async def _read(self, collection: str) -> List[Record]:
        pass

    @abstractmethod
    async def _write(self, collection: str, records: List[Record]) -> None:
        pass

    async def load(self, collection: str) -> List[Record]:
        async with self._lock_for(collection):
            return await self._read(collection)

    async def save(self, collection: str, records: List[Record]) -> None:
        async with self._lock_for(collection):
            await self._write(collection, records)

    async def mutate(self, collection: str, fn: Mutation) -> R:
        async with self._lock_for(collection):
            records = await self._read(collection)
            new_records, result = fn(records)
            await self._write(collection, new_records)
            return result


class JsonFileRecordStore(SerializedRecordStore):
    """One JSON array per collection under data_dir"""

    def __init__(self, data_dir: str, retry_attempts: int = 3, retry_delay: float = 0.05):
        super().__init__()
        self.data_dir = Path(data_dir)
        self.retry_attempts = max(1, retry_attempts)
        self.retry_delay = retry_delay

    def path_for(self, collection: str) -> Path:
        return self.data_dir / f"{collection}.json"

    async def initialize(self):
        """Create the data directory ahead of the first write"""
        await self._with_retry("*", "initialize", self.data_dir.mkdir, parents=True, exist_ok=True)
        logger.info(f"Record store ready at {self.data_dir.resolve()}")

    async def _read(self, collection: str) -> List[Record]:
        return await self._with_retry(collection, "read", self._read_file, collection)

    async def _write(self, collection: str, records: List[Record]) -> None:
        await self._with_retry(collection, "write", self._write_file, collection, records)
        logger.debug(f"Saved {len(records)} records to {collection}")

    def _read_file(self, collection: str) -> List[Record]:
        path = self.path_for(collection)
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return []
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise StorageError(collection, f"unreadable JSON in {path.name}: {e}") from e

        if not isinstance(data, list):
            raise StorageError(collection, f"{path.name} does not hold a JSON array")
        return data

    def _write_file(self, collection: str, records: List[Record]) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(collection)

        # Write beside the target and swap in, so a crash leaves the old file intact
        fd, tmp_path = tempfile.mkstemp(dir=self.data_dir, prefix=f".{collection}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    async def _with_retry(self, collection: str, action: str, func: Callable[..., Any], *args, **kwargs):
        """Run blocking file I/O off the event loop, retrying OSError with backoff"""
        delay = self.retry_delay
        for attempt in range(1, self.retry_attempts + 1):
            try:
                return await asyncio.to_thread(func, *args, **kwargs)
            except OSError as e:
                if attempt == self.retry_attempts:
                    logger.error(f"Failed to {action} collection {collection} after {attempt} attempts: {e}")
                    raise StorageError(collection, f"{action} failed: {e}") from e
                logger.warning(f"Retrying {action} of collection {collection} (attempt {attempt}): {e}")
                await asyncio.sleep(delay)
                delay *= 2


class InMemoryRecordStore(SerializedRecordStore):
    """Process-local store with the same contract, for tests and local runs"""

    def __init__(self, initial: Dict[str, List[Record]] = None):
        super().__init__()
        self._collections: Dict[str, List[Record]] = copy.deepcopy(initial or {})

    async def _read(self, collection: str) -> List[Record]:
        return copy.deepcopy(self._collections.get(collection, []))

    async def _write(self, collection: str, records: List[Record]) -> None:
        self._collections[collection] = copy.deepcopy(list(records))


# Global record store instance
record_store = JsonFileRecordStore(
    settings.DATA_DIR,
    retry_attempts=settings.STORAGE_RETRY_ATTEMPTS,
    retry_delay=settings.STORAGE_RETRY_DELAY,
)


async def get_record_store() -> IRecordStore:
    """Dependency for getting the record store"""
    return record_store
