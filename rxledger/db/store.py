"""
BalanceStore - key-value contract used by the ledger.

Operations: get, set, delete, count, enumerate(prefix) and a caller
controlled transaction boundary. Values are JSON-compatible documents.
"""

import asyncio
import copy
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional


class BalanceStore(ABC):
    """Durable key-value store holding the totals and the history log."""

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        ...

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        ...

    @abstractmethod
    async def delete(self, key: str) -> bool:
        ...

    @abstractmethod
    async def count(self) -> int:
        ...

    @abstractmethod
    async def enumerate(self, prefix: str) -> List[Any]:
        """Values whose key starts with prefix, in key order."""

    @abstractmethod
    def transaction(self):
        """Async context manager grouping one read-compute-write cycle."""

    async def close(self) -> None:
        return None


class MemoryBalanceStore(BalanceStore):
    """In-process store; a failed transaction restores the previous state."""

    def __init__(self):
        self._data: Dict[str, Any] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Optional[Any]:
        return copy.deepcopy(self._data.get(key))

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    async def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    async def count(self) -> int:
        return len(self._data)

    async def enumerate(self, prefix: str) -> List[Any]:
        return [
            copy.deepcopy(self._data[key])
            for key in sorted(self._data)
            if key.startswith(prefix)
        ]

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        async with self._lock:
            snapshot = copy.deepcopy(self._data)
            try:
                yield
            except BaseException:
                self._data = snapshot
                raise
