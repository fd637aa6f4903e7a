"""
State store used by the workflow engine and the prepayment ledger

Records are keyed by user id. The in-memory store is volatile: everything is
lost on restart.
"""

from abc import ABC, abstractmethod
from typing import Any, Iterator, List, Optional, Tuple


class StateStore(ABC):
    """Key/value store for per-user records carrying a timestamp attribute"""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        ...

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        ...

    @abstractmethod
    def delete(self, key: str) -> bool:
        ...

    @abstractmethod
    def items(self) -> Iterator[Tuple[str, Any]]:
        ...

    @abstractmethod
    def scan_expired(self, cutoff: float, inclusive: bool = False) -> List[str]:
        """Keys whose record timestamp is older than cutoff"""
        ...

    def __len__(self) -> int:
        return sum(1 for _ in self.items())


class MemoryStore(StateStore):
    """Dict-backed store"""

    def __init__(self, timestamp_attr: str = 'timestamp'):
        self.timestamp_attr = timestamp_attr
        self._records: dict = {}

    def get(self, key: str) -> Optional[Any]:
        return self._records.get(key)

    def set(self, key: str, value: Any) -> None:
        self._records[key] = value

    def delete(self, key: str) -> bool:
        return self._records.pop(key, None) is not None

    def items(self) -> Iterator[Tuple[str, Any]]:
        # Snapshot so callers can delete while iterating
        return iter(list(self._records.items()))

    def scan_expired(self, cutoff: float, inclusive: bool = False) -> List[str]:
        expired = []
        for key, record in self._records.items():
            stamp = getattr(record, self.timestamp_attr)
            if stamp < cutoff or (inclusive and stamp == cutoff):
                expired.append(key)
        return expired

    def __len__(self) -> int:
        return len(self._records)
