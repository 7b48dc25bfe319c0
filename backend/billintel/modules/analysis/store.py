from __future__ import annotations

from abc import ABC, abstractmethod
from collections import OrderedDict
from dataclasses import dataclass

from billintel.modules.analysis.schemas import AnalysisResult, Period


@dataclass(frozen=True)
class StoredAnalysis:
    session_id: str
    period: Period
    result: AnalysisResult
    created_at: float


class AnalysisStore(ABC):
    """Storage collaborator for finished analyses, keyed by session id."""

    @abstractmethod
    def save(self, entry: StoredAnalysis) -> None:
        ...

    @abstractmethod
    def get(self, session_id: str) -> StoredAnalysis | None:
        ...

    @abstractmethod
    def list_recent(self, limit: int = 20) -> list[StoredAnalysis]:
        ...

    @abstractmethod
    def delete(self, session_id: str) -> bool:
        ...


class MemoryAnalysisStore(AnalysisStore):
    """Process-local store; contents are lost on restart."""

    def __init__(self, max_entries: int = 200):
        self._max_entries = max(1, max_entries)
        # oldest first; re-saving a session moves it to the end
        self._entries: OrderedDict[str, StoredAnalysis] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def save(self, entry: StoredAnalysis) -> None:
        self._entries.pop(entry.session_id, None)
        self._entries[entry.session_id] = entry
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)

    def get(self, session_id: str) -> StoredAnalysis | None:
        return self._entries.get(session_id)

    def list_recent(self, limit: int = 20) -> list[StoredAnalysis]:
        newest_first = list(reversed(self._entries.values()))
        return newest_first[: max(limit, 0)]

    def delete(self, session_id: str) -> bool:
        return self._entries.pop(session_id, None) is not None
