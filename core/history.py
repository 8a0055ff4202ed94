import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .config import EngineSettings
from .models import DemandCalculationParameters, DemandCalculationResult

logger = logging.getLogger(__name__)

@dataclass
class HistoryEntry:
    params: DemandCalculationParameters
    result: DemandCalculationResult
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def summary(self) -> Dict[str, Any]:
        params = self.params.to_dict()
        return {
            "id": self.id,
            "projectName": params["projectName"],
            "projectType": params["projectType"],
            "standard": params["standard"],
            "totalConnectedLoad": self.result.total_connected_load,
            "maximumDemand": self.result.maximum_demand,
            "createdAt": self.created_at.isoformat(),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "createdAt": self.created_at.isoformat(),
            "params": self.params.to_dict(),
            "result": self.result.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoryEntry":
        return cls(
            params=DemandCalculationParameters.from_dict(data["params"]),
            result=DemandCalculationResult.from_dict(data["result"]),
            id=data["id"],
            created_at=datetime.fromisoformat(data["createdAt"]),
        )


class CalculationHistory:
    """
    Recent calculations kept in memory, newest first.
    Adding beyond `limit` drops the oldest entry.
    """

    def __init__(self, limit: int = 50):
        if limit < 1:
            raise ValueError("History limit must be >= 1")
        self.limit = limit
        self._entries: List[HistoryEntry] = []

    @classmethod
    def from_settings(cls, settings: Optional[EngineSettings] = None) -> "CalculationHistory":
        return cls((settings or EngineSettings()).history_limit)

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, params: DemandCalculationParameters, result: DemandCalculationResult) -> HistoryEntry:
        entry = HistoryEntry(params=params, result=result)
        self._entries.insert(0, entry)
        del self._entries[self.limit:]
        logger.debug("Stored calculation %s (%d in history)", entry.id, len(self._entries))
        return entry

    def entries(self) -> List[HistoryEntry]:
        return list(self._entries)

    def latest(self) -> Optional[HistoryEntry]:
        return self._entries[0] if self._entries else None

    def get(self, entry_id: str) -> Optional[HistoryEntry]:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def remove(self, entry_id: str) -> bool:
        entry = self.get(entry_id)
        if entry is None:
            return False
        self._entries.remove(entry)
        return True

    def clear(self):
        self._entries.clear()

    def summaries(self) -> List[Dict[str, Any]]:
        return [entry.summary() for entry in self._entries]

    def save(self, path: Union[str, Path]):
        path = Path(path)
        payload = {"limit": self.limit, "entries": [e.to_dict() for e in self._entries]}
        with path.open("w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)
        logger.info("Saved %d calculation(s) to %s", len(self._entries), path)

    @classmethod
    def load(cls, path: Union[str, Path], limit: Optional[int] = None) -> "CalculationHistory":
        path = Path(path)
        with path.open("r", encoding="utf-8") as f:
            payload = json.load(f)
        history = cls(limit or payload.get("limit", 50))
        history._entries = [HistoryEntry.from_dict(e) for e in payload.get("entries", [])][:history.limit]
        logger.info("Loaded %d calculation(s) from %s", len(history._entries), path)
        return history
