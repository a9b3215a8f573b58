"""Client-local key-value state.

String values under string keys, local to one client. Used for the
persisted product filters.
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path

import structlog

logger = structlog.get_logger()


class KeyValueStore(ABC):
    """Synchronous string key-value store."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Value under key, or None."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store value under key."""


class InMemoryKeyValueStore(KeyValueStore):
    """Dict-backed store."""

    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value


class JsonFileKeyValueStore(KeyValueStore):
    """Store kept as one JSON object in a file.

    An unreadable or corrupt file reads as empty.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning("Local state unreadable", path=str(self.path), error=str(e))
            return {}
        if not isinstance(raw, dict):
            return {}
        return {k: v for k, v in raw.items() if isinstance(v, str)}

    def _save(self, values: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(values), encoding="utf-8")

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        values = self._load()
        values[key] = value
        self._save(values)
