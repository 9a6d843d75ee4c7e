from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class StorageError(Exception):
    pass


class StateLoadError(StorageError):
    """Persisted data for a key could not be parsed or validated."""

    def __init__(self, key: str, reason: str):
        super().__init__(f"Could not load '{key}': {reason}")
        self.key = key
        self.reason = reason


def load_json(path: Path | str, default: Any = None) -> Any:
    """
    Load JSON from path:
    - If missing or empty: return default
    - If invalid: raise StateLoadError
    """
    path = Path(path)
    if not path.exists():
        return default

    raw_text = path.read_text(encoding="utf-8")
    text = raw_text.strip()
    if not text:
        logger.warning("%s is empty, using defaults", path.name)
        return default

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        logger.error("Invalid JSON in %s: %s", path, e)
        raise StateLoadError(path.stem, f"invalid JSON ({e.msg} at line {e.lineno})") from e


def save_json(path: Path | str, payload: Any) -> None:
    """
    Atomic JSON write: write to temp file then replace target.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    temp = path.with_suffix(path.suffix + ".tmp")
    temp.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2),
        encoding="utf-8",
    )
    temp.replace(path)


class KeyValueStore:
    """One JSON file per key inside a directory."""

    def __init__(self, root: Path | str):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        return self.root / f"{key}.json"

    def get(self, key: str, default: Any = None) -> Any:
        return load_json(self.path_for(key), default)

    def set(self, key: str, value: Any) -> None:
        save_json(self.path_for(key), value)

    def delete(self, key: str) -> None:
        try:
            self.path_for(key).unlink()
        except FileNotFoundError:
            pass

    def keys(self) -> list[str]:
        return sorted(p.stem for p in self.root.glob("*.json"))
