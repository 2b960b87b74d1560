"""
Persistent key/value storage
Completion markers of signed-in users survive restarts in a JSON file.
One instance is shared by every Streamlit session of the server process,
so writes are serialized.
"""
import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, Iterator

logger = logging.getLogger(__name__)


class PersistentStore:
    """JSON-file backed string store with a dict-like interface"""

    def __init__(self, storage_dir: str, filename: str):
        """
        Args:
            storage_dir: directory holding the JSON file
            filename: JSON file name
        """
        self.storage_dir = Path(storage_dir)
        self.filepath = self.storage_dir / filename
        self._lock = threading.RLock()

        self.storage_dir.mkdir(parents=True, exist_ok=True)

        self._data: Dict[str, Any] = self._load()

    def _load(self) -> Dict[str, Any]:
        """Read the file; a missing or corrupt file starts empty"""
        if self.filepath.exists():
            try:
                with open(self.filepath, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                if isinstance(data, dict):
                    return data
                logger.warning("Store file %s does not hold an object, starting empty", self.filepath)
            except (OSError, ValueError) as e:
                logger.warning("Failed to load store file %s: %s, starting empty", self.filepath, e)
        return {}

    def _save(self):
        """Write to a temp file then replace, so readers never see half a file.
        Callers hold the lock."""
        temp_file = self.filepath.with_suffix('.tmp')
        try:
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(self._data, f, ensure_ascii=False, indent=2, default=str)
            temp_file.replace(self.filepath)
        except OSError as e:
            logger.error("Failed to save store file %s: %s", self.filepath, e)
            raise

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._data.get(key, default)

    def set(self, key: str, value: Any):
        with self._lock:
            self._data[key] = value
            self._save()

    def delete(self, key: str):
        with self._lock:
            if key in self._data:
                del self._data[key]
                self._save()

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._data

    def __getitem__(self, key: str) -> Any:
        with self._lock:
            return self._data[key]

    def __setitem__(self, key: str, value: Any):
        self.set(key, value)

    def __delitem__(self, key: str):
        with self._lock:
            if key not in self._data:
                raise KeyError(key)
            self.delete(key)

    def __iter__(self) -> Iterator[str]:
        with self._lock:
            return iter(list(self._data))

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def clear(self):
        with self._lock:
            self._data.clear()
            self._save()
