"""Key/value option store used for small pieces of persistent state.

Options are global name/value pairs stored as strings. Options flagged as
``autoload`` are meant to be loaded in bulk at startup via
``get_autoloaded``.
"""

import json
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from webstats.utils.logger import log_warning


class OptionStore(ABC):
    """Abstract option store."""

    @abstractmethod
    def get(self, name: str) -> Optional[str]:
        """Return the option value, or None if it was never set."""

    @abstractmethod
    def set(self, name: str, value: Any, autoload: bool = False) -> None:
        """Store an option, converting the value to a string."""

    @abstractmethod
    def delete(self, name: str) -> bool:
        """Remove an option. Returns True if it existed."""

    @abstractmethod
    def get_autoloaded(self) -> Dict[str, str]:
        """Return every option flagged for autoloading."""


class MemoryOptionStore(OptionStore):
    """Option store kept in a dict, for tests and single-process tools."""

    def __init__(self):
        self._options: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def get(self, name: str) -> Optional[str]:
        with self._lock:
            option = self._options.get(name)
            return option["value"] if option else None

    def set(self, name: str, value: Any, autoload: bool = False) -> None:
        with self._lock:
            self._options[name] = {"value": str(value), "autoload": bool(autoload)}

    def delete(self, name: str) -> bool:
        with self._lock:
            return self._options.pop(name, None) is not None

    def get_autoloaded(self) -> Dict[str, str]:
        with self._lock:
            return {name: option["value"] for name, option in self._options.items() if option["autoload"]}


class FileOptionStore(MemoryOptionStore):
    """Option store persisted to a JSON file.

    The file is re-read on every access, so several stores (or processes)
    sharing one path see each other's changes. Writes re-read the file,
    apply the change and replace the file atomically; a crash never leaves a
    half-written file behind.
    """

    def __init__(self, path: str):
        super().__init__()
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def _load(self) -> Dict[str, Dict[str, Any]]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            log_warning("Ignoring unreadable option file", path=str(self.path), error=str(e))
            return {}

        if not isinstance(data, dict):
            log_warning("Ignoring malformed option file", path=str(self.path))
            return {}

        return {
            name: {"value": str(option.get("value", "")), "autoload": bool(option.get("autoload", False))}
            for name, option in data.items()
            if isinstance(option, dict)
        }

    def _write(self) -> None:
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".options-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._options, f, indent=2, sort_keys=True)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def get(self, name: str) -> Optional[str]:
        with self._lock:
            self._options = self._load()
            option = self._options.get(name)
            return option["value"] if option else None

    def get_autoloaded(self) -> Dict[str, str]:
        with self._lock:
            self._options = self._load()
            return {name: option["value"] for name, option in self._options.items() if option["autoload"]}

    def set(self, name: str, value: Any, autoload: bool = False) -> None:
        with self._lock:
            self._options = self._load()
            self._options[name] = {"value": str(value), "autoload": bool(autoload)}
            self._write()

    def delete(self, name: str) -> bool:
        with self._lock:
            self._options = self._load()
            existed = self._options.pop(name, None) is not None
            if existed:
                self._write()
            return existed
