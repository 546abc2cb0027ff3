"""Small key/value store backed by JSON files.

Every key is written to two files so a crash halfway through a write
still leaves one readable copy behind.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any

from backend import DEFAULT_DATA_DIR


_SAFE_KEY = re.compile(r"[^A-Za-z0-9_.-]")


class JsonStore:
    def __init__(self, base_dir: Path | str = DEFAULT_DATA_DIR) -> None:
        self.base_dir = Path(base_dir)

    def _paths(self, key: str) -> tuple[Path, Path]:
        name = _SAFE_KEY.sub("_", key)
        return (
            self.base_dir / f"{name}_1.json",
            self.base_dir / f"{name}_2.json",
        )

    def get_item(self, key: str) -> Any:
        """Return the value stored under ``key`` or ``None``."""

        for path in self._paths(key):
            if not path.exists():
                continue
            try:
                text = path.read_text(encoding="utf-8").strip()
                if not text:
                    continue
                return json.loads(text)
            except (OSError, ValueError):
                logging.exception("Could not read %s", path)
        return None

    def set_item(self, key: str, value: Any) -> bool:
        """Persist ``value`` under ``key``. Returns ``False`` on failure."""

        try:
            payload = json.dumps(value)
        except (TypeError, ValueError):
            logging.exception("Value for '%s' is not JSON serialisable", key)
            return False
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
            for path in self._paths(key):
                path.write_text(payload, encoding="utf-8")
        except OSError:
            logging.exception("Could not save '%s'", key)
            return False
        return True

    def remove_item(self, key: str) -> bool:
        removed = True
        for path in self._paths(key):
            try:
                path.unlink()
            except FileNotFoundError:
                pass
            except OSError:
                logging.exception("Could not remove %s", path)
                removed = False
        return removed
