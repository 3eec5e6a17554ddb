"""JSON file template store.

Keeps the template text in a small JSON key/value file, the way a browser
keeps it in localStorage, so several keys can share one file.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from simple_te.interfaces.store import BaseTemplateStore

logger = logging.getLogger(__name__)


class JsonFileTemplateStore(BaseTemplateStore):
    """Persists template text under a key of a JSON object on disk."""

    def __init__(
        self,
        path: Path | str,
        key: str = "simple-te:textraw",
    ) -> None:
        """Initialize the store.

        Args:
            path: Location of the JSON file. Parent directories are created
                on first save.
            key: Entry under which the template text is kept.
        """
        self._path = Path(path)
        self._key = key

    @property
    def path(self) -> Path:
        return self._path

    def load_template_text(self) -> str | None:
        """Load the saved text, or None if there is none or it is unreadable."""
        entries = self._read_entries()
        value = entries.get(self._key)
        if value is None:
            return None
        if not isinstance(value, str):
            logger.warning(f"Ignoring non-string value for '{self._key}' in {self._path}")
            return None
        return value

    def save_template_text(self, text: str) -> None:
        """Write the text atomically, preserving other keys in the file.

        Raises:
            OSError: If the file cannot be written.
        """
        entries = self._read_entries()
        entries[self._key] = text
        self._atomic_write(entries)
        logger.debug(f"Saved {len(text)} characters to {self._path}")

    def _read_entries(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}

        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read template store {self._path}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Template store {self._path} is not a JSON object")
            return {}
        return data

    def _atomic_write(self, entries: dict[str, Any]) -> None:
        """Write to a temp file in the same directory, then rename over."""
        self._path.parent.mkdir(parents=True, exist_ok=True)

        temp_path: Path | None = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="w",
                dir=self._path.parent,
                suffix=".tmp",
                delete=False,
                encoding="utf-8",
            ) as f:
                temp_path = Path(f.name)
                json.dump(entries, f, indent=2, ensure_ascii=False)
                f.flush()
                try:
                    os.fsync(f.fileno())
                except OSError as e:
                    logger.warning(f"File fsync failed for {self._path}: {e}")

            os.replace(temp_path, self._path)
            temp_path = None
        finally:
            if temp_path is not None and temp_path.exists():
                temp_path.unlink()
