"""Key-value backends holding JSON documents.

``load`` returns None for a missing key and raises CorruptDataError when the
stored text is not valid JSON. ``dump`` replaces the whole document.
``set_aside`` moves a document out of the way, keeping its contents for
manual recovery.
"""
from __future__ import annotations

import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

from common.errors import CorruptDataError

LOGGER = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"[^A-Za-z0-9._-]")


def _decode(key: str, text: Optional[str]) -> Any:
    if text is None:
        return None
    try:
        return json.loads(text)
    except ValueError as e:
        raise CorruptDataError(key, str(e)) from e


class MemoryBackend:
    """Backend kept in a dict of raw JSON strings."""

    def __init__(self):
        self.raw: Dict[str, str] = {}

    def load(self, key: str) -> Any:
        return _decode(key, self.raw.get(key))

    def dump(self, key: str, value: Any) -> None:
        self.raw[key] = json.dumps(value)

    def remove(self, key: str) -> None:
        self.raw.pop(key, None)

    def set_aside(self, key: str) -> Optional[str]:
        if key not in self.raw:
            return None
        kept = f"{key}.corrupt"
        self.raw[kept] = self.raw.pop(key)
        return kept


class JsonFileBackend:
    """One ``<key>.json`` file per key under ``directory``."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{_SAFE_KEY.sub('_', key)}.json"

    def load(self, key: str) -> Any:
        p = self.path_for(key)
        if not p.exists():
            return None
        return _decode(key, p.read_text(encoding="utf-8"))

    def dump(self, key: str, value: Any) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        target = self.path_for(key)
        fd, tmp = tempfile.mkstemp(prefix=target.name, suffix=".tmp", dir=self.directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(value, f, ensure_ascii=False, indent=2)
            os.replace(tmp, target)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise
        LOGGER.debug("Wrote %s", target)

    def remove(self, key: str) -> None:
        p = self.path_for(key)
        if p.exists():
            p.unlink()

    def set_aside(self, key: str) -> Optional[str]:
        """Rename an unreadable document to ``<file>.corrupt`` so it is not overwritten."""
        p = self.path_for(key)
        if not p.exists():
            return None
        kept = p.with_name(p.name + ".corrupt")
        os.replace(p, kept)
        return str(kept)
