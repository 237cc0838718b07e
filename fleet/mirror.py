"""
Local mirror stores: durable key/value snapshots of each collection.

A mirror holds one value per key (a collection name). ``get`` returns
``default`` when the key has never been written, so an absent key can be told
apart from an empty list. ``set`` replaces the whole value.
"""

import copy
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .log import get_logger

logger = get_logger(__name__)


class Mirror:
    """Interface consumed by SyncedCollection."""

    def get(self, key: str, default: Any = None) -> Any:
        raise NotImplementedError

    def set(self, key: str, value: Any) -> None:
        raise NotImplementedError


class MemoryMirror(Mirror):
    """
    Process-local mirror.

    Values are stored as JSON text so that callers never share references
    with the stored snapshot.
    """

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    def get(self, key: str, default: Any = None) -> Any:
        raw = self._data.get(key)
        if raw is None:
            return copy.deepcopy(default)
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Mirror entry %r is not valid JSON; ignoring it", key)
            return copy.deepcopy(default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)

    def set_raw(self, key: str, raw: str) -> None:
        """Store text as-is, bypassing serialization."""
        self._data[key] = raw


class JsonFileMirror(Mirror):
    """
    Mirror that keeps each key in ``<directory>/<key>.json``.

    Writes go to a temporary file which then replaces the target, so a
    reader never sees a partially written snapshot.
    """

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise ValueError(f"Invalid mirror key: {key!r}")
        return self.directory / f"{key}.json"

    def get(self, key: str, default: Any = None) -> Any:
        path = self.path_for(key)
        try:
            with open(path, "r", encoding="utf-8") as fp:
                return json.load(fp)
        except FileNotFoundError:
            return copy.deepcopy(default)
        except (OSError, ValueError) as e:
            logger.warning("Could not read mirror file %s: %s", path, e)
            return copy.deepcopy(default)

    def set(self, key: str, value: Any) -> None:
        path = self.path_for(key)
        self.directory.mkdir(parents=True, exist_ok=True)
        tmp = path.with_name(path.name + ".tmp")
        with open(tmp, "w", encoding="utf-8") as fp:
            json.dump(value, fp, indent=2, ensure_ascii=False)
        os.replace(tmp, path)

    def keys(self):
        """Keys that currently have a file in the mirror directory."""
        if not self.directory.exists():
            return []
        return sorted(p.stem for p in self.directory.glob("*.json"))
