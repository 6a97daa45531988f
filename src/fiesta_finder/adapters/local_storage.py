"""Durable local storage: one JSON blob per named key."""

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Generic, Protocol, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)

_logger = logging.getLogger(__name__)

_RAW_LIST = TypeAdapter(list[Any])


class KeyValueStorage(Protocol):
    """Interface for storing opaque string blobs under named keys."""

    def get(self, key: str) -> str | None:
        """Return the blob for a key, if present."""

    def set(self, key: str, value: str) -> None:
        """Replace the blob for a key."""


@dataclass
class FileKeyValueStorage(KeyValueStorage):
    """Stores each key as a JSON file in a directory.

    Writes go to a temporary file that is then renamed over the target, so a
    reader sees either the previous blob or the new one.
    """

    directory: Path

    def get(self, key: str) -> str | None:
        """Return the stored blob, or None when it is missing or not UTF-8."""
        path = self._path(key)
        try:
            return path.read_bytes().decode("utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as exc:
            _logger.warning("Ignoring undecodable %s blob: %s", key, exc.reason)
            return None

    def set(self, key: str, value: str) -> None:
        """Atomically replace the stored blob."""
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self._path(key))
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"


@dataclass
class JsonListPersistence(Generic[ModelT]):
    """Persists a list of models as a single JSON array under one key.

    Items are validated one by one; an unreadable item is skipped so the rest
    of the list survives.
    """

    storage: KeyValueStorage
    key: str
    model: type[ModelT]

    def __post_init__(self) -> None:
        self._adapter = TypeAdapter(list[self.model])  # type: ignore[name-defined]

    def load(self) -> list[ModelT] | None:
        """Return the stored list, or None when absent or not a JSON array."""
        raw = self.storage.get(self.key)
        if raw is None:
            return None
        try:
            items = _RAW_LIST.validate_json(raw)
        except ValidationError:
            _logger.warning("Ignoring malformed %s data in storage", self.key)
            return None
        loaded: list[ModelT] = []
        for index, item in enumerate(items):
            try:
                loaded.append(self.model.model_validate(item))
            except ValidationError as exc:
                _logger.warning(
                    "Skipping unreadable %s entry %d (%s errors)",
                    self.key,
                    index,
                    exc.error_count(),
                )
        return loaded

    def save(self, items: list[ModelT]) -> None:
        """Re-write the full list."""
        payload = self._adapter.dump_json(items, by_alias=True)
        self.storage.set(self.key, payload.decode("utf-8"))
