"""
Blob storage backends for the rule store.

The whole rule collection is kept as one serialized blob under one key.
A backend only has to read and write that blob; an absent blob is reported
as ``None`` and treated by the store as "no rules yet".
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol

from core.config import Settings
from core.exceptions import StorageCorruptedError, StorageReadError

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "ruleweave_rules"


class RuleStorage(Protocol):
    """Capability the store needs: read and write one serialized blob."""

    def read(self) -> Optional[str]:
        ...

    def write(self, blob: str) -> None:
        ...


class InMemoryStorage:
    def __init__(self, key: str = DEFAULT_STORAGE_KEY):
        self.key = key
        self.blobs: dict[str, str] = {}

    def read(self) -> Optional[str]:
        return self.blobs.get(self.key)

    def write(self, blob: str) -> None:
        self.blobs[self.key] = blob


class FileStorage:
    """
    Keeps the blob in a single JSON file, created on first write.

    Only a missing file reads as empty. A file that exists but cannot be read
    or decoded raises, so a later write never replaces rules that are still
    on disk.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def read(self) -> Optional[str]:
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as e:
            logger.error("Rule storage %s is not valid UTF-8: %s", self.path, e)
            raise StorageCorruptedError("Stored rules could not be decoded") from e
        except OSError as e:
            logger.error("Rule storage %s unreadable: %s", self.path, e)
            raise StorageReadError("Stored rules could not be read") from e

    def write(self, blob: str) -> None:
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=self.path.parent,
                prefix=f".{self.path.name}.", suffix=".tmp", delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(blob)
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as e:
            logger.warning("Rule storage %s unwritable, dropping write: %s", self.path, e)
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)


class UnavailableStorage:
    """No persistent storage in this context: reads are empty, writes are dropped."""

    def read(self) -> Optional[str]:
        return None

    def write(self, blob: str) -> None:
        logger.warning("No rule storage configured, dropping %d bytes", len(blob))


def create_storage(settings: Settings) -> RuleStorage:
    if settings.storage_backend == "memory":
        return InMemoryStorage(settings.storage_key)
    if settings.storage_backend == "none":
        return UnavailableStorage()
    return FileStorage(settings.storage_path)
