from __future__ import annotations

import json
import logging
import os
import stat
import tempfile
from typing import TYPE_CHECKING
from typing import Iterable

if TYPE_CHECKING:
    from types import TracebackType
    from typing import Protocol

    class _ListerConfig(Protocol):
        @property
        def store_path(self) -> str:
            ...


class StoreError(Exception):
    """Base error for the description store."""


class StoreCorrupt(StoreError):
    """The persisted store could not be parsed."""


class StoreWriteFailed(StoreError):
    """The store could not be written to disk."""


class DescriptionStore:
    """Persistent mapping of absolute paths to descriptions, kept as JSON."""

    logger = logging.getLogger("custom_ls.DescriptionStore")

    def __init__(self, store_path: str) -> None:
        """
        Initialize a new DescriptionStore backed by the given file.

        Nothing is read until load() is called. The context manager form
        loads on enter and saves on a clean exit:

            with DescriptionStore(path) as store:
                store.ensure_entries(paths)

        Args:
            store_path: Path to the JSON file holding the descriptions. The
                file is created with an empty mapping if it does not exist.
        """
        self._store_path = store_path
        self._descriptions: dict[str, str] | None = None

    @classmethod
    def from_config(cls, config: _ListerConfig) -> DescriptionStore:
        """Build a DescriptionStore from the given configuration."""
        return cls(config.store_path)

    def __enter__(self) -> DescriptionStore:
        """Enter a context manager."""
        self.load()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        """Exit a context manager, saving only if no error occurred."""
        if exc_type is None:
            self.save()

    @property
    def store_path(self) -> str:
        """Return the path of the backing file."""
        return self._store_path

    @property
    def descriptions(self) -> dict[str, str]:
        """Return the loaded mapping. Raises StoreError if not loaded."""
        if self._descriptions is None:
            raise StoreError(f"Store at {self._store_path} has not been loaded")
        return self._descriptions

    def load(self) -> dict[str, str]:
        """
        Read the whole store into memory, creating an empty one if absent.

        Raises:
            StoreCorrupt: The file is not a JSON object of strings to strings.
            StoreWriteFailed: The empty store could not be created.
        """
        if not os.path.exists(self._store_path):
            self.logger.debug("No store at %s, creating one", self._store_path)
            self._write({})
            self._descriptions = {}
            return self._descriptions

        try:
            with open(self._store_path, encoding="utf-8") as store_file:
                content = json.load(store_file)

        except ValueError as error:
            # Covers both malformed JSON and bytes that are not UTF-8.
            raise StoreCorrupt(
                f"Could not parse description store {self._store_path}: {error}"
            ) from error

        except OSError as error:
            raise StoreCorrupt(
                f"Could not read description store {self._store_path}: {error}"
            ) from error

        self._descriptions = self._validate(content)
        self.logger.debug(
            "Loaded %d descriptions from %s",
            len(self._descriptions),
            self._store_path,
        )
        return self._descriptions

    def _validate(self, content: object) -> dict[str, str]:
        """Check the decoded content is a flat mapping of strings."""
        if not isinstance(content, dict):
            raise StoreCorrupt(
                f"Description store {self._store_path} must hold a JSON object, "
                f"found {type(content).__name__}"
            )

        for key, value in content.items():
            if not isinstance(value, str):
                raise StoreCorrupt(
                    f"Description store {self._store_path} has a non-string "
                    f"description for '{key}'"
                )

        return content

    def ensure_entries(self, paths: Iterable[str]) -> int:
        """Add an empty description for each path not already stored."""
        descriptions = self.descriptions
        added = 0
        for path in paths:
            if path not in descriptions:
                descriptions[path] = ""
                added += 1

        self.logger.debug("Added %d new entries", added)
        return added

    def get(self, path: str) -> str:
        """Return the description for a path, empty if there is none."""
        return self.descriptions.get(path, "")

    def describe(self, path: str, description: str) -> None:
        """Set the description for a path."""
        self.descriptions[path] = description

    def prune(self) -> list[str]:
        """Remove entries whose path no longer exists. Returns removed paths."""
        descriptions = self.descriptions
        stale = sorted(path for path in descriptions if not os.path.lexists(path))
        for path in stale:
            del descriptions[path]

        self.logger.debug("Pruned %d stale entries", len(stale))
        return stale

    def save(self) -> None:
        """
        Overwrite the backing file with the in-memory mapping.

        Raises:
            StoreWriteFailed: The file could not be written.
        """
        self._write(self.descriptions)
        self.logger.debug(
            "Saved %d descriptions to %s",
            len(self.descriptions),
            self._store_path,
        )

    def _write(self, descriptions: dict[str, str]) -> None:
        """Write to a temp file beside the store, then replace the store."""
        directory = os.path.dirname(os.path.abspath(self._store_path))
        temp_path = None
        try:
            fd, temp_path = tempfile.mkstemp(
                prefix=".descriptions-",
                suffix=".tmp",
                dir=directory,
            )
            with os.fdopen(fd, "w", encoding="utf-8") as temp_file:
                json.dump(descriptions, temp_file, indent=4, sort_keys=True)
                temp_file.write("\n")

            os.chmod(temp_path, self._file_mode())
            os.replace(temp_path, self._store_path)

        except OSError as error:
            if temp_path and os.path.exists(temp_path):
                os.remove(temp_path)

            raise StoreWriteFailed(
                f"Could not write description store {self._store_path}: {error}"
            ) from error

    def _file_mode(self) -> int:
        """Return the mode of the existing store, or the umask default if new."""
        try:
            return stat.S_IMODE(os.stat(self._store_path).st_mode)

        except FileNotFoundError:
            umask = os.umask(0)
            os.umask(umask)
            return 0o666 & ~umask
