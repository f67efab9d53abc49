from __future__ import annotations

import logging
import os
import sys
import time
from typing import TextIO

from .listerconfig import ListerConfig
from .listermodel import DirectoryEntry
from .listermodel import ListingRequest
from .listerstore import DescriptionStore
from .listerstyle import PlainStyle
from .listerstyle import style_for


class Lister:
    """List a directory with the stored description of each entry."""

    logger = logging.getLogger(__name__)

    def __init__(
        self,
        config: ListerConfig,
        store: DescriptionStore,
        *,
        style: PlainStyle | None = None,
        stream: TextIO | None = None,
    ) -> None:
        """
        Initialize a new Lister.

        Args:
            config: The configuration to use for this lister.
            store: The description store, reloaded and saved on every list().

        Keyword Args:
            style: How names are rendered. Defaults to the configured color mode.
            stream: Where listings are written. Defaults to stdout.
        """
        self._config = config
        self._store = store
        self._stream = stream if stream is not None else sys.stdout
        if style is None:
            style = style_for(config.color, self._stream)
        self._style = style

    def list(self, request: ListingRequest) -> list[DirectoryEntry]:
        """
        List one directory, updating the store before anything is printed.

        Raises:
            StoreCorrupt: The store could not be loaded.
            StoreWriteFailed: The store could not be saved.
            OSError: The directory could not be read.
        """
        self.logger.debug(
            "Listing %s (hidden=%s)", request.directory, request.show_hidden
        )
        tic = time.perf_counter()

        entries = self._read_entries(request)

        # Hidden entries are filtered out before the store sees them.
        with self._store as store:
            store.ensure_entries(entry.absolute_path for entry in entries)

        for line in self.render(entries):
            print(line, file=self._stream)

        toc = time.perf_counter()
        self.logger.debug("Listed %d entries in %s seconds", len(entries), toc - tic)

        return entries

    def render(self, entries: list[DirectoryEntry]) -> list[str]:
        """Build the aligned name and description rows for the entries."""
        width = max((len(entry.display_name) for entry in entries), default=0)
        gap = " " * self._config.column_gap

        lines: list[str] = []
        for entry in entries:
            name = entry.display_name
            description = self._store.get(entry.absolute_path)
            if not description:
                lines.append(self._style.name(name))
                continue

            padding = " " * (width - len(name))
            lines.append(f"{self._style.name(name)}{padding}{gap}{description}")

        return lines

    def _read_entries(self, request: ListingRequest) -> list[DirectoryEntry]:
        """Read the immediate entries of the directory, sorted by name."""
        hidden_prefix = self._config.hidden_prefix
        entries: list[DirectoryEntry] = []

        for name in sorted(os.listdir(request.directory)):
            entry = DirectoryEntry.from_directory(
                request.directory,
                name,
                hidden_prefix=hidden_prefix,
            )

            if entry.is_hidden and not request.show_hidden:
                self.logger.debug("Ignoring hidden entry `%s`", name)
                continue

            entries.append(entry)

        return entries
