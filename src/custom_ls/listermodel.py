from __future__ import annotations

import dataclasses
import os


@dataclasses.dataclass(frozen=True)
class DirectoryEntry:
    """A single entry found in a listed directory."""

    name: str
    absolute_path: str
    is_hidden: bool = False

    @classmethod
    def from_directory(
        cls,
        directory: str,
        name: str,
        hidden_prefix: str = ".",
    ) -> DirectoryEntry:
        """Build an entry for `name` found inside `directory`."""
        return cls(
            name=name,
            absolute_path=os.path.join(os.path.abspath(directory), name),
            is_hidden=bool(hidden_prefix) and name.startswith(hidden_prefix),
        )

    @property
    def display_name(self) -> str:
        """Return the name with undecodable bytes shown as backslash escapes."""
        return os.fsencode(self.name).decode("utf-8", "backslashreplace")


@dataclasses.dataclass(frozen=True)
class ListingRequest:
    """One directory to list and whether hidden entries are shown."""

    directory: str = dataclasses.field(default_factory=os.getcwd)
    show_hidden: bool = False
