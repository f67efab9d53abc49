from __future__ import annotations

import logging
import os
from configparser import ConfigParser

from .listerstyle import COLOR_MODES

DEFAULT_STORE_PATH = os.path.join(os.path.dirname(__file__), "descriptions.json")

NEW_CONFIG = """\
[store]
# The JSON file holding descriptions, keyed by absolute path.
store_path = {store_path}

[display]
# Bold file names: auto (only on a terminal), always, or never.
color = auto
# Spaces between the name column and the description column.
column_gap = 2
# Entries starting with this prefix are hidden unless -a is given.
hidden_prefix = .

    """


class ListerConfig:
    """Configuration for the Lister."""

    logger = logging.getLogger("custom_ls.ListerConfig")

    def __init__(self, filepath: str | None = None) -> None:
        """Load the configuration from the given file, or use defaults if None."""
        self._config = ConfigParser()

        if filepath is None:
            self.logger.debug("No config file given, using defaults")
            return

        success = self._config.read(filepath)

        if not success:
            raise ValueError(f"Could not read config file at {filepath}")

        self.logger.debug("Loaded config from %s", filepath)

    @property
    def store_path(self) -> str:
        """Return the path to the description store."""
        path = self._config.get("store", "store_path", fallback="")
        return os.path.expanduser(path) if path else DEFAULT_STORE_PATH

    @property
    def color(self) -> str:
        """Return the color mode for file names. Will raise if not recognized."""
        mode = self._config.get("display", "color", fallback="auto").lower()
        if mode not in COLOR_MODES:
            raise ValueError(f"Unknown color mode '{mode}' in config")
        return mode

    @property
    def column_gap(self) -> int:
        """Return the number of spaces between the two columns."""
        return self._config.getint("display", "column_gap", fallback=2)

    @property
    def hidden_prefix(self) -> str:
        """Return the prefix marking hidden entries."""
        return self._config.get("display", "hidden_prefix", fallback=".")


def write_new_config(filename: str) -> None:
    """Write a new config file if one does not exist."""
    if os.path.exists(filename):
        return

    config = NEW_CONFIG.format(store_path=DEFAULT_STORE_PATH)

    with open(filename, "w") as config_file:
        config_file.write(config)
