from __future__ import annotations

from typing import TextIO

BOLD = "\x1b[1m"
RESET = "\x1b[0m"

COLOR_MODES = ("auto", "always", "never")


class PlainStyle:
    """Render names exactly as they are."""

    def name(self, text: str) -> str:
        """Return the name unchanged."""
        return text


class BoldStyle(PlainStyle):
    """Render names in bold using ANSI escape codes."""

    def name(self, text: str) -> str:
        """Return the name wrapped in bold escape codes."""
        return f"{BOLD}{text}{RESET}"


def style_for(mode: str, stream: TextIO) -> PlainStyle:
    """
    Pick the style for a color mode.

    Args:
        mode: One of "auto", "always" or "never". Auto styles only when the
            stream is a terminal.
        stream: The stream the listing is written to.

    Raises:
        ValueError: The mode is not recognized.
    """
    if mode not in COLOR_MODES:
        raise ValueError(
            f"Unknown color mode '{mode}', expected one of {COLOR_MODES}"
        )

    if mode == "always":
        return BoldStyle()

    if mode == "auto":
        isatty = getattr(stream, "isatty", None)
        if isatty is not None and isatty():
            return BoldStyle()

    return PlainStyle()
