"""OSC-8 terminal hyperlinks with a plain-text fallback."""

import os
import sys
from typing import TextIO

_LINKING_TERMINALS = frozenset(
    {"apple_terminal", "vscode", "iterm.app", "wezterm", "kitty"}
)


def supports_osc8(stream: TextIO | None = None) -> bool:
    """Best guess at whether *stream* (default stdout) renders OSC-8 links.

    Streams that are not TTYs never do. Otherwise known terminal programs
    are recognised from the environment.
    """
    stream = stream or sys.stdout
    if not getattr(stream, "isatty", lambda: False)():
        return False
    program = (os.getenv("TERM_PROGRAM") or "").lower()
    return bool(
        program in _LINKING_TERMINALS
        or os.getenv("WT_SESSION")  # Windows Terminal
        or os.getenv("VTE_VERSION")  # GNOME Terminal, Tilix
        or os.getenv("TERM", "").startswith(("alacritty", "konsole"))
    )


def hyperlink(url: str, label: str | None = None) -> str:
    """Wrap *url* in OSC-8 escapes, or return the plain text if unsupported."""
    text = label or url
    if not supports_osc8():
        return text if label is None else f"{label} ({url})"
    return f"\x1b]8;;{url}\x07{text}\x1b]8;;\x07"
