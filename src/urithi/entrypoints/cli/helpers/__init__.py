"""CLI helpers for URITHI.

Safe display of database URLs, OSC-8 hyperlinks where the terminal supports
them, stderr message emitters with ASCII fallbacks, and loaders that turn
configuration problems into click errors.
"""

from .app import load_app, load_schedule
from .db_url import sanitize_url
from .hyperlinks import hyperlink
from .messages import error, success, warn

__all__ = [
    "sanitize_url",
    "warn",
    "success",
    "error",
    "hyperlink",
    "load_app",
    "load_schedule",
]
