"""User-facing status lines for the URITHI CLI.

Messages go to stderr so stdout carries only command output. Each line is
prefixed with an emoji when the stream can encode it and an ASCII marker
otherwise.
"""

import click


def _encodable(character: str) -> bool:
    """True if stderr's encoding can represent *character*."""
    stream = click.get_text_stream("stderr")  # pragma: no mutate
    encoding = getattr(stream, "encoding", None) or "ascii"
    try:
        character.encode(encoding)
    except UnicodeEncodeError:
        return False
    return True


def _glyph(emoji: str, fallback: str) -> str:
    return emoji if _encodable(emoji) else fallback


def caution_glyph() -> str:
    return _glyph("⚠️", "[!]")  # pragma: no mutate


def success_glyph() -> str:
    return _glyph("✅", "[OK]")  # pragma: no mutate


def error_glyph() -> str:
    return _glyph("❌", "[X]")  # pragma: no mutate


def warn(msg: str) -> None:
    """Print *msg* as a bold yellow warning on stderr."""
    click.secho(f"{caution_glyph()}  {msg}", fg="yellow", bold=True, err=True)


def success(msg: str) -> None:
    """Print *msg* as a bold green success line on stderr."""
    click.secho(f"{success_glyph()}  {msg}", fg="green", bold=True, err=True)


def error(msg: str) -> None:
    """Print *msg* as a bold red error line on stderr."""
    click.secho(f"{error_glyph()}  {msg}", fg="red", bold=True, err=True)
