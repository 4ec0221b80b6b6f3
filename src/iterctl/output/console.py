"""Rich console and theme used by the human-readable renderers.

Renderers draw into an in-memory console and return the text, so the
commands decide where it goes. Rich drops the styling on its own when
that text is not bound for a terminal.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

ITERCTL_THEME = Theme(
    {
        "iter.ok": "bold green",
        "iter.error": "bold red",
        "iter.warning": "bold yellow",
        "iter.op": "bold cyan",
        "iter.key": "dim",
        "iter.project": "bold",
        "iter.name": "bold blue",
        "iter.date": "cyan",
        "iter.mode.bootstrap": "magenta",
        "iter.mode.extend": "green",
    }
)
MODE_STYLES = {"bootstrap": "iter.mode.bootstrap", "extend": "iter.mode.extend"}


def create_console(width: int = 120) -> Console:
    """Console that records into a string buffer; read it with :func:`get_output`."""
    return Console(file=StringIO(), theme=ITERCTL_THEME, highlight=False, width=width)


def get_output(console: Console) -> str:
    buffer = console.file
    if not isinstance(buffer, StringIO):
        raise TypeError("console was not created by create_console()")
    return buffer.getvalue()


def style_for_mode(mode: str) -> str:
    return MODE_STYLES.get(mode, "")
