"""Rich Console factory and theme for ctdata output.

Consoles render into a StringIO buffer so renderers return strings and
the CLI decides where they go. Outside a terminal (tests, pipes) Rich
drops color codes on its own.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

CT_THEME = Theme(
    {
        "ct.ok": "bold green",
        "ct.error": "bold red",
        "ct.warning": "bold yellow",
        "ct.op": "bold cyan",
        "ct.key": "dim",
        "ct.source": "bold blue",
        "ct.path": "dim",
        "ct.count": "magenta",
        "ct.stage": "cyan",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=CT_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 100,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()
