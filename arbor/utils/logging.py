from __future__ import annotations
"""Rich-backed logging for arbor.

Plain log messages go through the standard :mod:`logging` machinery rendered
by :class:`rich.logging.RichHandler`. :func:`show_tree` prints a node
hierarchy to the shared console.
"""
from logging import Logger, getLogger, INFO, DEBUG, WARNING, ERROR, basicConfig
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

console = Console()

__all__ = [
    "console",
    "log",
    "get",
    "show_tree",
]

_LEVEL_MAP = {
    "info": INFO,
    "debug": DEBUG,
    "warning": WARNING,
    "error": ERROR,
}

# Configure root once with Rich handler for plain log messages
basicConfig(
    level=WARNING,
    format="%(message)s",
    datefmt="%H:%M:%S",
    handlers=[RichHandler(console=console, rich_tracebacks=True, markup=False)],
)

log: Logger = getLogger("arbor")


def get(level: str = "info") -> Logger:  # noqa: D401
    """Return the arbor logger set to *level* (str)."""
    lvl = _LEVEL_MAP.get(level.lower(), INFO)
    lg = getLogger("arbor")
    lg.setLevel(lvl)
    return lg


def show_tree(node: Any, **kw) -> None:  # noqa: D401
    """Print *node* and its descendants as a Rich tree."""
    from arbor.utils.tree import build_rich_tree  # local import avoids a cycle with core

    console.print(build_rich_tree(node, **kw))
