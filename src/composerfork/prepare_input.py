"""Turning a markdown list of PR links into command-line arguments."""

from __future__ import annotations

from typing import List

from .errors import ComposerForkError

FORMATS = ("pr", "spaces")


def _list_items(text: str) -> List[str]:
    items = []
    for line in text.strip().splitlines():
        if not line.startswith("- "):
            raise ComposerForkError(f"Expected URLs in markdown list. Line was {line}")
        items.append(line.lstrip("- "))
    return items


def prepare_input(text: str, fmt: str = "spaces") -> str:
    """Format a markdown list of links.

    ``pr`` gives ``--pr=a --pr=b``; ``spaces`` gives ``a b``.
    """
    items = _list_items(text)
    fmt = fmt.lower()
    if fmt == "pr":
        return " ".join(f"--pr={item}" for item in items)
    if fmt == "spaces":
        return " ".join(items)
    raise ComposerForkError(f"Format not accepted: {fmt}")
