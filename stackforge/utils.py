"""Shared utility functions for Stackforge.

Provides logging setup, Rich console helpers, name/slug conversion, colour
conversion and JSON I/O.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

console = Console()

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


def setup_logging(level: str = "INFO", *, rich_tracebacks: bool = True) -> None:
    """Route the ``stackforge`` logger hierarchy through a Rich handler.

    Safe to call more than once; existing handlers on the package logger are
    replaced rather than duplicated.
    """
    logger = logging.getLogger("stackforge")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.handlers.clear()
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=rich_tracebacks,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(handler)
    logger.propagate = False


# ---------------------------------------------------------------------------
# String / name helpers
# ---------------------------------------------------------------------------


def slugify(text: str) -> str:
    """Convert text to a URL/filename-safe slug (hyphenated).

    Examples::

        slugify("My SaaS App!") -> "my-saas-app"
    """
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower().strip())
    return slug.strip("-")


def to_pascal(name: str) -> str:
    """Convert ``some-thing`` or ``some thing`` to ``SomeThing``."""
    parts = re.split(r"[-_\s]+", name)
    return "".join(word[:1].upper() + word[1:].lower() for word in parts if word)


def to_kebab(name: str) -> str:
    """Convert ``LoginForm`` to ``login-form``."""
    s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1-\2", name)
    s2 = re.sub(r"([a-z0-9])([A-Z])", r"\1-\2", s1)
    return re.sub(r"[_\s]+", "-", s2).lower()


# ---------------------------------------------------------------------------
# Colour helpers
# ---------------------------------------------------------------------------

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{6}|[0-9a-fA-F]{3})$")


def hex_to_hsl(value: str) -> Optional[str]:
    """Convert ``#rrggbb`` (or ``#rgb``) to a CSS-variable HSL triple.

    Returns ``"H S% L%"`` with each component rounded to the nearest
    integer, or ``None`` if *value* is not a hex colour.

    Examples::

        hex_to_hsl("#3b82f6") -> "217 91% 60%"
    """
    match = _HEX_RE.match(value.strip())
    if not match:
        return None
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)

    r, g, b = (int(digits[i : i + 2], 16) / 255 for i in (0, 2, 4))
    high, low = max(r, g, b), min(r, g, b)
    lightness = (high + low) / 2
    hue = saturation = 0.0

    if high != low:
        delta = high - low
        saturation = delta / (2 - high - low) if lightness > 0.5 else delta / (high + low)
        if high == r:
            hue = ((g - b) / delta + (6 if g < b else 0)) / 6
        elif high == g:
            hue = ((b - r) / delta + 2) / 6
        else:
            hue = ((r - g) / delta + 4) / 6

    return f"{round_half_up(hue * 360)} {round_half_up(saturation * 100)}% {round_half_up(lightness * 100)}%"


def round_half_up(value: float) -> int:
    """Round a non-negative value, halves up (round() rounds halves to even)."""
    return int(value + 0.5)


# ---------------------------------------------------------------------------
# JSON I/O
# ---------------------------------------------------------------------------


def load_json(path: str | Path) -> Any:
    """Load and parse a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
    """
    return json.loads(Path(path).read_text(encoding="utf-8"))


def dump_json(data: Any) -> str:
    """Pretty-print *data* the way every generated JSON file is written."""
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_summary_table(data: dict[str, Any], title: str = "Summary") -> None:
    """Print a two-column key/value summary table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")
