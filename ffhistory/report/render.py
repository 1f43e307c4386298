"""Markdown rendering helpers with deterministic formatting.

Tables are built with escaped pipe characters and stable column ordering to
ensure reproducible output suitable for parsing.
"""
from __future__ import annotations
from typing import Any


def md_escape(s: str) -> str:
    """Escape pipe characters for safe Markdown table rendering."""
    return s.replace("|", "\\|")


def fmt_pct(value: float, places: int = 3) -> str:
    """Win-percentage style: ``.667``, ``1.000``."""
    text = f"{value:.{places}f}"
    return text[1:] if text.startswith("0.") else text


def md_table(headers: list[str], rows: list[list[Any]], align: str = "") -> list[str]:
    """Render a Markdown table into a list of lines (header, separator, rows).

    ``align`` holds one ``l``/``r``/``c`` per column; missing columns align left.
    """
    def esc(v: Any) -> str:
        return md_escape(str(v))

    marks = {"l": ":---", "r": "---:", "c": ":---:"}
    seps = [marks.get(align[i] if i < len(align) else "l", ":---") for i in range(len(headers))]
    lines: list[str] = []
    lines.append("| " + " | ".join(esc(h) for h in headers) + " |")
    lines.append("| " + " | ".join(seps) + " |")
    for r in rows:
        lines.append("| " + " | ".join(esc(c) for c in r) + " |")
    return lines
