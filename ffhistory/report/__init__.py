from . import formatters, models, render
from .formatters import build_context, format_json, format_markdown, to_json_payload
from .models import HistoryContext

__all__ = [
    "formatters",
    "models",
    "render",
    "HistoryContext",
    "build_context",
    "format_json",
    "format_markdown",
    "to_json_payload",
]
