"""Top-level ffhistory package.

Re-exports the pipeline stages as subpackages.
"""

from importlib import import_module as _imp

_SUBPACKAGES = ["data", "api", "compute", "badges", "report", "cli"]

for _name in _SUBPACKAGES:
    _imp(f"ffhistory.{_name}")

__all__ = list(_SUBPACKAGES)
