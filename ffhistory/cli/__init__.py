from . import history_report

__all__ = ["history_report"]
