"""Error taxonomy for the history pipeline.

Calculators raise these for a single bad unit (one roster side, one matchup,
one player fetch) and catch them one level up, so no single record aborts a
whole run.
"""

from __future__ import annotations


class HistoryDataError(Exception):
    """Base class for recoverable data problems."""


class MissingIdentityMapping(HistoryDataError):
    """A roster has no owner for its season."""

    def __init__(self, season: int, roster_id: str) -> None:
        super().__init__(f"No owner mapping for roster {roster_id} in season {season}")
        self.season = season
        self.roster_id = roster_id


class MalformedScore(HistoryDataError):
    """A matchup side carries a score that is not a finite number."""

    def __init__(self, value: object, context: str = "") -> None:
        msg = f"Malformed score {value!r}"
        if context:
            msg = f"{msg} ({context})"
        super().__init__(msg)
        self.value = value


class IncompleteSeasonData(HistoryDataError):
    """A season has no playable matchups."""

    def __init__(self, season: int) -> None:
        super().__init__(f"Season {season} has no playable matchups")
        self.season = season


class UpstreamFetchFailure(HistoryDataError):
    """A per-player stat fetch failed."""

    def __init__(self, player_id: str, season: int, cause: Exception | None = None) -> None:
        super().__init__(f"Stat fetch failed for player {player_id} in {season}: {cause}")
        self.player_id = player_id
        self.season = season
        self.cause = cause


class ConfigError(ValueError):
    """Invalid pipeline configuration."""
