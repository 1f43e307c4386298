from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

SOURCE_SLEEPER = "sleeper"
SOURCE_EXTERNAL = "external"


@dataclass(frozen=True, slots=True)
class Matchup:
    season: int
    week: int
    roster_a: str
    score_a: float
    roster_b: str
    score_b: float
    matchup_id: int | None = None

    @property
    def is_placeholder(self) -> bool:
        """Both sides at zero: scheduled but never played."""
        return self.score_a == 0 and self.score_b == 0

    @property
    def margin(self) -> float:
        return abs(self.score_a - self.score_b)

    @property
    def combined(self) -> float:
        return self.score_a + self.score_b

    @property
    def is_tie(self) -> bool:
        return self.score_a == self.score_b

    @property
    def winner(self) -> str | None:
        if self.score_a > self.score_b:
            return self.roster_a
        if self.score_b > self.score_a:
            return self.roster_b
        return None

    @property
    def loser(self) -> str | None:
        if self.score_a > self.score_b:
            return self.roster_b
        if self.score_b > self.score_a:
            return self.roster_a
        return None

    def involves(self, roster_id: str) -> bool:
        return roster_id in (self.roster_a, self.roster_b)

    def side(self, roster_id: str) -> tuple[float, str, float]:
        """(own score, opponent roster, opponent score) for ``roster_id``."""
        if roster_id == self.roster_a:
            return self.score_a, self.roster_b, self.score_b
        if roster_id == self.roster_b:
            return self.score_b, self.roster_a, self.score_a
        raise KeyError(roster_id)

    def result_for(self, roster_id: str) -> str:
        own, _, opp = self.side(roster_id)
        if own > opp:
            return "W"
        if own < opp:
            return "L"
        return "T"


@dataclass(frozen=True, slots=True)
class BracketMatch:
    round: int
    match_id: int
    winner: str | None
    loser: str | None
    placement: int | None = None


@dataclass(frozen=True, slots=True)
class User:
    user_id: str
    display_name: str
    team_name: str | None = None


@dataclass(frozen=True, slots=True)
class DraftPick:
    season: int
    round: int
    pick_no: int
    pick_in_round: int
    player_id: str | None
    position: str
    player_name: str = ""
    roster_id: str | None = None
    picked_by: str | None = None
    is_keeper: bool = False
    fantasy_points: float = 0.0
    actual_vorp: float = 0.0
    expected_vorp: float = 0.0
    vorp_delta: float = 0.0
    scaled_vorp_delta: float = 0.0


@dataclass(frozen=True, slots=True)
class Transaction:
    season: int
    week: int
    transaction_id: str
    type: str
    status: str
    roster_ids: tuple[str, ...]
    adds: int = 0
    drops: int = 0

    @property
    def is_complete(self) -> bool:
        return self.status == "complete"


@dataclass(frozen=True, slots=True)
class Season:
    year: int
    weeks: tuple[int, ...]
    playoff_start_week: int
    matchups: tuple[Matchup, ...] = ()
    roster_owners: Mapping[str, str] = field(default_factory=dict)
    co_owners: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    owner_names: Mapping[str, str] = field(default_factory=dict)
    team_names: Mapping[str, str] = field(default_factory=dict)
    scoring_rules: Mapping[str, float] = field(default_factory=dict)
    roster_positions: tuple[str, ...] = ()
    total_rosters: int = 0
    winners_bracket: tuple[BracketMatch, ...] = ()
    losers_bracket: tuple[BracketMatch, ...] = ()
    placements: Mapping[str, int] = field(default_factory=dict)
    draft_picks: tuple[DraftPick, ...] = ()
    transactions: tuple[Transaction, ...] = ()
    source: str = SOURCE_SLEEPER

    @property
    def regular_season_matchups(self) -> tuple[Matchup, ...]:
        return tuple(m for m in self.matchups if m.week < self.playoff_start_week)

    @property
    def championship_decided(self) -> bool:
        return any(b.placement == 1 and b.winner for b in self.winners_bracket)

    @property
    def has_bracket(self) -> bool:
        return bool(self.winners_bracket or self.losers_bracket)


@dataclass(frozen=True, slots=True)
class LeagueState:
    season: int
    week: int


@dataclass(frozen=True, slots=True)
class LeagueDataset:
    """Full league snapshot; the only input the pipeline consumes."""

    seasons: Mapping[int, Season]
    users: Mapping[str, User]
    state: LeagueState
    owner_aliases: Mapping[str, str] = field(default_factory=dict)
    player_stats: Mapping[int, Mapping[str, Mapping]] = field(default_factory=dict)

    @property
    def years(self) -> list[int]:
        return sorted(self.seasons)

    def season_is_complete(self, year: int) -> bool:
        """Placement data for ``year`` is final.

        Decided championship game, explicit placements, or a past season that
        never had a bracket.
        """
        season = self.seasons.get(year)
        if season is None:
            return False
        if season.placements:
            return True
        if season.championship_decided:
            return True
        return not season.has_bracket and year < self.state.season
