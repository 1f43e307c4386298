"""Career aggregation across every season of an owner, with dense rankings."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from ffhistory.compute.core import dense_rank
from ffhistory.compute.identity import IdentityResolver
from ffhistory.compute.season import TeamSeasonRecord

logger = logging.getLogger(__name__)

SUMMED_FIELDS = (
    "wins",
    "losses",
    "ties",
    "points_for",
    "points_against",
    "top_score_weeks",
    "weekly_top2_scores",
    "blowout_wins",
    "blowout_losses",
    "slim_wins",
    "slim_losses",
    "all_play_wins",
    "all_play_losses",
    "all_play_ties",
)

# metric -> higher is better
RANKED_METRICS = {
    "career_dpr": True,
    "win_percentage": True,
    "all_play_win_percentage": True,
    "wins": True,
    "losses": False,
    "ties": True,
    "points_for": True,
    "points_against": False,
    "average_score": True,
    "high_score": True,
    "low_score": True,
    "championships": True,
    "runner_ups": True,
    "third_places": True,
    "points_titles": True,
    "playoff_appearances": True,
    "winning_seasons": True,
    "losing_seasons": False,
    "top_score_weeks": True,
    "weekly_top2_scores": True,
    "blowout_wins": True,
    "blowout_losses": False,
    "slim_wins": True,
    "slim_losses": False,
    "all_play_wins": True,
    "all_play_losses": False,
    "luck_rating": True,
}


@dataclass(frozen=True, slots=True)
class CareerRecord:
    owner_id: str
    display_name: str
    seasons_played: int = 0
    seasons: tuple[int, ...] = ()
    wins: int = 0
    losses: int = 0
    ties: int = 0
    points_for: float = 0.0
    points_against: float = 0.0
    high_score: float = 0.0
    low_score: float = 0.0
    top_score_weeks: int = 0
    weekly_top2_scores: int = 0
    blowout_wins: int = 0
    blowout_losses: int = 0
    slim_wins: int = 0
    slim_losses: int = 0
    all_play_wins: int = 0
    all_play_losses: int = 0
    all_play_ties: int = 0
    win_percentage: float = 0.0
    all_play_win_percentage: float = 0.0
    luck_rating: float = 0.0
    career_dpr: float = 0.0
    winning_seasons: int = 0
    losing_seasons: int = 0
    championships: int = 0
    runner_ups: int = 0
    third_places: int = 0
    points_titles: int = 0
    playoff_appearances: int = 0
    championship_years: tuple[int, ...] = ()
    ranks: Mapping[str, int] = field(default_factory=dict)
    rank_labels: Mapping[str, str] = field(default_factory=dict)

    @property
    def games_played(self) -> int:
        return self.wins + self.losses + self.ties

    @property
    def average_score(self) -> float:
        g = self.games_played
        return self.points_for / g if g else 0.0


def _aggregate(owner_id: str, name: str, seasons: list[TeamSeasonRecord]) -> dict:
    totals: dict = {f: 0 for f in SUMMED_FIELDS}
    for rec in seasons:
        for f in SUMMED_FIELDS:
            totals[f] += getattr(rec, f)
    totals["points_for"] = round(totals["points_for"], 2)
    totals["points_against"] = round(totals["points_against"], 2)

    games = totals["wins"] + totals["losses"] + totals["ties"]
    ap_games = totals["all_play_wins"] + totals["all_play_losses"] + totals["all_play_ties"]
    win_pct = (totals["wins"] + 0.5 * totals["ties"]) / games if games else 0.0
    ap_pct = (
        (totals["all_play_wins"] + 0.5 * totals["all_play_ties"]) / ap_games if ap_games else 0.0
    )
    weighted = sum(r.adjusted_dpr * r.points_for for r in seasons)
    pf = sum(r.points_for for r in seasons)

    complete = [r for r in seasons if r.is_complete]
    return {
        **totals,
        "owner_id": owner_id,
        "display_name": name,
        "seasons_played": len(seasons),
        "seasons": tuple(r.season for r in seasons),
        "high_score": max((r.high_score for r in seasons), default=0.0),
        "low_score": min((r.low_score for r in seasons), default=0.0),
        "win_percentage": win_pct,
        "all_play_win_percentage": ap_pct,
        "luck_rating": win_pct - ap_pct,
        "career_dpr": weighted / pf if pf > 0 else 0.0,
        "winning_seasons": sum(1 for r in complete if r.wins > r.losses),
        "losing_seasons": sum(1 for r in complete if r.losses > r.wins),
        "championships": sum(1 for r in complete if r.is_champion),
        "runner_ups": sum(1 for r in complete if r.is_runner_up),
        "third_places": sum(1 for r in complete if r.is_third_place),
        "points_titles": sum(1 for r in complete if r.is_points_champion),
        "playoff_appearances": sum(1 for r in complete if r.made_playoffs),
        "championship_years": tuple(r.season for r in complete if r.is_champion),
    }


def seasons_by_owner(
    season_records: Mapping[int, Mapping[str, TeamSeasonRecord]],
) -> dict[str, list[TeamSeasonRecord]]:
    """owner id -> that owner's season records in year order."""
    out: dict[str, list[TeamSeasonRecord]] = {}
    for year in sorted(season_records):
        for owner_id, rec in season_records[year].items():
            out.setdefault(owner_id, []).append(rec)
    return out


def compute_careers(
    season_records: Mapping[int, Mapping[str, TeamSeasonRecord]],
    resolver: IdentityResolver | None = None,
) -> list[CareerRecord]:
    """CareerRecords for every owner, sorted by career DPR (best first)."""
    grouped = seasons_by_owner(season_records)
    rows: dict[str, dict] = {}
    for owner_id, seasons in grouped.items():
        name = resolver.display_name(owner_id) if resolver else seasons[-1].display_name
        rows[owner_id] = _aggregate(owner_id, name, seasons)

    ranks: dict[str, dict[str, int]] = {o: {} for o in rows}
    labels: dict[str, dict[str, str]] = {o: {} for o in rows}
    for metric, higher in RANKED_METRICS.items():
        values = {o: _metric_value(row, metric) for o, row in rows.items()}
        for owner_id, (rank, label) in dense_rank(values, higher_is_better=higher).items():
            ranks[owner_id][metric] = rank
            labels[owner_id][metric] = label

    careers = [
        CareerRecord(**row, ranks=ranks[o], rank_labels=labels[o]) for o, row in rows.items()
    ]
    careers.sort(key=lambda c: (-c.career_dpr, c.display_name.casefold(), c.owner_id))
    logger.debug("Aggregated %d career(s)", len(careers))
    return careers


def _metric_value(row: dict, metric: str) -> float:
    if metric == "average_score":
        games = row["wins"] + row["losses"] + row["ties"]
        return round(row["points_for"] / games, 4) if games else 0.0
    value = row[metric]
    if isinstance(value, float):
        return round(value, 6)
    return value


def careers_by_owner(careers: Iterable[CareerRecord]) -> dict[str, CareerRecord]:
    return {c.owner_id: c for c in careers}
