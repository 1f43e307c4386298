"""Per-season team metrics: head-to-head, all-play, DPR, luck, margins, finishes."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ffhistory import constants as C
from ffhistory.compute.core import compute_weekly_results, longest_streaks, roster_sort_key
from ffhistory.compute.identity import IdentityResolver
from ffhistory.config import DEFAULT_CONFIG, PipelineConfig
from ffhistory.data.models import SOURCE_EXTERNAL, LeagueDataset, Matchup, Season
from ffhistory.errors import IncompleteSeasonData, MissingIdentityMapping

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TeamSeasonRecord:
    owner_id: str
    roster_id: str
    season: int
    display_name: str
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
    raw_dpr: float = 0.0
    adjusted_dpr: float = 0.0
    luck_rating: float = 0.0
    longest_win_streak: int = 0
    longest_loss_streak: int = 0
    rank: int = 0
    standings_rank: int = 0
    points_rank: int = 0
    playoff_finish: int | None = None
    made_playoffs: bool = False
    is_complete: bool = False
    is_champion: bool = False
    is_runner_up: bool = False
    is_third_place: bool = False
    is_regular_season_champion: bool = False
    is_points_champion: bool = False
    is_points_runner_up: bool = False
    is_points_third: bool = False
    # (week, score, opponent score, opponent roster id)
    weekly_scores: tuple[tuple[int, float, float, str], ...] = field(default=())

    @property
    def games_played(self) -> int:
        return self.wins + self.losses + self.ties

    @property
    def all_play_games(self) -> int:
        return self.all_play_wins + self.all_play_losses + self.all_play_ties

    @property
    def average_score(self) -> float:
        g = self.games_played
        return self.points_for / g if g else 0.0


def raw_dpr(
    points_for: float,
    games: int,
    high: float,
    low: float,
    win_pct: float,
    config: PipelineConfig = DEFAULT_CONFIG,
) -> float:
    """Unnormalized DPR from the team's own season scoring and win rate."""
    if not games:
        return 0.0
    ppg = points_for / games
    return (
        ppg * config.dpr_points_weight
        + (high + low) * config.dpr_extremes_weight
        + (win_pct * config.dpr_win_scale) * config.dpr_win_weight
    ) / config.dpr_divisor


def classify_margin(
    winner_score: float, loser_score: float, config: PipelineConfig = DEFAULT_CONFIG
) -> str | None:
    """``"blowout"``, ``"slim"`` or None, relative to the loser's score."""
    margin = winner_score - loser_score
    if margin <= 0:
        return None
    if loser_score <= 0 or margin >= config.blowout_margin_pct * loser_score:
        return "blowout"
    if margin < config.slim_margin_pct * loser_score:
        return "slim"
    return None


def playoff_finishes(season: Season, standings_order: list[str]) -> dict[str, int]:
    """roster id -> final place.

    Winners-bracket placement games rank the winner ``p`` and the loser
    ``p + 1``; losers-bracket games rank the same way without overriding a
    better place. Unranked rosters follow in ``standings_order``.
    """
    if season.placements:
        return dict(season.placements)
    if not season.has_bracket:
        return {}
    finishes: dict[str, int] = {}
    for b in sorted(season.winners_bracket, key=lambda b: (-b.round, -b.match_id)):
        if b.winner and b.loser and b.placement is not None:
            finishes.setdefault(b.winner, b.placement)
            finishes.setdefault(b.loser, b.placement + 1)
    for b in sorted(season.losers_bracket, key=lambda b: (-b.round, -b.match_id)):
        if b.winner and b.loser and b.placement is not None:
            for rid, place in ((b.winner, b.placement), (b.loser, b.placement + 1)):
                if rid not in finishes or finishes[rid] > place:
                    finishes[rid] = place
    next_rank = max(finishes.values(), default=0) + 1
    for rid in standings_order:
        if rid not in finishes:
            finishes[rid] = next_rank
            next_rank += 1
    return finishes


class _Acc:
    """Mutable per-roster accumulator, frozen into a TeamSeasonRecord at the end."""

    __slots__ = (
        "wins", "losses", "ties", "pf", "pa", "scores", "top", "top2",
        "bw", "bl", "sw", "sl", "apw", "apl", "apt", "log",
    )

    def __init__(self) -> None:
        self.wins = self.losses = self.ties = 0
        self.pf = self.pa = 0.0
        self.scores: list[float] = []
        self.top = self.top2 = 0
        self.bw = self.bl = self.sw = self.sl = 0
        self.apw = self.apl = self.apt = 0
        self.log: list[tuple[int, float, float, str]] = []


def _playable(season: Season, owners: dict[str, str]) -> list[Matchup]:
    games = []
    missing: set[str] = set()
    for m in season.regular_season_matchups:
        if m.is_placeholder:
            continue
        for rid in (m.roster_a, m.roster_b):
            if rid not in owners:
                missing.add(rid)
        games.append(m)
    for rid in sorted(missing, key=roster_sort_key):
        logger.warning("%s", MissingIdentityMapping(season.year, rid))
    return games


def compute_season_records(
    dataset: LeagueDataset,
    year: int,
    resolver: IdentityResolver | None = None,
    config: PipelineConfig = DEFAULT_CONFIG,
) -> dict[str, TeamSeasonRecord]:
    """owner id -> TeamSeasonRecord for one season's regular season.

    Sides without an owner mapping are dropped (their opponents keep the
    game); 0-0 placeholders never count. A season with no playable games
    yields an empty mapping.
    """
    season = dataset.seasons[year]
    resolver = resolver or IdentityResolver(dataset)
    owners = resolver.owners_for_season(year)
    games = _playable(season, owners)
    if not games:
        logger.warning("%s", IncompleteSeasonData(year))
        return {}

    accs: dict[str, _Acc] = {}
    by_week: dict[int, list[tuple[str, float]]] = {}
    for m in games:
        for rid in (m.roster_a, m.roster_b):
            if rid not in owners:
                continue
            own, opp_rid, opp = m.side(rid)
            acc = accs.setdefault(rid, _Acc())
            acc.pf += own
            acc.pa += opp
            acc.scores.append(own)
            acc.log.append((m.week, own, opp, opp_rid))
            result = m.result_for(rid)
            if result == "W":
                acc.wins += 1
                kind = classify_margin(own, opp, config)
                acc.bw += kind == "blowout"
                acc.sw += kind == "slim"
            elif result == "L":
                acc.losses += 1
                kind = classify_margin(opp, own, config)
                acc.bl += kind == "blowout"
                acc.sl += kind == "slim"
            else:
                acc.ties += 1
            by_week.setdefault(m.week, []).append((rid, own))

    if not accs:
        logger.warning("%s", IncompleteSeasonData(year))
        return {}

    for week, entries in by_week.items():
        scores = sorted((s for _, s in entries), reverse=True)
        top = scores[0]
        second = scores[1] if len(scores) > 1 else scores[0]
        for rid, own in entries:
            acc = accs[rid]
            acc.top += own == top
            acc.top2 += own >= second
            for other_rid, other in entries:
                if other_rid == rid:
                    continue
                if own > other:
                    acc.apw += 1
                elif own < other:
                    acc.apl += 1
                else:
                    acc.apt += 1

    results = compute_weekly_results(games)

    def win_pct(a: _Acc) -> float:
        g = a.wins + a.losses + a.ties
        return (a.wins + 0.5 * a.ties) / g if g else 0.0

    standings = sorted(accs, key=lambda r: (-win_pct(accs[r]), -accs[r].pf, roster_sort_key(r)))
    by_points = sorted(accs, key=lambda r: (-accs[r].pf, standings.index(r)))
    complete = dataset.season_is_complete(year)
    finishes = playoff_finishes(season, standings) if complete else {}
    playoff_teams = {
        rid for b in season.winners_bracket for rid in (b.winner, b.loser) if rid is not None
    }
    if not playoff_teams and season.source == SOURCE_EXTERNAL:
        playoff_teams = {
            rid
            for m in season.matchups
            if m.week >= season.playoff_start_week and not m.is_placeholder
            for rid in (m.roster_a, m.roster_b)
        }

    # one roster per owner; DPR is normalized over the kept rosters only
    kept: dict[str, str] = {}
    for rid in standings:
        owner = owners[rid]
        if owner in kept:
            logger.warning(
                "Season %s: owner %s holds rosters %s and %s; keeping the first",
                year, owner, kept[owner], rid,
            )
            continue
        kept[owner] = rid

    raws: dict[str, float] = {}
    for rid in kept.values():
        a = accs[rid]
        g = a.wins + a.losses + a.ties
        raws[rid] = raw_dpr(a.pf, g, max(a.scores), min(a.scores), win_pct(a), config)
    mean_raw = sum(raws.values()) / len(raws)

    records: dict[str, TeamSeasonRecord] = {}
    for owner, rid in kept.items():
        a = accs[rid]
        ap_games = a.apw + a.apl + a.apt
        wp = win_pct(a)
        ap_pct = (a.apw + 0.5 * a.apt) / ap_games if ap_games else 0.0
        (win_streak, _), (loss_streak, _) = longest_streaks(results.get(rid, []))
        finish = finishes.get(rid)
        standings_rank = standings.index(rid) + 1
        points_rank = by_points.index(rid) + 1
        records[owner] = TeamSeasonRecord(
            owner_id=owner,
            roster_id=rid,
            season=year,
            display_name=resolver.display_name(owner, year),
            wins=a.wins,
            losses=a.losses,
            ties=a.ties,
            points_for=round(a.pf, C.POINTS_PLACES),
            points_against=round(a.pa, C.POINTS_PLACES),
            high_score=max(a.scores),
            low_score=min(a.scores),
            top_score_weeks=a.top,
            weekly_top2_scores=a.top2,
            blowout_wins=a.bw,
            blowout_losses=a.bl,
            slim_wins=a.sw,
            slim_losses=a.sl,
            all_play_wins=a.apw,
            all_play_losses=a.apl,
            all_play_ties=a.apt,
            win_percentage=wp,
            all_play_win_percentage=ap_pct,
            raw_dpr=raws[rid],
            adjusted_dpr=raws[rid] / mean_raw if mean_raw > 0 else 1.0,
            luck_rating=wp - ap_pct,
            longest_win_streak=win_streak,
            longest_loss_streak=loss_streak,
            rank=finish if finish is not None else standings_rank,
            standings_rank=standings_rank,
            points_rank=points_rank,
            playoff_finish=finish,
            made_playoffs=complete and rid in playoff_teams,
            is_complete=complete,
            is_champion=complete and finish == 1,
            is_runner_up=complete and finish == 2,
            is_third_place=complete and finish == 3,
            is_regular_season_champion=complete and standings_rank == 1,
            is_points_champion=complete and points_rank == 1,
            is_points_runner_up=complete and points_rank == 2,
            is_points_third=complete and points_rank == 3,
            weekly_scores=tuple(sorted(a.log)),
        )
    return records


def compute_all_seasons(
    dataset: LeagueDataset,
    resolver: IdentityResolver | None = None,
    config: PipelineConfig = DEFAULT_CONFIG,
) -> dict[int, dict[str, TeamSeasonRecord]]:
    resolver = resolver or IdentityResolver(dataset)
    out: dict[int, dict[str, TeamSeasonRecord]] = {}
    for year in dataset.years:
        out[year] = compute_season_records(dataset, year, resolver, config)
    return out
