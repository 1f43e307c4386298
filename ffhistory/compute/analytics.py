"""Draft insight helpers built on scored picks."""

from __future__ import annotations

import math
import statistics
from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence

from ffhistory.compute.draft import fantasy_points
from ffhistory.data.models import DraftPick, LeagueDataset


@dataclass(frozen=True, slots=True)
class HeatmapCell:
    avg: float | None
    count: int


@dataclass(frozen=True, slots=True)
class OwnerPickSummary:
    owner_id: str
    total: float
    count: int
    avg: float
    best: DraftPick | None
    worst: DraftPick | None


@dataclass(frozen=True, slots=True)
class ConsistencyStats:
    mean: float
    stddev: float
    consistency_score: float
    p10: float
    median: float
    p90: float


@dataclass(frozen=True, slots=True)
class SeasonDraftAnalytics:
    heatmap: list[list[HeatmapCell]]
    owner_summaries: dict[str, OwnerPickSummary]
    consistency: dict[str, ConsistencyStats]


@dataclass(frozen=True, slots=True)
class DraftAnalytics:
    seasons: dict[int, SeasonDraftAnalytics]
    owner_totals: dict[int, dict[str, float]]


def pick_owner(pick: DraftPick, roster_owners: Mapping[str, str] | None = None) -> str:
    """Owner of a pick: the roster's owner when known, else the drafting user."""
    if roster_owners and pick.roster_id and pick.roster_id in roster_owners:
        return roster_owners[pick.roster_id]
    return pick.picked_by or "unknown"


def build_heatmap(
    picks: Iterable[DraftPick], total_rounds: int, total_teams: int = 12
) -> list[list[HeatmapCell]]:
    """[round][slot] average scaled VORP delta; keepers and out-of-range picks skipped."""
    sums = [[0.0] * total_teams for _ in range(total_rounds)]
    counts = [[0] * total_teams for _ in range(total_rounds)]
    for p in picks:
        if p.is_keeper:
            continue
        rnd = p.round or math.ceil((p.pick_no or 1) / total_teams)
        slot = p.pick_in_round or ((p.pick_no - 1) % total_teams) + 1
        if not (1 <= rnd <= total_rounds and 1 <= slot <= total_teams):
            continue
        sums[rnd - 1][slot - 1] += p.scaled_vorp_delta
        counts[rnd - 1][slot - 1] += 1
    return [
        [
            HeatmapCell(avg=s / c if c else None, count=c)
            for s, c in zip(row_sums, row_counts)
        ]
        for row_sums, row_counts in zip(sums, counts)
    ]


def player_consistency(weekly_points: Sequence[float]) -> ConsistencyStats | None:
    if not weekly_points:
        return None
    n = len(weekly_points)
    mean = statistics.fmean(weekly_points)
    stddev = statistics.pstdev(weekly_points)
    ordered = sorted(weekly_points)

    def pct(p: int) -> float:
        return ordered[max(0, min(n - 1, int(p / 100 * n)))]

    raw = mean / (stddev + 1e-6)
    score = math.tanh(raw / 5) * 50 + 50
    return ConsistencyStats(
        mean=mean,
        stddev=stddev,
        consistency_score=score if math.isfinite(score) else 50.0,
        p10=pct(10),
        median=pct(50),
        p90=pct(90),
    )


def owner_pick_summaries(
    picks: Iterable[DraftPick], roster_owners: Mapping[str, str] | None = None
) -> dict[str, OwnerPickSummary]:
    grouped: dict[str, list[DraftPick]] = {}
    for p in picks:
        if p.is_keeper:
            continue
        grouped.setdefault(pick_owner(p, roster_owners), []).append(p)
    out: dict[str, OwnerPickSummary] = {}
    for owner_id, owned in grouped.items():
        ranked = sorted(owned, key=lambda p: p.scaled_vorp_delta, reverse=True)
        total = sum(p.scaled_vorp_delta for p in owned)
        out[owner_id] = OwnerPickSummary(
            owner_id=owner_id,
            total=total,
            count=len(owned),
            avg=total / len(owned),
            best=ranked[0],
            worst=ranked[-1],
        )
    return out


def owner_draft_totals(
    scored: Mapping[int, Sequence[DraftPick]],
    owners_by_season: Mapping[int, Mapping[str, str]],
) -> dict[int, dict[str, float]]:
    """season -> owner id -> summed scaled VORP delta of that owner's picks."""
    out: dict[int, dict[str, float]] = {}
    for year, picks in scored.items():
        totals: dict[str, float] = {}
        for owner_id, summary in owner_pick_summaries(picks, owners_by_season.get(year)).items():
            totals[owner_id] = summary.total
        out[year] = totals
    return out


def weekly_points(
    weekly_stats: Mapping[int, Mapping[str, float]],
    scoring_rules: Mapping[str, float],
    position: str = "",
) -> list[float]:
    return [
        fantasy_points({week: stats}, scoring_rules, position)
        for week, stats in sorted(weekly_stats.items())
    ]


def draft_analytics(
    dataset: LeagueDataset,
    scored: Mapping[int, Sequence[DraftPick]],
    owners_by_season: Mapping[int, Mapping[str, str]],
) -> DraftAnalytics:
    """Heatmap, owner summaries and consistency for every scored draft class.

    Consistency covers drafted players with weekly stats in the snapshot cache.
    """
    seasons: dict[int, SeasonDraftAnalytics] = {}
    for year, picks in sorted(scored.items()):
        if not picks:
            continue
        season = dataset.seasons.get(year)
        teams = (season.total_rosters if season else 0) or max(p.pick_in_round for p in picks)
        rounds = max(p.round for p in picks)
        cached = dataset.player_stats.get(year, {})
        rules = season.scoring_rules if season else {}
        consistency: dict[str, ConsistencyStats] = {}
        for p in picks:
            if p.is_keeper or not p.player_id or p.player_id not in cached:
                continue
            stats = player_consistency(weekly_points(cached[p.player_id], rules, p.position))
            if stats is not None:
                consistency[p.player_id] = stats
        seasons[year] = SeasonDraftAnalytics(
            heatmap=build_heatmap(picks, max(rounds, 1), max(teams, 1)),
            owner_summaries=owner_pick_summaries(picks, owners_by_season.get(year)),
            consistency=consistency,
        )
    return DraftAnalytics(
        seasons=seasons,
        owner_totals=owner_draft_totals(scored, owners_by_season),
    )
