"""Draft value engine: realized fantasy points, VORP and slot-expected value.

Each draft class is scored on its own. Keepers are carried through with all
value fields at 0 and never take part in ranking or class averages.
"""

from __future__ import annotations

import dataclasses
import logging
import math
from concurrent.futures import ThreadPoolExecutor, as_completed
from functools import lru_cache
from typing import Callable, Iterable, Mapping

from ffhistory import constants as C
from ffhistory.config import DEFAULT_CONFIG, PipelineConfig
from ffhistory.data.models import DraftPick, LeagueDataset, Season
from ffhistory.errors import UpstreamFetchFailure

logger = logging.getLogger(__name__)

# player id, season -> {week: {stat: value}}
StatFetcher = Callable[[str, int], Mapping[int, Mapping[str, float]]]


def _tier_key(value: float, tiers: tuple[tuple[int | None, str], ...]) -> str:
    for upper, key in tiers:
        if upper is None or value <= upper:
            return key
    return tiers[-1][1]


def fantasy_points(
    weekly_stats: Mapping[int, Mapping[str, float]],
    scoring_rules: Mapping[str, float],
    position: str = "",
) -> float:
    """Season fantasy points under ``scoring_rules``.

    Tiered defensive keys (``pts_allow_*``, ``yds_allow_*``) never apply
    linearly; defenses get the one matching band per week instead.
    """
    is_defense = position.upper() in C.DEFENSE_POSITIONS
    total = 0.0
    for stats in weekly_stats.values():
        for key, value in stats.items():
            if key.startswith(C.TIERED_STAT_PREFIXES):
                continue
            weight = scoring_rules.get(key)
            if weight is None or not isinstance(value, int | float):
                continue
            total += float(value) * weight
        if not is_defense:
            continue
        pts_allowed = stats.get("pts_allow")
        if isinstance(pts_allowed, int | float):
            total += scoring_rules.get(_tier_key(pts_allowed, C.POINTS_ALLOWED_TIERS), 0.0)
        yds_allowed = stats.get("yds_allow")
        if isinstance(yds_allowed, int | float):
            total += scoring_rules.get(_tier_key(yds_allowed, C.YARDS_ALLOWED_TIERS), 0.0)
    return round(total, C.POINTS_PLACES)


def _slot_weights(roster_positions: Iterable[str]) -> dict[str, float]:
    """Starting-slot weight per position; flex slots split across eligible positions."""
    weights: dict[str, float] = {}
    for slot in roster_positions:
        slot = slot.upper()
        if slot in C.NON_STARTING_SLOTS:
            continue
        eligible = C.FLEX_ELIGIBILITY.get(slot)
        if eligible:
            share = 1.0 / len(eligible)
            for pos in eligible:
                weights[pos] = weights.get(pos, 0.0) + share
        else:
            pos = "DEF" if slot in C.DEFENSE_POSITIONS else slot
            weights[pos] = weights.get(pos, 0.0) + 1.0
    return weights


_STANDARD_WEIGHTS = _slot_weights(C.STANDARD_ROSTER_POSITIONS)


def replacement_depths(
    teams: int,
    roster_positions: Iterable[str] = (),
    config: PipelineConfig = DEFAULT_CONFIG,
) -> dict[str, int]:
    """Replacement rank per position, scaled by league size and lineup shape."""
    positions = tuple(roster_positions)
    league_weights = _slot_weights(positions) if positions else _STANDARD_WEIGHTS
    size_factor = teams / config.baseline_league_size if teams > 0 else 1.0
    depths: dict[str, int] = {}
    for pos, base in config.replacement_base_ranks.items():
        standard = _STANDARD_WEIGHTS.get(pos, 0.0)
        lineup_factor = league_weights.get(pos, 0.0) / standard if standard else 1.0
        depths[pos] = int(round(base * size_factor * lineup_factor))
    return depths


@lru_cache(maxsize=32)
def _slot_curve(total_picks: int, top_value: float, zero_pick: int) -> tuple[float, ...]:
    slope = top_value / math.log(zero_pick)
    return tuple(top_value - slope * math.log(i) for i in range(1, total_picks + 1))


def slot_curve(total_picks: int, config: PipelineConfig = DEFAULT_CONFIG) -> tuple[float, ...]:
    """Expected VORP by overall pick, index 0 is pick 1."""
    return _slot_curve(total_picks, config.slot_curve_top_value, config.slot_curve_zero_pick)


def expected_value(pick_no: int, curve: tuple[float, ...], config: PipelineConfig = DEFAULT_CONFIG) -> float:
    if 1 <= pick_no <= len(curve):
        return curve[pick_no - 1]
    slope = config.slot_curve_top_value / math.log(config.slot_curve_zero_pick)
    return config.slot_curve_top_value - slope * math.log(max(1, pick_no))


def fetch_stats(
    player_ids: Iterable[str],
    season: int,
    fetcher: StatFetcher,
    workers: int = C.DEFAULT_FETCH_WORKERS,
) -> dict[str, Mapping[int, Mapping[str, float]]]:
    """Fetch weekly stats for many players with a bounded worker pool.

    Every id gets a slot up front; a failed fetch leaves it empty.
    """
    ids = sorted({pid for pid in player_ids if pid})
    results: dict[str, Mapping[int, Mapping[str, float]]] = {pid: {} for pid in ids}
    if not ids:
        return results
    with ThreadPoolExecutor(max_workers=workers) as executor:
        future_to_pid = {executor.submit(fetcher, pid, season): pid for pid in ids}
        for future in as_completed(future_to_pid):
            pid = future_to_pid[future]
            try:
                results[pid] = future.result() or {}
            except UpstreamFetchFailure as exc:
                logger.warning("%s; scoring 0 points", exc)
            except Exception:
                logger.exception("Stat fetch for player %s in %s failed; scoring 0 points", pid, season)
    logger.debug("Fetched stats for %d player(s) in %s", len(ids), season)
    return results


def score_draft(
    season: Season,
    stats: Mapping[str, Mapping[int, Mapping[str, float]]],
    config: PipelineConfig = DEFAULT_CONFIG,
) -> tuple[DraftPick, ...]:
    """Value every pick of ``season``'s draft class."""
    picks = season.draft_picks
    if not picks:
        return ()

    pointed: list[DraftPick] = []
    for p in picks:
        if p.is_keeper:
            pointed.append(p)
            continue
        weekly = stats.get(p.player_id or "", {})
        pointed.append(
            dataclasses.replace(
                p, fantasy_points=fantasy_points(weekly, season.scoring_rules, p.position)
            )
        )

    teams = season.total_rosters or max((p.pick_in_round for p in picks), default=0)
    depths = replacement_depths(teams, season.roster_positions, config)
    by_pos: dict[str, list[float]] = {}
    for p in pointed:
        if not p.is_keeper:
            by_pos.setdefault(p.position, []).append(p.fantasy_points)
    replacement: dict[str, float] = {}
    for pos, points in by_pos.items():
        depth = depths.get(pos, 0)
        ranked = sorted(points, reverse=True)
        replacement[pos] = ranked[depth - 1] if 0 < depth <= len(ranked) else 0.0

    curve = slot_curve(max(len(picks), max(p.pick_no for p in picks)), config)
    valued: list[DraftPick] = []
    for p in pointed:
        if p.is_keeper:
            valued.append(p)
            continue
        vorp = p.fantasy_points - replacement.get(p.position, 0.0)
        expected = expected_value(p.pick_no, curve, config)
        valued.append(
            dataclasses.replace(p, actual_vorp=vorp, expected_vorp=expected, vorp_delta=vorp - expected)
        )

    deltas = [p.vorp_delta for p in valued if not p.is_keeper]
    mean_delta = sum(deltas) / len(deltas) if deltas else 0.0
    return tuple(
        p
        if p.is_keeper
        else dataclasses.replace(
            p, scaled_vorp_delta=(p.vorp_delta - mean_delta) / config.scaled_delta_divisor
        )
        for p in valued
    )


def score_all_drafts(
    dataset: LeagueDataset,
    fetcher: StatFetcher | None = None,
    config: PipelineConfig = DEFAULT_CONFIG,
) -> dict[int, tuple[DraftPick, ...]]:
    """season -> scored picks; cached stats first, ``fetcher`` for the rest."""
    out: dict[int, tuple[DraftPick, ...]] = {}
    for year in dataset.years:
        season = dataset.seasons[year]
        if not season.draft_picks:
            continue
        stats: dict[str, Mapping[int, Mapping[str, float]]] = dict(dataset.player_stats.get(year, {}))
        missing = [
            p.player_id
            for p in season.draft_picks
            if p.player_id and not p.is_keeper and p.player_id not in stats
        ]
        if missing and fetcher is not None:
            stats.update(fetch_stats(missing, year, fetcher, config.fetch_workers))
        elif missing:
            logger.info("Season %s: no stats for %d drafted player(s)", year, len(missing))
        out[year] = score_draft(season, stats, config)
    return out
