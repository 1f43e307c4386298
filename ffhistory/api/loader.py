"""Raw snapshot assembly: walk a league's history over the API, or read/write JSON."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

import yaml

from ffhistory.api.client import SleeperClient
from ffhistory.compute.core import _coerce_int

logger = logging.getLogger(__name__)

MAX_HISTORY_SEASONS = 25
DEFAULT_LAST_WEEK = 18


def _season_payload(client: SleeperClient, league: dict, with_transactions: bool) -> dict:
    league_id = league["league_id"]
    settings = league.get("settings") or {}
    last_week = _coerce_int(settings.get("last_scored_leg"), 0) or DEFAULT_LAST_WEEK

    matchups: dict[str, list[dict]] = {}
    for wk in range(1, last_week + 1):
        rows = client.matchups(league_id, wk)
        if rows:
            matchups[str(wk)] = rows

    draft: dict = {}
    picks: list[dict] = []
    drafts = client.drafts(league_id)
    if drafts:
        draft = drafts[0]
        picks = client.draft_picks(draft["draft_id"])

    transactions: list[dict] = []
    if with_transactions:
        for wk in range(1, last_week + 1):
            transactions.extend(client.transactions(league_id, wk))

    return {
        "league": league,
        "users": client.users(league_id),
        "rosters": client.rosters(league_id),
        "matchups": matchups,
        "winners_bracket": client.winners_bracket(league_id),
        "losers_bracket": client.losers_bracket(league_id),
        "draft": draft,
        "draft_picks": picks,
        "transactions": transactions,
    }


def load_league_history(
    client: SleeperClient,
    league_id: str,
    *,
    with_transactions: bool = True,
    max_seasons: int = MAX_HISTORY_SEASONS,
) -> dict[str, Any]:
    """Raw snapshot for ``league_id`` and every season reachable via ``previous_league_id``.

    Raises requests.HTTPError when a league endpoint fails after retries.
    """
    state = client.state()
    seasons: dict[str, dict] = {}
    next_id: str | None = league_id
    guard = 0
    while next_id and guard < max_seasons:
        league = client.league(next_id)
        if not league:
            break
        season = str(league.get("season"))
        logger.info("Fetching season %s (league %s)", season, next_id)
        seasons[season] = _season_payload(client, league, with_transactions)
        prev = league.get("previous_league_id")
        next_id = str(prev) if prev and str(prev) != "0" else None
        guard += 1
    return {
        "state": {"season": state.get("season"), "week": state.get("week")},
        "seasons": seasons,
    }


def read_snapshot(path: str | os.PathLike[str]) -> dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: snapshot must be a JSON object")
    return data


def write_snapshot(snapshot: dict[str, Any], path: str | os.PathLike[str]) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with open(out, "w", encoding="utf-8") as f:
        json.dump(snapshot, f, indent=2, sort_keys=True)
    return out


def read_supplement(path: str | os.PathLike[str]) -> dict[str, Any]:
    """YAML (or JSON) file with ``external_seasons`` and/or ``owner_aliases``."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level")
    return {k: data[k] for k in ("external_seasons", "owner_aliases") if k in data}


def merge_supplement(snapshot: dict[str, Any], supplement: dict[str, Any]) -> dict[str, Any]:
    merged = dict(snapshot)
    for key, value in supplement.items():
        current = dict(merged.get(key) or {})
        current.update(value or {})
        merged[key] = current
    return merged
