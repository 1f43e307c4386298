"""Ingestion adapters: raw snapshot dict -> canonical ``LeagueDataset``.

The raw snapshot mirrors Sleeper payloads (see ``ffhistory.api.loader``) plus
optional ``external_seasons`` for years that predate the Sleeper league.
All field-name variants are resolved here so calculators only ever see the
canonical records from ``ffhistory.data.models``.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Mapping

from ffhistory.compute.core import _coerce_int, group_rows
from ffhistory.data.models import (
    SOURCE_EXTERNAL,
    SOURCE_SLEEPER,
    BracketMatch,
    DraftPick,
    LeagueDataset,
    LeagueState,
    Matchup,
    Season,
    Transaction,
    User,
)
from ffhistory.errors import MalformedScore

logger = logging.getLogger(__name__)

DEFAULT_PLAYOFF_START_WEEK = 15


def parse_score(value: Any, context: str = "") -> float:
    """Finite float from a raw score; ``None`` counts as 0 (unplayed side)."""
    if value is None:
        return 0.0
    if isinstance(value, bool):
        raise MalformedScore(value, context)
    try:
        score = float(value)
    except (TypeError, ValueError) as exc:
        raise MalformedScore(value, context) from exc
    if not math.isfinite(score):
        raise MalformedScore(value, context)
    return score


def _str_id(value: Any) -> str | None:
    if value is None or value == "":
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def _user_team_name(user: Mapping) -> str | None:
    meta = user.get("metadata") or {}
    if isinstance(meta, dict):
        return meta.get("team_name") or meta.get("team_name_updated") or meta.get("nickname")
    return None


def _build_users(raw_users: list[dict]) -> dict[str, User]:
    users: dict[str, User] = {}
    for u in raw_users or []:
        uid = _str_id(u.get("user_id"))
        if not uid:
            continue
        disp = u.get("display_name") or u.get("username") or uid
        users[uid] = User(user_id=uid, display_name=disp, team_name=_user_team_name(u))
    return users


def _pair_week(season: int, week: int, rows: list[dict]) -> list[Matchup]:
    out: list[Matchup] = []
    for mid, entries in sorted(group_rows(rows).items()):
        if len(entries) != 2:
            logger.debug(
                "Season %s week %s: skipping matchup group %s with %d side(s)",
                season, week, mid, len(entries),
            )
            continue
        a, b = entries
        a_rid = _str_id(a.get("roster_id"))
        b_rid = _str_id(b.get("roster_id"))
        if a_rid is None or b_rid is None:
            logger.warning("Season %s week %s: matchup %s missing roster id", season, week, mid)
            continue
        try:
            a_pts = parse_score(a.get("points"), f"season {season} week {week} roster {a_rid}")
            b_pts = parse_score(b.get("points"), f"season {season} week {week} roster {b_rid}")
        except MalformedScore as exc:
            logger.warning("Excluding matchup: %s", exc)
            continue
        out.append(
            Matchup(
                season=season,
                week=week,
                roster_a=a_rid,
                score_a=a_pts,
                roster_b=b_rid,
                score_b=b_pts,
                matchup_id=mid if mid >= 0 else None,
            )
        )
    return out


def _bracket(rows: list[dict] | None) -> tuple[BracketMatch, ...]:
    out = []
    for row in rows or []:
        p = row.get("p")
        out.append(
            BracketMatch(
                round=_coerce_int(row.get("r"), 0),
                match_id=_coerce_int(row.get("m"), 0),
                winner=_str_id(row.get("w")),
                loser=_str_id(row.get("l")),
                placement=_coerce_int(p) if p is not None else None,
            )
        )
    return tuple(sorted(out, key=lambda b: (b.round, b.match_id)))


def normalize_draft_pick(
    raw: Mapping[str, Any], season: int, teams: int = 0
) -> DraftPick:
    """Canonical DraftPick from any of the known pick payload shapes.

    Slot: ``pick_in_round`` or ``draft_slot`` (derived from ``pick_no`` and the
    team count when both are absent). Drafter: ``picked_by`` or ``owner_id``.
    Position: ``metadata.position``, ``player_position`` or ``position``.
    """
    meta = raw.get("metadata") or {}
    if not isinstance(meta, dict):
        meta = {}
    rnd = _coerce_int(raw.get("round"), 0)
    pick_no = _coerce_int(raw.get("pick_no"), 0)
    slot_raw = raw.get("pick_in_round")
    if slot_raw is None:
        slot_raw = raw.get("draft_slot")
    if slot_raw is not None:
        slot = _coerce_int(slot_raw, 0)
    elif teams and pick_no:
        slot = (pick_no - 1) % teams + 1
    else:
        slot = 0
    if not pick_no and teams and rnd and slot:
        pick_no = (rnd - 1) * teams + slot
    position = meta.get("position") or raw.get("player_position") or raw.get("position") or ""
    name = raw.get("player_name")
    if not name:
        name = " ".join(p for p in (meta.get("first_name"), meta.get("last_name")) if p)
    return DraftPick(
        season=season,
        round=rnd,
        pick_no=pick_no,
        pick_in_round=slot,
        player_id=_str_id(raw.get("player_id")),
        position=str(position).upper(),
        player_name=name or "",
        roster_id=_str_id(raw.get("roster_id")),
        picked_by=_str_id(raw.get("picked_by") or raw.get("owner_id")),
        is_keeper=bool(raw.get("is_keeper")),
    )


def _transactions(season: int, rows: list[dict] | None) -> tuple[Transaction, ...]:
    out = []
    for row in rows or []:
        tid = _str_id(row.get("transaction_id"))
        if not tid:
            continue
        week = row.get("leg")
        if week is None:
            week = row.get("week")
        out.append(
            Transaction(
                season=season,
                week=_coerce_int(week, 0),
                transaction_id=tid,
                type=str(row.get("type") or ""),
                status=str(row.get("status") or ""),
                roster_ids=tuple(
                    rid for rid in (_str_id(r) for r in row.get("roster_ids") or []) if rid
                ),
                adds=len(row.get("adds") or {}),
                drops=len(row.get("drops") or {}),
            )
        )
    return tuple(out)


def _sleeper_season(year: int, raw: Mapping[str, Any]) -> tuple[Season, dict[str, User]]:
    league = raw.get("league") or {}
    settings = league.get("settings") or {}
    users = _build_users(raw.get("users") or [])

    roster_owners: dict[str, str] = {}
    co_owners: dict[str, tuple[str, ...]] = {}
    team_names: dict[str, str] = {}
    for r in raw.get("rosters") or []:
        rid = _str_id(r.get("roster_id"))
        if rid is None:
            continue
        owner = _str_id(r.get("owner_id"))
        if owner:
            roster_owners[rid] = owner
        co = r.get("co_owners") or []
        if isinstance(co, list) and co:
            co_owners[rid] = tuple(str(c) for c in co if c)
        rmeta = r.get("metadata") or {}
        tn = rmeta.get("team_name") if isinstance(rmeta, dict) else None
        if tn:
            team_names[rid] = tn

    playoff_start = _coerce_int(
        settings.get("playoff_week_start") or settings.get("playoff_start_week"),
        DEFAULT_PLAYOFF_START_WEEK,
    ) or DEFAULT_PLAYOFF_START_WEEK

    matchups: list[Matchup] = []
    raw_matchups = raw.get("matchups") or {}
    for wk_key in sorted(raw_matchups, key=lambda k: _coerce_int(k, 0)):
        wk = _coerce_int(wk_key, 0)
        if wk <= 0:
            continue
        matchups.extend(_pair_week(year, wk, raw_matchups[wk_key] or []))

    total_rosters = _coerce_int(league.get("total_rosters"), 0) or len(raw.get("rosters") or [])
    draft_settings = (raw.get("draft") or {}).get("settings") or {}
    teams = _coerce_int(draft_settings.get("teams"), 0) or total_rosters
    picks = tuple(
        sorted(
            (normalize_draft_pick(p, year, teams) for p in raw.get("draft_picks") or []),
            key=lambda p: p.pick_no,
        )
    )

    season = Season(
        year=year,
        weeks=tuple(sorted({m.week for m in matchups})),
        playoff_start_week=playoff_start,
        matchups=tuple(matchups),
        roster_owners=roster_owners,
        co_owners=co_owners,
        owner_names={uid: u.team_name or u.display_name for uid, u in users.items()},
        team_names=team_names,
        scoring_rules={
            k: float(v)
            for k, v in (league.get("scoring_settings") or {}).items()
            if isinstance(v, int | float) and not isinstance(v, bool)
        },
        roster_positions=tuple(str(p).upper() for p in league.get("roster_positions") or ()),
        total_rosters=total_rosters,
        winners_bracket=_bracket(raw.get("winners_bracket")),
        losers_bracket=_bracket(raw.get("losers_bracket")),
        draft_picks=picks,
        transactions=_transactions(year, raw.get("transactions")),
        source=SOURCE_SLEEPER,
    )
    return season, users


def _external_season(year: int, raw: Mapping[str, Any]) -> Season:
    """Season from pre-platform rows keyed by team name.

    Rows: ``{"week", "team1", "score1", "team2", "score2"}`` with an optional
    ``"playoff": true`` flag. The playoff start is the first flagged week.
    """
    matchups: list[Matchup] = []
    playoff_weeks: list[int] = []
    for i, row in enumerate(raw.get("matchups") or []):
        wk = _coerce_int(row.get("week"), 0)
        t1 = row.get("team1")
        t2 = row.get("team2")
        if wk <= 0 or not t1 or not t2:
            logger.warning("External season %s: skipping incomplete row %d", year, i)
            continue
        try:
            s1 = parse_score(row.get("score1"), f"external {year} week {wk} {t1}")
            s2 = parse_score(row.get("score2"), f"external {year} week {wk} {t2}")
        except MalformedScore as exc:
            logger.warning("Excluding matchup: %s", exc)
            continue
        if row.get("playoff"):
            playoff_weeks.append(wk)
        matchups.append(
            Matchup(season=year, week=wk, roster_a=str(t1), score_a=s1, roster_b=str(t2), score_b=s2)
        )
    weeks = tuple(sorted({m.week for m in matchups}))
    if "playoff_start_week" in raw:
        playoff_start = _coerce_int(raw.get("playoff_start_week"), 0)
    elif playoff_weeks:
        playoff_start = min(playoff_weeks)
    else:
        playoff_start = (weeks[-1] + 1) if weeks else DEFAULT_PLAYOFF_START_WEEK
    placements = {
        str(name): _coerce_int(place, 0)
        for name, place in (raw.get("placements") or {}).items()
        if _coerce_int(place, 0) > 0
    }
    teams = {m.roster_a for m in matchups} | {m.roster_b for m in matchups}
    return Season(
        year=year,
        weeks=weeks,
        playoff_start_week=playoff_start,
        matchups=tuple(matchups),
        team_names={t: t for t in teams},
        total_rosters=len(teams),
        placements=placements,
        source=SOURCE_EXTERNAL,
    )


def _player_stats(raw: Mapping[str, Any] | None) -> dict[str, dict[int, dict]]:
    """player id -> week -> stat dict; accepts a week-keyed dict or a list of weeks."""
    out: dict[str, dict[int, dict]] = {}
    for pid, weekly in (raw or {}).items():
        if isinstance(weekly, list):
            items = [(row.get("week", i + 1), row.get("stats", row)) for i, row in enumerate(weekly)]
        elif isinstance(weekly, dict):
            items = list(weekly.items())
        else:
            continue
        out[str(pid)] = {
            _coerce_int(wk, 0): dict(stats) for wk, stats in items if isinstance(stats, dict)
        }
    return out


def build_dataset(snapshot: Mapping[str, Any]) -> LeagueDataset:
    """Build the canonical dataset from a raw snapshot dict."""
    seasons: dict[int, Season] = {}
    users: dict[str, User] = {}
    stats: dict[int, dict] = {}

    raw_seasons = snapshot.get("seasons") or {}
    # Later seasons overwrite user names so ``users`` reflects the latest identity
    for key in sorted(raw_seasons, key=lambda k: _coerce_int(k, 0)):
        year = _coerce_int(key, 0)
        season, season_users = _sleeper_season(year, raw_seasons[key] or {})
        seasons[year] = season
        users.update(season_users)
        raw_stats = (raw_seasons[key] or {}).get("player_stats")
        if raw_stats:
            stats[year] = _player_stats(raw_stats)

    for key, raw in (snapshot.get("external_seasons") or {}).items():
        year = _coerce_int(key, 0)
        if year in seasons:
            logger.warning("External season %s shadowed by platform data; ignoring", year)
            continue
        seasons[year] = _external_season(year, raw or {})

    raw_state = snapshot.get("state") or {}
    state_season = _coerce_int(raw_state.get("season"), 0) or (max(seasons) if seasons else 0)
    state = LeagueState(season=state_season, week=_coerce_int(raw_state.get("week"), 0))

    aliases = {str(k): str(v) for k, v in (snapshot.get("owner_aliases") or {}).items()}
    logger.debug("Built dataset with %d season(s), %d user(s)", len(seasons), len(users))
    return LeagueDataset(
        seasons=seasons, users=users, state=state, owner_aliases=aliases, player_stats=stats
    )
