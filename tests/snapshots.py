"""Raw snapshot builders shared by the tests (Sleeper-shaped dicts, no network)."""

from __future__ import annotations


def matchup_rows(games: list[tuple[int, float, int, float]]) -> list[dict]:
    """[(roster a, score a, roster b, score b), ...] -> Sleeper matchup rows."""
    rows = []
    for mid, (ra, sa, rb, sb) in enumerate(games, start=1):
        rows.append({"roster_id": ra, "matchup_id": mid, "points": sa})
        rows.append({"roster_id": rb, "matchup_id": mid, "points": sb})
    return rows


def sleeper_season(
    weeks: dict[int, list[tuple[int, float, int, float]]],
    owners: dict[int, str],
    *,
    names: dict[str, str] | None = None,
    playoff_week_start: int = 15,
    winners_bracket: list[dict] | None = None,
    losers_bracket: list[dict] | None = None,
    draft_picks: list[dict] | None = None,
    scoring: dict[str, float] | None = None,
    roster_positions: list[str] | None = None,
    transactions: list[dict] | None = None,
    player_stats: dict | None = None,
) -> dict:
    names = names or {}
    users = [
        {"user_id": uid, "display_name": names.get(uid, uid.upper())}
        for uid in sorted(set(owners.values()))
    ]
    season = {
        "league": {
            "settings": {"playoff_week_start": playoff_week_start, "start_week": 1},
            "scoring_settings": scoring or {},
            "roster_positions": roster_positions or [],
            "total_rosters": len(owners),
        },
        "users": users,
        "rosters": [{"roster_id": rid, "owner_id": uid} for rid, uid in owners.items()],
        "matchups": {str(wk): matchup_rows(games) for wk, games in weeks.items()},
        "winners_bracket": winners_bracket or [],
        "losers_bracket": losers_bracket or [],
        "draft": {"settings": {"teams": len(owners)}},
        "draft_picks": draft_picks or [],
        "transactions": transactions or [],
    }
    if player_stats is not None:
        season["player_stats"] = player_stats
    return season


def snapshot(seasons: dict[int, dict], state_season: int, **extra) -> dict:
    return {
        "state": {"season": str(state_season), "week": 1},
        "seasons": {str(y): s for y, s in seasons.items()},
        **extra,
    }


def four_team_season(**kwargs) -> dict:
    """Four teams, three regular-season weeks, decided championship.

    Records: r1 3-0, r2 2-1, r3 1-2, r4 0-3. Final: r2 champion over r1,
    r3 third over r4.
    """
    weeks = {
        1: [(1, 120.0, 2, 100.0), (3, 95.0, 4, 90.0)],
        2: [(1, 130.0, 3, 80.0), (2, 110.0, 4, 70.0)],
        3: [(1, 105.0, 4, 104.0), (2, 115.0, 3, 99.0)],
    }
    bracket = [
        {"r": 1, "m": 1, "t1": 1, "t2": 4, "w": 1, "l": 4},
        {"r": 1, "m": 2, "t1": 2, "t2": 3, "w": 2, "l": 3},
        {"r": 2, "m": 3, "t1": 1, "t2": 2, "w": 2, "l": 1, "p": 1},
        {"r": 2, "m": 4, "t1": 4, "t2": 3, "w": 3, "l": 4, "p": 3},
    ]
    owners = {1: "u1", 2: "u2", 3: "u3", 4: "u4"}
    params = dict(playoff_week_start=4, winners_bracket=bracket)
    params.update(kwargs)
    return sleeper_season(weeks, owners, **params)
