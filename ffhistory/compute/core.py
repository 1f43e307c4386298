from __future__ import annotations

from typing import Iterable, Sequence


def _coerce_int(value: object, default: int = 0) -> int:
    """Best-effort int conversion (supports int, float, str of digits)."""
    if value is None:
        return default
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int | float):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return default
    return default


def roster_sort_key(roster_id: str) -> tuple[int, int | str]:
    """Numeric roster ids sort numerically, names after them alphabetically."""
    if roster_id.isdigit():
        return (0, int(roster_id))
    return (1, roster_id)


def group_rows(rows: list[dict]) -> dict[int, list[dict]]:
    groups: dict[int, list[dict]] = {}
    for row in rows or []:
        mid_raw = row.get("matchup_id")
        if mid_raw is None:
            # Create deterministic synthetic id using roster_id when missing
            rid_int = _coerce_int(row.get("roster_id"), 0)
            mid = -100000 - rid_int
        else:
            mid = _coerce_int(mid_raw, -1)
        groups.setdefault(mid, []).append(row)
    return groups


def compute_weekly_results(matchups: Iterable) -> dict[str, list[tuple[int, str]]]:
    """roster id -> [(week, "W"|"L"|"T"), ...] in week order."""
    results: dict[str, list[tuple[int, str]]] = {}
    for m in sorted(matchups, key=lambda m: m.week):
        if m.is_placeholder:
            continue
        for rid in (m.roster_a, m.roster_b):
            results.setdefault(rid, []).append((m.week, m.result_for(rid)))
    return results


def longest_streaks(
    res_list: Sequence[tuple[int, str]],
) -> tuple[tuple[int, str], tuple[int, str]]:
    """Longest win and loss runs as (length, "wA-wB") spans; a tie breaks any run."""
    best_win = (0, "-")
    best_loss = (0, "-")
    cur_type = None
    cur_len = 0
    cur_start = None
    last_week = None
    for week, res in res_list:
        if res == cur_type:
            cur_len += 1
        else:
            if cur_type == "W" and cur_len > best_win[0]:
                best_win = (cur_len, f"w{cur_start}-w{last_week}")
            if cur_type == "L" and cur_len > best_loss[0]:
                best_loss = (cur_len, f"w{cur_start}-w{last_week}")
            if res == "T":
                cur_type, cur_len, cur_start = None, 0, None
            else:
                cur_type, cur_len, cur_start = res, 1, week
        last_week = week
    if cur_type == "W" and cur_len > best_win[0]:
        best_win = (cur_len, f"w{cur_start}-w{last_week}")
    if cur_type == "L" and cur_len > best_loss[0]:
        best_loss = (cur_len, f"w{cur_start}-w{last_week}")
    return best_win, best_loss


def ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def dense_rank(
    values: dict[str, float], *, higher_is_better: bool = True
) -> dict[str, tuple[int, str]]:
    """Dense ranks keyed like ``values``: key -> (rank, label).

    Equal values share a rank and get a ``T-`` label prefix; the next distinct
    value takes the next integer.
    """
    distinct = sorted(set(values.values()), reverse=higher_is_better)
    position = {v: i + 1 for i, v in enumerate(distinct)}
    counts: dict[float, int] = {}
    for v in values.values():
        counts[v] = counts.get(v, 0) + 1
    out: dict[str, tuple[int, str]] = {}
    for key, v in values.items():
        rank = position[v]
        label = ordinal(rank)
        if counts[v] > 1:
            label = f"T-{label}"
        out[key] = (rank, label)
    return out
