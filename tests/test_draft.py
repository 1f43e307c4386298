import logging
import threading

import pytest

from ffhistory.compute.draft import (
    fantasy_points,
    fetch_stats,
    replacement_depths,
    score_all_drafts,
    score_draft,
    slot_curve,
)
from ffhistory.config import PipelineConfig
from ffhistory.data.models import DraftPick, Season
from ffhistory.data.normalize import build_dataset
from ffhistory.errors import UpstreamFetchFailure

from snapshots import sleeper_season, snapshot


def test_fantasy_points_linear_rules():
    weekly = {1: {"pass_yd": 300, "pass_td": 2}, 2: {"pass_yd": 200, "pass_int": 1}}
    rules = {"pass_yd": 0.04, "pass_td": 4.0, "pass_int": -2.0}
    assert fantasy_points(weekly, rules, "QB") == pytest.approx(26.0)


def test_defense_uses_allowed_bands_once_per_week():
    weekly = {1: {"pts_allow": 0, "yds_allow": 150, "def_td": 1, "pts_allow_0": 1}}
    rules = {"pts_allow_0": 10.0, "yds_allow_100_199": 2.0, "def_td": 2.0}
    assert fantasy_points(weekly, rules, "DEF") == pytest.approx(14.0)
    # tiered keys never score linearly, and only defenses get the bands
    assert fantasy_points(weekly, rules, "WR") == pytest.approx(2.0)


def test_replacement_depths_scale_with_league_size():
    assert replacement_depths(12)["QB"] == 18
    depths = replacement_depths(10)
    assert (depths["QB"], depths["RB"], depths["WR"], depths["TE"]) == (15, 30, 40, 10)


def test_replacement_depths_follow_lineup_shape():
    two_qb = ("QB", "QB", "RB", "RB", "WR", "WR", "TE", "FLEX", "K", "DEF", "BN", "BN")
    assert replacement_depths(12, two_qb)["QB"] == 36


def test_slot_curve_shape_and_cache():
    curve = slot_curve(12)
    assert curve[0] == pytest.approx(27.1)
    assert curve[9] == pytest.approx(0.0, abs=1e-9)
    assert curve[11] < 0
    assert slot_curve(12) is curve


def _pick(no, pid, pos="QB", keeper=False):
    return DraftPick(season=2023, round=1, pick_no=no, pick_in_round=no, player_id=pid,
                     position=pos, is_keeper=keeper)


def _qb_draft():
    season = Season(
        year=2023,
        weeks=(1,),
        playoff_start_week=15,
        scoring_rules={"bonus": 1.0},
        total_rosters=12,
        draft_picks=(_pick(1, "a"), _pick(2, "b"), _pick(3, "c"), _pick(4, "k", keeper=True)),
    )
    stats = {
        "a": {1: {"bonus": 300}},
        "b": {1: {"bonus": 250}},
        "c": {1: {"bonus": 200}},
        "k": {1: {"bonus": 999}},
    }
    return season, stats


def test_vorp_against_replacement_rank():
    season, stats = _qb_draft()
    config = PipelineConfig(replacement_base_ranks={"QB": 2})
    picks = {p.player_id: p for p in score_draft(season, stats, config)}
    assert picks["a"].fantasy_points == 300.0
    assert picks["a"].actual_vorp == pytest.approx(50.0)
    assert picks["b"].actual_vorp == pytest.approx(0.0)
    assert picks["c"].actual_vorp == pytest.approx(-50.0)
    assert picks["a"].expected_vorp == pytest.approx(27.1)
    assert picks["a"].vorp_delta == pytest.approx(50.0 - 27.1)


def test_keepers_keep_zero_value_and_skip_class_mean():
    season, stats = _qb_draft()
    config = PipelineConfig(replacement_base_ranks={"QB": 2})
    picks = score_draft(season, stats, config)
    keeper = next(p for p in picks if p.is_keeper)
    assert keeper.fantasy_points == 0.0
    assert keeper.actual_vorp == keeper.vorp_delta == keeper.scaled_vorp_delta == 0.0
    scaled = [p.scaled_vorp_delta for p in picks if not p.is_keeper]
    assert sum(scaled) == pytest.approx(0.0, abs=1e-9)


def test_position_without_depth_uses_zero_replacement():
    season, stats = _qb_draft()
    config = PipelineConfig(replacement_base_ranks={"RB": 2})
    picks = {p.player_id: p for p in score_draft(season, stats, config)}
    assert picks["c"].actual_vorp == pytest.approx(200.0)


def test_fetch_failure_scores_zero(caplog):
    def fetcher(pid, season):
        if pid == "bad":
            raise UpstreamFetchFailure(pid, season, RuntimeError("boom"))
        return {1: {"bonus": 5}}

    with caplog.at_level(logging.WARNING):
        out = fetch_stats(["ok", "bad", None], 2023, fetcher, workers=2)
    assert out == {"bad": {}, "ok": {1: {"bonus": 5}}}
    assert any("player bad" in m for m in caplog.messages)


def test_unexpected_fetch_error_is_isolated_to_that_player(caplog):
    def fetcher(pid, season):
        if pid == "broken":
            raise ValueError("bad payload")
        return {1: {"bonus": 5}}

    with caplog.at_level(logging.ERROR, logger="ffhistory.compute.draft"):
        out = fetch_stats(["a", "broken", "c"], 2023, fetcher, workers=3)
    assert out == {"a": {1: {"bonus": 5}}, "broken": {}, "c": {1: {"bonus": 5}}}
    assert any("player broken" in m for m in caplog.messages)


def test_score_all_drafts_fetches_only_uncached_players():
    raw_picks = [
        {"round": 1, "pick_no": 1, "player_id": "p1", "metadata": {"position": "RB"}},
        {"round": 1, "pick_no": 2, "player_id": "p2", "metadata": {"position": "RB"}},
    ]
    season = sleeper_season(
        {1: [(1, 100.0, 2, 90.0)]},
        {1: "a", 2: "b"},
        draft_picks=raw_picks,
        scoring={"rush_yd": 0.1},
        player_stats={"p1": {"1": {"rush_yd": 100}}},
    )
    ds = build_dataset(snapshot({2023: season}, 2023))
    calls = []
    lock = threading.Lock()

    def fetcher(pid, year):
        with lock:
            calls.append((pid, year))
        return {1: {"rush_yd": 50}}

    scored = score_all_drafts(ds, fetcher)[2023]
    assert calls == [("p2", 2023)]
    assert [p.fantasy_points for p in scored] == [10.0, 5.0]


def test_score_all_drafts_without_fetcher_scores_cached_only():
    raw_picks = [{"round": 1, "pick_no": 1, "player_id": "p9", "metadata": {"position": "TE"}}]
    season = sleeper_season({1: [(1, 100.0, 2, 90.0)]}, {1: "a", 2: "b"}, draft_picks=raw_picks)
    ds = build_dataset(snapshot({2023: season}, 2023))
    (pick,) = score_all_drafts(ds)[2023]
    assert pick.fantasy_points == 0.0
