import logging

import pytest

from ffhistory.compute.season import (
    classify_margin,
    compute_all_seasons,
    compute_season_records,
    raw_dpr,
)
from ffhistory.config import PipelineConfig
from ffhistory.data.normalize import build_dataset

from snapshots import four_team_season, sleeper_season, snapshot


def _two_team(week_games, state_season=2023):
    season = sleeper_season(week_games, {1: "alice", 2: "bob"})
    return build_dataset(snapshot({2023: season}, state_season))


def test_two_team_two_week_scenario():
    ds = _two_team({1: [(1, 100.0, 2, 90.0)], 2: [(1, 120.0, 2, 110.0)]})
    recs = compute_season_records(ds, 2023)
    a, b = recs["alice"], recs["bob"]
    assert (a.wins, a.losses, a.ties) == (2, 0, 0)
    assert (b.wins, b.losses, b.ties) == (0, 2, 0)
    assert a.all_play_win_percentage == 1.0
    assert b.all_play_win_percentage == 0.0
    assert a.luck_rating == 0.0
    assert b.luck_rating == 0.0
    assert a.points_for == 220.0 and a.points_against == 200.0


def test_two_team_dpr_values():
    ds = _two_team({1: [(1, 100.0, 2, 90.0)], 2: [(1, 120.0, 2, 110.0)]})
    recs = compute_season_records(ds, 2023)
    # alice: (110*6 + (120+100)*2 + 1.0*200*2) / 10
    assert recs["alice"].raw_dpr == pytest.approx(150.0)
    assert recs["bob"].raw_dpr == pytest.approx(100.0)
    assert recs["alice"].adjusted_dpr == pytest.approx(1.2)
    assert recs["bob"].adjusted_dpr == pytest.approx(0.8)


def test_exact_tie_is_head_to_head_tie_and_half_all_play():
    ds = _two_team({1: [(1, 100.0, 2, 100.0)]})
    recs = compute_season_records(ds, 2023)
    for owner in ("alice", "bob"):
        r = recs[owner]
        assert (r.wins, r.losses, r.ties) == (0, 0, 1)
        assert r.all_play_ties == 1
        assert r.all_play_win_percentage == 0.5
        assert r.win_percentage == 0.5


def test_placeholder_weeks_are_ignored():
    ds = _two_team({1: [(1, 100.0, 2, 90.0)], 2: [(1, 0.0, 2, 0.0)]})
    recs = compute_season_records(ds, 2023)
    assert recs["alice"].games_played == 1
    assert recs["bob"].low_score == 90.0
    assert [w for w, *_ in recs["alice"].weekly_scores] == [1]


def test_playoff_weeks_do_not_feed_regular_season():
    season = sleeper_season(
        {1: [(1, 100.0, 2, 90.0)], 2: [(1, 50.0, 2, 150.0)]},
        {1: "alice", 2: "bob"},
        playoff_week_start=2,
    )
    recs = compute_season_records(build_dataset(snapshot({2023: season}, 2023)), 2023)
    assert recs["alice"].wins == 1 and recs["alice"].losses == 0


def test_four_team_season_invariants():
    ds = build_dataset(snapshot({2022: four_team_season()}, 2023))
    recs = compute_season_records(ds, 2022)
    assert len(recs) == 4
    assert sum(r.wins for r in recs.values()) == sum(r.losses for r in recs.values())
    for r in recs.values():
        assert r.wins + r.losses + r.ties == r.games_played
        assert 0.0 <= r.all_play_win_percentage <= 1.0
    mean = sum(r.adjusted_dpr for r in recs.values()) / len(recs)
    assert mean == pytest.approx(1.0)


def test_four_team_margins_streaks_and_weekly_highs():
    ds = build_dataset(snapshot({2022: four_team_season()}, 2023))
    recs = compute_season_records(ds, 2022)
    u1, u2, u4 = recs["u1"], recs["u2"], recs["u4"]
    assert u1.blowout_wins == 1 and u2.blowout_wins == 1
    assert u1.slim_wins == 1 and u4.slim_losses == 1
    assert u1.longest_win_streak == 3 and u1.longest_loss_streak == 0
    assert u4.longest_loss_streak == 3
    assert u1.top_score_weeks == 2
    assert u2.top_score_weeks == 1
    assert u1.all_play_wins == 8 and u1.all_play_losses == 1


def test_playoff_finish_and_placement_flags():
    ds = build_dataset(snapshot({2022: four_team_season()}, 2023))
    recs = compute_season_records(ds, 2022)
    assert recs["u2"].playoff_finish == 1 and recs["u2"].is_champion
    assert recs["u1"].playoff_finish == 2 and recs["u1"].is_runner_up
    assert recs["u3"].is_third_place
    assert recs["u4"].rank == 4
    assert recs["u1"].is_regular_season_champion
    assert recs["u1"].is_points_champion and recs["u2"].is_points_runner_up
    assert all(r.is_complete for r in recs.values())


def test_unresolved_bracket_leaves_flags_unset():
    bracket = [{"r": 1, "m": 1, "t1": 1, "t2": 2, "w": None, "l": None, "p": 1}]
    ds = build_dataset(snapshot({2023: four_team_season(winners_bracket=bracket)}, 2023))
    recs = compute_season_records(ds, 2023)
    assert not any(r.is_complete for r in recs.values())
    assert not any(r.is_champion or r.is_regular_season_champion for r in recs.values())
    # standings order stands in for the finish
    assert recs["u1"].rank == 1


def test_past_season_without_bracket_is_complete():
    season = sleeper_season({1: [(1, 100.0, 2, 90.0)]}, {1: "alice", 2: "bob"})
    ds = build_dataset(snapshot({2019: season}, 2023))
    recs = compute_season_records(ds, 2019)
    assert recs["alice"].is_complete
    assert recs["alice"].playoff_finish is None
    assert recs["alice"].is_regular_season_champion


def test_losers_bracket_does_not_override_better_finish():
    losers = [{"r": 1, "m": 1, "t1": 3, "t2": 4, "w": 4, "l": 3, "p": 5}]
    ds = build_dataset(snapshot({2022: four_team_season(losers_bracket=losers)}, 2023))
    recs = compute_season_records(ds, 2022)
    # r3 already placed third through the winners bracket
    assert recs["u3"].playoff_finish == 3
    assert recs["u4"].playoff_finish == 4


def test_missing_owner_mapping_drops_that_side(caplog):
    season = sleeper_season(
        {1: [(1, 100.0, 2, 90.0), (3, 80.0, 4, 70.0)]}, {1: "alice", 2: "bob", 3: "carol"}
    )
    ds = build_dataset(snapshot({2023: season}, 2023))
    with caplog.at_level(logging.WARNING, logger="ffhistory.compute.season"):
        recs = compute_season_records(ds, 2023)
    assert set(recs) == {"alice", "bob", "carol"}
    assert recs["carol"].wins == 1
    assert any("roster 4" in m for m in caplog.messages)


def test_malformed_score_excludes_only_that_matchup(caplog):
    season = sleeper_season({1: [(1, 100.0, 2, 90.0)], 2: [(1, 110.0, 2, 95.0)]}, {1: "a", 2: "b"})
    season["matchups"]["2"][0]["points"] = "abc"
    with caplog.at_level(logging.WARNING):
        ds = build_dataset(snapshot({2023: season}, 2023))
    recs = compute_season_records(ds, 2023)
    assert recs["a"].games_played == 1
    assert any("Malformed score" in m for m in caplog.messages)


def test_season_without_playable_games_yields_no_records(caplog):
    season = sleeper_season({1: [(1, 0.0, 2, 0.0)]}, {1: "a", 2: "b"})
    ds = build_dataset(snapshot({2023: season}, 2023))
    with caplog.at_level(logging.WARNING):
        assert compute_season_records(ds, 2023) == {}
    assert any("no playable matchups" in m for m in caplog.messages)


def test_season_with_no_mapped_owners_yields_no_records(caplog):
    orphaned = sleeper_season({1: [(1, 100.0, 2, 90.0)]}, {1: "a", 2: "b"})
    orphaned["rosters"] = [{"roster_id": 1, "owner_id": None}, {"roster_id": 2, "owner_id": None}]
    ds = build_dataset(snapshot({2021: orphaned, 2022: four_team_season()}, 2023))
    with caplog.at_level(logging.WARNING):
        assert compute_season_records(ds, 2021) == {}
        out = compute_all_seasons(ds)
    assert any("no playable matchups" in m for m in caplog.messages)
    assert out[2021] == {}
    assert set(out[2022]) == {"u1", "u2", "u3", "u4"}


def test_duplicate_owner_is_left_out_of_dpr_normalization(caplog):
    season = sleeper_season(
        {1: [(1, 150.0, 2, 90.0), (3, 100.0, 4, 80.0)]}, {1: "a", 2: "b", 3: "c", 4: "a"}
    )
    ds = build_dataset(snapshot({2023: season}, 2023))
    with caplog.at_level(logging.WARNING, logger="ffhistory.compute.season"):
        recs = compute_season_records(ds, 2023)
    assert set(recs) == {"a", "b", "c"}
    assert recs["a"].roster_id == "1"
    mean = sum(r.adjusted_dpr for r in recs.values()) / len(recs)
    assert mean == pytest.approx(1.0)
    assert any("holds rosters" in m for m in caplog.messages)


def test_compute_all_seasons_keys_every_year():
    ds = build_dataset(snapshot({2021: four_team_season(), 2022: four_team_season()}, 2023))
    out = compute_all_seasons(ds)
    assert sorted(out) == [2021, 2022]


def test_raw_dpr_formula_and_weights():
    assert raw_dpr(200.0, 2, 120.0, 80.0, 1.0) == pytest.approx(140.0)
    cfg = PipelineConfig(dpr_win_weight=0.0)
    assert raw_dpr(200.0, 2, 120.0, 80.0, 1.0, cfg) == pytest.approx(100.0)
    assert raw_dpr(0.0, 0, 0.0, 0.0, 0.0) == 0.0


def test_classify_margin_relative_to_loser():
    assert classify_margin(140.0, 100.0) == "blowout"
    assert classify_margin(101.0, 100.0) == "slim"
    assert classify_margin(110.0, 100.0) is None
    assert classify_margin(100.0, 100.0) is None
    cfg = PipelineConfig(blowout_margin_pct=0.05)
    assert classify_margin(110.0, 100.0, cfg) == "blowout"
