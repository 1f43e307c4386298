import pytest

from ffhistory.compute.career import careers_by_owner, compute_careers, seasons_by_owner
from ffhistory.compute.season import TeamSeasonRecord


def rec(owner, season, **kw):
    kw.setdefault("is_complete", True)
    return TeamSeasonRecord(owner_id=owner, roster_id=owner, season=season, display_name=owner.title(), **kw)


def _records():
    return {
        2021: {
            "ann": rec("ann", 2021, wins=10, losses=4, points_for=1000.0, adjusted_dpr=1.2,
                       high_score=150.0, low_score=70.0, all_play_wins=100, all_play_losses=82,
                       is_champion=True, made_playoffs=True),
            "ben": rec("ben", 2021, wins=4, losses=10, points_for=800.0, adjusted_dpr=0.8,
                       high_score=120.0, low_score=60.0, all_play_wins=82, all_play_losses=100),
        },
        2022: {
            "ann": rec("ann", 2022, wins=8, losses=5, ties=1, points_for=900.0, adjusted_dpr=0.9,
                       high_score=140.0, low_score=65.0),
            "ben": rec("ben", 2022, wins=10, losses=4, points_for=1100.0, adjusted_dpr=1.1,
                       high_score=160.0, low_score=75.0, is_runner_up=True),
        },
        2023: {
            "ann": rec("ann", 2023, wins=2, losses=0, points_for=250.0, adjusted_dpr=1.0,
                       high_score=130.0, low_score=120.0, is_champion=True, is_complete=False),
        },
    }


def test_counts_are_summed_and_rates_recomputed():
    ann = careers_by_owner(compute_careers(_records()))["ann"]
    assert (ann.wins, ann.losses, ann.ties) == (20, 9, 1)
    assert ann.seasons_played == 3 and ann.seasons == (2021, 2022, 2023)
    assert ann.points_for == pytest.approx(2150.0)
    assert ann.win_percentage == pytest.approx(20.5 / 30)
    assert ann.high_score == 150.0 and ann.low_score == 65.0
    assert ann.all_play_win_percentage == pytest.approx(100 / 182)


def test_career_dpr_is_points_weighted():
    ann = careers_by_owner(compute_careers(_records()))["ann"]
    expected = (1.2 * 1000 + 0.9 * 900 + 1.0 * 250) / 2150
    assert ann.career_dpr == pytest.approx(expected)


def test_in_progress_season_excluded_from_placements():
    careers = careers_by_owner(compute_careers(_records()))
    ann, ben = careers["ann"], careers["ben"]
    assert ann.championships == 1
    assert ann.championship_years == (2021,)
    assert ann.playoff_appearances == 1
    assert ann.winning_seasons == 2 and ann.losing_seasons == 0
    assert ben.runner_ups == 1
    assert ben.winning_seasons == 1 and ben.losing_seasons == 1


def test_dense_ranks_with_shared_values():
    careers = careers_by_owner(compute_careers(_records()))
    ann, ben = careers["ann"], careers["ben"]
    assert ann.ranks["points_for"] == 1 and ben.ranks["points_for"] == 2
    assert ann.rank_labels["wins"] == "1st"
    # fewer losing seasons ranks higher
    assert ann.ranks["losing_seasons"] == 1 and ben.ranks["losing_seasons"] == 2


def test_equal_values_share_a_tied_label():
    records = {
        2021: {
            "ann": rec("ann", 2021, wins=7, losses=7, points_for=1000.0, adjusted_dpr=1.0),
            "ben": rec("ben", 2021, wins=7, losses=7, points_for=900.0, adjusted_dpr=1.0),
            "cat": rec("cat", 2021, wins=5, losses=9, points_for=800.0, adjusted_dpr=1.0),
        }
    }
    careers = careers_by_owner(compute_careers(records))
    assert careers["ann"].rank_labels["wins"] == "T-1st"
    assert careers["ben"].ranks["wins"] == 1
    assert careers["cat"].ranks["wins"] == 2


def test_careers_sorted_by_dpr():
    careers = compute_careers(_records())
    dprs = [c.career_dpr for c in careers]
    assert dprs == sorted(dprs, reverse=True)


def test_seasons_by_owner_year_order():
    grouped = seasons_by_owner(_records())
    assert [r.season for r in grouped["ann"]] == [2021, 2022, 2023]
    assert [r.season for r in grouped["ben"]] == [2021, 2022]
