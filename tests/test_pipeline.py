import threading

from ffhistory.badges.engine import BadgeResult
from ffhistory.data.normalize import build_dataset
from ffhistory.pipeline import (
    NOT_COMPUTED,
    BadgeTask,
    TaskStatus,
    compute_league_history,
    compute_records,
)

from snapshots import four_team_season, snapshot

PICKS = [{"round": 1, "pick_no": 1, "player_id": "p1", "picked_by": "u1",
          "metadata": {"position": "RB"}}]


def _dataset():
    season = four_team_season(draft_picks=PICKS, scoring={"bonus": 1.0})
    return build_dataset(snapshot({2022: season}, 2023))


class BlockingFetcher:
    """First call blocks until released; later calls return right away."""

    def __init__(self) -> None:
        self.started = threading.Event()
        self.release = threading.Event()
        self.calls = 0
        self._lock = threading.Lock()

    def __call__(self, player_id, season):
        with self._lock:
            self.calls += 1
            call = self.calls
        if call == 1:
            self.started.set()
            self.release.wait(5)
            return {1: {"bonus": 10}}
        return {1: {"bonus": 99}}


def test_compute_records_skips_badges():
    result = compute_records(_dataset())
    assert result.badges is None
    assert set(result.season_records[2022]) == {"u1", "u2", "u3", "u4"}
    assert result.owners_by_season[2022]["2"] == "u2"


def test_compute_league_history_scores_drafts_and_badges():
    result = compute_league_history(_dataset(), fetcher=lambda pid, year: {1: {"bonus": 12}})
    (pick,) = result.draft_picks[2022]
    assert pick.fantasy_points == 12.0
    assert isinstance(result.badges, BadgeResult)
    assert result.badges.by_owner


def test_badge_task_not_computed_until_triggered():
    ds = _dataset()
    with BadgeTask(ds, compute_records(ds), fetcher=lambda pid, year: {}) as task:
        assert task.result() is NOT_COMPUTED
        assert not task.result()
        assert task.status is TaskStatus.IDLE
        task.trigger().result(timeout=5)
        assert task.status is TaskStatus.COMPLETED
        assert isinstance(task.result(), BadgeResult)


def test_later_trigger_supersedes_running_one():
    ds = _dataset()
    fetcher = BlockingFetcher()
    with BadgeTask(ds, compute_records(ds), fetcher=fetcher) as task:
        first = task.trigger()
        assert fetcher.started.wait(5)
        second = task.trigger()
        fetcher.release.set()
        first.result(timeout=5)
        second.result(timeout=5)
        assert task.status is TaskStatus.COMPLETED
        (pick,) = task.draft_picks[2022]
        assert pick.fantasy_points == 99.0


def test_cancel_discards_in_flight_run():
    ds = _dataset()
    fetcher = BlockingFetcher()
    with BadgeTask(ds, compute_records(ds), fetcher=fetcher) as task:
        future = task.trigger()
        assert fetcher.started.wait(5)
        task.cancel()
        fetcher.release.set()
        future.result(timeout=5)
        assert task.result() is NOT_COMPUTED
        assert task.status is TaskStatus.CANCELLED
        assert task.draft_picks == {}
