"""End-to-end derivation: dataset -> season records -> careers -> drafts -> badges.

``compute_league_history`` runs everything synchronously. ``BadgeTask`` runs
the expensive tail (draft scoring with stat fetches, then badge evaluation)
on a background executor when explicitly triggered.
"""

from __future__ import annotations

import enum
import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Mapping

from ffhistory.badges.engine import BadgeResult, evaluate_badges
from ffhistory.compute.career import CareerRecord, compute_careers
from ffhistory.compute.draft import StatFetcher, score_all_drafts
from ffhistory.compute.identity import IdentityResolver
from ffhistory.compute.season import TeamSeasonRecord, compute_all_seasons
from ffhistory.config import DEFAULT_CONFIG, PipelineConfig
from ffhistory.data.models import DraftPick, LeagueDataset

logger = logging.getLogger(__name__)


class _NotComputed:
    """Placeholder returned before a background run has finished."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "NOT_COMPUTED"

    def __bool__(self) -> bool:
        return False


NOT_COMPUTED = _NotComputed()


@dataclass(frozen=True, slots=True)
class PipelineResult:
    season_records: Mapping[int, Mapping[str, TeamSeasonRecord]]
    careers: tuple[CareerRecord, ...]
    owners_by_season: Mapping[int, Mapping[str, str]]
    draft_picks: Mapping[int, tuple[DraftPick, ...]] = field(default_factory=dict)
    badges: BadgeResult | None = None


def compute_records(
    dataset: LeagueDataset, config: PipelineConfig = DEFAULT_CONFIG
) -> PipelineResult:
    """Season records and careers only; no draft scoring or badges."""
    resolver = IdentityResolver(dataset)
    seasons = compute_all_seasons(dataset, resolver, config)
    careers = compute_careers(seasons, resolver)
    owners = {year: resolver.owners_for_season(year) for year in dataset.years}
    return PipelineResult(season_records=seasons, careers=tuple(careers), owners_by_season=owners)


def _draft_and_badges(
    dataset: LeagueDataset,
    base: PipelineResult,
    fetcher: StatFetcher | None,
    config: PipelineConfig,
) -> tuple[dict[int, tuple[DraftPick, ...]], BadgeResult]:
    picks = score_all_drafts(dataset, fetcher, config)
    badges = evaluate_badges(
        dataset,
        base.season_records,
        base.careers,
        scored_picks=picks,
        owners_by_season=base.owners_by_season,
        config=config,
    )
    return picks, badges


def compute_league_history(
    dataset: LeagueDataset,
    config: PipelineConfig = DEFAULT_CONFIG,
    fetcher: StatFetcher | None = None,
    with_badges: bool = True,
) -> PipelineResult:
    base = compute_records(dataset, config)
    if not with_badges:
        return base
    picks, badges = _draft_and_badges(dataset, base, fetcher, config)
    return PipelineResult(
        season_records=base.season_records,
        careers=base.careers,
        owners_by_season=base.owners_by_season,
        draft_picks=picks,
        badges=badges,
    )


class TaskStatus(str, enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class BadgeTask:
    """Explicitly triggered background draft scoring + badge evaluation.

    Each ``trigger()`` starts a new generation; a run only publishes its
    result if no newer trigger or ``cancel()`` happened meanwhile.
    """

    def __init__(
        self,
        dataset: LeagueDataset,
        base: PipelineResult,
        fetcher: StatFetcher | None = None,
        config: PipelineConfig = DEFAULT_CONFIG,
        executor: Executor | None = None,
    ) -> None:
        self.dataset = dataset
        self.base = base
        self.fetcher = fetcher
        self.config = config
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="badges")
        self._lock = threading.Lock()
        self._generation = 0
        self._future: Future | None = None
        self._result: BadgeResult | _NotComputed = NOT_COMPUTED
        self._picks: Mapping[int, tuple[DraftPick, ...]] = {}
        self.status = TaskStatus.IDLE

    def trigger(self) -> Future:
        with self._lock:
            self._generation += 1
            generation = self._generation
            if self._future is not None:
                self._future.cancel()
            self.status = TaskStatus.RUNNING
            self._future = self._executor.submit(self._run, generation)
            logger.info("Badge task generation %d started", generation)
            return self._future

    def _run(self, generation: int) -> BadgeResult:
        try:
            picks, badges = _draft_and_badges(self.dataset, self.base, self.fetcher, self.config)
        except Exception:
            with self._lock:
                if generation == self._generation:
                    self.status = TaskStatus.FAILED
            logger.exception("Badge task generation %d failed", generation)
            raise
        with self._lock:
            if generation != self._generation:
                logger.info("Discarding superseded badge run %d", generation)
                return badges
            self._picks = picks
            self._result = badges
            self.status = TaskStatus.COMPLETED
        return badges

    def cancel(self) -> None:
        with self._lock:
            self._generation += 1
            if self._future is not None:
                self._future.cancel()
                self._future = None
            if self.status is TaskStatus.RUNNING:
                self.status = TaskStatus.CANCELLED
        logger.info("Badge task cancelled")

    def result(self) -> BadgeResult | _NotComputed:
        with self._lock:
            return self._result

    @property
    def draft_picks(self) -> Mapping[int, tuple[DraftPick, ...]]:
        with self._lock:
            return dict(self._picks)

    def close(self) -> None:
        self.cancel()
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    def __enter__(self) -> "BadgeTask":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
