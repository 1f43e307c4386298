"""Badge evaluation over the computed season and career records."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping, Sequence

from ffhistory.badges.registry import Badge, BadgeDefinition, BadgeRegistry, BadgeScope
from ffhistory.badges.rules import REGISTRY, CareerContext, SeasonContext
from ffhistory.compute.career import CareerRecord, seasons_by_owner
from ffhistory.compute.season import TeamSeasonRecord
from ffhistory.config import DEFAULT_CONFIG, PipelineConfig
from ffhistory.data.models import DraftPick, LeagueDataset

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BadgeResult:
    by_owner: Mapping[str, tuple[Badge, ...]] = field(default_factory=dict)
    recent: tuple[Badge, ...] = ()

    def all(self) -> list[Badge]:
        return [b for badges in self.by_owner.values() for b in badges]


def _run(definition: BadgeDefinition, ctx, owner_id: str, year: int | None) -> Badge | None:
    try:
        meta = definition.predicate(ctx)
    except Exception:
        # one broken rule must not take the others down
        logger.exception(
            "Badge rule %s failed for owner %s (%s); skipping", definition.id, owner_id, year
        )
        return None
    if meta is None:
        return None
    return Badge(
        badge_id=definition.id,
        owner_id=owner_id,
        year=year,
        category=definition.category,
        display_name=definition.display_name,
        metadata=dict(meta),
    )


def evaluate_badges(
    dataset: LeagueDataset,
    season_records: Mapping[int, Mapping[str, TeamSeasonRecord]],
    careers: Sequence[CareerRecord],
    scored_picks: Mapping[int, Sequence[DraftPick]] | None = None,
    owners_by_season: Mapping[int, Mapping[str, str]] | None = None,
    registry: BadgeRegistry = REGISTRY,
    config: PipelineConfig = DEFAULT_CONFIG,
) -> BadgeResult:
    """Evaluate every rule for every owner; stateless and order independent."""
    scored_picks = scored_picks or {}
    owners_by_season = owners_by_season or {}
    histories = seasons_by_owner(season_records)
    seen: set[tuple[str, str, int | None]] = set()
    earned: list[Badge] = []

    def keep(badge: Badge | None) -> None:
        if badge is None or badge.key in seen:
            return
        seen.add(badge.key)
        earned.append(badge)

    season_rules = registry.by_scope(BadgeScope.SEASON)
    for year in sorted(season_records):
        records = season_records[year]
        season = dataset.seasons.get(year)
        if season is None or not records:
            continue
        complete = dataset.season_is_complete(year)
        for owner_id in sorted(records):
            ctx = SeasonContext(
                record=records[owner_id],
                season_records=records,
                season=season,
                history=histories.get(owner_id, []),
                picks=scored_picks.get(year, ()),
                roster_owners=owners_by_season.get(year, {}),
                config=config,
            )
            for definition in season_rules:
                if definition.requires_complete and not complete:
                    continue
                keep(_run(definition, ctx, owner_id, year))

    career_rules = registry.by_scope(BadgeScope.CAREER)
    for career in careers:
        ctx = CareerContext(
            career=career,
            careers=careers,
            history=histories.get(career.owner_id, []),
            config=config,
        )
        for definition in career_rules:
            keep(_run(definition, ctx, career.owner_id, None))

    by_owner: dict[str, list[Badge]] = {}
    for badge in earned:
        by_owner.setdefault(badge.owner_id, []).append(badge)
    result = BadgeResult(
        by_owner={o: tuple(sorted(b, key=Badge.sort_key)) for o, b in sorted(by_owner.items())},
        recent=recent_badges(earned, config.recent_badges_limit),
    )
    logger.debug("Evaluated %d badge(s) for %d owner(s)", len(earned), len(by_owner))
    return result


def recent_badges(badges: Sequence[Badge], limit: int) -> tuple[Badge, ...]:
    """Season badges, latest year first, capped at ``limit``."""
    dated = [b for b in badges if b.year is not None]
    dated.sort(key=lambda b: (-b.year, b.category.precedence, b.badge_id, b.owner_id))
    return tuple(dated[:limit])
