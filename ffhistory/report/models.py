from __future__ import annotations
from dataclasses import asdict, dataclass, field
from typing import Any

from ffhistory.badges.registry import Badge
from ffhistory.compute.analytics import DraftAnalytics, HeatmapCell, OwnerPickSummary
from ffhistory.compute.career import CareerRecord
from ffhistory.compute.season import TeamSeasonRecord
from ffhistory.data.models import DraftPick


def _season_row(rec: TeamSeasonRecord) -> dict[str, Any]:
    row = asdict(rec)
    row["games_played"] = rec.games_played
    row["average_score"] = round(rec.average_score, 2)
    row["weekly_scores"] = [
        {"week": w, "score": s, "opponent_score": o, "opponent_roster_id": opp}
        for w, s, o, opp in rec.weekly_scores
    ]
    return row


def _career_row(rec: CareerRecord) -> dict[str, Any]:
    row = asdict(rec)
    row["games_played"] = rec.games_played
    row["average_score"] = round(rec.average_score, 2)
    row["seasons"] = list(rec.seasons)
    row["championship_years"] = list(rec.championship_years)
    row["ranks"] = dict(rec.ranks)
    row["rank_labels"] = dict(rec.rank_labels)
    return row


def _summary_row(summary: OwnerPickSummary) -> dict[str, Any]:
    return {
        "total": summary.total,
        "count": summary.count,
        "avg": summary.avg,
        "best_pick_no": summary.best.pick_no if summary.best else None,
        "best_player_id": summary.best.player_id if summary.best else None,
        "worst_pick_no": summary.worst.pick_no if summary.worst else None,
        "worst_player_id": summary.worst.player_id if summary.worst else None,
    }


def _draft_analytics_payload(analytics: DraftAnalytics) -> dict[str, Any]:
    def cell(c: HeatmapCell) -> dict[str, Any]:
        return {"avg": c.avg, "count": c.count}

    return {
        str(year): {
            "heatmap": [[cell(c) for c in row] for row in season.heatmap],
            "owners": {
                owner: _summary_row(s) for owner, s in sorted(season.owner_summaries.items())
            },
            "consistency": {pid: asdict(c) for pid, c in sorted(season.consistency.items())},
            "owner_totals": dict(sorted(analytics.owner_totals.get(year, {}).items())),
        }
        for year, season in sorted(analytics.seasons.items())
    }


def _badge_row(badge: Badge) -> dict[str, Any]:
    return {
        "badge_id": badge.badge_id,
        "owner_id": badge.owner_id,
        "year": badge.year,
        "category": badge.category.value,
        "display_name": badge.display_name,
        "metadata": dict(badge.metadata),
    }


@dataclass(slots=True)
class HistoryContext:
    league_id: str | None
    state_season: int
    state_week: int
    seasons: dict[int, dict[str, TeamSeasonRecord]]
    careers: list[CareerRecord]
    complete_seasons: list[int] = field(default_factory=list)
    draft_picks: dict[int, tuple[DraftPick, ...]] | None = None
    draft_analytics: DraftAnalytics | None = None
    badges_by_owner: dict[str, tuple[Badge, ...]] | None = None
    recent_badges: tuple[Badge, ...] | None = None
    badge_catalog: list[dict[str, Any]] | None = None
    owner_names: dict[str, str] = field(default_factory=dict)

    def to_json_payload(self, schema_version: str) -> dict[str, Any]:
        base: dict[str, Any] = {
            "schema_version": schema_version,
            "metadata": {
                "league_id": self.league_id,
                "state_season": self.state_season,
                "state_week": self.state_week,
                "seasons": sorted(self.seasons),
                "complete_seasons": sorted(self.complete_seasons),
            },
            "owners": dict(sorted(self.owner_names.items())),
            "seasons": {
                str(year): {owner: _season_row(rec) for owner, rec in sorted(records.items())}
                for year, records in sorted(self.seasons.items())
            },
            "careers": [_career_row(c) for c in self.careers],
        }
        if self.draft_picks is not None:
            base["draft_picks"] = {
                str(year): [asdict(p) for p in picks]
                for year, picks in sorted(self.draft_picks.items())
            }
        if self.draft_analytics is not None:
            base["draft_analytics"] = _draft_analytics_payload(self.draft_analytics)
        if self.badges_by_owner is not None:
            base["badges"] = {
                owner: [_badge_row(b) for b in badges]
                for owner, badges in self.badges_by_owner.items()
            }
        if self.recent_badges is not None:
            base["recent_badges"] = [_badge_row(b) for b in self.recent_badges]
        if self.badge_catalog is not None:
            base["badge_catalog"] = self.badge_catalog
        return base
