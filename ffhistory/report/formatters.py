"""Output format helpers for league history contexts.

JSON is the primary output: every computed structure (season records, career
records, scored draft picks, badges) with numbers as numbers and enums as
their string values. Markdown is a compact human summary: career table, title
history and the most recent badges.
"""

from __future__ import annotations
import json
from typing import Any

from ffhistory.badges.rules import catalog
from ffhistory.compute.analytics import draft_analytics
from ffhistory.compute.identity import IdentityResolver
from ffhistory.constants import SCHEMA_VERSION
from ffhistory.data.models import LeagueDataset
from ffhistory.pipeline import PipelineResult
from .models import HistoryContext
from .render import fmt_pct, md_table


def build_context(
    dataset: LeagueDataset,
    result: PipelineResult,
    league_id: str | None = None,
    *,
    include_catalog: bool = False,
) -> HistoryContext:
    resolver = IdentityResolver(dataset)
    owners = {c.owner_id: resolver.display_name(c.owner_id) for c in result.careers}
    badges = result.badges
    analytics = (
        draft_analytics(dataset, result.draft_picks, result.owners_by_season)
        if badges is not None
        else None
    )
    return HistoryContext(
        league_id=league_id,
        state_season=dataset.state.season,
        state_week=dataset.state.week,
        seasons={year: dict(recs) for year, recs in result.season_records.items()},
        careers=list(result.careers),
        complete_seasons=[y for y in dataset.years if dataset.season_is_complete(y)],
        draft_picks=dict(result.draft_picks) if badges is not None else None,
        draft_analytics=analytics,
        badges_by_owner=dict(badges.by_owner) if badges is not None else None,
        recent_badges=badges.recent if badges is not None else None,
        badge_catalog=catalog() if include_catalog else None,
        owner_names=owners,
    )


def to_json_payload(
    dataset: LeagueDataset,
    result: PipelineResult,
    league_id: str | None = None,
    schema_version: str = SCHEMA_VERSION,
) -> dict[str, Any]:
    """JSON-ready dict of everything the pipeline computed."""
    return build_context(dataset, result, league_id).to_json_payload(schema_version)


def format_json(ctx: HistoryContext, schema_version: str = SCHEMA_VERSION, *, pretty: bool = False) -> str:
    payload = ctx.to_json_payload(schema_version)
    if pretty:
        return json.dumps(payload, indent=2)
    return json.dumps(payload, separators=(",", ":"))


def format_markdown(ctx: HistoryContext) -> str:
    lines: list[str] = ["# League History", ""]
    seasons = sorted(ctx.seasons)
    if seasons:
        lines.append(f"Seasons: {seasons[0]}-{seasons[-1]} (current {ctx.state_season}, week {ctx.state_week})")
        lines.append("")

    lines.append("## Careers")
    lines.append("")
    rows = []
    for c in ctx.careers:
        rows.append(
            [
                c.rank_labels.get("career_dpr", "-"),
                c.display_name,
                c.seasons_played,
                f"{c.wins}-{c.losses}-{c.ties}",
                fmt_pct(c.win_percentage),
                fmt_pct(c.all_play_win_percentage),
                f"{c.points_for:.2f}",
                f"{c.career_dpr:.3f}",
                c.championships,
                c.playoff_appearances,
            ]
        )
    lines.extend(
        md_table(
            ["Rank", "Owner", "Seasons", "Record", "Win%", "All-Play%", "PF", "DPR", "Titles", "Playoffs"],
            rows,
            align="lllrrrrrrr",
        )
    )
    lines.append("")

    lines.append("## Champions")
    lines.append("")
    champ_rows = []
    for year in seasons:
        recs = ctx.seasons[year]
        champ = next((r for r in recs.values() if r.is_champion), None)
        points = next((r for r in recs.values() if r.is_points_champion), None)
        if champ is None and points is None:
            continue
        champ_rows.append(
            [
                year,
                champ.display_name if champ else "-",
                points.display_name if points else "-",
                f"{points.points_for:.2f}" if points else "-",
            ]
        )
    lines.extend(md_table(["Season", "Champion", "Points Title", "PF"], champ_rows, align="lllr"))

    if ctx.draft_analytics is not None and ctx.draft_analytics.owner_totals:
        career_value: dict[str, float] = {}
        for totals in ctx.draft_analytics.owner_totals.values():
            for owner, total in totals.items():
                career_value[owner] = career_value.get(owner, 0.0) + total
        lines.append("")
        lines.append("## Draft Value")
        lines.append("")
        value_rows = [
            [ctx.owner_names.get(owner, owner), f"{total:+.2f}"]
            for owner, total in sorted(career_value.items(), key=lambda kv: kv[1], reverse=True)
        ]
        lines.extend(md_table(["Owner", "Scaled VORP Delta"], value_rows, align="lr"))

    if ctx.recent_badges:
        lines.append("")
        lines.append("## Recent Badges")
        lines.append("")
        badge_rows = [
            [b.year, ctx.owner_names.get(b.owner_id, b.owner_id), b.display_name, b.category.value]
            for b in ctx.recent_badges
        ]
        lines.extend(md_table(["Season", "Owner", "Badge", "Category"], badge_rows))
    return "\n".join(lines) + "\n"
