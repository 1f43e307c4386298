from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Sequence

import requests

from ffhistory.api.client import SleeperClient
from ffhistory.api.loader import (
    load_league_history,
    merge_supplement,
    read_snapshot,
    read_supplement,
    write_snapshot,
)
from ffhistory.config import PipelineConfig, env_overrides
from ffhistory.constants import SCHEMA_VERSION
from ffhistory.data.normalize import build_dataset
from ffhistory.errors import ConfigError
from ffhistory.pipeline import compute_league_history
from ffhistory.report.formatters import build_context, format_json, format_markdown

LEAGUE_ID = os.environ.get("SLEEPER_LEAGUE_ID")

logger = logging.getLogger(__name__)


def _pretty(data: Any) -> str:
    return json.dumps(data, indent=2, sort_keys=True)


def load_config(path: str | None = None) -> PipelineConfig:
    """YAML file overrides first, then ``FFH_*`` environment overrides on top."""
    config = PipelineConfig.from_yaml(path) if path else PipelineConfig()
    env = env_overrides()
    if env:
        logger.debug("Config overrides from environment: %s", sorted(env))
        config = config.with_overrides(env)
    return config


def generate_history_report(
    *,
    snapshot: dict,
    league_id: str | None = None,
    config: PipelineConfig | None = None,
    client: SleeperClient | None = None,
    out_dir: str = "reports/history",
    output_formats: Sequence[str] | None = None,
    json_pretty: bool = True,
    with_badges: bool = True,
    include_catalog: bool = False,
    verbose: bool = False,
    dry_run: bool = False,
) -> dict:
    formats = list(output_formats) if output_formats else ["json"]
    config = config or PipelineConfig()
    dataset = build_dataset(snapshot)
    fetcher = client.player_stats if client is not None else None
    result = compute_league_history(dataset, config, fetcher=fetcher, with_badges=with_badges)
    ctx = build_context(dataset, result, league_id, include_catalog=include_catalog)

    dest_dir = Path(out_dir)
    if not dry_run:
        dest_dir.mkdir(parents=True, exist_ok=True)

    results: dict[str, dict[str, Any]] = {}
    for fmt in formats:
        fmt_norm = fmt.lower()
        if fmt_norm in {"md", "markdown"}:
            content = format_markdown(ctx)
            path = dest_dir / "history.md"
        elif fmt_norm == "json":
            content = format_json(ctx, SCHEMA_VERSION, pretty=json_pretty)
            path = dest_dir / "history.json"
        else:
            raise ValueError(f"Unsupported format: {fmt}")
        if not dry_run:
            path.write_text(content, encoding="utf-8")
        if verbose:
            print(f"[history_report] wrote {fmt_norm} -> {path} ({len(content)} bytes)")
        key = "markdown" if fmt_norm in {"md", "markdown"} else fmt_norm
        results[key] = {"path": str(path), "bytes": len(content), "written": not dry_run}

    badge_count = sum(len(b) for b in (ctx.badges_by_owner or {}).values())
    return {
        "formats": results,
        "meta": {
            "schema_version": SCHEMA_VERSION,
            "league_id": league_id,
            "seasons": sorted(ctx.seasons),
            "state_season": ctx.state_season,
        },
        "written": not dry_run,
        "entries": {
            "owners": len(ctx.careers),
            "team_seasons": sum(len(r) for r in ctx.seasons.values()),
            "draft_picks": sum(len(p) for p in (ctx.draft_picks or {}).values()),
            "badges": badge_count,
        },
    }


def main(argv: list[str] | None = None) -> int:  # pragma: no cover
    parser = argparse.ArgumentParser(
        description="Derive league history (season records, careers, draft value, badges)"
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--snapshot", help="Read a raw snapshot JSON instead of calling the API")
    source.add_argument(
        "--league-id", default=LEAGUE_ID, help="Current Sleeper league_id (default from env)"
    )
    parser.add_argument(
        "--supplement", help="YAML/JSON file with external_seasons and owner_aliases"
    )
    parser.add_argument("--save-snapshot", help="Write the fetched raw snapshot to this path")
    parser.add_argument("--config", help="YAML file with pipeline overrides")
    parser.add_argument("--out-dir", default="reports/history", help="Output directory")
    parser.add_argument(
        "--formats", default="json", help="Comma-separated list of output formats (json,markdown)"
    )
    parser.set_defaults(json_pretty=True)
    parser.add_argument("--json-compact", dest="json_pretty", action="store_false",
                        help="Use compact JSON (no whitespace)")
    parser.add_argument("--skip-badges", action="store_true",
                        help="Skip draft scoring and badge evaluation")
    parser.add_argument("--catalog", action="store_true", help="Include the badge catalog")
    parser.add_argument("--no-stats-fetch", action="store_true",
                        help="Score drafts from cached player stats only")
    parser.add_argument("--verbose", action="store_true", help="Verbose logging")
    parser.add_argument("--dry-run", action="store_true", help="Compute but do not write files")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    formats = [f.strip() for f in args.formats.split(",") if f.strip()]

    try:
        config = load_config(args.config)
        client = None if args.no_stats_fetch else SleeperClient.from_env()
        if args.snapshot:
            snapshot = read_snapshot(args.snapshot)
        elif args.league_id:
            client = client or SleeperClient.from_env()
            print(f"Fetching league history starting from {args.league_id} ...")
            snapshot = load_league_history(client, args.league_id)
            if args.save_snapshot:
                print(f"Saved snapshot -> {write_snapshot(snapshot, args.save_snapshot)}")
        else:
            print("Either --snapshot or --league-id (or SLEEPER_LEAGUE_ID) is required.",
                  file=sys.stderr)
            return 1
        if args.supplement:
            snapshot = merge_supplement(snapshot, read_supplement(args.supplement))
        summary = generate_history_report(
            snapshot=snapshot,
            league_id=args.league_id if not args.snapshot else None,
            config=config,
            client=client,
            out_dir=args.out_dir,
            output_formats=formats,
            json_pretty=args.json_pretty,
            with_badges=not args.skip_badges,
            include_catalog=args.catalog,
            verbose=args.verbose,
            dry_run=args.dry_run,
        )
        print(_pretty(summary))
        for fmt_name, info in summary["formats"].items():
            print(f"Wrote [{fmt_name}]: {info['path']}")
        return 0
    except ConfigError as e:
        print(f"Config error: {e}", file=sys.stderr)
        return 1
    except requests.HTTPError as e:
        print(f"HTTPError: {e}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
