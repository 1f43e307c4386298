import json

import pytest

from ffhistory.cli.history_report import generate_history_report
from ffhistory.data.normalize import build_dataset
from ffhistory.pipeline import compute_league_history, compute_records
from ffhistory.report.formatters import build_context, format_json, format_markdown, to_json_payload
from ffhistory.report.render import fmt_pct, md_table

from snapshots import four_team_season, sleeper_season, snapshot

EXPECTED_TOP_KEYS = {
    'schema_version', 'metadata', 'owners', 'seasons', 'careers', 'draft_picks', 'badges',
    'recent_badges', 'draft_analytics',
}

EXPECTED_META_KEYS = {'league_id', 'state_season', 'state_week', 'seasons', 'complete_seasons'}

EXPECTED_CAREER_COLUMNS = [
    'Rank', 'Owner', 'Seasons', 'Record', 'Win%', 'All-Play%', 'PF', 'DPR', 'Titles', 'Playoffs'
]


def _history():
    ds = build_dataset(snapshot({2021: four_team_season(), 2022: four_team_season()}, 2023))
    return ds, compute_league_history(ds)


def test_json_payload_keys_present():
    ds, result = _history()
    payload = to_json_payload(ds, result, league_id="123")
    assert set(payload) == EXPECTED_TOP_KEYS
    assert set(payload['metadata']) == EXPECTED_META_KEYS
    assert payload['metadata']['complete_seasons'] == [2021, 2022]
    assert set(payload['seasons']) == {'2021', '2022'}
    row = payload['seasons']['2022']['u2']
    assert row['is_champion'] is True
    assert row['weekly_scores'][0]['week'] == 1
    # enums come out as their string values
    badge = payload['badges']['u2'][0]
    assert isinstance(badge['category'], str)
    json.dumps(payload)


def test_payload_without_badges_omits_badge_sections():
    ds = build_dataset(snapshot({2022: four_team_season()}, 2023))
    payload = to_json_payload(ds, compute_records(ds))
    assert 'badges' not in payload and 'draft_picks' not in payload
    assert 'draft_analytics' not in payload


def test_draft_analytics_section_from_scored_picks():
    raw_picks = [
        {"round": 1, "pick_no": 1, "roster_id": 1, "player_id": "p1", "metadata": {"position": "RB"}},
        {"round": 1, "pick_no": 2, "roster_id": 2, "player_id": "p2", "metadata": {"position": "RB"}},
    ]
    season = sleeper_season(
        {1: [(1, 100.0, 2, 90.0)]},
        {1: "a", 2: "b"},
        draft_picks=raw_picks,
        scoring={"rush_yd": 0.1},
        player_stats={"p1": {"1": {"rush_yd": 100}, "2": {"rush_yd": 100}}, "p2": {"1": {"rush_yd": 50}}},
    )
    ds = build_dataset(snapshot({2023: season}, 2023))
    ctx = build_context(ds, compute_league_history(ds))
    section = ctx.to_json_payload("1")["draft_analytics"]["2023"]

    assert [[c["count"] for c in row] for row in section["heatmap"]] == [[1, 1]]
    assert set(section["owners"]) == {"a", "b"}
    assert section["owners"]["a"]["best_player_id"] == "p1"
    totals = section["owner_totals"]
    assert totals["a"] + totals["b"] == pytest.approx(0.0)
    assert totals["a"] > totals["b"]
    p1 = section["consistency"]["p1"]
    assert p1["mean"] == pytest.approx(10.0) and p1["stddev"] == pytest.approx(0.0)
    assert section["consistency"]["p2"]["mean"] == pytest.approx(5.0)
    assert "## Draft Value" in format_markdown(ctx)
    json.dumps(ctx.to_json_payload("1"))


def test_career_rows_carry_ranks():
    ds, result = _history()
    careers = to_json_payload(ds, result)['careers']
    assert [c['owner_id'] for c in careers] == [c.owner_id for c in result.careers]
    u2 = next(c for c in careers if c['owner_id'] == 'u2')
    assert u2['championships'] == 2
    assert u2['championship_years'] == [2021, 2022]
    assert u2['rank_labels']['championships'] == '1st'


def test_markdown_sections_and_columns():
    ds, result = _history()
    md = format_markdown(build_context(ds, result))
    lines = md.splitlines()
    idx = lines.index('## Careers')
    cols = [c.strip() for c in lines[idx + 2].strip('| ').split('|')]
    assert cols == EXPECTED_CAREER_COLUMNS
    assert '## Champions' in lines
    assert '## Recent Badges' in lines


def test_format_json_compact_and_pretty_parse_the_same():
    ds, result = _history()
    ctx = build_context(ds, result, include_catalog=True)
    compact = format_json(ctx)
    pretty = format_json(ctx, pretty=True)
    assert '\n' not in compact
    assert json.loads(compact) == json.loads(pretty)
    assert json.loads(compact)['badge_catalog']


def test_generate_history_report_writes_files(tmp_path):
    raw = snapshot({2022: four_team_season()}, 2023)
    summary = generate_history_report(
        snapshot=raw, out_dir=str(tmp_path), output_formats=['json', 'markdown']
    )
    assert (tmp_path / 'history.json').exists()
    assert (tmp_path / 'history.md').exists()
    assert summary['entries']['owners'] == 4
    assert summary['meta']['seasons'] == [2022]


def test_generate_history_report_dry_run(tmp_path):
    out = tmp_path / 'out'
    summary = generate_history_report(
        snapshot=snapshot({2022: four_team_season()}, 2023), out_dir=str(out), dry_run=True
    )
    assert not out.exists()
    assert summary['written'] is False
    assert summary['formats']['json']['written'] is False


def test_md_table_alignment_and_escaping():
    lines = md_table(['A', 'B'], [['x|y', 1]], align='lr')
    assert lines[1] == '| :--- | ---: |'
    assert lines[2] == '| x\\|y | 1 |'


def test_fmt_pct():
    assert fmt_pct(2 / 3) == '.667'
    assert fmt_pct(1.0) == '1.000'
