import pytest

from ffhistory import constants as C
from ffhistory.cli.history_report import load_config
from ffhistory.config import DEFAULT_CONFIG, PipelineConfig, env_overrides
from ffhistory.errors import ConfigError


def test_defaults_match_constants():
    cfg = PipelineConfig()
    assert cfg.dpr_points_weight == C.DPR_POINTS_WEIGHT
    assert cfg.blowout_margin_pct == C.BLOWOUT_MARGIN_PCT
    assert dict(cfg.replacement_base_ranks) == C.REPLACEMENT_BASE_RANKS
    assert cfg == DEFAULT_CONFIG


def test_from_yaml(tmp_path):
    path = tmp_path / "pipeline.yaml"
    path.write_text(
        "dpr_win_weight: 3\n"
        "fetch_workers: 2\n"
        "replacement_base_ranks:\n"
        "  qb: 24\n",
        encoding="utf-8",
    )
    cfg = PipelineConfig.from_yaml(path)
    assert cfg.dpr_win_weight == 3.0
    assert cfg.fetch_workers == 2
    assert cfg.replacement_base_ranks["QB"] == 24
    # untouched positions keep their defaults
    assert cfg.replacement_base_ranks["RB"] == C.REPLACEMENT_BASE_RANKS["RB"]


def test_unknown_key_is_an_error(tmp_path):
    path = tmp_path / "pipeline.yaml"
    path.write_text("not_a_setting: 1\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        PipelineConfig.from_yaml(path)


def test_from_env_mapping():
    cfg = PipelineConfig.from_env({"FFH_SLIM_MARGIN_PCT": "0.05", "OTHER": "x"})
    assert cfg.slim_margin_pct == 0.05


def test_invalid_values_rejected():
    with pytest.raises(ConfigError):
        PipelineConfig.from_env({"FFH_FETCH_WORKERS": "many"})
    with pytest.raises(ConfigError):
        PipelineConfig(fetch_workers=0)
    with pytest.raises(ConfigError):
        PipelineConfig(slim_margin_pct=0.5, blowout_margin_pct=0.4)


def test_load_config_applies_env_over_yaml(tmp_path, monkeypatch):
    path = tmp_path / "pipeline.yaml"
    path.write_text("recent_badges_limit: 5\nveteran_seasons: 3\n", encoding="utf-8")
    monkeypatch.setenv("FFH_RECENT_BADGES_LIMIT", "7")
    cfg = load_config(str(path))
    assert cfg.recent_badges_limit == 7
    assert cfg.veteran_seasons == 3


def test_env_overrides_shared_by_from_env_and_load_config(monkeypatch):
    monkeypatch.setenv("FFH_SLIM_MARGIN_PCT", "0.04")
    monkeypatch.setenv("SLEEPER_LEAGUE_ID", "123")
    assert env_overrides() == {"slim_margin_pct": "0.04"}
    assert env_overrides({"FFH_VETERAN_SEASONS": "4", "HOME": "/tmp"}) == {"veteran_seasons": "4"}
    assert load_config() == PipelineConfig.from_env()
    assert load_config().slim_margin_pct == 0.04
