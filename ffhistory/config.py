"""Pipeline configuration.

Every tunable numeric constant of the pipeline lives on ``PipelineConfig``;
the defaults mirror ``ffhistory.constants``. Overrides can come from a YAML
file or ``FFH_*`` environment variables.
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

from ffhistory import constants as C
from ffhistory.errors import ConfigError

ENV_PREFIX = "FFH_"


@dataclass(frozen=True, slots=True)
class PipelineConfig:
    dpr_points_weight: float = C.DPR_POINTS_WEIGHT
    dpr_extremes_weight: float = C.DPR_EXTREMES_WEIGHT
    dpr_win_scale: float = C.DPR_WIN_SCALE
    dpr_win_weight: float = C.DPR_WIN_WEIGHT
    dpr_divisor: float = C.DPR_DIVISOR

    blowout_margin_pct: float = C.BLOWOUT_MARGIN_PCT
    slim_margin_pct: float = C.SLIM_MARGIN_PCT

    slot_curve_top_value: float = C.SLOT_CURVE_TOP_VALUE
    slot_curve_zero_pick: int = C.SLOT_CURVE_ZERO_PICK
    scaled_delta_divisor: float = C.SCALED_DELTA_DIVISOR
    replacement_base_ranks: Mapping[str, int] = field(
        default_factory=lambda: dict(C.REPLACEMENT_BASE_RANKS)
    )
    baseline_league_size: int = C.BASELINE_LEAGUE_SIZE

    fetch_workers: int = C.DEFAULT_FETCH_WORKERS
    recent_badges_limit: int = C.RECENT_BADGES_LIMIT

    small_victory_margin: float = C.SMALL_VICTORY_MARGIN
    micro_victory_margin: float = C.MICRO_VICTORY_MARGIN
    nano_victory_margin: float = C.NANO_VICTORY_MARGIN
    bully_blowout_wins: int = C.BULLY_BLOWOUT_WINS
    heartbreaker_slim_losses: int = C.HEARTBREAKER_SLIM_LOSSES
    comeback_kid_start_losses: int = C.COMEBACK_KID_START_LOSSES
    veteran_seasons: int = C.VETERAN_SEASONS
    top_half_week_share: float = C.TOP_HALF_WEEK_SHARE

    def __post_init__(self) -> None:
        if self.dpr_divisor == 0:
            raise ConfigError("dpr_divisor must be non-zero")
        if self.scaled_delta_divisor == 0:
            raise ConfigError("scaled_delta_divisor must be non-zero")
        if self.fetch_workers < 1:
            raise ConfigError("fetch_workers must be at least 1")
        if self.slot_curve_zero_pick < 2:
            raise ConfigError("slot_curve_zero_pick must be at least 2")
        if not 0 <= self.slim_margin_pct < self.blowout_margin_pct:
            raise ConfigError("expected 0 <= slim_margin_pct < blowout_margin_pct")

    def with_overrides(self, overrides: Mapping[str, Any]) -> "PipelineConfig":
        """Return a copy with ``overrides`` applied; unknown keys are an error."""
        known = {f.name: f for f in dataclasses.fields(self)}
        clean: dict[str, Any] = {}
        for key, value in (overrides or {}).items():
            if key not in known:
                raise ConfigError(f"Unknown config key: {key}")
            clean[key] = _coerce(known[key], value)
        return dataclasses.replace(self, **clean)

    @classmethod
    def from_yaml(cls, path: str | os.PathLike[str]) -> "PipelineConfig":
        text = Path(path).read_text(encoding="utf-8")
        data = yaml.safe_load(text) or {}
        if not isinstance(data, dict):
            raise ConfigError(f"{path}: expected a mapping at the top level")
        return cls().with_overrides(data)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "PipelineConfig":
        return cls().with_overrides(env_overrides(environ))


def env_overrides(environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """``FFH_*`` variables as lower-case field names, prefix stripped."""
    env = os.environ if environ is None else environ
    return {k[len(ENV_PREFIX):].lower(): v for k, v in env.items() if k.startswith(ENV_PREFIX)}


def _coerce(f: dataclasses.Field, value: Any) -> Any:
    default = f.default if f.default is not dataclasses.MISSING else f.default_factory()  # type: ignore[misc]
    if isinstance(default, dict):
        if not isinstance(value, dict):
            raise ConfigError(f"{f.name}: expected a mapping")
        merged = dict(default)
        merged.update({str(k).upper(): int(v) for k, v in value.items()})
        return merged
    try:
        if isinstance(default, bool):
            return str(value).lower() in {"1", "true", "yes"}
        if isinstance(default, int):
            return int(value)
        if isinstance(default, float):
            return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{f.name}: invalid value {value!r}") from exc
    return value


DEFAULT_CONFIG = PipelineConfig()
