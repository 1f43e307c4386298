"""HTTP client and rate limiter for the Sleeper API.

This module centralizes HTTP concerns:
- Monotonically-timed rate limiting (min interval between calls), shared by
  every thread using the client
- Resilient requests.Session with retries and backoff for transient errors
- JSON helpers bound to the configured league API and stats API base URLs
"""

from __future__ import annotations

import os
import threading
import time
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ffhistory.constants import DEFAULT_MIN_INTERVAL_SEC
from ffhistory.errors import UpstreamFetchFailure

DEFAULT_BASE_URL = "https://api.sleeper.app/v1"
DEFAULT_STATS_URL = "https://api.sleeper.app/stats/nfl"


class RateLimiter:
    """Wall-clock based rate limiter using a minimum interval between calls.

    ``wait()`` holds a lock while sleeping so concurrent callers queue up
    instead of bursting.
    """

    def __init__(self, min_interval_sec: float | None = None) -> None:
        self.min_interval = (
            float(min_interval_sec) if min_interval_sec else DEFAULT_MIN_INTERVAL_SEC
        )
        self._last = 0.0
        self._lock = threading.Lock()

    def wait(self) -> None:
        with self._lock:
            now = time.monotonic()
            if self._last:
                elapsed = now - self._last
                if elapsed < self.min_interval:
                    time.sleep(self.min_interval - elapsed)
            self._last = time.monotonic()


class SleeperClient:
    """Thin wrapper around requests.Session for the Sleeper API.

    Environment variables can flow in via parameters:
    - base_url: defaults to SLEEPER_BASE_URL or https://api.sleeper.app/v1
    - stats_url: defaults to SLEEPER_STATS_URL or https://api.sleeper.app/stats/nfl
    - rpm_limit: translated to a minimum interval of 60 / rpm seconds
    - min_interval_ms: explicit minimum interval in milliseconds (wins if larger)

    Only GET + JSON is implemented; history ingestion only reads.
    """

    def __init__(
        self,
        base_url: str | None = None,
        rpm_limit: float | None = None,
        min_interval_ms: float | None = None,
        stats_url: str | None = None,
        timeout: float = 20,
    ) -> None:
        self.base_url = (base_url or os.environ.get("SLEEPER_BASE_URL", DEFAULT_BASE_URL)).rstrip("/")
        self.stats_url = (
            stats_url or os.environ.get("SLEEPER_STATS_URL", DEFAULT_STATS_URL)
        ).rstrip("/")
        self.timeout = timeout
        min_interval = None
        if rpm_limit and rpm_limit > 0:
            min_interval = max(min_interval or 0.0, 60.0 / rpm_limit)
        if min_interval_ms and min_interval_ms > 0:
            ms = float(min_interval_ms) / 1000.0
            min_interval = max(min_interval or 0.0, ms)
        self.rate = RateLimiter(min_interval)

        self.session = requests.Session()
        self.session.headers.update({"User-Agent": "ff-history/1.0"})
        # Configure safe-idempotent retries for transient errors
        retry = Retry(
            total=5,
            connect=3,
            read=3,
            backoff_factor=0.5,
            status_forcelist=(408, 429, 500, 502, 503, 504),
            allowed_methods=("GET",),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry, pool_maxsize=8)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "SleeperClient":
        env = os.environ if environ is None else environ

        def _num(name: str) -> float | None:
            raw = env.get(name)
            try:
                return float(raw) if raw else None
            except ValueError:
                return None

        return cls(
            base_url=env.get("SLEEPER_BASE_URL"),
            stats_url=env.get("SLEEPER_STATS_URL"),
            rpm_limit=_num("SLEEPER_RPM_LIMIT"),
            min_interval_ms=_num("SLEEPER_MIN_INTERVAL_MS"),
        )

    def _get(self, url: str, params: dict | None = None) -> Any:
        self.rate.wait()
        r = self.session.get(url, params=params, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def get_json(self, path: str) -> Any:
        """GET ``base_url + path`` and return decoded JSON.

        Raises requests.HTTPError on non-2xx responses (after retries). A
        timeout is applied per request to avoid indefinite hangs.
        """
        if not path.startswith("/"):
            path = "/" + path
        return self._get(self.base_url + path)

    def state(self, sport: str = "nfl") -> dict:
        return self.get_json(f"/state/{sport}") or {}

    def league(self, league_id: str) -> dict:
        return self.get_json(f"/league/{league_id}") or {}

    def users(self, league_id: str) -> list[dict]:
        return self.get_json(f"/league/{league_id}/users") or []

    def rosters(self, league_id: str) -> list[dict]:
        return self.get_json(f"/league/{league_id}/rosters") or []

    def matchups(self, league_id: str, week: int) -> list[dict]:
        return self.get_json(f"/league/{league_id}/matchups/{week}") or []

    def winners_bracket(self, league_id: str) -> list[dict]:
        return self.get_json(f"/league/{league_id}/winners_bracket") or []

    def losers_bracket(self, league_id: str) -> list[dict]:
        return self.get_json(f"/league/{league_id}/losers_bracket") or []

    def transactions(self, league_id: str, week: int) -> list[dict]:
        return self.get_json(f"/league/{league_id}/transactions/{week}") or []

    def drafts(self, league_id: str) -> list[dict]:
        return self.get_json(f"/league/{league_id}/drafts") or []

    def draft_picks(self, draft_id: str) -> list[dict]:
        return self.get_json(f"/draft/{draft_id}/picks") or []

    def player_stats(
        self, player_id: str, season: int, season_type: str = "regular"
    ) -> dict[int, dict]:
        """Weekly stat lines for one player: {week: {stat: value}}.

        Any transport or HTTP failure surfaces as ``UpstreamFetchFailure``.
        """
        url = f"{self.stats_url}/player/{player_id}"
        params = {"season_type": season_type, "season": season, "grouping": "week"}
        try:
            payload = self._get(url, params=params) or {}
        except (requests.RequestException, ValueError) as exc:
            raise UpstreamFetchFailure(player_id, season, exc) from exc
        weekly: dict[int, dict] = {}
        for week, entry in payload.items():
            if not isinstance(entry, dict):
                continue
            stats = entry.get("stats", entry)
            if isinstance(stats, dict):
                try:
                    weekly[int(week)] = stats
                except ValueError:
                    continue
        return weekly
