"""Roster -> durable owner identity across seasons and data sources."""

from __future__ import annotations

import logging

from ffhistory.data.models import SOURCE_EXTERNAL, LeagueDataset, Season
from ffhistory.errors import MissingIdentityMapping

logger = logging.getLogger(__name__)


class IdentityResolver:
    """Maps (season, roster id) to owner ids and owner ids to display names.

    Sleeper rosters resolve through ``owner_id`` with a fallback to the first
    co-owner that is a known user. External seasons key teams by name; a name
    resolves through ``owner_aliases`` (exact, then case-insensitive), then a
    case-insensitive match on a known user's display or team name, and
    otherwise stands as its own owner id.
    """

    def __init__(self, dataset: LeagueDataset) -> None:
        self.dataset = dataset
        self._aliases = dict(dataset.owner_aliases)
        self._aliases_folded = {k.casefold(): v for k, v in dataset.owner_aliases.items()}
        self._users_folded: dict[str, str] = {}
        for uid, user in dataset.users.items():
            for name in (user.display_name, user.team_name):
                if name:
                    self._users_folded.setdefault(name.casefold(), uid)
        self._cache: dict[int, dict[str, str]] = {}

    def _resolve_name(self, name: str) -> str:
        if name in self._aliases:
            return self._aliases[name]
        folded = name.casefold()
        if folded in self._aliases_folded:
            return self._aliases_folded[folded]
        return self._users_folded.get(folded, name)

    def _build(self, season: Season) -> dict[str, str]:
        mapping: dict[str, str] = {}
        if season.source == SOURCE_EXTERNAL:
            names = set(season.team_names) | set(season.placements)
            for m in season.matchups:
                names.update((m.roster_a, m.roster_b))
            for name in sorted(names):
                mapping[name] = self._resolve_name(name)
            return mapping
        rosters = set(season.roster_owners) | set(season.co_owners)
        for rid in rosters:
            owner = season.roster_owners.get(rid)
            if owner and (owner in self.dataset.users or not season.co_owners.get(rid)):
                mapping[rid] = owner
                continue
            for uid in season.co_owners.get(rid, ()):
                if uid in self.dataset.users:
                    mapping[rid] = uid
                    break
            else:
                if owner:
                    mapping[rid] = owner
        return mapping

    def owners_for_season(self, season: int) -> dict[str, str]:
        """roster id -> owner id for every resolvable roster of ``season``."""
        if season not in self._cache:
            s = self.dataset.seasons.get(season)
            self._cache[season] = self._build(s) if s is not None else {}
        return dict(self._cache[season])

    def owner_id(self, season: int, roster_id: str | int) -> str:
        rid = str(roster_id)
        if season not in self._cache:
            self.owners_for_season(season)
        try:
            return self._cache[season][rid]
        except KeyError:
            raise MissingIdentityMapping(season, rid) from None

    def display_name(self, owner_id: str, season: int | None = None) -> str:
        """Name valid for ``season``, else the most recent known one, else the id."""
        seasons = self.dataset.seasons
        if season is not None and season in seasons:
            name = self._season_name(seasons[season], owner_id)
            if name:
                return name
        for year in sorted(seasons, reverse=True):
            name = self._season_name(seasons[year], owner_id)
            if name:
                return name
        user = self.dataset.users.get(owner_id)
        if user is not None:
            return user.team_name or user.display_name
        return owner_id

    def _season_name(self, season: Season, owner_id: str) -> str | None:
        if owner_id in season.owner_names:
            return season.owner_names[owner_id]
        if season.source == SOURCE_EXTERNAL:
            for name, owner in self.owners_for_season(season.year).items():
                if owner == owner_id:
                    return name
        return None
