"""Typed badge registry: categories, scopes, definitions and instances."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Mapping


class BadgeCategory(enum.Enum):
    """Display categories, declared in precedence order."""

    TROPHY = "trophy"
    CHAMPION = "champion"
    SEASON = "season"
    MATCHUP = "matchup"
    DRAFT = "draft-and-transaction"
    ROSTER = "roster"
    LEAGUE = "league"
    BLUNDER = "blunder"
    LEAGUE_BLUNDER = "league-blunder"
    OTHER = "other"

    @property
    def precedence(self) -> int:
        return _PRECEDENCE[self]


_PRECEDENCE = {c: i for i, c in enumerate(BadgeCategory)}


class BadgeScope(enum.Enum):
    SEASON = "season"
    CAREER = "career"


# Context -> metadata dict when earned, None otherwise
Predicate = Callable[[Any], "Mapping[str, Any] | None"]


@dataclass(frozen=True, slots=True)
class BadgeDefinition:
    id: str
    display_name: str
    scope: BadgeScope
    predicate: Predicate
    categories: tuple[BadgeCategory, ...] = ()
    description: str = ""
    # Skip seasons whose placements are not final yet
    requires_complete: bool = False

    @property
    def category(self) -> BadgeCategory:
        """The one category this badge is shown under."""
        if not self.categories:
            return BadgeCategory.OTHER
        return min(self.categories, key=lambda c: c.precedence)


@dataclass(frozen=True, slots=True)
class Badge:
    badge_id: str
    owner_id: str
    year: int | None
    category: BadgeCategory
    display_name: str
    metadata: Mapping[str, Any] = field(default_factory=dict)

    @property
    def key(self) -> tuple[str, str, int | None]:
        return (self.owner_id, self.badge_id, self.year)

    def sort_key(self) -> tuple:
        # career badges (no year) after season badges
        year = self.year if self.year is not None else 10**6
        return (year, self.category.precedence, self.badge_id)


class BadgeRegistry:
    def __init__(self) -> None:
        self._defs: dict[str, BadgeDefinition] = {}

    def register(self, definition: BadgeDefinition) -> BadgeDefinition:
        if definition.id in self._defs:
            raise ValueError(f"Duplicate badge id: {definition.id}")
        self._defs[definition.id] = definition
        return definition

    def rule(
        self,
        badge_id: str,
        display_name: str,
        *categories: BadgeCategory,
        scope: BadgeScope = BadgeScope.SEASON,
        description: str = "",
        requires_complete: bool = False,
    ) -> Callable[[Predicate], Predicate]:
        """Decorator form of ``register``."""

        def wrap(fn: Predicate) -> Predicate:
            self.register(
                BadgeDefinition(
                    id=badge_id,
                    display_name=display_name,
                    scope=scope,
                    predicate=fn,
                    categories=tuple(categories),
                    description=description or (fn.__doc__ or "").strip(),
                    requires_complete=requires_complete,
                )
            )
            return fn

        return wrap

    def get(self, badge_id: str) -> BadgeDefinition:
        return self._defs[badge_id]

    def __contains__(self, badge_id: object) -> bool:
        return badge_id in self._defs

    def __iter__(self) -> Iterator[BadgeDefinition]:
        return iter(self._defs.values())

    def __len__(self) -> int:
        return len(self._defs)

    def by_scope(self, scope: BadgeScope) -> list[BadgeDefinition]:
        return [d for d in self._defs.values() if d.scope is scope]
