from . import engine, registry, rules
from .engine import BadgeResult, evaluate_badges, recent_badges
from .registry import Badge, BadgeCategory, BadgeDefinition, BadgeRegistry, BadgeScope
from .rules import REGISTRY, CareerContext, SeasonContext

__all__ = [
    "engine",
    "registry",
    "rules",
    "Badge",
    "BadgeCategory",
    "BadgeDefinition",
    "BadgeRegistry",
    "BadgeResult",
    "BadgeScope",
    "CareerContext",
    "SeasonContext",
    "REGISTRY",
    "evaluate_badges",
    "recent_badges",
]
