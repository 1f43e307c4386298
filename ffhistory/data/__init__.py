from . import models, normalize
from .models import (
    BracketMatch,
    DraftPick,
    LeagueDataset,
    LeagueState,
    Matchup,
    Season,
    Transaction,
    User,
)
from .normalize import build_dataset, normalize_draft_pick

__all__ = [
    "models",
    "normalize",
    "BracketMatch",
    "DraftPick",
    "LeagueDataset",
    "LeagueState",
    "Matchup",
    "Season",
    "Transaction",
    "User",
    "build_dataset",
    "normalize_draft_pick",
]
