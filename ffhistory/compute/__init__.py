from . import analytics, career, core, draft, identity, season

IdentityResolver = identity.IdentityResolver
TeamSeasonRecord = season.TeamSeasonRecord
CareerRecord = career.CareerRecord
compute_season_records = season.compute_season_records
compute_all_seasons = season.compute_all_seasons
compute_careers = career.compute_careers
score_draft = draft.score_draft
score_all_drafts = draft.score_all_drafts
fantasy_points = draft.fantasy_points
longest_streaks = core.longest_streaks
dense_rank = core.dense_rank

__all__ = [
    "IdentityResolver",
    "TeamSeasonRecord",
    "CareerRecord",
    "compute_season_records",
    "compute_all_seasons",
    "compute_careers",
    "score_draft",
    "score_all_drafts",
    "fantasy_points",
    "longest_streaks",
    "dense_rank",
]
