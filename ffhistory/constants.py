# constants.py
# Centralized constants used by the history pipeline. Do not change values without bumping schema_version.

SCHEMA_VERSION = "2.0.0"

# DPR = ((ppg * POINTS) + ((high + low) * EXTREMES) + ((win_pct * 200) * WIN)) / DIVISOR
DPR_POINTS_WEIGHT = 6.0
DPR_EXTREMES_WEIGHT = 2.0
DPR_WIN_SCALE = 200.0
DPR_WIN_WEIGHT = 2.0
DPR_DIVISOR = 10.0

# Margin classification, as a fraction of the losing score
BLOWOUT_MARGIN_PCT = 0.40
SLIM_MARGIN_PCT = 0.025

# Slot-expected VORP curve: A - (A / ln 10) * ln(pick)
SLOT_CURVE_TOP_VALUE = 27.1
SLOT_CURVE_ZERO_PICK = 10
SCALED_DELTA_DIVISOR = 10.0

# Replacement ranks for a 12-team league with the standard lineup
BASELINE_LEAGUE_SIZE = 12
REPLACEMENT_BASE_RANKS = {
    "QB": 18,
    "RB": 36,
    "WR": 48,
    "TE": 12,
    "K": 12,
    "DEF": 12,
}
STANDARD_ROSTER_POSITIONS = ("QB", "RB", "RB", "WR", "WR", "TE", "FLEX", "K", "DEF")
FLEX_ELIGIBILITY = {
    "FLEX": ("RB", "WR", "TE"),
    "WRRB_FLEX": ("RB", "WR"),
    "REC_FLEX": ("WR", "TE"),
    "SUPER_FLEX": ("QB", "RB", "WR", "TE"),
    "IDP_FLEX": ("DL", "LB", "DB"),
}
NON_STARTING_SLOTS = ("BN", "IR", "TAXI")

# Defensive tier bands: (upper bound inclusive, scoring key); last band is open-ended
POINTS_ALLOWED_TIERS = (
    (0, "pts_allow_0"),
    (6, "pts_allow_1_6"),
    (13, "pts_allow_7_13"),
    (20, "pts_allow_14_20"),
    (27, "pts_allow_21_27"),
    (34, "pts_allow_28_34"),
    (None, "pts_allow_35p"),
)
YARDS_ALLOWED_TIERS = (
    (100, "yds_allow_0_100"),
    (199, "yds_allow_100_199"),
    (299, "yds_allow_200_299"),
    (349, "yds_allow_300_349"),
    (399, "yds_allow_350_399"),
    (449, "yds_allow_400_449"),
    (499, "yds_allow_450_499"),
    (549, "yds_allow_500_549"),
    (None, "yds_allow_550p"),
)
TIERED_STAT_PREFIXES = ("pts_allow_", "yds_allow_")
DEFENSE_POSITIONS = ("DEF", "DST")

# Season tiers by adjusted DPR percentile within the season (threshold, badge id)
SEASON_TIERS = (
    (0.90, "diamond-season"),
    (0.75, "gold-season"),
    (0.55, "silver-season"),
    (0.40, "bronze-season"),
)
BLUNDER_TIERS = (
    (0.0, "clay-season"),
    (0.10, "wood-season"),
    (0.25, "iron-season"),
)

# Matchup badge thresholds (points)
SMALL_VICTORY_MARGIN = 3.0
MICRO_VICTORY_MARGIN = 1.0
NANO_VICTORY_MARGIN = 0.1
BULLY_BLOWOUT_WINS = 3
HEARTBREAKER_SLIM_LOSSES = 3
COMEBACK_KID_START_LOSSES = 3
VETERAN_SEASONS = 5
TOP_HALF_WEEK_SHARE = 0.75

WIN_MILESTONES = (25, 50, 100)
ALL_PLAY_MILESTONES = (250, 500, 1000)
POINTS_MILESTONES = (10000,)
DROUGHT_SEASONS = (5, 10, 15)

RECENT_BADGES_LIMIT = 20

# Throttling / fan-out defaults
DEFAULT_MIN_INTERVAL_SEC = 0.10  # ~600 rpm
DEFAULT_FETCH_WORKERS = 4

# Formatting
WIN_PCT_PLACES = 4
POINTS_PLACES = 2
