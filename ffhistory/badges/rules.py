"""Badge catalog.

Season rules receive a ``SeasonContext`` (one owner's season plus the whole
season's records, matchups and scored draft), career rules a
``CareerContext``. A rule returns a metadata dict when the badge is earned
and None otherwise.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from ffhistory import constants as C
from ffhistory.badges.registry import BadgeCategory as Cat
from ffhistory.badges.registry import BadgeRegistry, BadgeScope
from ffhistory.compute.analytics import pick_owner
from ffhistory.compute.career import CareerRecord
from ffhistory.compute.season import TeamSeasonRecord
from ffhistory.config import DEFAULT_CONFIG, PipelineConfig
from ffhistory.data.models import DraftPick, Season

DRAFT_POSITIONS = ("QB", "RB", "WR", "TE", "K", "DEF")


@dataclass(frozen=True, slots=True)
class SeasonContext:
    record: TeamSeasonRecord
    season_records: Mapping[str, TeamSeasonRecord]
    season: Season
    history: Sequence[TeamSeasonRecord]
    picks: Sequence[DraftPick] = ()
    roster_owners: Mapping[str, str] = field(default_factory=dict)
    config: PipelineConfig = DEFAULT_CONFIG

    @property
    def owner_id(self) -> str:
        return self.record.owner_id

    @property
    def others(self) -> list[TeamSeasonRecord]:
        return list(self.season_records.values())

    def owner_picks(self) -> list[DraftPick]:
        return [
            p
            for p in self.picks
            if not p.is_keeper and pick_owner(p, self.roster_owners) == self.owner_id
        ]


@dataclass(frozen=True, slots=True)
class CareerContext:
    career: CareerRecord
    careers: Sequence[CareerRecord]
    history: Sequence[TeamSeasonRecord]
    config: PipelineConfig = DEFAULT_CONFIG


REGISTRY = BadgeRegistry()
rule = REGISTRY.rule


# -- helpers -----------------------------------------------------------------


def percentile(value: float, population: Sequence[float]) -> float:
    """Share of the other members strictly below ``value`` (1.0 for a lone member)."""
    n = len(population)
    if n <= 1:
        return 1.0
    lower = sum(1 for v in population if v < value)
    return lower / (n - 1)


def _is_best(ctx: SeasonContext, attr: str, lowest: bool = False) -> dict | None:
    values = [getattr(r, attr) for r in ctx.others]
    if not values:
        return None
    target = min(values) if lowest else max(values)
    own = getattr(ctx.record, attr)
    if own != target:
        return None
    return {attr: own}


def _season_games(ctx: SeasonContext) -> list[tuple[int, str, float, str, float]]:
    """(week, roster a, score a, roster b, score b) for played regular-season games."""
    return [
        (m.week, m.roster_a, m.score_a, m.roster_b, m.score_b)
        for m in ctx.season.regular_season_matchups
        if not m.is_placeholder
    ]


def _owned_game(ctx: SeasonContext, game: tuple, predicate) -> bool:
    week, ra, sa, rb, sb = game
    rid = ctx.record.roster_id
    if rid == ra:
        return predicate(sa, sb)
    if rid == rb:
        return predicate(sb, sa)
    return False


def _wins(ctx: SeasonContext) -> list[tuple[int, float, float]]:
    return [(w, s, o) for w, s, o, _ in ctx.record.weekly_scores if s > o]


def _losses(ctx: SeasonContext) -> list[tuple[int, float, float]]:
    return [(w, s, o) for w, s, o, _ in ctx.record.weekly_scores if s < o]


def _week_positions(ctx: SeasonContext) -> list[tuple[int, int]]:
    """(teams scoring strictly more, teams that week) for each of the owner's weeks."""
    by_week: dict[int, list[float]] = {}
    for rec in ctx.others:
        for week, score, _, _ in rec.weekly_scores:
            by_week.setdefault(week, []).append(score)
    out = []
    for week, score, _, _ in ctx.record.weekly_scores:
        scores = by_week.get(week, [])
        out.append((sum(1 for s in scores if s > score), len(scores)))
    return out


def _transaction_counts(ctx: SeasonContext) -> dict[str, int]:
    counts: dict[str, int] = {}
    for t in ctx.season.transactions:
        if not t.is_complete:
            continue
        for rid in t.roster_ids:
            owner = ctx.roster_owners.get(rid)
            if owner:
                counts[owner] = counts.get(owner, 0) + 1
    return counts


def _owner_totals(ctx: SeasonContext, attr: str, position: str | None = None) -> dict[str, float]:
    totals: dict[str, float] = {}
    for p in ctx.picks:
        if p.is_keeper or (position and p.position != position):
            continue
        owner = pick_owner(p, ctx.roster_owners)
        totals[owner] = totals.get(owner, 0.0) + getattr(p, attr)
    return totals


def _extreme_pick(ctx: SeasonContext, worst: bool, position: str | None = None) -> dict | None:
    pool = [p for p in ctx.picks if not p.is_keeper and (position is None or p.position == position)]
    if not pool:
        return None
    key = min if worst else max
    target = key(p.scaled_vorp_delta for p in pool)
    mine = [p for p in ctx.owner_picks() if p.scaled_vorp_delta == target and p in pool]
    if not mine:
        return None
    p = mine[0]
    return {
        "player_id": p.player_id,
        "player_name": p.player_name,
        "position": p.position,
        "pick_no": p.pick_no,
        "scaled_vorp_delta": round(p.scaled_vorp_delta, 4),
    }


# -- trophy ------------------------------------------------------------------


@rule("champion", "Champion", Cat.TROPHY, requires_complete=True)
def champion(ctx: SeasonContext) -> dict | None:
    """Playoff champion for the season."""
    return {"finish": 1} if ctx.record.is_champion else None


@rule("runner-up", "Runner Up", Cat.TROPHY, requires_complete=True)
def runner_up(ctx: SeasonContext) -> dict | None:
    """Playoff runner-up (2nd place)."""
    return {"finish": 2} if ctx.record.is_runner_up else None


@rule("third-place", "3rd Place", Cat.TROPHY, requires_complete=True)
def third_place(ctx: SeasonContext) -> dict | None:
    """Playoff third-place finisher."""
    return {"finish": 3} if ctx.record.is_third_place else None


@rule("points-first", "Points Title", Cat.TROPHY, Cat.CHAMPION, requires_complete=True)
def points_first(ctx: SeasonContext) -> dict | None:
    """Most regular-season points."""
    return {"points_for": ctx.record.points_for} if ctx.record.is_points_champion else None


@rule("points-second", "Points Runner Up", Cat.TROPHY, requires_complete=True)
def points_second(ctx: SeasonContext) -> dict | None:
    """Second-most regular-season points."""
    return {"points_for": ctx.record.points_for} if ctx.record.is_points_runner_up else None


@rule("points-third", "Points 3rd Place", Cat.TROPHY, requires_complete=True)
def points_third(ctx: SeasonContext) -> dict | None:
    """Third-most regular-season points."""
    return {"points_for": ctx.record.points_for} if ctx.record.is_points_third else None


# -- champion ----------------------------------------------------------------


@rule("season-title", "Season Title", Cat.CHAMPION, requires_complete=True)
def season_title(ctx: SeasonContext) -> dict | None:
    """Best regular-season record."""
    if not ctx.record.is_regular_season_champion:
        return None
    r = ctx.record
    return {"record": f"{r.wins}-{r.losses}-{r.ties}"}


@rule("all-play-title", "Season All-Play Title", Cat.CHAMPION, requires_complete=True)
def all_play_title(ctx: SeasonContext) -> dict | None:
    """Best all-play win percentage of the season."""
    return _is_best(ctx, "all_play_win_percentage")


@rule("triple-crown", "Triple Crown", Cat.CHAMPION, Cat.TROPHY, requires_complete=True)
def triple_crown(ctx: SeasonContext) -> dict | None:
    """Season title, points title and all-play title in the same year."""
    r = ctx.record
    if r.is_regular_season_champion and r.is_points_champion and all_play_title(ctx) is not None:
        return {}
    return None


@rule("heavyweight-champion", "Heavyweight Champion", Cat.CHAMPION, requires_complete=True)
def heavyweight_champion(ctx: SeasonContext) -> dict | None:
    """Champion whose schedule was at or above the 75th percentile of difficulty."""
    if not ctx.record.is_champion:
        return None
    sos = {r.owner_id: r.points_against / r.games_played for r in ctx.others if r.games_played}
    own = sos.get(ctx.owner_id)
    if own is None:
        return None
    p = percentile(own, list(sos.values()))
    return {"schedule_percentile": round(p, 4)} if p >= 0.75 else None


@rule("comeback-kid", "Comeback Kid", Cat.CHAMPION, requires_complete=True)
def comeback_kid(ctx: SeasonContext) -> dict | None:
    """Champion who lost the opening games of the season and still won the title."""
    if not ctx.record.is_champion:
        return None
    n = ctx.config.comeback_kid_start_losses
    opening = ctx.record.weekly_scores[:n]
    if len(opening) == n and all(s < o for _, s, o, _ in opening):
        return {"opening_losses": n}
    return None


@rule("against-all-odds", "Against All Odds", Cat.CHAMPION, requires_complete=True)
def against_all_odds(ctx: SeasonContext) -> dict | None:
    """Champion with a luck rating at or below the 25th percentile."""
    if not ctx.record.is_champion:
        return None
    p = percentile(ctx.record.luck_rating, [r.luck_rating for r in ctx.others])
    return {"luck_percentile": round(p, 4)} if p <= 0.25 else None


@rule("silverback-to-back", "Silverback-To-Back", Cat.CHAMPION, requires_complete=True)
def silverback_to_back(ctx: SeasonContext) -> dict | None:
    """Runner-up in consecutive seasons."""
    if not ctx.record.is_runner_up:
        return None
    prev = [r for r in ctx.history if r.season == ctx.record.season - 1]
    if prev and prev[0].is_runner_up:
        return {"previous": prev[0].season}
    return None


@rule("lucky-duck", "Lucky Duck", Cat.CHAMPION, Cat.SEASON, requires_complete=True)
def lucky_duck(ctx: SeasonContext) -> dict | None:
    """Highest luck rating of the season."""
    found = _is_best(ctx, "luck_rating")
    if found is None or ctx.record.luck_rating <= 0:
        return None
    return {"luck_rating": round(ctx.record.luck_rating, 4)}


@rule("draft-king", "Draft King", Cat.CHAMPION, Cat.DRAFT, requires_complete=True)
def draft_king(ctx: SeasonContext) -> dict | None:
    """Highest combined draft value of the season."""
    totals = _owner_totals(ctx, "scaled_vorp_delta")
    if ctx.owner_id not in totals:
        return None
    own = totals[ctx.owner_id]
    if own < max(totals.values()):
        return None
    return {"draft_value": round(own, 4)}


# -- season ------------------------------------------------------------------


def _tier(ctx: SeasonContext) -> str | None:
    p = percentile(ctx.record.adjusted_dpr, [r.adjusted_dpr for r in ctx.others])
    for threshold, badge_id in C.SEASON_TIERS:
        if p >= threshold:
            return badge_id
    return None


def _blunder_tier(ctx: SeasonContext) -> str | None:
    p = percentile(ctx.record.adjusted_dpr, [r.adjusted_dpr for r in ctx.others])
    for threshold, badge_id in C.BLUNDER_TIERS:
        if p <= threshold:
            return badge_id
    return None


def _register_tiers() -> None:
    for threshold, badge_id in C.SEASON_TIERS:
        name = badge_id.replace("-", " ").title()

        def check(ctx: SeasonContext, _id: str = badge_id) -> dict | None:
            if _tier(ctx) != _id:
                return None
            return {"adjusted_dpr": round(ctx.record.adjusted_dpr, 4)}

        rule(
            badge_id,
            name,
            Cat.SEASON,
            description=f"Adjusted DPR at or above the {int(threshold * 100)}th percentile of the season.",
            requires_complete=True,
        )(check)
    for threshold, badge_id in C.BLUNDER_TIERS:
        name = badge_id.replace("-", " ").title()

        def check_low(ctx: SeasonContext, _id: str = badge_id) -> dict | None:
            if _blunder_tier(ctx) != _id:
                return None
            return {"adjusted_dpr": round(ctx.record.adjusted_dpr, 4)}

        rule(
            badge_id,
            name,
            Cat.BLUNDER,
            description=f"Adjusted DPR at or below the {int(threshold * 100)}th percentile of the season.",
            requires_complete=True,
        )(check_low)


_register_tiers()


@rule("top-half-scoring", "Top Half Scoring", Cat.SEASON, requires_complete=True)
def top_half_scoring(ctx: SeasonContext) -> dict | None:
    """Scored in the top half of the league in most weeks."""
    positions = _week_positions(ctx)
    if not positions:
        return None
    top = sum(1 for above, n in positions if above < n / 2)
    share = top / len(positions)
    return {"weeks": top} if share >= ctx.config.top_half_week_share else None


@rule("action-king", "Action King", Cat.SEASON, Cat.DRAFT, requires_complete=True)
def action_king(ctx: SeasonContext) -> dict | None:
    """Most completed transactions of the season."""
    counts = _transaction_counts(ctx)
    own = counts.get(ctx.owner_id, 0)
    if not own or own < max(counts.values()):
        return None
    return {"transactions": own}


# -- matchup -----------------------------------------------------------------


@rule("peak-performance", "Peak Performance", Cat.MATCHUP)
def peak_performance(ctx: SeasonContext) -> dict | None:
    """Highest single-game score of the season."""
    return _is_best(ctx, "high_score")


@rule("the-shootout", "The Shootout", Cat.MATCHUP)
def the_shootout(ctx: SeasonContext) -> dict | None:
    """Played in the highest combined-score matchup of the season."""
    games = _season_games(ctx)
    if not games:
        return None
    best = max(sa + sb for _, _, sa, _, sb in games)
    for game in games:
        week, ra, sa, rb, sb = game
        if sa + sb == best and ctx.record.roster_id in (ra, rb):
            return {"week": week, "combined": round(best, 2)}
    return None


@rule("massacre", "Massacre", Cat.MATCHUP)
def massacre(ctx: SeasonContext) -> dict | None:
    """Won the largest-margin game of the season."""
    games = _season_games(ctx)
    if not games:
        return None
    widest = max(abs(sa - sb) for _, _, sa, _, sb in games)
    if widest <= 0:
        return None
    for game in games:
        if _owned_game(ctx, game, lambda own, opp: own - opp == widest):
            return {"week": game[0], "margin": round(widest, 2)}
    return None


@rule("firing-squad", "Firing Squad", Cat.MATCHUP)
def firing_squad(ctx: SeasonContext) -> dict | None:
    """Highest share of a matchup's points in a win this season."""
    games = _season_games(ctx)
    shares = []
    for _, _, sa, _, sb in games:
        total = sa + sb
        if total > 0:
            shares.append(max(sa, sb) / total)
    if not shares:
        return None
    best = max(shares)
    for week, s, o in _wins(ctx):
        if s + o > 0 and s / (s + o) == best:
            return {"week": week, "share": round(best, 4)}
    return None


@rule("double-up", "Double Up", Cat.MATCHUP)
def double_up(ctx: SeasonContext) -> dict | None:
    """Scored at least double the opponent in a win."""
    weeks = [w for w, s, o in _wins(ctx) if o > 0 and s >= 2 * o]
    return {"weeks": weeks} if weeks else None


def _victory_band(ctx: SeasonContext, low: float, high: float) -> dict | None:
    weeks = [w for w, s, o in _wins(ctx) if low <= s - o < high]
    return {"weeks": weeks} if weeks else None


@rule("a-small-victory", "A Small Victory", Cat.MATCHUP)
def a_small_victory(ctx: SeasonContext) -> dict | None:
    """Won by less than a field goal."""
    cfg = ctx.config
    return _victory_band(ctx, cfg.micro_victory_margin, cfg.small_victory_margin)


@rule("a-micro-victory", "A Micro Victory", Cat.MATCHUP)
def a_micro_victory(ctx: SeasonContext) -> dict | None:
    """Won by less than a point."""
    cfg = ctx.config
    return _victory_band(ctx, cfg.nano_victory_margin, cfg.micro_victory_margin)


@rule("a-nano-victory", "A Nano Victory", Cat.MATCHUP)
def a_nano_victory(ctx: SeasonContext) -> dict | None:
    """Won by a fraction of a point."""
    return _victory_band(ctx, 1e-9, ctx.config.nano_victory_margin)


@rule("bully", "Bully", Cat.MATCHUP)
def bully(ctx: SeasonContext) -> dict | None:
    """Several blowout wins in one season."""
    n = ctx.record.blowout_wins
    return {"blowout_wins": n} if n >= ctx.config.bully_blowout_wins else None


# -- draft & roster ----------------------------------------------------------


@rule("top-draft-pick", "Top Draft Pick", Cat.DRAFT, requires_complete=True)
def top_draft_pick(ctx: SeasonContext) -> dict | None:
    """Made the most valuable pick of the draft."""
    return _extreme_pick(ctx, worst=False)


@rule("worst-draft-pick", "Worst Draft Pick", Cat.DRAFT, Cat.BLUNDER, requires_complete=True)
def worst_draft_pick(ctx: SeasonContext) -> dict | None:
    """Made the pick with the largest shortfall against its slot."""
    return _extreme_pick(ctx, worst=True)


@rule("the-mastermind", "The Mastermind", Cat.DRAFT, requires_complete=True)
def the_mastermind(ctx: SeasonContext) -> dict | None:
    """Best average pick value of the draft."""
    totals = _owner_totals(ctx, "scaled_vorp_delta")
    counts: dict[str, int] = {}
    for p in ctx.picks:
        if not p.is_keeper:
            owner = pick_owner(p, ctx.roster_owners)
            counts[owner] = counts.get(owner, 0) + 1
    averages = {o: totals[o] / counts[o] for o in totals if counts.get(o)}
    own = averages.get(ctx.owner_id)
    if own is None or own < max(averages.values()):
        return None
    return {"average_value": round(own, 4)}


def _register_positional() -> None:
    for pos in DRAFT_POSITIONS:
        low = pos.lower()

        def top_pick(ctx: SeasonContext, _pos: str = pos) -> dict | None:
            return _extreme_pick(ctx, worst=False, position=_pos)

        def worst_pick(ctx: SeasonContext, _pos: str = pos) -> dict | None:
            return _extreme_pick(ctx, worst=True, position=_pos)

        def top_roster(ctx: SeasonContext, _pos: str = pos) -> dict | None:
            return _roster_extreme(ctx, _pos, worst=False)

        def worst_roster(ctx: SeasonContext, _pos: str = pos) -> dict | None:
            return _roster_extreme(ctx, _pos, worst=True)

        rule(f"top-{low}-draft", f"Top {pos} Draft", Cat.DRAFT,
             description=f"Most valuable {pos} pick of the draft.", requires_complete=True)(top_pick)
        rule(f"worst-{low}-draft", f"Worst {pos} Draft", Cat.DRAFT, Cat.BLUNDER,
             description=f"Least valuable {pos} pick of the draft.", requires_complete=True)(worst_pick)
        rule(f"top-{low}-roster", f"Top {pos} Roster", Cat.ROSTER,
             description=f"Highest combined {pos} value drafted.", requires_complete=True)(top_roster)
        rule(f"worst-{low}-roster", f"Worst {pos} Roster", Cat.ROSTER, Cat.BLUNDER,
             description=f"Lowest combined {pos} value drafted.", requires_complete=True)(worst_roster)


def _roster_extreme(ctx: SeasonContext, position: str, worst: bool) -> dict | None:
    totals = _owner_totals(ctx, "actual_vorp", position)
    if ctx.owner_id not in totals or len(totals) < 2:
        return None
    own = totals[ctx.owner_id]
    target = min(totals.values()) if worst else max(totals.values())
    return {"vorp": round(own, 2)} if own == target else None


_register_positional()


# -- blunder -----------------------------------------------------------------


@rule("the-worst", "The Worst", Cat.BLUNDER, requires_complete=True)
def the_worst(ctx: SeasonContext) -> dict | None:
    """Finished last in the league."""
    last = max(r.rank for r in ctx.others)
    return {"rank": last} if ctx.record.rank == last and len(ctx.others) > 1 else None


@rule("trash-trifecta", "Trash Trifecta", Cat.BLUNDER, requires_complete=True)
def trash_trifecta(ctx: SeasonContext) -> dict | None:
    """Worst record, fewest points and worst all-play mark in one season."""
    n = len(ctx.others)
    if n < 2 or ctx.record.standings_rank != n:
        return None
    if _is_best(ctx, "points_for", lowest=True) is None:
        return None
    if _is_best(ctx, "all_play_win_percentage", lowest=True) is None:
        return None
    return {}


@rule("the-snoozer", "The Snoozer", Cat.BLUNDER, requires_complete=True)
def the_snoozer(ctx: SeasonContext) -> dict | None:
    """Fewest points scored in the season."""
    return _is_best(ctx, "points_for", lowest=True)


@rule("season-worst-score", "Season Worst Score", Cat.BLUNDER)
def season_worst_score(ctx: SeasonContext) -> dict | None:
    """Lowest single-game score of the season."""
    return _is_best(ctx, "low_score", lowest=True)


@rule("heartbreaker", "Heartbreaker", Cat.BLUNDER)
def heartbreaker(ctx: SeasonContext) -> dict | None:
    """Several slim losses in one season."""
    n = ctx.record.slim_losses
    return {"slim_losses": n} if n >= ctx.config.heartbreaker_slim_losses else None


@rule("doubled-up", "Doubled Up", Cat.BLUNDER)
def doubled_up(ctx: SeasonContext) -> dict | None:
    """Lost to an opponent scoring at least double."""
    weeks = [w for w, s, o in _losses(ctx) if s > 0 and o >= 2 * s]
    return {"weeks": weeks} if weeks else None


@rule("bullied", "Bullied", Cat.BLUNDER)
def bullied(ctx: SeasonContext) -> dict | None:
    """Several blowout losses in one season."""
    n = ctx.record.blowout_losses
    return {"blowout_losses": n} if n >= ctx.config.bully_blowout_wins else None


@rule("the-cupcake", "The Cupcake", Cat.BLUNDER, requires_complete=True)
def the_cupcake(ctx: SeasonContext) -> dict | None:
    """Lost to the season's lowest-scoring team."""
    if len(ctx.others) < 2:
        return None
    weakest = min(ctx.others, key=lambda r: (r.points_for, r.roster_id))
    if weakest.owner_id == ctx.owner_id:
        return None
    weeks = [w for w, s, o, opp in ctx.record.weekly_scores if opp == weakest.roster_id and s < o]
    return {"weeks": weeks, "opponent": weakest.owner_id} if weeks else None


@rule("true-lowlight", "True Lowlight", Cat.BLUNDER)
def true_lowlight(ctx: SeasonContext) -> dict | None:
    """On the wrong end of the season's largest-margin game."""
    games = _season_games(ctx)
    if not games:
        return None
    widest = max(abs(sa - sb) for _, _, sa, _, sb in games)
    if widest <= 0:
        return None
    for game in games:
        if _owned_game(ctx, game, lambda own, opp: opp - own == widest):
            return {"week": game[0], "margin": round(widest, 2)}
    return None


@rule("bottom-half-scoring", "Bottom Half Scoring", Cat.BLUNDER, requires_complete=True)
def bottom_half_scoring(ctx: SeasonContext) -> dict | None:
    """Scored in the bottom half of the league in most weeks."""
    positions = _week_positions(ctx)
    if not positions:
        return None
    bottom = sum(1 for above, n in positions if above >= n / 2)
    share = bottom / len(positions)
    return {"weeks": bottom} if share >= ctx.config.top_half_week_share else None


@rule("the-madman", "The Madman", Cat.BLUNDER, requires_complete=True)
def the_madman(ctx: SeasonContext) -> dict | None:
    """Most transactions of the season and a losing record anyway."""
    found = action_king(ctx)
    if found is None or ctx.record.wins >= ctx.record.losses:
        return None
    return found


# -- career ------------------------------------------------------------------


def _register_milestones(
    prefix: str, name: str, attr: str, thresholds: Sequence[int], category: Cat
) -> None:
    for threshold in thresholds:

        def check(ctx: CareerContext, _t: int = threshold) -> dict | None:
            value = getattr(ctx.career, attr)
            return {attr: round(value, 2)} if value >= _t else None

        rule(
            f"{prefix}-{threshold}",
            f"{name} - {threshold}",
            category,
            scope=BadgeScope.CAREER,
            description=f"Reached {threshold} career {name.lower()}.",
        )(check)


@rule("veteran-presence", "Veteran Presence", Cat.LEAGUE, scope=BadgeScope.CAREER)
def veteran_presence(ctx: CareerContext) -> dict | None:
    """Long-term participation in the league."""
    n = ctx.career.seasons_played
    return {"seasons": n} if n >= ctx.config.veteran_seasons else None


_register_milestones("total-wins", "Total Wins", "wins", C.WIN_MILESTONES, Cat.LEAGUE)
_register_milestones(
    "all-play-wins", "All-Play Wins", "all_play_wins", C.ALL_PLAY_MILESTONES, Cat.LEAGUE
)
_register_milestones("total-points", "Total Points", "points_for", C.POINTS_MILESTONES, Cat.LEAGUE)
_register_milestones(
    "total-losses", "Total Losses", "losses", C.WIN_MILESTONES, Cat.LEAGUE_BLUNDER
)
_register_milestones(
    "all-play-losses", "All-Play Losses", "all_play_losses", C.ALL_PLAY_MILESTONES,
    Cat.LEAGUE_BLUNDER,
)
_register_milestones(
    "total-opponent-points", "Total Opponent Points", "points_against", C.POINTS_MILESTONES,
    Cat.LEAGUE_BLUNDER,
)


def championship_drought(history: Sequence[TeamSeasonRecord]) -> int:
    """Completed seasons since the owner's last title (or since joining)."""
    drought = 0
    for rec in history:
        if not rec.is_complete:
            continue
        drought = 0 if rec.is_champion else drought + 1
    return drought


def _register_droughts() -> None:
    for seasons in C.DROUGHT_SEASONS:

        def check(ctx: CareerContext, _n: int = seasons) -> dict | None:
            drought = championship_drought(ctx.history)
            return {"seasons": drought} if drought >= _n else None

        rule(
            f"champion-drought-{seasons}",
            f"Champion Drought - {seasons}",
            Cat.BLUNDER,
            scope=BadgeScope.CAREER,
            description=f"No championship in {seasons}+ completed seasons.",
        )(check)


_register_droughts()


def catalog() -> list[dict[str, Any]]:
    """Registry summary rows for reports."""
    return [
        {
            "id": d.id,
            "name": d.display_name,
            "category": d.category.value,
            "scope": d.scope.value,
            "description": d.description,
        }
        for d in REGISTRY
    ]
