"""League standings from stored match points and hole scores.

Two pure folds over already-persisted data:

- ``compute_team_standings``: decided matches + their aggregate point row
  → won/lost/tied records, league points, weekly drill-down.
- ``compute_player_standings``: hole scores of decided matches + handicap
  indexes → gross/net totals per PRIMARY player.

Neither ever mutates its inputs or guesses at bad data. Anomalies become
``DataQualityWarning`` entries and the affected match is left out; a
partial round is counted on the holes actually played and flagged.

``load_team_standings`` / ``load_player_standings`` read the stores through
the repository and raise ``StandingsUnavailableError`` if any read fails,
so callers never see a partial table.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from clubhouse.config import CourseSetup
from clubhouse.core.handicap import round_allowance
from clubhouse.core.scoring import classify_point_total
from clubhouse.errors import StandingsUnavailableError
from clubhouse.models.league import Match, MatchPoints, MatchScore, Player, PlayerType, Team
from clubhouse.models.standings import (
    DataQualityWarning,
    PlayerStanding,
    PlayerStandingsReport,
    TeamStanding,
    TeamStandingsReport,
    WeeklyPoints,
)

if TYPE_CHECKING:
    from clubhouse.db.repository import Repository

logger = logging.getLogger(__name__)

_OLDEST = datetime.min


# ---------------------------------------------------------------------------
# Aggregate row resolution
# ---------------------------------------------------------------------------


def resolve_aggregate_points(rows: Iterable[MatchPoints]) -> MatchPoints | None:
    """Pick the canonical aggregate row for one match.

    Latest ``updated_at`` wins (falling back to ``created_at``); equal
    timestamps are broken by the greater id so the choice never depends on
    query order. Per-hole rows are ignored.
    """
    candidates = [r for r in rows if r.is_aggregate]
    if not candidates:
        return None
    return max(
        candidates,
        key=lambda r: (
            (r.updated_at or r.created_at or _OLDEST).replace(tzinfo=None),
            r.id,
        ),
    )


# ---------------------------------------------------------------------------
# Team standings
# ---------------------------------------------------------------------------


def _team_sort_key(entry: TeamStanding) -> tuple:
    return (
        -entry.league_points,
        -entry.matches_won,
        -entry.matches_tied,
        entry.team_name.lower(),
        entry.team_id,
    )


def compute_team_standings(
    teams: list[Team],
    matches: list[Match],
    aggregate_points: dict[str, list[MatchPoints]],
) -> TeamStandingsReport:
    """Fold decided matches into one standing per team.

    Args:
        teams: every team; each appears once in the output, even with no matches.
        matches: matches to consider. Anything not COMPLETED/FINALIZED is ignored.
        aggregate_points: null-hole MatchPoints rows keyed by match id.

    Returns:
        Standings sorted by league points desc, then matches won desc,
        matches tied desc, team name asc; plus any data-quality warnings.
    """
    standings: dict[str, TeamStanding] = {
        t.id: TeamStanding(team_id=t.id, team_name=t.name) for t in teams
    }
    warnings: list[DataQualityWarning] = []

    decided = sorted(
        (m for m in matches if m.is_decided),
        key=lambda m: (m.week_number, m.date.replace(tzinfo=None), m.starting_hole, m.id),
    )
    for match in decided:
        rows = [r for r in aggregate_points.get(match.id, []) if r.is_aggregate]
        canonical = resolve_aggregate_points(rows)
        if canonical is None:
            warnings.append(
                DataQualityWarning(
                    kind="missing_aggregate",
                    match_id=match.id,
                    message=f"Week {match.week_number} match is {match.status} "
                    "but has no aggregate points; excluded",
                )
            )
            continue
        if len(rows) > 1:
            warnings.append(
                DataQualityWarning(
                    kind="duplicate_aggregate",
                    match_id=match.id,
                    message=f"{len(rows)} aggregate point rows; using {canonical.id} "
                    "(most recently updated)",
                )
            )

        home_pts, away_pts = canonical.home_points, canonical.away_points
        if classify_point_total(home_pts, away_pts) == "unexpected":
            warnings.append(
                DataQualityWarning(
                    kind="unexpected_point_total",
                    match_id=match.id,
                    message=f"Points {home_pts:g}-{away_pts:g} total "
                    f"{canonical.total:g}, expected 9 or 10; excluded",
                )
            )
            continue

        home = standings.get(match.home_team_id)
        away = standings.get(match.away_team_id)
        if home is None or away is None:
            warnings.append(
                DataQualityWarning(
                    kind="unknown_team",
                    match_id=match.id,
                    message="Match references a team that no longer exists; excluded",
                )
            )
            continue

        if home_pts > away_pts:
            home_result, away_result = "W", "L"
        elif home_pts < away_pts:
            home_result, away_result = "L", "W"
        else:
            home_result = away_result = "T"

        for entry, points, result, opponent in (
            (home, home_pts, home_result, away),
            (away, away_pts, away_result, home),
        ):
            entry.matches_played += 1
            if result == "W":
                entry.matches_won += 1
            elif result == "L":
                entry.matches_lost += 1
            else:
                entry.matches_tied += 1
            entry.league_points += points
            entry.weekly_points.append(
                WeeklyPoints(
                    week_number=match.week_number,
                    points=points,
                    match_id=match.id,
                    opponent_name=opponent.team_name,
                    result=result,
                )
            )

    for entry in standings.values():
        if entry.matches_played:
            entry.win_percentage = round(
                (entry.matches_won + 0.5 * entry.matches_tied) / entry.matches_played, 3
            )

    return TeamStandingsReport(
        data=sorted(standings.values(), key=_team_sort_key),
        warnings=warnings,
    )


# ---------------------------------------------------------------------------
# Player standings
# ---------------------------------------------------------------------------


def _player_sort_key(entry: PlayerStanding) -> tuple:
    # Players who have not played sink to the bottom instead of leading on 0.
    return (
        entry.rounds_played == 0,
        entry.average_net_score,
        entry.total_net_score,
        entry.player_name.lower(),
        entry.player_id,
    )


def compute_player_standings(
    players: list[Player],
    scores: list[MatchScore],
    course: CourseSetup,
) -> PlayerStandingsReport:
    """Total gross and net strokes per PRIMARY player.

    ``scores`` must already be limited to decided matches. A round is the
    set of a player's scores in one match; only holes with a stored score
    are summed.
    """
    primary = [p for p in players if p.player_type == PlayerType.PRIMARY]
    standings: dict[str, PlayerStanding] = {
        p.id: PlayerStanding(
            player_id=p.id,
            player_name=p.name,
            team_id=p.team_id,
            handicap_index=p.handicap_index,
        )
        for p in primary
    }
    indexes = {p.id: p.handicap_index for p in primary}
    warnings: list[DataQualityWarning] = []

    rounds: dict[tuple[str, str], dict[int, int]] = defaultdict(dict)
    for score in sorted(scores, key=lambda s: (s.match_id, s.player_id, s.hole, s.id)):
        if score.player_id not in standings:
            continue
        rounds[(score.player_id, score.match_id)][score.hole] = score.score

    for (player_id, match_id), holes in sorted(rounds.items()):
        entry = standings[player_id]
        holes_scored = len(holes)
        gross = sum(holes.values())
        net = gross - round_allowance(indexes[player_id], holes_scored, course)

        entry.matches_played += 1
        entry.rounds_played += 1
        entry.total_gross_score += gross
        entry.total_net_score += net
        if holes_scored < course.holes_per_round:
            entry.partial_rounds += 1
            warnings.append(
                DataQualityWarning(
                    kind="partial_round",
                    match_id=match_id,
                    player_id=player_id,
                    message=f"{entry.player_name} has {holes_scored} of "
                    f"{course.holes_per_round} holes scored; totals use those holes only",
                )
            )

    for entry in standings.values():
        if entry.rounds_played:
            entry.average_gross_score = round(entry.total_gross_score / entry.rounds_played, 2)
            entry.average_net_score = round(entry.total_net_score / entry.rounds_played, 2)

    return PlayerStandingsReport(
        data=sorted(standings.values(), key=_player_sort_key),
        warnings=warnings,
    )


# ---------------------------------------------------------------------------
# Store-backed entry points
# ---------------------------------------------------------------------------


def _log_warnings(report_name: str, warnings: list[DataQualityWarning]) -> None:
    for w in warnings:
        logger.warning(
            "standings_data_quality report=%s kind=%s match=%s player=%s: %s",
            report_name,
            w.kind,
            w.match_id,
            w.player_id,
            w.message,
        )


async def load_team_standings(repo: Repository) -> TeamStandingsReport:
    """Read teams, decided matches, and aggregate points, then fold them."""
    try:
        teams = await repo.list_teams()
        matches = await repo.list_decided_matches()
        aggregates = await repo.list_aggregate_points(m.id for m in matches)
    except (SQLAlchemyError, ValueError) as exc:
        logger.exception("team_standings_read_failed")
        raise StandingsUnavailableError("Could not read league data for team standings") from exc

    report = compute_team_standings(teams, matches, aggregates)
    _log_warnings("team", report.warnings)
    logger.info(
        "team_standings_computed teams=%d matches=%d warnings=%d",
        len(report.data),
        len(matches),
        len(report.warnings),
    )
    return report


async def load_player_standings(repo: Repository, course: CourseSetup) -> PlayerStandingsReport:
    """Read PRIMARY players and decided-match scores, then fold them."""
    try:
        players = await repo.list_primary_players()
        scores = await repo.list_scores_for_decided_matches()
    except (SQLAlchemyError, ValueError) as exc:
        logger.exception("player_standings_read_failed")
        raise StandingsUnavailableError("Could not read league data for player standings") from exc

    report = compute_player_standings(players, scores, course)
    _log_warnings("player", report.warnings)
    logger.info(
        "player_standings_computed players=%d scores=%d warnings=%d",
        len(report.data),
        len(scores),
        len(report.warnings),
    )
    return report
