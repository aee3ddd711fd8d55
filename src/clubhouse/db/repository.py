"""Repository pattern for database access.

Wraps SQLAlchemy async sessions. CRUD methods return ORM rows; the read
queries the standings aggregators consume return validated models from
``clubhouse.models.league`` so raw status strings never leak past here.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from datetime import UTC, datetime

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from clubhouse.core.handicap import validate_handicap_index
from clubhouse.core.standings import resolve_aggregate_points
from clubhouse.db.models import (
    MatchPointsRow,
    MatchRow,
    MatchScoreRow,
    MatchSubstitutionRow,
    PlayerRow,
    TeamRow,
)
from clubhouse.models.league import (
    Match,
    MatchPoints,
    MatchScore,
    MatchStatus,
    Player,
    PlayerType,
    Team,
    normalize_status,
)


def to_team(row: TeamRow) -> Team:
    return Team(id=row.id, name=row.name)


def to_player(row: PlayerRow) -> Player:
    index = row.handicap_index or 0.0
    if not validate_handicap_index(index):
        raise ValueError(f"player {row.id} has handicap index {index!r} outside -10..54")
    return Player(
        id=row.id,
        name=row.name,
        handicap_index=index,
        team_id=row.team_id,
        player_type=PlayerType(row.player_type.upper()),
    )


def to_match(row: MatchRow) -> Match:
    return Match(
        id=row.id,
        date=row.date,
        week_number=row.week_number,
        home_team_id=row.home_team_id,
        away_team_id=row.away_team_id,
        starting_hole=row.starting_hole,
        status=normalize_status(row.status),
    )


def to_score(row: MatchScoreRow) -> MatchScore:
    return MatchScore(
        id=row.id,
        match_id=row.match_id,
        player_id=row.player_id,
        hole=row.hole,
        score=row.score,
    )


def to_points(row: MatchPointsRow) -> MatchPoints:
    return MatchPoints(
        id=row.id,
        match_id=row.match_id,
        team_id=row.team_id,
        hole=row.hole,
        home_points=row.home_points,
        away_points=row.away_points,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class Repository:
    """Async repository for all database operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    # --- Teams ---

    async def create_team(self, name: str) -> TeamRow:
        row = TeamRow(name=name)
        self.session.add(row)
        await self.session.flush()
        return row

    async def get_team(self, team_id: str) -> TeamRow | None:
        stmt = select(TeamRow).where(TeamRow.id == team_id).options(selectinload(TeamRow.players))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_team_by_name(self, name: str) -> TeamRow | None:
        stmt = select(TeamRow).where(TeamRow.name == name)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_all_teams(self) -> list[TeamRow]:
        stmt = select(TeamRow).order_by(TeamRow.name).options(selectinload(TeamRow.players))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def rename_team(self, team_id: str, name: str) -> TeamRow | None:
        row = await self.session.get(TeamRow, team_id)
        if row is None:
            return None
        row.name = name
        await self.session.flush()
        return row

    async def delete_team(self, team_id: str) -> bool:
        """Delete a team. Returns False if it does not exist."""
        row = await self.session.get(TeamRow, team_id)
        if row is None:
            return False
        await self.session.delete(row)
        await self.session.flush()
        return True

    async def team_has_matches(self, team_id: str) -> bool:
        stmt = select(func.count()).where(
            (MatchRow.home_team_id == team_id) | (MatchRow.away_team_id == team_id)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one() > 0

    # --- Players ---

    async def create_player(
        self,
        name: str,
        handicap_index: float = 0.0,
        team_id: str | None = None,
        player_type: str = PlayerType.PRIMARY,
    ) -> PlayerRow:
        row = PlayerRow(
            name=name,
            handicap_index=handicap_index,
            team_id=team_id,
            player_type=str(player_type),
        )
        self.session.add(row)
        await self.session.flush()
        return row

    async def get_player(self, player_id: str) -> PlayerRow | None:
        return await self.session.get(PlayerRow, player_id)

    async def get_players(self, team_id: str | None = None) -> list[PlayerRow]:
        stmt = select(PlayerRow).order_by(PlayerRow.name)
        if team_id is not None:
            stmt = stmt.where(PlayerRow.team_id == team_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_players_by_ids(self, player_ids: Iterable[str]) -> list[PlayerRow]:
        ids = list(player_ids)
        if not ids:
            return []
        stmt = select(PlayerRow).where(PlayerRow.id.in_(ids))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update_player(self, player_id: str, **fields: object) -> PlayerRow | None:
        """Apply the given column values to a player. Unknown keys are ignored."""
        row = await self.session.get(PlayerRow, player_id)
        if row is None:
            return None
        for key in ("name", "handicap_index", "team_id", "player_type"):
            if key in fields:
                value = fields[key]
                setattr(row, key, str(value) if key == "player_type" else value)
        await self.session.flush()
        return row

    async def player_has_scores(self, player_id: str) -> bool:
        stmt = select(func.count()).where(MatchScoreRow.player_id == player_id)
        result = await self.session.execute(stmt)
        return result.scalar_one() > 0

    async def delete_player(self, player_id: str) -> bool:
        row = await self.session.get(PlayerRow, player_id)
        if row is None:
            return False
        await self.session.delete(row)
        await self.session.flush()
        return True

    # --- Matches / schedule ---

    async def create_match(
        self,
        date: datetime,
        week_number: int,
        home_team_id: str,
        away_team_id: str,
        starting_hole: int = 1,
        status: str = MatchStatus.SCHEDULED,
    ) -> MatchRow:
        row = MatchRow(
            date=date,
            week_number=week_number,
            home_team_id=home_team_id,
            away_team_id=away_team_id,
            starting_hole=starting_hole,
            status=str(status),
        )
        self.session.add(row)
        await self.session.flush()
        return row

    async def get_match(self, match_id: str) -> MatchRow | None:
        return await self.session.get(MatchRow, match_id)

    async def get_matches(
        self,
        week_number: int | None = None,
    ) -> list[MatchRow]:
        stmt = select(MatchRow).order_by(MatchRow.week_number, MatchRow.starting_hole)
        if week_number is not None:
            stmt = stmt.where(MatchRow.week_number == week_number)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_matches(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(MatchRow))
        return result.scalar_one()

    async def update_match(self, match_id: str, **fields: object) -> MatchRow | None:
        row = await self.session.get(MatchRow, match_id)
        if row is None:
            return None
        for key in ("date", "week_number", "home_team_id", "away_team_id", "starting_hole"):
            if key in fields:
                setattr(row, key, fields[key])
        if "status" in fields:
            row.status = str(normalize_status(str(fields["status"])))
        await self.session.flush()
        return row

    async def delete_match(self, match_id: str) -> bool:
        row = await self.session.get(MatchRow, match_id)
        if row is None:
            return False
        await self.session.delete(row)
        await self.session.flush()
        return True

    async def delete_all_matches(self) -> int:
        """Clear the schedule along with every score and point row."""
        await self.session.execute(delete(MatchPointsRow))
        await self.session.execute(delete(MatchScoreRow))
        await self.session.execute(delete(MatchSubstitutionRow))
        result = await self.session.execute(delete(MatchRow))
        await self.session.flush()
        return result.rowcount or 0

    # --- Scores ---

    async def replace_scores(
        self,
        match_id: str,
        scores: Iterable[tuple[str, int, int]],
    ) -> list[MatchScoreRow]:
        """Replace every score of a match with ``(player_id, hole, score)`` tuples."""
        await self.session.execute(delete(MatchScoreRow).where(MatchScoreRow.match_id == match_id))
        rows = [
            MatchScoreRow(match_id=match_id, player_id=player_id, hole=hole, score=score)
            for player_id, hole, score in scores
        ]
        self.session.add_all(rows)
        await self.session.flush()
        return rows

    async def get_scores_for_match(self, match_id: str) -> list[MatchScoreRow]:
        stmt = (
            select(MatchScoreRow)
            .where(MatchScoreRow.match_id == match_id)
            .order_by(MatchScoreRow.player_id, MatchScoreRow.hole)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    # --- Substitutions / lineups ---

    async def get_substitutions(self, match_id: str) -> list[MatchSubstitutionRow]:
        stmt = (
            select(MatchSubstitutionRow)
            .where(MatchSubstitutionRow.match_id == match_id)
            .order_by(MatchSubstitutionRow.team_id, MatchSubstitutionRow.created_at)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def replace_substitutions(
        self,
        match_id: str,
        assignments: Iterable[tuple[str, str, str]],
    ) -> list[MatchSubstitutionRow]:
        """Replace a match's substitutions with ``(team_id, original_id, substitute_id)`` tuples."""
        await self.session.execute(
            delete(MatchSubstitutionRow).where(MatchSubstitutionRow.match_id == match_id)
        )
        rows = [
            MatchSubstitutionRow(
                match_id=match_id,
                team_id=team_id,
                original_player_id=original_id,
                substitute_player_id=substitute_id,
            )
            for team_id, original_id, substitute_id in assignments
        ]
        self.session.add_all(rows)
        await self.session.flush()
        return rows

    async def get_match_lineup(
        self,
        match: MatchRow,
    ) -> dict[str, list[tuple[PlayerRow, str | None]]]:
        """Who plays for each side of a match, keyed by team id.

        Each side is the team's PRIMARY roster with stored substitutions
        swapped in. Entries are ``(player, replaced_player_id)``; the second
        item is None for a rostered player playing in person.
        """
        swaps = {
            s.original_player_id: s.substitute_player_id
            for s in await self.get_substitutions(match.id)
        }
        substitutes = {p.id: p for p in await self.get_players_by_ids(swaps.values())}

        stmt = (
            select(PlayerRow)
            .where(
                PlayerRow.team_id.in_([match.home_team_id, match.away_team_id]),
                func.upper(PlayerRow.player_type) == PlayerType.PRIMARY.value,
            )
            .order_by(PlayerRow.name)
        )
        result = await self.session.execute(stmt)

        lineup: dict[str, list[tuple[PlayerRow, str | None]]] = {
            match.home_team_id: [],
            match.away_team_id: [],
        }
        for player in result.scalars().all():
            substitute = substitutes.get(swaps.get(player.id, ""))
            if substitute is None:
                lineup[player.team_id].append((player, None))
            else:
                lineup[player.team_id].append((substitute, player.id))
        return lineup

    # --- Match points ---

    async def get_match_points(self, match_id: str) -> list[MatchPointsRow]:
        """All point rows of a match, aggregate rows first, then by hole."""
        stmt = (
            select(MatchPointsRow)
            .where(MatchPointsRow.match_id == match_id)
            .order_by(MatchPointsRow.hole.is_not(None), MatchPointsRow.hole)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def save_match_points(
        self,
        match_id: str,
        team_id: str | None,
        home_points: float,
        away_points: float,
        hole_points: dict[int, tuple[float, float]],
    ) -> MatchPointsRow:
        """Store a match's point split.

        Per-hole rows are replaced. The most recently updated aggregate row
        is updated in place (or created); older duplicate aggregates are
        left as they are for the audit script to report.
        """
        now = datetime.now(UTC)
        await self.session.execute(
            delete(MatchPointsRow).where(
                MatchPointsRow.match_id == match_id,
                MatchPointsRow.hole.is_not(None),
            )
        )
        for hole, (home, away) in sorted(hole_points.items()):
            self.session.add(
                MatchPointsRow(
                    match_id=match_id,
                    team_id=team_id,
                    hole=hole,
                    home_points=home,
                    away_points=away,
                )
            )

        stmt = (
            select(MatchPointsRow)
            .where(MatchPointsRow.match_id == match_id, MatchPointsRow.hole.is_(None))
            .order_by(MatchPointsRow.updated_at.desc(), MatchPointsRow.id.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        aggregate = result.scalar_one_or_none()
        if aggregate is None:
            aggregate = MatchPointsRow(match_id=match_id, team_id=team_id, hole=None)
            self.session.add(aggregate)
        aggregate.home_points = home_points
        aggregate.away_points = away_points
        aggregate.updated_at = now
        await self.session.flush()
        return aggregate

    # --- Standings inputs ---

    async def list_teams(self) -> list[Team]:
        result = await self.session.execute(select(TeamRow).order_by(TeamRow.name))
        return [to_team(row) for row in result.scalars().all()]

    async def list_decided_matches(self) -> list[Match]:
        """Matches whose normalized status is COMPLETED or FINALIZED.

        Every row is normalized, so an unreadable status anywhere raises
        ValueError instead of silently dropping a match.
        """
        result = await self.session.execute(
            select(MatchRow).order_by(MatchRow.week_number, MatchRow.starting_hole)
        )
        matches = [to_match(row) for row in result.scalars().all()]
        return [m for m in matches if m.is_decided]

    async def list_aggregate_points(
        self,
        match_ids: Iterable[str],
    ) -> dict[str, list[MatchPoints]]:
        """All null-hole rows for the given matches, grouped by match id."""
        ids = list(match_ids)
        grouped: dict[str, list[MatchPoints]] = defaultdict(list)
        if not ids:
            return grouped
        stmt = select(MatchPointsRow).where(
            MatchPointsRow.match_id.in_(ids),
            MatchPointsRow.hole.is_(None),
        )
        result = await self.session.execute(stmt)
        for row in result.scalars().all():
            grouped[row.match_id].append(to_points(row))
        return grouped

    async def get_aggregate_match_points(self, match_id: str) -> MatchPoints | None:
        """The canonical aggregate row of one match, or None if it has none."""
        grouped = await self.list_aggregate_points([match_id])
        return resolve_aggregate_points(grouped.get(match_id, []))

    async def list_scores_for_decided_matches(self) -> list[MatchScore]:
        decided = await self.list_decided_matches()
        ids = [m.id for m in decided]
        if not ids:
            return []
        stmt = (
            select(MatchScoreRow)
            .where(MatchScoreRow.match_id.in_(ids))
            .order_by(MatchScoreRow.match_id, MatchScoreRow.player_id, MatchScoreRow.hole)
        )
        result = await self.session.execute(stmt)
        return [to_score(row) for row in result.scalars().all()]

    async def list_primary_players(self) -> list[Player]:
        stmt = (
            select(PlayerRow)
            .where(func.upper(PlayerRow.player_type) == PlayerType.PRIMARY.value)
            .order_by(PlayerRow.name)
        )
        result = await self.session.execute(stmt)
        return [to_player(row) for row in result.scalars().all()]
