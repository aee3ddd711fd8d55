"""Tests for database layer: engine, ORM models, repository round-trips."""

from datetime import datetime

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine

from clubhouse.config import CourseSetup
from clubhouse.core.standings import load_player_standings
from clubhouse.db.repository import Repository
from clubhouse.errors import StandingsUnavailableError
from clubhouse.models.league import MatchStatus, PlayerType

TEE_TIME = datetime(2025, 4, 15, 18, 0)


async def _pairing(repo: Repository):
    home = await repo.create_team("Team 1")
    away = await repo.create_team("Team 2")
    match = await repo.create_match(TEE_TIME, 1, home.id, away.id, starting_hole=3)
    return home, away, match


class TestTableCreation:
    async def test_all_tables_created(self, engine: AsyncEngine):
        async with engine.connect() as conn:
            tables = await conn.run_sync(
                lambda sync_conn: sync_conn.dialect.get_table_names(sync_conn)
            )
        assert {
            "teams",
            "players",
            "matches",
            "match_scores",
            "match_points",
            "match_substitutions",
        } <= set(tables)


class TestTeams:
    async def test_create_and_fetch_with_roster(self, repo: Repository):
        team = await repo.create_team("Team 1")
        await repo.create_player("Nolan", handicap_index=11.3, team_id=team.id)
        await repo.create_player("Brent", handicap_index=12.0, team_id=team.id)

        fetched = await repo.get_team(team.id)
        assert fetched is not None
        assert sorted(p.name for p in fetched.players) == ["Brent", "Nolan"]
        assert (await repo.get_team_by_name("Team 1")).id == team.id

    async def test_names_are_unique(self, repo: Repository):
        await repo.create_team("Team 1")
        with pytest.raises(IntegrityError):
            await repo.create_team("Team 1")
        await repo.session.rollback()

    async def test_rename(self, repo: Repository):
        team = await repo.create_team("Team 1")
        renamed = await repo.rename_team(team.id, "Birdie Hunters")
        assert renamed.name == "Birdie Hunters"
        assert await repo.rename_team("missing", "x") is None

    async def test_scheduled_team(self, repo: Repository):
        home, _, _ = await _pairing(repo)
        assert await repo.team_has_matches(home.id)
        free = await repo.create_team("Team 3")
        assert not await repo.team_has_matches(free.id)
        assert await repo.delete_team(free.id)
        assert not await repo.delete_team(free.id)


class TestPlayers:
    async def test_filter_by_team(self, repo: Repository):
        team = await repo.create_team("Team 1")
        await repo.create_player("Abe", handicap_index=7.3, team_id=team.id)
        await repo.create_player("Free Agent")

        on_team = await repo.get_players(team_id=team.id)
        assert [p.name for p in on_team] == ["Abe"]
        assert len(await repo.get_players()) == 2

    async def test_update_ignores_unknown_fields(self, repo: Repository):
        player = await repo.create_player("Jonah", handicap_index=21.4)
        updated = await repo.update_player(
            player.id, handicap_index=19.8, player_type=PlayerType.SUBSTITUTE, nickname="JP"
        )
        assert updated.handicap_index == 19.8
        assert updated.player_type == "SUBSTITUTE"
        assert not hasattr(updated, "nickname")

    async def test_primary_players_only(self, repo: Repository):
        await repo.create_player("Drew", handicap_index=10.6)
        await repo.create_player("Ringer", player_type=PlayerType.SUBSTITUTE)
        players = await repo.list_primary_players()
        assert [p.name for p in players] == ["Drew"]
        assert players[0].player_type == PlayerType.PRIMARY

    async def test_stored_index_out_of_range_fails_the_read(self, repo: Repository):
        player = await repo.create_player("Ada", handicap_index=40.6)
        player.handicap_index = 60.0
        await repo.session.flush()

        with pytest.raises(ValueError, match="outside -10..54"):
            await repo.list_primary_players()
        with pytest.raises(StandingsUnavailableError):
            await load_player_standings(repo, CourseSetup())


class TestMatches:
    async def test_create_and_filter_by_week(self, repo: Repository):
        home, away, match = await _pairing(repo)
        await repo.create_match(TEE_TIME, 2, away.id, home.id)

        week_one = await repo.get_matches(week_number=1)
        assert [m.id for m in week_one] == [match.id]
        assert await repo.count_matches() == 2

    async def test_status_is_normalized_on_write(self, repo: Repository):
        _, _, match = await _pairing(repo)
        updated = await repo.update_match(match.id, status="complete")
        assert updated.status == MatchStatus.COMPLETED

    async def test_status_rejects_garbage(self, repo: Repository):
        _, _, match = await _pairing(repo)
        with pytest.raises(ValueError, match="unknown match status"):
            await repo.update_match(match.id, status="rained out")

    async def test_decided_matches(self, repo: Repository):
        home, away, match = await _pairing(repo)
        other = await repo.create_match(TEE_TIME, 2, away.id, home.id)
        match.status = "Finalized"
        other.status = "IN_PROGRESS"
        await repo.session.flush()

        decided = await repo.list_decided_matches()
        assert [m.id for m in decided] == [match.id]
        assert decided[0].status == MatchStatus.FINALIZED

    async def test_delete_all_clears_scores_and_points(self, repo: Repository):
        home, _, match = await _pairing(repo)
        player = await repo.create_player("Clay", team_id=home.id)
        await repo.replace_scores(match.id, [(player.id, 1, 4)])
        await repo.save_match_points(match.id, home.id, 1, 0, {1: (1, 0)})

        assert await repo.delete_all_matches() == 1
        assert await repo.count_matches() == 0
        assert not await repo.player_has_scores(player.id)


class TestScores:
    async def test_replace_scores(self, repo: Repository):
        home, _, match = await _pairing(repo)
        player = await repo.create_player("Wade", team_id=home.id)

        await repo.replace_scores(match.id, [(player.id, h, 5) for h in range(1, 10)])
        await repo.replace_scores(match.id, [(player.id, 1, 4), (player.id, 2, 3)])

        rows = await repo.get_scores_for_match(match.id)
        assert [(r.hole, r.score) for r in rows] == [(1, 4), (2, 3)]
        assert await repo.player_has_scores(player.id)


class TestMatchPoints:
    async def test_save_creates_aggregate_and_hole_rows(self, repo: Repository):
        home, _, match = await _pairing(repo)
        await repo.save_match_points(
            match.id, home.id, 1.5, 0.5, {1: (1.0, 0.0), 2: (0.5, 0.5)}
        )

        rows = await repo.get_match_points(match.id)
        assert [r.hole for r in rows] == [None, 1, 2]
        aggregate = await repo.get_aggregate_match_points(match.id)
        assert aggregate is not None and aggregate.is_aggregate
        assert (aggregate.home_points, aggregate.away_points) == (1.5, 0.5)

    async def test_no_aggregate_without_points(self, repo: Repository):
        _, _, match = await _pairing(repo)
        assert await repo.get_aggregate_match_points(match.id) is None

    async def test_save_again_updates_in_place(self, repo: Repository):
        home, _, match = await _pairing(repo)
        first = await repo.save_match_points(match.id, home.id, 5, 4, {1: (1, 0)})
        second = await repo.save_match_points(match.id, home.id, 4, 6, {})

        assert second.id == first.id
        rows = await repo.get_match_points(match.id)
        assert len(rows) == 1
        assert (rows[0].home_points, rows[0].away_points) == (4, 6)

    async def test_aggregates_grouped_by_match(self, repo: Repository):
        home, away, match = await _pairing(repo)
        other = await repo.create_match(TEE_TIME, 2, away.id, home.id)
        await repo.save_match_points(match.id, home.id, 5, 4, {3: (1, 0)})
        await repo.save_match_points(other.id, away.id, 4.5, 4.5, {})

        grouped = await repo.list_aggregate_points([match.id, other.id])
        assert {k: len(v) for k, v in grouped.items()} == {match.id: 1, other.id: 1}
        assert all(p.is_aggregate for rows in grouped.values() for p in rows)
        assert await repo.list_aggregate_points([]) == {}


class TestSubstitutions:
    async def _two_sides(self, repo: Repository):
        home, away, match = await _pairing(repo)
        abe = await repo.create_player("Abe", handicap_index=7.3, team_id=home.id)
        hugo = await repo.create_player("Hugo", handicap_index=11.8, team_id=home.id)
        clay = await repo.create_player("Clay", handicap_index=12.5, team_id=away.id)
        return home, away, match, abe, hugo, clay

    async def test_lineup_without_substitutions_is_the_roster(self, repo: Repository):
        home, away, match, abe, hugo, clay = await self._two_sides(repo)
        await repo.create_player("Ringer", team_id=home.id, player_type=PlayerType.SUBSTITUTE)

        lineup = await repo.get_match_lineup(match)
        assert [(p.name, r) for p, r in lineup[home.id]] == [("Abe", None), ("Hugo", None)]
        assert [(p.name, r) for p, r in lineup[away.id]] == [("Clay", None)]

    async def test_substitute_takes_the_original_place(self, repo: Repository):
        home, away, match, abe, hugo, clay = await self._two_sides(repo)
        sub = await repo.create_player(
            "Tony", handicap_index=14.1, player_type=PlayerType.SUBSTITUTE
        )

        await repo.replace_substitutions(match.id, [(home.id, hugo.id, sub.id)])

        lineup = await repo.get_match_lineup(match)
        assert [(p.name, r) for p, r in lineup[home.id]] == [("Abe", None), ("Tony", hugo.id)]
        assert [(p.name, r) for p, r in lineup[away.id]] == [("Clay", None)]

        stored = await repo.get_substitutions(match.id)
        assert [(s.original_player_id, s.substitute_player_id) for s in stored] == [
            (hugo.id, sub.id)
        ]

    async def test_replace_with_nothing_clears(self, repo: Repository):
        home, _, match, abe, _, _ = await self._two_sides(repo)
        sub = await repo.create_player("Tony")
        await repo.replace_substitutions(match.id, [(home.id, abe.id, sub.id)])
        await repo.replace_substitutions(match.id, [])

        assert await repo.get_substitutions(match.id) == []
        lineup = await repo.get_match_lineup(match)
        assert [p.name for p, _ in lineup[home.id]] == ["Abe", "Hugo"]

    async def test_original_replaced_once_per_match(self, repo: Repository):
        home, _, match, abe, _, _ = await self._two_sides(repo)
        tony = await repo.create_player("Tony")
        rob = await repo.create_player("Rob")
        with pytest.raises(IntegrityError):
            await repo.replace_substitutions(
                match.id, [(home.id, abe.id, tony.id), (home.id, abe.id, rob.id)]
            )
        await repo.session.rollback()

    async def test_delete_all_clears_substitutions(self, repo: Repository):
        home, _, match, abe, _, _ = await self._two_sides(repo)
        sub = await repo.create_player("Tony")
        await repo.replace_substitutions(match.id, [(home.id, abe.id, sub.id)])

        assert await repo.delete_all_matches() == 1
        assert await repo.get_substitutions(match.id) == []
