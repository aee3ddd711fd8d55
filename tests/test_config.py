"""Tests for application configuration."""

import pytest
from pydantic import ValidationError

from clubhouse.config import DEFAULT_HOLE_HANDICAPS, CourseSetup, Settings


class TestDefaults:
    def test_course_defaults(self, settings: Settings) -> None:
        assert settings.course_rating == 34.0
        assert settings.slope_rating == 107
        assert settings.course_par == 36
        assert settings.holes_per_round == 9
        assert settings.winner_bonus_point is True

    def test_course_value_object(self, settings: Settings) -> None:
        course = settings.course()
        assert isinstance(course, CourseSetup)
        assert course == CourseSetup()
        assert course.hole_handicaps == DEFAULT_HOLE_HANDICAPS

    def test_course_copy_is_detached(self, settings: Settings) -> None:
        course = settings.course()
        course.hole_handicaps[1] = 9
        assert settings.hole_handicaps[1] == 1


class TestEnvironment:
    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SLOPE_RATING", "120")
        monkeypatch.setenv("WINNER_BONUS_POINT", "false")
        monkeypatch.setenv("CLUBHOUSE_LOG_LEVEL", "DEBUG")
        settings = Settings(database_url="sqlite+aiosqlite:///:memory:")
        assert settings.slope_rating == 120
        assert settings.winner_bonus_point is False
        assert settings.clubhouse_log_level == "DEBUG"

    def test_database_url_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///league.db")
        assert Settings().database_url == "sqlite+aiosqlite:///league.db"

    def test_hole_handicaps_from_json(self, monkeypatch: pytest.MonkeyPatch) -> None:
        reversed_nine = {str(h): 10 - h for h in range(1, 10)}
        monkeypatch.setenv("HOLE_HANDICAPS", str(reversed_nine).replace("'", '"'))
        settings = Settings(database_url="sqlite+aiosqlite:///:memory:")
        assert settings.hole_handicaps[1] == 9
        assert settings.hole_handicaps[9] == 1


class TestValidation:
    def test_slope_out_of_range(self) -> None:
        with pytest.raises(ValidationError, match="SLOPE_RATING"):
            Settings(slope_rating=200, database_url="sqlite+aiosqlite:///:memory:")

    def test_repeated_stroke_index(self) -> None:
        handicaps = dict(DEFAULT_HOLE_HANDICAPS)
        handicaps[2] = 1
        with pytest.raises(ValidationError, match="HOLE_HANDICAPS"):
            Settings(hole_handicaps=handicaps, database_url="sqlite+aiosqlite:///:memory:")

    def test_missing_hole(self) -> None:
        handicaps = {h: h for h in range(1, 9)}
        with pytest.raises(ValidationError, match="HOLE_HANDICAPS"):
            Settings(hole_handicaps=handicaps, database_url="sqlite+aiosqlite:///:memory:")
