"""Application settings via pydantic-settings. Loads from environment and .env file."""

from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import model_validator
from pydantic_settings import BaseSettings

# Stroke index (difficulty rank) per hole for the league's home nine.
DEFAULT_HOLE_HANDICAPS: dict[int, int] = {
    1: 1,
    2: 9,
    3: 3,
    4: 7,
    5: 4,
    6: 6,
    7: 8,
    8: 2,
    9: 5,
}


@dataclass(frozen=True)
class CourseSetup:
    """Course values the handicap and scoring code needs, detached from settings."""

    course_rating: float = 34.0
    slope_rating: int = 107
    par: int = 36
    holes_per_round: int = 9
    hole_handicaps: dict[int, int] = field(default_factory=lambda: dict(DEFAULT_HOLE_HANDICAPS))


class Settings(BaseSettings):
    """Clubhouse application configuration.

    All values can be overridden via environment variables or .env file.
    Course values default to a 9-hole league played on one nine.
    """

    # Database
    database_url: str = "sqlite+aiosqlite:///clubhouse.db"

    # Environment
    clubhouse_env: str = "development"

    # Course (9-hole ratings)
    course_rating: float = 34.0
    slope_rating: int = 107
    course_par: int = 36
    holes_per_round: int = 9
    hole_handicaps: dict[int, int] = dict(DEFAULT_HOLE_HANDICAPS)

    # Match scoring
    winner_bonus_point: bool = True

    # Realtime
    max_sse_connections: int = 100

    # Logging
    clubhouse_log_level: str = "INFO"

    model_config = {"env_prefix": "", "env_file": ".env", "extra": "ignore"}

    @model_validator(mode="after")
    def _check_course(self) -> Settings:
        """Reject course values that would make handicaps meaningless."""
        if not 55 <= self.slope_rating <= 155:
            msg = f"SLOPE_RATING must be between 55 and 155, got {self.slope_rating}"
            raise ValueError(msg)
        expected = set(range(1, self.holes_per_round + 1))
        if set(self.hole_handicaps) != expected or set(self.hole_handicaps.values()) != expected:
            msg = (
                "HOLE_HANDICAPS must map every hole 1..%d to a unique stroke index"
                % self.holes_per_round
            )
            raise ValueError(msg)
        return self

    def course(self) -> CourseSetup:
        """Return the course values as a frozen value object."""
        return CourseSetup(
            course_rating=self.course_rating,
            slope_rating=self.slope_rating,
            par=self.course_par,
            holes_per_round=self.holes_per_round,
            hole_handicaps=dict(self.hole_handicaps),
        )
