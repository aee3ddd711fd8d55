"""Course handicaps and stroke allocation.

Course Handicap = Handicap Index × (Slope Rating ÷ 113) + (Course Rating − Par)

For a 9-hole round the index is halved (rounded to one decimal) and the
9-hole slope, rating, and par are used. Strokes in a match go to the
higher-handicap players, allocated hole by hole in stroke-index order.
"""

from __future__ import annotations

import math

from clubhouse.config import CourseSetup

MIN_HANDICAP_INDEX = -10.0
MAX_HANDICAP_INDEX = 54.0
STANDARD_SLOPE = 113


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up, as scorecards do."""
    return math.floor(value + 0.5)


def validate_handicap_index(value: float | str) -> bool:
    """True if *value* parses as a handicap index within -10..54."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return False
    if math.isnan(number):
        return False
    return MIN_HANDICAP_INDEX <= number <= MAX_HANDICAP_INDEX


def course_handicap(
    handicap_index: float,
    course_rating: float,
    slope_rating: int,
    par: int,
) -> int:
    """18-hole course handicap for one set of tees."""
    return round_half_up(handicap_index * (slope_rating / STANDARD_SLOPE) + (course_rating - par))


def nine_hole_course_handicap(handicap_index: float, course: CourseSetup) -> int:
    """Course handicap for a 9-hole round on the configured nine."""
    half_index = round_half_up(handicap_index / 2 * 10) / 10
    return course_handicap(half_index, course.course_rating, course.slope_rating, course.par)


def round_allowance(handicap_index: float, holes_scored: int, course: CourseSetup) -> int:
    """Strokes to deduct from a round's gross score.

    A partial round gets the course handicap prorated by the share of
    holes actually scored.
    """
    if holes_scored <= 0:
        return 0
    full = nine_hole_course_handicap(handicap_index, course)
    if holes_scored >= course.holes_per_round:
        return full
    return round_half_up(full * holes_scored / course.holes_per_round)


def strokes_on_hole(handicap_difference: int, hole_stroke_index: int, holes: int = 9) -> int:
    """Strokes a player receives on one hole given their match differential.

    The first pass gives one stroke to each hole whose stroke index is at
    most the differential; each further pass of *holes* strokes adds one
    more, hardest holes first.
    """
    if handicap_difference <= 0:
        return 0
    full_passes, remainder = divmod(handicap_difference, holes)
    return full_passes + (1 if hole_stroke_index <= remainder else 0)


def match_strokes(
    handicap_indexes: dict[str, float],
    course: CourseSetup,
) -> dict[str, dict[int, int]]:
    """Strokes received per player per hole for everyone in one match.

    Every player plays off the lowest course handicap in the match.
    """
    if not handicap_indexes:
        return {}
    course_handicaps = {
        player_id: nine_hole_course_handicap(index, course)
        for player_id, index in handicap_indexes.items()
    }
    lowest = min(course_handicaps.values())
    return {
        player_id: {
            hole: strokes_on_hole(ch - lowest, stroke_index, course.holes_per_round)
            for hole, stroke_index in course.hole_handicaps.items()
        }
        for player_id, ch in course_handicaps.items()
    }
