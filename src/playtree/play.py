# -*- coding: utf-8 -*-
"""
playtree.play
=============

Categorized play records.

A play is described by its type, five situational characteristics and its
outcome.  The raw situational inputs (yards to go, yard line, minutes left,
scores) are bucketed into small fixed categories when a record is created and
the raw values are discarded; the decision tree only ever sees the category
codes, which lets every characteristic be handled identically.
"""

from __future__ import annotations

from enum import IntEnum
from typing import NamedTuple


# -----------------------------------------------------------------------------
# Enumerations
# -----------------------------------------------------------------------------
class PlayType(IntEnum):
    RUN_LEFT = 0
    RUN_MIDDLE = 1
    RUN_RIGHT = 2
    PASS_SHORT_RIGHT = 3
    PASS_SHORT_MIDDLE = 4
    PASS_SHORT_LEFT = 5
    PASS_DEEP_RIGHT = 6
    PASS_DEEP_MIDDLE = 7
    PASS_DEEP_LEFT = 8
    FIELD_GOAL = 9
    PUNT = 10

    @property
    def label(self) -> str:
        return _PLAY_TYPE_LABELS[self]


class Characteristic(IntEnum):
    """Situational attributes the tree may split on."""
    DOWN_NUMBER = 0
    DISTANCE_NEEDED = 1
    FIELD_LOCATION = 2
    TIME_REMAINING = 3
    SCORE_DIFFERENTIAL = 4

    @property
    def label(self) -> str:
        return self.name.lower()

    @property
    def category_count(self) -> int:
        return _CATEGORY_COUNTS[self]

    def category_label(self, value: int) -> str:
        """Human-readable name of one category of this characteristic."""
        if self is Characteristic.DOWN_NUMBER:
            return str(int(value))
        return _CATEGORY_LABELS[self][int(value)]


class DistanceNeeded(IntEnum):
    OVER_TWENTY = 0
    TWENTY_TO_TEN = 1
    TEN_TO_FOUR = 2
    FOUR_TO_ONE = 3
    ONE_OR_LESS = 4


class FieldLocation(IntEnum):
    OWN_RED_ZONE = 0
    MIDDLE = 1
    OPP_RED_ZONE = 2


class TimeRemaining(IntEnum):
    OUTSIDE_TWO_MINUTES = 0
    INSIDE_TWO_MINUTES = 1


class ScoreDifferential(IntEnum):
    DOWN_OVER_FOURTEEN = 0
    DOWN_OVER_SEVEN = 1
    DOWN_SEVEN_LESS = 2
    EVEN = 3
    UP_SEVEN_LESS = 4
    UP_OVER_SEVEN = 5
    UP_OVER_FOURTEEN = 6


PLAY_TYPE_COUNT = len(PlayType)

_PLAY_TYPE_LABELS = {
    PlayType.RUN_LEFT: "Run Left",
    PlayType.RUN_MIDDLE: "Run Up Middle",
    PlayType.RUN_RIGHT: "Run Right",
    PlayType.PASS_SHORT_RIGHT: "Short Pass Right",
    PlayType.PASS_SHORT_MIDDLE: "Short Pass Middle",
    PlayType.PASS_SHORT_LEFT: "Short Pass Left",
    PlayType.PASS_DEEP_RIGHT: "Deep Pass Right",
    PlayType.PASS_DEEP_MIDDLE: "Deep Pass Middle",
    PlayType.PASS_DEEP_LEFT: "Deep Pass Left",
    PlayType.FIELD_GOAL: "Field Goal Attempt",
    PlayType.PUNT: "Punt",
}

# Downs run 1..4; category 0 exists so the down can be used as its own code.
_CATEGORY_COUNTS = {
    Characteristic.DOWN_NUMBER: 5,
    Characteristic.DISTANCE_NEEDED: len(DistanceNeeded),
    Characteristic.FIELD_LOCATION: len(FieldLocation),
    Characteristic.TIME_REMAINING: len(TimeRemaining),
    Characteristic.SCORE_DIFFERENTIAL: len(ScoreDifferential),
}

_CATEGORY_LABELS = {
    Characteristic.DISTANCE_NEEDED: (
        "over twenty yards",
        "ten to twenty yards",
        "four to ten yards",
        "one to four yards",
        "less than one yard",
    ),
    Characteristic.FIELD_LOCATION: (
        "backed up, own red zone",
        "between red zones",
        "scoring range, opponent red zone",
    ),
    Characteristic.TIME_REMAINING: (
        "Outside two minute warning",
        "Inside two minute warning",
    ),
    Characteristic.SCORE_DIFFERENTIAL: (
        "Down over 14 points",
        "Down between 7 and 14 points",
        "Down 7 or less points",
        "Tied",
        "Up 7 or less points",
        "Up between 7 and 14 points",
        "Up over 14 points",
    ),
}


# -----------------------------------------------------------------------------
# Bucketing
# -----------------------------------------------------------------------------
def distance_to_category(distance_needed: int) -> DistanceNeeded:
    if distance_needed <= 1:
        return DistanceNeeded.ONE_OR_LESS
    if distance_needed <= 4:
        return DistanceNeeded.FOUR_TO_ONE
    if distance_needed <= 10:
        return DistanceNeeded.TEN_TO_FOUR
    if distance_needed < 20:
        return DistanceNeeded.TWENTY_TO_TEN
    return DistanceNeeded.OVER_TWENTY


def yards_to_field_location(yard_line: int) -> FieldLocation:
    """Bucket a yard line given as offence yards to go.

    The red zones here are the 10 yards closest to either goal line.
    """
    if yard_line >= 90:
        return FieldLocation.OWN_RED_ZONE
    if yard_line > 10:
        return FieldLocation.MIDDLE
    return FieldLocation.OPP_RED_ZONE


def minutes_to_time_remaining(minutes: int) -> TimeRemaining:
    """Bucket minutes left in the game; both halves have a two minute warning."""
    if minutes < 2 or 30 <= minutes < 32:
        return TimeRemaining.INSIDE_TWO_MINUTES
    return TimeRemaining.OUTSIDE_TWO_MINUTES


def score_to_differential(own_score: int, opp_score: int) -> ScoreDifferential:
    diff = own_score - opp_score
    if diff < -14:
        return ScoreDifferential.DOWN_OVER_FOURTEEN
    if diff < -7:
        return ScoreDifferential.DOWN_OVER_SEVEN
    if diff < 0:
        return ScoreDifferential.DOWN_SEVEN_LESS
    if diff == 0:
        return ScoreDifferential.EVEN
    if diff <= 7:
        return ScoreDifferential.UP_SEVEN_LESS
    if diff <= 14:
        return ScoreDifferential.UP_OVER_SEVEN
    return ScoreDifferential.UP_OVER_FOURTEEN


# -----------------------------------------------------------------------------
# Records
# -----------------------------------------------------------------------------
class Situation(NamedTuple):
    """Category codes of the five characteristics, in ``Characteristic`` order."""
    down: int
    distance_needed: DistanceNeeded
    field_location: FieldLocation
    time_remaining: TimeRemaining
    score_differential: ScoreDifferential

    @classmethod
    def from_raw(cls, down: int, distance_needed: int, yard_line: int,
                 minutes: int, own_score: int, opp_score: int) -> "Situation":
        down = int(down)
        if not 0 <= down < Characteristic.DOWN_NUMBER.category_count:
            raise ValueError(f"down must be between 0 and 4, got {down}")
        return cls(
            down,
            distance_to_category(distance_needed),
            yards_to_field_location(yard_line),
            minutes_to_time_remaining(minutes),
            score_to_differential(own_score, opp_score),
        )

    def value(self, characteristic: Characteristic) -> int:
        return int(self[characteristic])


class SinglePlay:
    """One historical play.  Immutable once created by the store.

    Parameters
    ----------
    ref_id : int
        Identifier assigned by the store (the play's position in it).
    play_type : PlayType
        Play called.
    down, distance_needed, yard_line, minutes, own_score, opp_score : int
        Raw situation; bucketed immediately and not kept.
    distance_gained : int
        Signed yardage gained on the play.
    turned_over : bool
        Whether the offence lost the ball on the play.
    """

    __slots__ = ("ref_id", "play_type", "situation", "distance_gained", "turned_over")

    def __init__(self, ref_id: int, play_type, down: int, distance_needed: int,
                 yard_line: int, minutes: int, own_score: int, opp_score: int,
                 distance_gained: int, turned_over: bool):
        object.__setattr__(self, "ref_id", int(ref_id))
        object.__setattr__(self, "play_type", PlayType(play_type))
        object.__setattr__(self, "situation", Situation.from_raw(
            down, distance_needed, yard_line, minutes, own_score, opp_score))
        object.__setattr__(self, "distance_gained", int(distance_gained))
        object.__setattr__(self, "turned_over", bool(turned_over))

    def __setattr__(self, name, value):
        raise AttributeError("SinglePlay is immutable")

    def value(self, characteristic: Characteristic) -> int:
        return self.situation.value(characteristic)

    def __repr__(self) -> str:
        chars = " ".join(f"{c.label}:{self.value(c)}" for c in Characteristic)
        return (f"RefId:{self.ref_id} Play:{self.play_type.label} {chars} "
                f"Distance Gained:{self.distance_gained} "
                f"Turned Over:{int(self.turned_over)}")
