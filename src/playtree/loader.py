# -*- coding: utf-8 -*-
"""
playtree.loader
===============

Loads plays from play-by-play CSV files into a :class:`~playtree.store.DataStore`.

Teams study film of the games most like the one coming up: earlier games
between the two teams, games of teams similar to "us" against the opponent,
and games of "us" against teams similar to the opponent.  The loader keeps
exactly those plays.  Team names must match the files exactly (all caps, no
whitespace).

Each file has the columns ``gameid, qtr, min, sec, off, def, down, togo,
ydline, description, offscore, defscore, season``.  The play type, yardage and
turnover are recovered from the free text description.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

import pandas as pd

from .config import LoaderConfig
from .play import PlayType
from .store import DataStore

logger = logging.getLogger(__name__)

COLUMNS = ["gameid", "qtr", "min", "sec", "off", "def", "down", "togo",
           "ydline", "description", "offscore", "defscore", "season"]

# Sacks and aborted snaps are busted passes of unknown kind; they are
# spread over the pass types in turn.
SACK_ROTATION = (
    PlayType.PASS_SHORT_LEFT, PlayType.PASS_SHORT_MIDDLE, PlayType.PASS_SHORT_RIGHT,
    PlayType.PASS_DEEP_LEFT, PlayType.PASS_DEEP_MIDDLE, PlayType.PASS_DEEP_RIGHT,
)

# Descriptions that are not plays at all.
NON_PLAY_MARKERS = ("PENALTY", "penalized", "kneels", "spiked", "kicked", " play under review ")

_LEADING_INT = re.compile(r"-?\d+")


def _leading_int(text: str) -> int:
    m = _LEADING_INT.match(text)
    return int(m.group()) if m else 0


def _next_word(description: str, pos: int) -> str:
    end = description.find(" ", pos)
    return description[pos:] if end < 0 else description[pos:end]


def extract_yardage_turnover(description: str, pos: int = 0) -> tuple[int, bool]:
    """
    Yards gained and fumble flag from the ``for N yards`` part of a description.

    Parameters
    ----------
    description : str
        Play description.
    pos : int, default=0
        Position to start looking for ``" for "``.

    Returns
    -------
    (int, bool)
        Signed yards gained (``no gain`` is 0, ``a loss of N`` is -N) and
        whether ``FUMBLE`` appears after the yardage.
    """
    loc = description.find(" for ", pos)
    if loc < 0:
        return 0, "FUMBLE" in description[pos:]
    loc += 5
    word = _next_word(description, loc)
    if word == "no":
        distance = 0
    elif word == "a":
        # "a loss of N yards"
        loc += len("a loss of ")
        word = _next_word(description, loc)
        distance = -_leading_int(word)
    else:
        distance = _leading_int(word)
    return distance, "FUMBLE" in description[loc + len(word):]


def parse_description(description: str, sack_count: int = 0):
    """
    Classify a play description.

    Parameters
    ----------
    description : str
        Free text description of one play.
    sack_count : int, default=0
        Sacks and aborted snaps seen so far this season; picks the pass type
        such plays are credited to.

    Returns
    -------
    tuple or None
        ``(play_type, distance_gained, turned_over, is_sack)``, or None when
        the description is not a recognised play.
    """
    d = description

    # Passes
    loc = d.find(" pass ")
    if loc < 0:
        loc = d.find(" passed ")
    if loc >= 0:
        loc += 5
        if d[loc:loc + 1] != " ":
            loc += 2
        loc += 1
        incomplete = d.startswith("incomplete ", loc)
        if incomplete:
            loc += len("incomplete ")
        deep = d.startswith("deep ", loc)
        if deep:
            loc += len("deep ")
        elif d.startswith("short ", loc):
            loc += len("short ")
        # Passes without a direction count as middle.
        if d.startswith("left ", loc):
            play_type = PlayType.PASS_DEEP_LEFT if deep else PlayType.PASS_SHORT_LEFT
        elif d.startswith("right ", loc):
            play_type = PlayType.PASS_DEEP_RIGHT if deep else PlayType.PASS_SHORT_RIGHT
        else:
            play_type = PlayType.PASS_DEEP_MIDDLE if deep else PlayType.PASS_SHORT_MIDDLE
        if incomplete:
            return play_type, 0, False, False
        if d.find("INTERCEPT", loc) >= 0:
            return play_type, 0, True, False
        distance, turned_over = extract_yardage_turnover(d, loc)
        return play_type, distance, turned_over, False

    # Runs
    for play_type, markers in (
        (PlayType.RUN_LEFT, (" left end ", " left guard ", " left tackle ")),
        (PlayType.RUN_RIGHT, (" right end ", " right guard ", " right tackle ")),
        (PlayType.RUN_MIDDLE, (" up the middle ", " rushed ", " scrambles ")),
    ):
        for marker in markers:
            loc = d.find(marker)
            if loc >= 0:
                distance, turned_over = extract_yardage_turnover(d, loc)
                return play_type, distance, turned_over, False

    loc = d.find(" sacked ")
    if loc >= 0:
        distance, turned_over = extract_yardage_turnover(d, loc + len(" sacked "))
        return SACK_ROTATION[sack_count % 6], distance, turned_over, True

    # Successful punts are not turnovers.
    for marker in (" punts ", " punted "):
        loc = d.find(marker)
        if loc >= 0:
            return PlayType.PUNT, _leading_int(_next_word(d, loc + len(marker))), False, False

    loc = d.find(" field goal ")
    if loc >= 0:
        distance = 0
        if d.startswith("is GOOD", loc + len(" field goal ")):
            # "... 42 yard field goal is GOOD"
            words = d[:loc].split(" ")
            if len(words) >= 2:
                distance = _leading_int(words[-2])
        return PlayType.FIELD_GOAL, distance, False, False

    if d.find(" FUMBLES (Aborted) ") >= 0:
        return SACK_ROTATION[sack_count % 6], 0, True, True

    if d.find(" Aborted. ") >= 0:
        if "Punt" in d:
            play_type = PlayType.PUNT
        elif "Field Goal" in d:
            play_type = PlayType.FIELD_GOAL
        else:
            play_type = PlayType.RUN_MIDDLE
        return play_type, 0, True, False

    if d.find(" punt is BLOCKED ") >= 0:
        return PlayType.PUNT, 0, True, False

    # "[name] to [team] [yard line] for [yards]" is a run with no direction.
    if " kneels " not in d:
        loc = d.find(" to ")
        if loc >= 0:
            loc = d.find(" ", loc + 4 + 1)
            if loc >= 0:
                loc = d.find(" ", loc + 1)
            if loc >= 0 and d.startswith(" for ", loc):
                distance, turned_over = extract_yardage_turnover(d, loc)
                return PlayType.RUN_MIDDLE, distance, turned_over, False

    loc = d.find(" lost ")
    if loc >= 0:
        return PlayType.RUN_MIDDLE, -_leading_int(_next_word(d, loc + len(" lost "))), False, False

    return None


def _to_int(value):
    if pd.isna(value):
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


class PlayLoader:
    """Reads play-by-play seasons and inserts the wanted plays into a store.

    Parameters
    ----------
    config : LoaderConfig or None, default=None
        File locations and season range.  Defaults to ``LoaderConfig()``.
    """

    def __init__(self, config: LoaderConfig | None = None):
        self.config = config or LoaderConfig()

    def load_plays(self, this_team: str, other_team: str, this_similar=(), other_similar=(),
                   store=None):
        """
        Load every configured season into ``store`` and finalize it.

        Parameters
        ----------
        this_team, other_team : str
            The team to advise and its opponent.
        this_similar : iterable of str
            Teams whose offence resembles ``this_team``.
        other_similar : iterable of str
            Teams whose defence resembles ``other_team``.
        store : DataStore or None
            Target store; a new one is created when None.

        Returns
        -------
        DataStore
            The finalized store.

        Raises
        ------
        FileNotFoundError
            If a season file is missing.
        """
        store = DataStore() if store is None else store
        for path in self.config.season_files():
            self.load_season(path, store, this_team, other_team, this_similar, other_similar)
        store.finalize()
        return store

    def load_season(self, path, store, this_team: str, other_team: str, this_similar=(),
                    other_similar=()) -> int:
        """Insert the wanted plays of one season file; return how many were inserted."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Error, could not open data file {path}")
        df = pd.read_csv(path, dtype=str, keep_default_na=False, on_bad_lines="warn")
        missing = [c for c in COLUMNS[:12] if c not in df.columns]
        if missing:
            raise ValueError(f"{path} is missing columns {missing}")
        this_similar, other_similar = set(this_similar), set(other_similar)
        sack_count = 0
        inserted = 0
        for row in df.to_dict("records"):
            # Kickoffs and conversions have no down.
            if row["down"] == "":
                continue
            offense, defense = row["off"], row["def"]
            if offense == this_team:
                wanted = defense == other_team or defense in other_similar
            else:
                wanted = defense == other_team and offense in this_similar
            if not wanted:
                continue
            values = [_to_int(row[c]) for c in ("down", "togo", "ydline", "min", "offscore", "defscore")]
            if any(v is None for v in values):
                logger.warning("Improperly formatted input: %s", ",".join(str(v) for v in row.values()))
                continue
            down, togo, ydline, minutes, own_score, opp_score = values
            description = str(row["description"])
            parsed = parse_description(description, sack_count)
            if parsed is None:
                if not any(marker in description for marker in NON_PLAY_MARKERS):
                    logger.warning("UNKNOWN PLAY TYPE: %s", description)
                continue
            play_type, distance, turned_over, is_sack = parsed
            if is_sack:
                sack_count += 1
            try:
                store.insert(play_type, down, togo, ydline, minutes, own_score, opp_score,
                             distance, turned_over)
            except ValueError as exc:
                logger.warning("Skipping play %s: %s", row["gameid"], exc)
                continue
            inserted += 1
        logger.info("loaded %d plays from %s", inserted, path)
        return inserted
