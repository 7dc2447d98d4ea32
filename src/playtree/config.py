# -*- coding: utf-8 -*-
"""
playtree.config
===============

Settings for locating play-by-play data.

Data files hold one season each and are named after the season year
(``2011_nfl_pbp_data.csv``).  Seasons are read most recent first, going back
``year_range`` seasons from ``last_season`` but never before ``first_season``.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass
class LoaderConfig:
    """Where play-by-play files live and which seasons to read."""
    data_dir: str = "../Data"
    first_season: int = 2008
    last_season: int = 2011
    year_range: int = 3
    file_pattern: str = "{year}_nfl_pbp_data.csv"

    def seasons(self) -> list[int]:
        first = max(self.first_season, self.last_season - self.year_range + 1)
        return list(range(self.last_season, first - 1, -1))

    def season_file(self, year: int) -> Path:
        return Path(self.data_dir) / self.file_pattern.format(year=year)

    def season_files(self) -> list[Path]:
        return [self.season_file(year) for year in self.seasons()]
