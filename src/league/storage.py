"""
YAML-backed season storage.

Each season lives in ``<data_dir>/seasons/<season_id>.yaml``:

    season: spring
    year: 2026
    divisions: [{id, name, level}, ...]
    teams: [{id, division, number, name}, ...]
    matches: [{id, division, week, date, time, court, home_team, away_team,
               home_score, away_score, home_set1_score, ..., winner, playoff}, ...]
    playoff_meta: [{id, division, week, match_num, match_id, bracket,
                    home_source, away_source, next_match_num,
                    next_loser_match_num, work_team}, ...]
"""
import logging
import os
from typing import List, Optional

import yaml
from filelock import FileLock

from .models import Division, Match, PlayoffMeta, Team

logger = logging.getLogger(__name__)

LOCK_TIMEOUT_SECONDS = 10


def _time_text(value) -> Optional[str]:
    """Unquoted 18:30 loads as a base-60 int under YAML 1.1; turn it back into text."""
    if value is None:
        return None
    if isinstance(value, int):
        return f'{value // 60}:{value % 60:02d}'
    return str(value)


def _date_text(value) -> Optional[str]:
    if value is None:
        return None
    if hasattr(value, 'isoformat'):
        return value.isoformat()
    return str(value)


def team_from_row(row: dict) -> Team:
    return Team(id=row['id'], division=row['division'], name=row.get('name', ''),
                number=row.get('number'))


def division_from_row(row: dict) -> Division:
    return Division(id=row['id'], name=row.get('name') or f"Division {row['id']}",
                    level=row.get('level', 999 + row['id']))


def match_from_row(row: dict) -> Match:
    return Match(
        id=row['id'],
        division=row['division'],
        week=row.get('week', 0),
        date=_date_text(row.get('date')),
        time=_time_text(row.get('time')),
        court=row.get('court'),
        home_team_id=row.get('home_team'),
        away_team_id=row.get('away_team'),
        home_score=row.get('home_score'),
        away_score=row.get('away_score'),
        home_set1_score=row.get('home_set1_score'),
        away_set1_score=row.get('away_set1_score'),
        home_set2_score=row.get('home_set2_score'),
        away_set2_score=row.get('away_set2_score'),
        home_set3_score=row.get('home_set3_score'),
        away_set3_score=row.get('away_set3_score'),
        winner_team_id=row.get('winner'),
        playoff=bool(row.get('playoff', False)),
    )


def meta_from_row(row: dict) -> PlayoffMeta:
    return PlayoffMeta(
        id=row['id'],
        division=row['division'],
        week=row.get('week', 0),
        match_num=row.get('match_num'),
        match_id=row.get('match_id'),
        bracket=row.get('bracket'),
        home_source=None if row.get('home_source') is None else str(row['home_source']),
        away_source=None if row.get('away_source') is None else str(row['away_source']),
        next_match_num=row.get('next_match_num'),
        next_loser_match_num=row.get('next_loser_match_num'),
        work_team_id=row.get('work_team'),
    )


class SeasonData:
    """All rows of one season, converted to model objects."""

    def __init__(self, season_id: int, season: str, year, divisions: List[Division],
                 teams: List[Team], matches: List[Match], playoff_meta: List[PlayoffMeta]):
        self.season_id = season_id
        self.season = season
        self.year = year
        self.divisions = divisions
        self.teams = teams
        self.matches = matches
        self.playoff_meta = playoff_meta

    @property
    def label(self) -> str:
        """e.g. 'Spring 2026'."""
        name = self.season or ''
        return f"{name[:1].upper()}{name[1:]} {self.year if self.year is not None else ''}".strip()

    def playoff_matches(self) -> List[Match]:
        return [match for match in self.matches if match.playoff]

    def regular_season_matches(self) -> List[Match]:
        return [match for match in self.matches if not match.playoff]

    @classmethod
    def from_dict(cls, season_id: int, data: dict) -> 'SeasonData':
        return cls(
            season_id=season_id,
            season=str(data.get('season') or ''),
            year=data.get('year'),
            divisions=[division_from_row(row) for row in data.get('divisions') or []],
            teams=[team_from_row(row) for row in data.get('teams') or []],
            matches=[match_from_row(row) for row in data.get('matches') or []],
            playoff_meta=[meta_from_row(row) for row in data.get('playoff_meta') or []],
        )


class SeasonRepository:
    """Reads and writes season YAML files under a file lock."""

    def __init__(self, data_dir: str):
        self.data_dir = data_dir

    def _season_path(self, season_id: int) -> str:
        return os.path.join(self.data_dir, 'seasons', f'{season_id}.yaml')

    def _lock(self, path: str) -> FileLock:
        return FileLock(f'{path}.lock', timeout=LOCK_TIMEOUT_SECONDS)

    def load_season(self, season_id: int) -> Optional[SeasonData]:
        """Load a season, or None if it does not exist."""
        path = self._season_path(season_id)
        if not os.path.exists(path):
            return None
        with self._lock(path):
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        logger.debug(f'Loaded season {season_id} from {path}')
        return SeasonData.from_dict(season_id, data or {})

    def save_season(self, season_id: int, data: dict):
        """Write raw season rows."""
        path = self._season_path(season_id)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with self._lock(path):
            with open(path, 'w', encoding='utf-8') as f:
                yaml.dump(data, f, default_flow_style=False, sort_keys=False)
