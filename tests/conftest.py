"""
Shared pytest fixtures for league playoff and standings tests.

Running tests:
    pytest tests/
"""
import pytest
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from league.models import CombinedMatch
from league.sources import parse_source_token
from league.storage import SeasonData


def make_combined(match_num, home=None, away=None, bracket=None, **fields):
    """Build a metadata-style CombinedMatch from raw source tokens."""
    return CombinedMatch(
        key=fields.pop('key', f'meta-{match_num}'),
        match_num=match_num,
        home_source=parse_source_token(home),
        away_source=parse_source_token(away),
        meta_bracket=bracket,
        **fields
    )


def six_team_rows():
    """Raw season rows for a 6-team double elimination playoff.

    Seeds 1 and 2 skip the first round. Matches 9-11 exist only as bracket
    metadata; 11 is the "if necessary" reset game.
    """
    teams = [
        {'id': 101, 'division': 1, 'number': 1, 'name': 'Aces'},
        {'id': 102, 'division': 1, 'number': 2, 'name': 'Blockers'},
        {'id': 103, 'division': 1, 'number': 3, 'name': 'Diggers'},
        {'id': 104, 'division': 1, 'number': 4, 'name': 'Setters'},
        {'id': 105, 'division': 1, 'number': 5, 'name': 'Spikers'},
        {'id': 106, 'division': 1, 'number': 6, 'name': 'Servers'},
    ]

    def match(match_id, week, time, court, home, away, sets=(), **extra):
        row = {
            'id': match_id, 'division': 1, 'week': week, 'date': f'2026-05-{week:02d}',
            'time': time, 'court': court, 'home_team': home, 'away_team': away,
            'playoff': True,
        }
        for number, (home_points, away_points) in enumerate(sets, start=1):
            row[f'home_set{number}_score'] = home_points
            row[f'away_set{number}_score'] = away_points
        row.update(extra)
        return row

    matches = [
        match(1, 9, '18:00', 1, 103, 106, [(25, 20), (25, 18)]),
        match(2, 9, '18:00', 2, 104, 105, [(22, 25), (25, 23), (13, 15)]),
        match(3, 9, '19:00', 1, 101, 105, [(25, 15), (25, 17)]),
        match(4, 9, '19:00', 2, 102, 103, home_score=1, away_score=2, winner=103),
        match(5, 10, '18:00', 1, 101, 103),
        match(6, 9, '20:00', 1, 106, 104, [(25, 21), (25, 19)]),
        match(7, 10, '9:30', 2, None, None),
        match(8, 10, '20:00', 1, None, None),
    ]

    def meta(match_num, home, away, bracket=None, match_id=None, **extra):
        row = {
            'id': 500 + match_num, 'division': 1, 'week': 9 if match_num <= 4 else 10,
            'match_num': match_num, 'match_id': match_id, 'bracket': bracket,
            'home_source': home, 'away_source': away,
        }
        row.update(extra)
        return row

    playoff_meta = [
        meta(1, 'S3', 'S6', 'winners', match_id=1, next_match_num=4, next_loser_match_num=6),
        meta(2, 'S4', 'S5', 'winners', match_id=2),
        meta(3, 'S1', 'W2', 'winners', match_id=3),
        meta(4, 'S2', 'W1', 'winners', match_id=4, work_team=106),
        meta(5, 'W3', 'W4', None, match_id=5),
        meta(6, 'L1', 'L2', None, match_id=6),
        meta(7, 'L3', 'W6', 'losers', match_id=7),
        meta(8, 'L4', 'W7', 'losers', match_id=8),
        meta(9, 'L5', 'W8', None),
        meta(10, 'W5', 'W9', None, next_match_num=11, next_loser_match_num=11),
        meta(11, 'W10', 'L10', 'winners', next_match_num=12),
    ]

    return {
        'season': 'spring',
        'year': 2026,
        'divisions': [{'id': 1, 'name': 'Gold', 'level': 1}],
        'teams': teams,
        'matches': matches,
        'playoff_meta': playoff_meta,
    }


@pytest.fixture
def six_team_season():
    """The 6-team playoff as a loaded SeasonData."""
    return SeasonData.from_dict(1, six_team_rows())


@pytest.fixture
def temp_data_dir(tmp_path, monkeypatch):
    """Temporary data directory wired into the web app."""
    import app as app_module

    data_dir = tmp_path / "data"
    (data_dir / "seasons").mkdir(parents=True)
    monkeypatch.setattr(app_module, 'DATA_DIR', str(data_dir))
    return str(data_dir)


@pytest.fixture
def client(temp_data_dir):
    """Flask test client backed by the temporary data directory."""
    from app import app
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client
