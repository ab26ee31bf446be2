"""
Tests for regular season standings and weekly results.
"""
import pytest

from league.models import Match, Team
from league.standings import (
    build_week_rows,
    calculate_division_standings,
    compare_standings,
    get_head_to_head_stats,
    get_season_schedule_data,
)
from league.storage import SeasonRepository


def make_match(match_id, home, away, sets=(), week=1, time='18:00', court=1, **fields):
    scores = {}
    for number, (home_points, away_points) in enumerate(sets, start=1):
        scores[f'home_set{number}_score'] = home_points
        scores[f'away_set{number}_score'] = away_points
    scores.update(fields)
    return Match(id=match_id, division=1, week=week, time=time, court=court,
                 home_team_id=home, away_team_id=away, **scores)


@pytest.fixture
def teams():
    return [
        Team(id=1, division=1, name='Aces', number=1),
        Team(id=2, division=1, name='Blockers', number=2),
        Team(id=3, division=1, name='Diggers', number=3),
    ]


def ranking(standings):
    return [row['name'] for row in standings]


class TestHeadToHead:
    """Tests for get_head_to_head_stats."""

    def test_sets_counted_from_each_side(self):
        matches = [
            make_match(1, 1, 2, [(25, 20), (18, 25)]),
            make_match(2, 2, 1, [(25, 23)]),
            make_match(3, 1, 3, [(25, 0)]),
        ]
        assert get_head_to_head_stats(matches, 1, 2) == {
            'a_wins': 1, 'b_wins': 2, 'a_points': 66, 'b_points': 70,
        }

    def test_aggregate_scores(self):
        matches = [make_match(1, 2, 1, home_score=2, away_score=1)]
        assert get_head_to_head_stats(matches, 1, 2) == {
            'a_wins': 1, 'b_wins': 2, 'a_points': 0, 'b_points': 0,
        }


class TestDivisionStandings:
    """Tests for calculate_division_standings."""

    def test_every_set_counts(self, teams):
        matches = [make_match(1, 1, 2, [(25, 20), (20, 25), (15, 10)])]
        standings = calculate_division_standings(teams, matches)
        aces = next(row for row in standings if row['id'] == 1)
        assert (aces['wins'], aces['losses']) == (2, 1)
        assert (aces['points_for'], aces['point_diff']) == (60, 5)

    def test_head_to_head_beats_point_diff(self, teams):
        matches = [
            make_match(1, 1, 2, [(25, 20), (20, 25), (15, 10)]),
            make_match(2, 2, 3, [(25, 0), (25, 0)]),
            make_match(3, 1, 3, [(25, 20), (10, 25)]),
        ]
        standings = calculate_division_standings(teams, matches)
        assert ranking(standings) == ['Aces', 'Blockers', 'Diggers']
        assert standings[0]['point_diff'] < standings[1]['point_diff']

    def test_point_diff_after_even_head_to_head(self, teams):
        matches = [
            make_match(1, 1, 2, [(25, 20), (20, 25)]),
            make_match(2, 2, 3, [(25, 10), (25, 10)]),
            make_match(3, 1, 3, [(25, 23), (25, 23)]),
        ]
        assert ranking(calculate_division_standings(teams, matches)) == ['Blockers', 'Aces', 'Diggers']

    def test_team_number_then_name(self):
        teams = [
            Team(id=1, division=1, name='Zebras'),
            Team(id=2, division=1, name='Hawks', number=4),
            Team(id=3, division=1, name='Eagles'),
        ]
        assert ranking(calculate_division_standings(teams, [])) == ['Hawks', 'Eagles', 'Zebras']

    def test_name_order_ignores_case(self):
        teams = [
            Team(id=1, division=1, name='Zebras'),
            Team(id=2, division=1, name='blockers'),
            Team(id=3, division=1, name='Blockers'),
        ]
        assert ranking(calculate_division_standings(teams, [])) == ['Blockers', 'blockers', 'Zebras']

    def test_aggregate_mode(self, teams):
        matches = [make_match(1, 3, 2, home_score=2, away_score=1)]
        standings = calculate_division_standings(teams, matches)
        assert ranking(standings)[0] == 'Diggers'
        assert (standings[0]['wins'], standings[0]['losses'], standings[0]['point_diff']) == (2, 1, 0)

    def test_playoff_and_cross_division_ignored(self, teams):
        matches = [
            make_match(1, 1, 2, [(25, 0)], playoff=True),
            make_match(2, 1, 99, [(25, 0)]),
        ]
        standings = calculate_division_standings(teams, matches)
        assert all(row['wins'] == 0 for row in standings)

    def test_compare_is_negative_for_better_team(self):
        a = {'id': 1, 'number': 1, 'name': 'A', 'wins': 5, 'point_diff': 0, 'points_for': 0}
        b = {'id': 2, 'number': 2, 'name': 'B', 'wins': 3, 'point_diff': 0, 'points_for': 0}
        assert compare_standings(a, b, []) < 0
        assert compare_standings(b, a, []) > 0


class TestWeekRows:
    """Tests for build_week_rows."""

    def test_weeks_and_order(self, teams):
        matches = [
            make_match(1, 1, 2, [(25, 20), (25, 20)], week=2),
            make_match(2, 2, 3, [(25, 20), (25, 20)], week=1, time='19:00'),
            make_match(3, 1, 3, [(25, 20), (25, 20)], week=1, time='18:00', court=2),
        ]
        rows = build_week_rows(teams, matches)
        assert [row['week'] for row in rows] == [1, 2]
        assert [line['id'] for line in rows[0]['matches']] == [3, 2]

    def test_winner_listed_first(self, teams):
        matches = [make_match(1, 2, 1, [(20, 25), (25, 22), (10, 15)])]
        line = build_week_rows(teams, matches)[0]['matches'][0]
        assert line['match_label'] == '2 vs 1'
        assert line['winner_decided'] is True
        assert (line['winner_name'], line['winner_games']) == ('Aces', 2)
        assert (line['loser_name'], line['loser_games']) == ('Blockers', 1)
        assert line['scores_display'] == '25-20  22-25  15-10'

    def test_undecided_keeps_home_first(self, teams):
        matches = [make_match(1, 3, 1, [(25, 20), (20, 25)])]
        line = build_week_rows(teams, matches)[0]['matches'][0]
        assert line['winner_decided'] is False
        assert (line['winner_name'], line['loser_name']) == ('Diggers', 'Aces')
        assert (line['winner_games'], line['loser_games']) == (1, 1)

    def test_unnumbered_teams_use_names(self):
        teams = [Team(id=1, division=1, name='Aces'), Team(id=2, division=1, name='Blockers', number=2)]
        line = build_week_rows(teams, [make_match(1, 1, 2, home_score=2, away_score=0)])[0]['matches'][0]
        assert line['match_label'] == 'Aces vs Blockers'
        assert line['scores_display'] == '—'

    def test_no_matches(self, teams):
        assert build_week_rows(teams, []) == []


class TestSeasonSchedule:
    """Tests for get_season_schedule_data."""

    def test_divisions(self, tmp_path):
        repository = SeasonRepository(str(tmp_path))
        repository.save_season(5, {
            'season': 'winter',
            'year': 2025,
            'divisions': [{'id': 1, 'name': 'Gold', 'level': 1}],
            'teams': [
                {'id': 1, 'division': 1, 'number': 2, 'name': 'Blockers'},
                {'id': 2, 'division': 1, 'number': 1, 'name': 'Aces'},
                {'id': 3, 'division': 2, 'number': 1, 'name': 'Diggers'},
            ],
            'matches': [
                {'id': 1, 'division': 1, 'week': 1, 'time': '18:00', 'court': 1,
                 'home_team': 1, 'away_team': 2,
                 'home_set1_score': 25, 'away_set1_score': 10},
                {'id': 2, 'division': 1, 'week': 9, 'playoff': True,
                 'home_team': 2, 'away_team': 1, 'home_score': 2, 'away_score': 0},
            ],
        })
        data = get_season_schedule_data(5, repository)
        assert data['status'] is True
        assert data['season_label'] == 'Winter 2025'
        assert [division['name'] for division in data['divisions']] == ['Gold', 'Division 2']
        gold = data['divisions'][0]
        assert [row['name'] for row in gold['standings']] == ['Blockers', 'Aces']
        assert [row['week'] for row in gold['weeks']] == [1]
        assert data['divisions'][1]['weeks'] == []

    def test_invalid_and_missing(self, tmp_path):
        repository = SeasonRepository(str(tmp_path))
        assert get_season_schedule_data(0, repository)['message'] == 'Invalid season.'
        assert get_season_schedule_data(8, repository)['message'] == 'Season not found.'
