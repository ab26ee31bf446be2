"""
Regular season standings and weekly results.

Every set counts as a game: a team that wins a match 2-1 gets two wins and
one loss. Matches recorded only as aggregate game counts add those counts
directly.

Ranking: wins -> head-to-head wins -> head-to-head points -> point
differential -> points scored -> team number -> name
"""
import logging
from functools import cmp_to_key
from typing import Dict, List

from .models import Match, Team
from .playoffs import parse_time_for_sort, resolve_divisions
from .scoring import (
    count_set_wins,
    format_set_score_display,
    get_home_is_winner,
    get_set_scores,
    get_winner_team_id,
)

logger = logging.getLogger(__name__)

MISSING_TEAM_NUMBER = 999


def _between(match: Match, team_a_id: int, team_b_id: int) -> bool:
    return ((match.home_team_id == team_a_id and match.away_team_id == team_b_id)
            or (match.home_team_id == team_b_id and match.away_team_id == team_a_id))


def get_head_to_head_stats(matches: List[Match], team_a_id: int, team_b_id: int) -> Dict[str, int]:
    """Games and points won by each team in matches between the two."""
    stats = {'a_wins': 0, 'b_wins': 0, 'a_points': 0, 'b_points': 0}

    for match in matches:
        if not _between(match, team_a_id, team_b_id):
            continue

        a_is_home = match.home_team_id == team_a_id
        sets = get_set_scores(match)
        if sets:
            for home, away in sets:
                a_score, b_score = (home, away) if a_is_home else (away, home)
                stats['a_points'] += a_score
                stats['b_points'] += b_score
                if a_score > b_score:
                    stats['a_wins'] += 1
                elif b_score > a_score:
                    stats['b_wins'] += 1
        elif match.home_score is not None and match.away_score is not None:
            stats['a_wins'] += match.home_score if a_is_home else match.away_score
            stats['b_wins'] += match.away_score if a_is_home else match.home_score

    return stats


def compare_standings(a: Dict, b: Dict, matches: List[Match]) -> int:
    """Negative when ``a`` ranks above ``b``."""
    if a['wins'] != b['wins']:
        return b['wins'] - a['wins']

    # Head-to-head is recomputed per pair; divisions are small.
    h2h = get_head_to_head_stats(matches, a['id'], b['id'])
    if h2h['a_wins'] != h2h['b_wins']:
        return h2h['b_wins'] - h2h['a_wins']
    if h2h['a_points'] != h2h['b_points']:
        return h2h['b_points'] - h2h['a_points']

    if a['point_diff'] != b['point_diff']:
        return b['point_diff'] - a['point_diff']
    if a['points_for'] != b['points_for']:
        return b['points_for'] - a['points_for']

    a_number = a['number'] if a['number'] is not None else MISSING_TEAM_NUMBER
    b_number = b['number'] if b['number'] is not None else MISSING_TEAM_NUMBER
    if a_number != b_number:
        return a_number - b_number

    a_name, b_name = a['name'].casefold(), b['name'].casefold()
    if a_name != b_name:
        return (a_name > b_name) - (a_name < b_name)
    return (a['name'] > b['name']) - (a['name'] < b['name'])


def _division_matches(teams: List[Team], matches: List[Match]) -> List[Match]:
    team_ids = {team.id for team in teams}
    return [
        match for match in matches
        if not match.playoff
        and match.home_team_id in team_ids
        and match.away_team_id in team_ids
    ]


def calculate_division_standings(teams: List[Team], matches: List[Match]) -> List[Dict]:
    """
    Calculate standings for one division from its regular season matches.

    Returns: [{'id', 'number', 'name', 'wins', 'losses', 'point_diff',
               'points_for'}, ...] best team first
    """
    division_matches = _division_matches(teams, matches)
    standings = {
        team.id: {
            'id': team.id,
            'number': team.number,
            'name': team.name,
            'wins': 0,
            'losses': 0,
            'point_diff': 0,
            'points_for': 0,
        }
        for team in teams
    }

    for match in division_matches:
        home = standings[match.home_team_id]
        away = standings[match.away_team_id]

        sets = get_set_scores(match)
        if sets:
            for home_points, away_points in sets:
                home['points_for'] += home_points
                away['points_for'] += away_points
                home['point_diff'] += home_points - away_points
                away['point_diff'] += away_points - home_points
            home_wins, away_wins = count_set_wins(sets)
            home['wins'] += home_wins
            home['losses'] += away_wins
            away['wins'] += away_wins
            away['losses'] += home_wins
        elif match.home_score is not None and match.away_score is not None:
            home['wins'] += match.home_score
            home['losses'] += match.away_score
            away['wins'] += match.away_score
            away['losses'] += match.home_score

    return sorted(standings.values(), key=cmp_to_key(lambda a, b: compare_standings(a, b, division_matches)))


def _team_games(match: Match):
    sets = get_set_scores(match)
    if sets:
        return sets, count_set_wins(sets)
    return sets, (match.home_score or 0, match.away_score or 0)


def build_week_rows(teams: List[Team], matches: List[Match]) -> List[Dict]:
    """Regular season results grouped by week.

    Each line lists the winner first; a match with no decision keeps home
    first and leaves ``winner_decided`` False.
    """
    team_by_id = {team.id: team for team in teams}
    weeks = {}

    for match in _division_matches(teams, matches):
        home_team = team_by_id[match.home_team_id]
        away_team = team_by_id[match.away_team_id]

        sets, (home_games, away_games) = _team_games(match)
        home_is_winner = get_home_is_winner(match, get_winner_team_id(match))
        home_first = home_is_winner is not False

        if home_team.number is not None and away_team.number is not None:
            match_label = f'{home_team.number} vs {away_team.number}'
        else:
            match_label = f'{home_team.name} vs {away_team.name}'

        week = weeks.setdefault(match.week, {'week': match.week, 'date': match.date, 'matches': []})
        week['matches'].append({
            'id': match.id,
            'time': match.time,
            'court': match.court,
            'match_label': match_label,
            'winner_decided': home_is_winner is not None,
            'winner_name': home_team.name if home_first else away_team.name,
            'winner_games': home_games if home_first else away_games,
            'loser_name': away_team.name if home_first else home_team.name,
            'loser_games': away_games if home_first else home_games,
            'scores_display': format_set_score_display(sets, home_is_winner),
        })

    rows = []
    for week_number in sorted(weeks):
        row = weeks[week_number]
        row['matches'].sort(key=lambda line: (
            parse_time_for_sort(line['time']),
            line['court'] if line['court'] is not None else 0,
        ))
        rows.append(row)
    return rows


def get_season_schedule_data(season_id, repository) -> Dict:
    """Standings and weekly results for every division with teams."""
    if not isinstance(season_id, int) or isinstance(season_id, bool) or season_id <= 0:
        return {'status': False, 'message': 'Invalid season.', 'season_label': '', 'divisions': []}

    season = repository.load_season(season_id)
    if season is None:
        return {'status': False, 'message': 'Season not found.', 'season_label': '', 'divisions': []}

    division_ids = {team.division for team in season.teams}
    regular_matches = season.regular_season_matches()

    divisions = []
    for division in resolve_divisions(division_ids, season.divisions):
        division_teams = sorted(
            (team for team in season.teams if team.division == division.id),
            key=lambda team: (team.number if team.number is not None else MISSING_TEAM_NUMBER, team.name),
        )
        division_matches = [match for match in regular_matches if match.division == division.id]
        divisions.append({
            'id': division.id,
            'name': division.name,
            'level': division.level,
            'standings': calculate_division_standings(division_teams, division_matches),
            'weeks': build_week_rows(division_teams, division_matches),
        })

    logger.info(f'Built schedule data for season {season_id}: {len(divisions)} division(s)')
    return {'status': True, 'message': None, 'season_label': season.label, 'divisions': divisions}
