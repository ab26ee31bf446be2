"""
Set and game resolution for a single match.

Matches are recorded either as up to three set scores or, in "total games"
mode, as an aggregate home/away score that already counts games won.
"""
from typing import List, Optional, Tuple

NO_SCORES = '—'


def get_set_scores(match) -> List[Tuple[int, int]]:
    """Return (home, away) pairs for every set where both sides are recorded."""
    sets = []
    for home, away in (
        (match.home_set1_score, match.away_set1_score),
        (match.home_set2_score, match.away_set2_score),
        (match.home_set3_score, match.away_set3_score),
    ):
        if home is not None and away is not None:
            sets.append((home, away))
    return sets


def count_set_wins(sets: List[Tuple[int, int]]) -> Tuple[int, int]:
    """Count sets won by each side; a tied set counts for nobody."""
    home_wins = 0
    away_wins = 0
    for home, away in sets:
        if home > away:
            home_wins += 1
        elif away > home:
            away_wins += 1
    return home_wins, away_wins


def get_game_wins(match) -> Tuple[Optional[int], Optional[int]]:
    """Games won by (home, away), or (None, None) if nothing is recorded."""
    if match.home_score is not None and match.away_score is not None:
        return match.home_score, match.away_score

    sets = get_set_scores(match)
    if not sets:
        return None, None
    return count_set_wins(sets)


def get_winner_team_id(match) -> Optional[int]:
    """Recorded winner if present, otherwise whoever won more games.

    Returns None when the match is undecided (not played, or tied).
    """
    if match.winner_team_id is not None:
        return match.winner_team_id

    if match.home_team_id is None or match.away_team_id is None:
        return None

    home_wins, away_wins = get_game_wins(match)
    if home_wins is None or away_wins is None:
        return None
    if home_wins > away_wins:
        return match.home_team_id
    if away_wins > home_wins:
        return match.away_team_id
    return None


def get_loser_team_id(match, winner_team_id: Optional[int]) -> Optional[int]:
    if winner_team_id is None or match.home_team_id is None or match.away_team_id is None:
        return None
    if winner_team_id == match.home_team_id:
        return match.away_team_id
    return match.home_team_id


def get_home_is_winner(match, winner_team_id: Optional[int]) -> Optional[bool]:
    """True/False when the winner side is known, None otherwise."""
    if winner_team_id is None:
        return None
    if match.home_team_id is not None and winner_team_id == match.home_team_id:
        return True
    if match.away_team_id is not None and winner_team_id == match.away_team_id:
        return False
    return None


def format_set_score_display(sets: List[Tuple[int, int]], home_is_winner: Optional[bool]) -> str:
    """Render sets as '25-20  23-25' with the winner's score first."""
    if not sets:
        return NO_SCORES

    parts = []
    for home, away in sets:
        if home_is_winner is False:
            parts.append(f'{away}-{home}')
        else:
            parts.append(f'{home}-{away}')
    return '  '.join(parts)
