"""
Renderable double elimination bracket data.

The upper half holds the winners bracket and championship games; the lower
half holds the losers bracket. Each entry is a plain dict in the shape a
generic bracket layout renderer expects (``next_match_id`` /
``next_loser_match_id`` pointers, two participants).
"""
import logging
from typing import Dict, List, Optional

from .labels import LabelContext, get_team_label_by_id, resolve_side_label
from .models import CombinedMatch
from .scoring import (
    NO_SCORES,
    format_set_score_display,
    get_game_wins,
    get_set_scores,
    get_winner_team_id,
)
from .sections import CHAMPIONSHIP, LOSERS, WINNERS, build_match_index
from .sources import format_source_label, is_direct, is_match_reference

logger = logging.getLogger(__name__)

BYE = 'BYE'


def fill_forward_references(matches: List[CombinedMatch]) -> int:
    """Fill missing next/next-loser pointers from other matches' sources.

    If match R has source W<n>, match n's winner moves on to R; L<n> likewise
    for the loser. Pointers already present are kept. Returns the number of
    pointers filled.
    """
    filled = 0
    for match in matches:
        if match.match_num is None:
            continue
        if match.next_match_num is not None and match.next_loser_match_num is not None:
            continue

        next_match_num = None
        next_loser_match_num = None
        for other in matches:
            if other is match or other.match_num is None:
                continue
            for source in other.sources:
                if not is_match_reference(source) or source.value != match.match_num:
                    continue
                if source.kind == 'winner' and next_match_num is None:
                    next_match_num = other.match_num
                if source.kind == 'loser' and next_loser_match_num is None:
                    next_loser_match_num = other.match_num

        if match.next_match_num is None and next_match_num is not None:
            match.next_match_num = next_match_num
            filled += 1
        if match.next_loser_match_num is None and next_loser_match_num is not None:
            match.next_loser_match_num = next_loser_match_num
            filled += 1
    return filled


def _participant(participant_id: str, name: str, result_text: Optional[str],
                 is_winner: bool, status: Optional[str]) -> Dict:
    return {
        'id': participant_id,
        'name': name,
        'result_text': result_text,
        'is_winner': is_winner,
        'status': status,
    }


def build_bracket_match(match: CombinedMatch, context: LabelContext) -> Dict:
    """Render entry for one numbered playoff match."""
    winner_team_id = get_winner_team_id(match)
    home_wins, away_wins = get_game_wins(match)

    home_is_winner = winner_team_id is not None and match.home_team_id is not None \
        and winner_team_id == match.home_team_id
    away_is_winner = winner_team_id is not None and match.away_team_id is not None \
        and winner_team_id == match.away_team_id

    has_result = winner_team_id is not None
    status = 'PLAYED' if has_result else None

    if home_is_winner:
        orientation = True
    elif away_is_winner:
        orientation = False
    else:
        orientation = None

    return {
        'id': match.match_num,
        'name': f'Match #{match.match_num}',
        'next_match_id': match.next_match_num,
        'next_loser_match_id': match.next_loser_match_num,
        'tournament_round_text': f'R{match.round}',
        'start_time': match.date or '',
        'state': 'SCORE_DONE' if has_result else 'NO_PARTY',
        'participants': [
            _participant(
                str(match.home_team_id) if match.home_team_id is not None else f'home-{match.match_num}',
                resolve_side_label(match.home_team_id, match.home_source, context),
                str(home_wins) if home_wins is not None else None,
                home_is_winner,
                status,
            ),
            _participant(
                str(match.away_team_id) if match.away_team_id is not None else f'away-{match.match_num}',
                resolve_side_label(match.away_team_id, match.away_source, context),
                str(away_wins) if away_wins is not None else None,
                away_is_winner,
                status,
            ),
        ],
        'match_num': match.match_num,
        'week': match.week,
        'date': match.date,
        'time': match.time,
        'court': match.court,
        'scores_display': format_set_score_display(get_set_scores(match), orientation),
        'home_source_label': format_source_label(match.home_source),
        'away_source_label': format_source_label(match.away_source),
        'work_team_label': get_team_label_by_id(match.work_team_id, context)
        if match.work_team_id is not None else None,
    }


def needs_bye(match: CombinedMatch) -> bool:
    """A winners match with one direct side and one W<n> side.

    The direct side skipped a round, so the layout needs a placeholder match
    feeding it to keep each column half the size of the previous one.
    """
    if match.section != WINNERS:
        return False
    home, away = match.home_source, match.away_source
    return (is_direct(home) and away.kind == 'winner') or (is_direct(away) and home.kind == 'winner')


def build_bye_match(bye_id: int, target: CombinedMatch, context: LabelContext) -> Dict:
    """Placeholder walk-over feeding the direct side of ``target``."""
    if is_direct(target.home_source) and target.away_source.kind == 'winner':
        team_id, source = target.home_team_id, target.home_source
    else:
        team_id, source = target.away_team_id, target.away_source

    return {
        'id': bye_id,
        'name': BYE,
        'next_match_id': target.match_num,
        'next_loser_match_id': None,
        'tournament_round_text': BYE,
        'start_time': '',
        'state': 'WALK_OVER',
        'participants': [
            _participant(
                str(team_id) if team_id is not None else f'bye-team-{bye_id}',
                resolve_side_label(team_id, source, context),
                None,
                True,
                'WALK_OVER',
            ),
            _participant(f'bye-{bye_id}', BYE, None, False, 'NO_SHOW'),
        ],
        'match_num': bye_id,
        'week': 0,
        'date': None,
        'time': None,
        'court': None,
        'scores_display': NO_SCORES,
        'home_source_label': None,
        'away_source_label': None,
        'work_team_label': None,
    }


def find_unbalanced_byes(matches: List[CombinedMatch]) -> List[int]:
    """Match numbers whose bye shape the placeholder insertion cannot fix.

    Flags winners matches that take a team from a same-section match more
    than one round earlier (a bye that skips a column), and losers matches
    with a direct seed/team side (a bye inside the losers bracket).
    """
    index = build_match_index(matches)
    flagged = set()
    for match in matches:
        if match.match_num is None:
            continue
        if match.section == LOSERS and any(is_direct(source) for source in match.sources):
            flagged.add(match.match_num)
            continue
        if match.section != WINNERS:
            continue
        for source in match.sources:
            if not is_match_reference(source):
                continue
            parent = index.get(source.value)
            if parent is not None and parent.section == WINNERS and parent.round < match.round - 1:
                flagged.add(match.match_num)
    return sorted(flagged)


def _sanitize_pointers(entries: List[Dict], known_ids: set) -> None:
    for entry in entries:
        if entry['next_match_id'] is not None and entry['next_match_id'] not in known_ids:
            entry['next_match_id'] = None
        if entry['next_loser_match_id'] is not None and entry['next_loser_match_id'] not in known_ids:
            entry['next_loser_match_id'] = None


def build_bracket_data(matches: List[CombinedMatch], context: LabelContext) -> Optional[Dict[str, List[Dict]]]:
    """Build ``{'upper': [...], 'lower': [...]}`` or None when no match is numbered."""
    numbered = [match for match in matches if match.match_num is not None]
    if not numbered:
        return None

    upper = []
    lower = []
    for match in numbered:
        entry = build_bracket_match(match, context)
        if match.section in (WINNERS, CHAMPIONSHIP):
            upper.append(entry)
        elif match.section == LOSERS:
            lower.append(entry)

    if not upper and not lower:
        return None

    bye_id = -1
    for match in numbered:
        if not needs_bye(match):
            continue
        upper.append(build_bye_match(bye_id, match, context))
        bye_id -= 1
    if bye_id < -1:
        logger.debug(f'Inserted {-1 - bye_id} bye placeholder(s)')

    unbalanced = find_unbalanced_byes(numbered)
    if unbalanced:
        logger.warning(f'Bracket layout may be unbalanced around match(es) {unbalanced}: '
                       f'bye shape not handled by placeholder insertion')

    known_ids = {entry['id'] for entry in upper + lower}
    _sanitize_pointers(upper, known_ids)
    _sanitize_pointers(lower, known_ids)

    return {'upper': upper, 'lower': lower}
