"""
Playoff data assembly for one season.

Raw playoff matches and bracket metadata are combined into one working list,
classified into sections, numbered into rounds, and turned into:
- chronological schedule/result line items
- section -> round groupings
- upper/lower bracket render data
- the division champion
"""
import logging
import re
import sys
from typing import Dict, List, Optional

from .bracket import build_bracket_data, fill_forward_references
from .config import get_default_settings
from .labels import (
    LabelContext,
    build_label_context,
    build_seed_list,
    get_team_label_by_id,
    resolve_side_label,
)
from .models import CombinedMatch, Division, Match, PlayoffMeta, Team
from .rounds import assign_rounds
from .scoring import (
    NO_SCORES,
    format_set_score_display,
    get_game_wins,
    get_home_is_winner,
    get_loser_team_id,
    get_set_scores,
    get_winner_team_id,
)
from .sections import CHAMPIONSHIP, SECTION_ORDER, classify_sections
from .sources import format_source_label, parse_source_token

logger = logging.getLogger(__name__)

SORT_LAST = sys.maxsize
TIME_PATTERN = re.compile(r'^(\d{1,2}):(\d{2})$')


def parse_time_for_sort(time: Optional[str]) -> int:
    """Minutes after midnight for 'H:MM' / 'HH:MM'; anything else sorts last."""
    if not time:
        return SORT_LAST
    match = TIME_PATTERN.match(time.strip())
    if not match:
        return SORT_LAST
    return int(match.group(1)) * 60 + int(match.group(2))


def _value(item, name):
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name)


def chronological_key(item) -> tuple:
    """Sort key: week, time of day, court, match number. Works on matches and line dicts."""
    court = _value(item, 'court')
    match_num = _value(item, 'match_num')
    return (
        _value(item, 'week') or 0,
        parse_time_for_sort(_value(item, 'time')),
        court if court is not None else SORT_LAST,
        match_num if match_num is not None else SORT_LAST,
    )


def combine_matches(matches: List[Match], metas: List[PlayoffMeta]) -> List[CombinedMatch]:
    """Join playoff matches with their bracket metadata.

    At most one metadata row is kept per match id and per match number; the
    first row seen wins and later duplicates are dropped. Kept rows not
    attached to any match become placeholders keyed ``meta-<id>`` so they
    never collide with a real match that has no metadata.
    """
    meta_by_match_id = {}
    claimed_numbers = set()
    kept = []
    for meta in metas:
        if meta.match_id is not None and meta.match_id in meta_by_match_id:
            logger.debug(f'Skipping metadata row {meta.id}: match {meta.match_id} already has metadata')
            continue
        if meta.match_num is not None and meta.match_num in claimed_numbers:
            logger.debug(f'Skipping metadata row {meta.id}: match number {meta.match_num} already claimed')
            continue
        if meta.match_id is not None:
            meta_by_match_id[meta.match_id] = meta
        if meta.match_num is not None:
            claimed_numbers.add(meta.match_num)
        kept.append(meta)

    used_meta_ids = set()
    combined = []
    for match in matches:
        meta = meta_by_match_id.get(match.id)
        if meta is not None:
            used_meta_ids.add(meta.id)
        combined.append(CombinedMatch(
            key=f'match-{match.id}',
            id=match.id,
            week=match.week,
            date=match.date,
            time=match.time,
            court=match.court,
            match_num=meta.match_num if meta else None,
            home_team_id=match.home_team_id,
            away_team_id=match.away_team_id,
            home_score=match.home_score,
            away_score=match.away_score,
            home_set1_score=match.home_set1_score,
            away_set1_score=match.away_set1_score,
            home_set2_score=match.home_set2_score,
            away_set2_score=match.away_set2_score,
            home_set3_score=match.home_set3_score,
            away_set3_score=match.away_set3_score,
            winner_team_id=match.winner_team_id,
            home_source=parse_source_token(meta.home_source if meta else None),
            away_source=parse_source_token(meta.away_source if meta else None),
            work_team_id=meta.work_team_id if meta else None,
            meta_bracket=(meta.bracket or None) if meta else None,
            next_match_num=meta.next_match_num if meta else None,
            next_loser_match_num=meta.next_loser_match_num if meta else None,
        ))

    for meta in kept:
        if meta.id in used_meta_ids:
            continue
        combined.append(CombinedMatch(
            key=f'meta-{meta.id}',
            week=meta.week,
            match_num=meta.match_num,
            home_source=parse_source_token(meta.home_source),
            away_source=parse_source_token(meta.away_source),
            work_team_id=meta.work_team_id,
            meta_bracket=meta.bracket or None,
            next_match_num=meta.next_match_num,
            next_loser_match_num=meta.next_loser_match_num,
        ))

    combined.sort(key=lambda m: (m.match_num if m.match_num is not None else SORT_LAST,) + chronological_key(m))
    return combined


def build_match_line(match: CombinedMatch, context: LabelContext) -> Dict:
    """Schedule/result line item for one combined match."""
    winner_team_id = get_winner_team_id(match)
    loser_team_id = get_loser_team_id(match, winner_team_id)
    home_wins, away_wins = get_game_wins(match)
    home_is_winner = get_home_is_winner(match, winner_team_id)

    if home_is_winner is None:
        winner_games, loser_games = None, None
    elif home_is_winner:
        winner_games, loser_games = home_wins, away_wins
    else:
        winner_games, loser_games = away_wins, home_wins

    return {
        'key': match.key,
        'id': match.id,
        'week': match.week,
        'match_num': match.match_num,
        'date': match.date,
        'time': match.time,
        'court': match.court,
        'home_label': resolve_side_label(match.home_team_id, match.home_source, context),
        'away_label': resolve_side_label(match.away_team_id, match.away_source, context),
        'home_score': match.home_score,
        'away_score': match.away_score,
        'home_is_winner': home_is_winner,
        'winner_label': get_team_label_by_id(winner_team_id, context) if winner_team_id is not None else None,
        'winner_games': winner_games,
        'loser_label': get_team_label_by_id(loser_team_id, context) if loser_team_id is not None else None,
        'loser_games': loser_games,
        'scores_display': format_set_score_display(get_set_scores(match), home_is_winner),
        'home_source_label': format_source_label(match.home_source),
        'away_source_label': format_source_label(match.away_source),
        'work_assignment_label': get_team_label_by_id(match.work_team_id, context)
        if match.work_team_id is not None else None,
        'section': match.section,
        'round': match.round,
    }


def has_result(line: Dict) -> bool:
    return (line['winner_label'] is not None
            or line['winner_games'] is not None
            or line['loser_games'] is not None
            or line['scores_display'] != NO_SCORES)


def group_sections(matches: List[CombinedMatch], lines_by_key: Dict[str, Dict],
                   section_labels: Optional[Dict[str, str]] = None) -> List[Dict]:
    """Group line items by section then round; empty sections are omitted."""
    labels = section_labels or get_default_settings()['section_labels']
    sections = []
    for section in SECTION_ORDER:
        rounds = {}
        for match in matches:
            if match.section != section or match.key not in lines_by_key:
                continue
            rounds.setdefault(match.round, []).append(lines_by_key[match.key])
        if not rounds:
            continue
        sections.append({
            'key': section,
            'label': labels.get(section, section.title()),
            'rounds': [
                {'round': round_number, 'matches': sorted(rounds[round_number], key=chronological_key)}
                for round_number in sorted(rounds)
            ],
        })
    return sections


def _latest_first(match: CombinedMatch) -> tuple:
    return (-match.round, -(match.match_num if match.match_num is not None else -1))


def determine_champion(matches: List[CombinedMatch], context: LabelContext) -> Optional[str]:
    """Most recent decided championship game, else the highest numbered decided match."""
    champion_id = None
    for match in sorted((m for m in matches if m.section == CHAMPIONSHIP), key=_latest_first):
        champion_id = get_winner_team_id(match)
        if champion_id is not None:
            break

    if champion_id is None:
        by_number = sorted(matches, key=lambda m: -(m.match_num if m.match_num is not None else -1))
        for match in by_number:
            champion_id = get_winner_team_id(match)
            if champion_id is not None:
                break

    if champion_id is None:
        return None
    return get_team_label_by_id(champion_id, context)


def prepare_combined_matches(matches: List[Match], metas: List[PlayoffMeta],
                             settings: Optional[dict] = None) -> List[CombinedMatch]:
    """Combine, classify and number one division's playoff matches."""
    settings = settings or get_default_settings()
    combined = combine_matches(matches, metas)
    classify_sections(combined, settings.get('propagation_passes'))
    assign_rounds(combined)
    if settings.get('derive_forward_refs', True):
        filled = fill_forward_references(combined)
        if filled:
            logger.debug(f'Derived {filled} forward bracket pointer(s) from source tokens')
    return combined


def build_playoff_division(division: Division, teams: List[Team], matches: List[Match],
                           metas: List[PlayoffMeta], settings: Optional[dict] = None) -> Dict:
    """Everything the playoff view needs for one division."""
    settings = settings or get_default_settings()
    combined = prepare_combined_matches(matches, metas, settings)
    context = build_label_context(teams, combined)

    lines_by_key = {match.key: build_match_line(match, context) for match in combined}
    schedule_matches = sorted(lines_by_key.values(), key=chronological_key)

    return {
        'id': division.id,
        'name': division.name,
        'level': division.level,
        'champion': determine_champion(combined, context),
        'seeds': build_seed_list(combined, context),
        'sections': group_sections(combined, lines_by_key, settings.get('section_labels')),
        'schedule_matches': schedule_matches,
        'results_matches': [line for line in schedule_matches if has_result(line)],
        'bracket_matches': build_bracket_data(combined, context),
    }


def resolve_divisions(division_ids, divisions: List[Division]) -> List[Division]:
    """Known divisions for the given ids, plus stand-ins for unknown ids, by level."""
    known = {division.id: division for division in divisions if division.id in division_ids}
    resolved = list(known.values())
    for division_id in sorted(division_ids):
        if division_id not in known:
            resolved.append(Division(division_id, f'Division {division_id}', 999 + division_id))
    resolved.sort(key=lambda division: (division.level, division.id))
    return resolved


def _failure(message: str) -> Dict:
    return {'status': False, 'message': message, 'season_label': '', 'divisions': []}


def get_playoff_data(season_id, repository, settings: Optional[dict] = None) -> Dict:
    """Playoff view data for every division of a season.

    Upstream problems (bad id, missing season) come back as ``status: False``
    with a message; the engine itself never fails on sparse data.
    """
    if not isinstance(season_id, int) or isinstance(season_id, bool) or season_id <= 0:
        return _failure('Invalid season.')

    season = repository.load_season(season_id)
    if season is None:
        return _failure('Season not found.')

    playoff_matches = season.playoff_matches()
    division_ids = {match.division for match in playoff_matches} | {meta.division for meta in season.playoff_meta}

    divisions = []
    for division in resolve_divisions(division_ids, season.divisions):
        divisions.append(build_playoff_division(
            division,
            [team for team in season.teams if team.division == division.id],
            [match for match in playoff_matches if match.division == division.id],
            [meta for meta in season.playoff_meta if meta.division == division.id],
            settings,
        ))

    logger.info(f'Built playoff data for season {season_id}: {len(divisions)} division(s)')
    return {'status': True, 'message': None, 'season_label': season.label, 'divisions': divisions}
