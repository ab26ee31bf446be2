"""
Human readable labels for playoff match sides.
"""
from typing import Dict, List, Optional

from .models import CombinedMatch, ParsedSource, Team
from .scoring import get_loser_team_id, get_winner_team_id
from .sections import build_match_index

TBD = 'TBD'


class LabelContext:
    """Lookups needed to turn a team id or source reference into a label."""

    def __init__(self, team_label_by_id: Dict[int, str], team_label_by_number: Dict[int, str],
                 seed_label_by_seed: Dict[int, str], match_by_num: Dict[int, CombinedMatch]):
        self.team_label_by_id = team_label_by_id
        self.team_label_by_number = team_label_by_number
        self.seed_label_by_seed = seed_label_by_seed
        self.match_by_num = match_by_num


def format_team_label(team: Team) -> str:
    if team.number is not None:
        return f'#{team.number} {team.name}'
    return team.name


def build_label_context(teams: List[Team], matches: List[CombinedMatch]) -> LabelContext:
    """Build label lookups for one division.

    Seed labels come from matches where a seed source already has a team
    assigned on that side; the last such observation wins.
    """
    team_label_by_id = {}
    team_label_by_number = {}
    for team in teams:
        label = format_team_label(team)
        team_label_by_id[team.id] = label
        if team.number is not None:
            team_label_by_number[team.number] = label

    seed_label_by_seed = {}
    for match in matches:
        for source, team_id in ((match.home_source, match.home_team_id),
                                (match.away_source, match.away_team_id)):
            if source.kind == 'seed' and source.value is not None and team_id is not None:
                seed_label_by_seed[source.value] = team_label_by_id.get(team_id, f'Team {team_id}')

    return LabelContext(team_label_by_id, team_label_by_number, seed_label_by_seed,
                        build_match_index(matches))


def get_team_label_by_id(team_id: int, context: LabelContext) -> str:
    return context.team_label_by_id.get(team_id, f'Team {team_id}')


def resolve_reference_label(source: ParsedSource, context: LabelContext) -> Optional[str]:
    """Label for a source reference, or None when there is no reference."""
    if source.kind == 'none':
        return None

    if source.kind == 'seed' and source.value is not None:
        return context.seed_label_by_seed.get(source.value, f'Seed {source.value}')

    if source.kind == 'team' and source.value is not None:
        return context.team_label_by_number.get(source.value, f'Team #{source.value}')

    if source.kind in ('winner', 'loser') and source.value is not None:
        placeholder = f"{'Winner' if source.kind == 'winner' else 'Loser'} #{source.value}"
        referenced = context.match_by_num.get(source.value)
        if referenced is None:
            return placeholder

        winner_team_id = get_winner_team_id(referenced)
        if source.kind == 'winner':
            team_id = winner_team_id
        else:
            team_id = get_loser_team_id(referenced, winner_team_id)
        if team_id is None:
            return placeholder
        return get_team_label_by_id(team_id, context)

    return source.normalized or source.raw or None


def resolve_side_label(team_id: Optional[int], source: ParsedSource, context: LabelContext) -> str:
    """Label for one side: assigned team first, then its source, then 'TBD'."""
    if team_id is not None:
        return get_team_label_by_id(team_id, context)
    return resolve_reference_label(source, context) or TBD


def build_seed_list(matches: List[CombinedMatch], context: LabelContext) -> List[Dict]:
    """Every seed referenced by the bracket, in seed order."""
    seeds = set()
    for match in matches:
        for source in match.sources:
            if source.kind == 'seed' and source.value is not None:
                seeds.add(source.value)
    return [
        {'seed': seed_num, 'team_label': context.seed_label_by_seed.get(seed_num, f'Seed {seed_num}')}
        for seed_num in sorted(seeds)
    ]
