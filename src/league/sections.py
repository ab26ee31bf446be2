"""
Classification of playoff matches into double elimination sections.

Every match ends up in exactly one of:
- 'winners': teams that have not lost yet
- 'losers': teams that have lost once
- 'championship': the grand final, including a possible reset game

Bracket metadata is often incomplete, so the section is seeded from whatever
signal a match carries and then propagated along W<n>/L<n> references until
nothing changes.
"""
import logging
from typing import Dict, List, Optional

from .models import CombinedMatch
from .sources import is_direct, is_match_reference, is_winner_loser_reset

logger = logging.getLogger(__name__)

WINNERS = 'winners'
LOSERS = 'losers'
CHAMPIONSHIP = 'championship'
SECTION_ORDER = (WINNERS, LOSERS, CHAMPIONSHIP)

DEFAULT_PROPAGATION_PASSES = 8


def build_match_index(matches: List[CombinedMatch]) -> Dict[int, CombinedMatch]:
    """Map match number to the first match carrying it."""
    index = {}
    for match in matches:
        if match.match_num is not None and match.match_num not in index:
            index[match.match_num] = match
    return index


def _has_loser_reference(match: CombinedMatch) -> bool:
    return any(source.kind == 'loser' for source in match.sources)


def _has_direct_reference(match: CombinedMatch) -> bool:
    return any(is_direct(source) for source in match.sources)


def _initial_section(match: CombinedMatch) -> Optional[str]:
    if is_winner_loser_reset(match.home_source, match.away_source):
        return CHAMPIONSHIP

    bracket = (match.meta_bracket or '').strip().lower()
    if bracket == WINNERS:
        return WINNERS
    if bracket == LOSERS:
        return LOSERS

    if _has_loser_reference(match):
        return LOSERS
    if _has_direct_reference(match):
        return WINNERS
    return None


def _propagated_section(match: CombinedMatch, index: Dict[int, CombinedMatch]) -> Optional[str]:
    if is_winner_loser_reset(match.home_source, match.away_source):
        return CHAMPIONSHIP
    if _has_loser_reference(match):
        return LOSERS

    referenced_sections = []
    for source in match.sources:
        if not is_match_reference(source):
            continue
        referenced = index.get(source.value)
        if referenced is not None and referenced.section is not None:
            referenced_sections.append(referenced.section)

    if WINNERS in referenced_sections and LOSERS in referenced_sections:
        return CHAMPIONSHIP
    if referenced_sections:
        first = referenced_sections[0]
        if all(section == first for section in referenced_sections):
            return first
        return match.section
    if _has_direct_reference(match):
        return WINNERS
    return match.section


def _fallback_section(match: CombinedMatch) -> str:
    if is_winner_loser_reset(match.home_source, match.away_source):
        return CHAMPIONSHIP
    if _has_loser_reference(match):
        return LOSERS
    return WINNERS


def propagation_limit(matches: List[CombinedMatch], max_passes: Optional[int] = None) -> int:
    """Number of propagation passes to allow.

    A chain of n referenced matches needs at most n passes to settle, so the
    configured cap is raised to the number of numbered matches when smaller.
    """
    limit = DEFAULT_PROPAGATION_PASSES if max_passes is None else max_passes
    numbered = sum(1 for match in matches if match.match_num is not None)
    return max(limit, numbered)


def classify_sections(matches: List[CombinedMatch], max_passes: Optional[int] = None) -> None:
    """Assign ``section`` on every match in place."""
    index = build_match_index(matches)

    for match in matches:
        section = _initial_section(match)
        if section is not None:
            match.section = section

    limit = propagation_limit(matches, max_passes)
    passes = 0
    for _ in range(limit):
        passes += 1
        changed = False
        for match in matches:
            section = _propagated_section(match, index)
            if section is not None and section != match.section:
                match.section = section
                changed = True
        if not changed:
            break
    logger.debug(f'Section propagation settled after {passes} pass(es) over {len(matches)} matches')

    for match in matches:
        if match.section is None:
            match.section = _fallback_section(match)
