"""
Round numbering within each bracket section.

A match with no parent in its own section plays in round 1; otherwise it
plays one round after its latest same-section parent. Parents are the
matches named by its W<n>/L<n> sources.
"""
from typing import Dict, List

from .models import CombinedMatch
from .sections import SECTION_ORDER, build_match_index
from .sources import is_match_reference


def _section_parents(match: CombinedMatch, index: Dict[int, CombinedMatch], section: str) -> List[CombinedMatch]:
    parents = []
    for source in match.sources:
        if not is_match_reference(source):
            continue
        referenced = index.get(source.value)
        if referenced is not None and referenced.section == section:
            parents.append(referenced)
    return parents


def _resolve_round(start: CombinedMatch, index: Dict[int, CombinedMatch], section: str,
                   cache: Dict[str, int]) -> int:
    """Longest-path round for ``start`` using an explicit stack.

    A parent that is still being resolved (a reference cycle) counts as
    round 1.
    """
    if start.key in cache:
        return cache[start.key]

    visiting = {start.key}
    # Each frame: [match, parents, next parent index, parent rounds seen]
    stack = [[start, _section_parents(start, index, section), 0, []]]

    while stack:
        frame = stack[-1]
        match, parents, position, parent_rounds = frame
        if position < len(parents):
            frame[2] += 1
            parent = parents[position]
            if parent.key in cache:
                parent_rounds.append(cache[parent.key])
            elif parent.key in visiting:
                parent_rounds.append(1)
            else:
                visiting.add(parent.key)
                stack.append([parent, _section_parents(parent, index, section), 0, []])
            continue

        round_number = max(parent_rounds) + 1 if parent_rounds else 1
        cache[match.key] = round_number
        visiting.discard(match.key)
        stack.pop()
        if stack:
            stack[-1][3].append(round_number)

    return cache[start.key]


def assign_rounds(matches: List[CombinedMatch]) -> None:
    """Set ``round`` on every classified match in place."""
    index = build_match_index(matches)

    for section in SECTION_ORDER:
        cache = {}
        for match in matches:
            if match.section == section:
                match.round = _resolve_round(match, index, section, cache)
