"""
Source token parsing for playoff match sides.

A source token says where a side's team comes from:
- ``S3`` / ``SEED3``: the third seed
- ``W5`` / ``WINNER5``: the winner of match number 5
- ``L5`` / ``LOSER5``: the loser of match number 5
- ``12``: team number 12 directly
"""
import re
from typing import Optional

from .models import ParsedSource

SEED_PATTERN = re.compile(r'^S(?:EED)?(\d+)$')
WINNER_PATTERN = re.compile(r'^W(?:INNER)?(\d+)$')
LOSER_PATTERN = re.compile(r'^L(?:OSER)?(\d+)$')
TEAM_PATTERN = re.compile(r'^[+-]?\d+$')

DIRECT_KINDS = ('seed', 'team')
MATCH_REFERENCE_KINDS = ('winner', 'loser')


def none() -> ParsedSource:
    return ParsedSource('none')


def seed(value: int) -> ParsedSource:
    return ParsedSource('seed', value, raw=f'S{value}', normalized=f'S{value}')


def winner(value: int) -> ParsedSource:
    return ParsedSource('winner', value, raw=f'W{value}', normalized=f'W{value}')


def loser(value: int) -> ParsedSource:
    return ParsedSource('loser', value, raw=f'L{value}', normalized=f'L{value}')


def team(value: int) -> ParsedSource:
    return ParsedSource('team', value, raw=str(value), normalized=str(value))


def unknown(text: str) -> ParsedSource:
    return ParsedSource('unknown', None, raw=text, normalized=text)


def _normalize(source: str) -> str:
    text = source.strip()
    if text.startswith('"'):
        text = text[1:]
    if text.endswith('"'):
        text = text[:-1]
    return text.upper()


def parse_source_token(source: Optional[str]) -> ParsedSource:
    """Parse a raw source token into a ParsedSource. Never raises."""
    if not source:
        return ParsedSource('none')

    normalized = _normalize(source)
    if not normalized:
        return ParsedSource('none', raw=source)

    for kind, pattern in (('seed', SEED_PATTERN), ('winner', WINNER_PATTERN), ('loser', LOSER_PATTERN)):
        match = pattern.match(normalized)
        if match:
            return ParsedSource(kind, int(match.group(1)), raw=source, normalized=normalized)

    if TEAM_PATTERN.match(normalized):
        return ParsedSource('team', int(normalized), raw=source, normalized=normalized)

    return ParsedSource('unknown', None, raw=source, normalized=normalized)


def format_source_label(source: ParsedSource) -> Optional[str]:
    """Short badge for a source, e.g. 'S1', 'W3', 'L2', '#7'."""
    if source.kind == 'none':
        return None
    if source.value is not None:
        if source.kind == 'seed':
            return f'S{source.value}'
        if source.kind == 'winner':
            return f'W{source.value}'
        if source.kind == 'loser':
            return f'L{source.value}'
        if source.kind == 'team':
            return f'#{source.value}'
    return source.normalized or source.raw or None


def is_direct(source: ParsedSource) -> bool:
    return source.kind in DIRECT_KINDS


def is_match_reference(source: ParsedSource) -> bool:
    return source.kind in MATCH_REFERENCE_KINDS and source.value is not None


def is_winner_loser_reset(home: ParsedSource, away: ParsedSource) -> bool:
    """True for a W<k> vs L<k> pairing: the grand final reset game."""
    if home.value is None or away.value is None:
        return False
    pair = {home.kind, away.kind}
    return pair == {'winner', 'loser'} and home.value == away.value
