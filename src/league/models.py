"""
Plain data records shared by the playoff and standings engines.
"""
from typing import Optional


class Team:
    def __init__(self, id, division, name, number=None):
        self.id = id
        self.division = division
        self.name = name
        self.number = number

    def __repr__(self):
        return f"Team(id={self.id}, number={self.number}, name={self.name})"


class Division:
    def __init__(self, id, name, level):
        self.id = id
        self.name = name
        self.level = level

    def __repr__(self):
        return f"Division(id={self.id}, name={self.name}, level={self.level})"


class Match:
    """A scheduled or played contest as recorded by result entry."""

    def __init__(self, id, division, week, date=None, time=None, court=None,
                 home_team_id=None, away_team_id=None,
                 home_score=None, away_score=None,
                 home_set1_score=None, away_set1_score=None,
                 home_set2_score=None, away_set2_score=None,
                 home_set3_score=None, away_set3_score=None,
                 winner_team_id=None, playoff=False):
        self.id = id
        self.division = division
        self.week = week
        self.date = date
        self.time = time
        self.court = court
        self.home_team_id = home_team_id
        self.away_team_id = away_team_id
        self.home_score = home_score
        self.away_score = away_score
        self.home_set1_score = home_set1_score
        self.away_set1_score = away_set1_score
        self.home_set2_score = home_set2_score
        self.away_set2_score = away_set2_score
        self.home_set3_score = home_set3_score
        self.away_set3_score = away_set3_score
        self.winner_team_id = winner_team_id
        self.playoff = playoff

    def __repr__(self):
        return (f"Match(id={self.id}, week={self.week}, home={self.home_team_id}, "
                f"away={self.away_team_id}, playoff={self.playoff})")


class PlayoffMeta:
    """Bracket annotation for one playoff match number.

    A row may exist without a recorded match (``match_id`` is None), e.g. an
    "if necessary" game that has not been scheduled.
    """

    def __init__(self, id, division, week, match_num, match_id=None, bracket=None,
                 home_source=None, away_source=None, next_match_num=None,
                 next_loser_match_num=None, work_team_id=None):
        self.id = id
        self.division = division
        self.week = week
        self.match_num = match_num
        self.match_id = match_id
        self.bracket = bracket
        self.home_source = home_source
        self.away_source = away_source
        self.next_match_num = next_match_num
        self.next_loser_match_num = next_loser_match_num
        self.work_team_id = work_team_id

    def __repr__(self):
        return (f"PlayoffMeta(id={self.id}, match_num={self.match_num}, "
                f"home={self.home_source}, away={self.away_source})")


class ParsedSource:
    """Where one side of a playoff match gets its team from.

    ``kind`` is one of 'none', 'seed', 'winner', 'loser', 'team', 'unknown'.
    ``value`` carries the number for seed/winner/loser/team references.
    """

    def __init__(self, kind: str, value: Optional[int] = None,
                 raw: Optional[str] = None, normalized: Optional[str] = None):
        self.kind = kind
        self.value = value
        self.raw = raw
        self.normalized = normalized

    def __eq__(self, other):
        if not isinstance(other, ParsedSource):
            return NotImplemented
        if self.kind != other.kind or self.value != other.value:
            return False
        if self.kind == 'unknown':
            return self.normalized == other.normalized
        return True

    def __hash__(self):
        return hash((self.kind, self.value, self.normalized if self.kind == 'unknown' else None))

    def __repr__(self):
        if self.kind == 'unknown':
            return f"ParsedSource(kind=unknown, text={self.normalized})"
        return f"ParsedSource(kind={self.kind}, value={self.value})"


class CombinedMatch:
    """Working record for one playoff match: a recorded match, its bracket
    metadata, or a metadata-only placeholder.

    ``section`` and ``round`` are filled in by the classifier and the round
    assigner.
    """

    def __init__(self, key, id=None, week=0, date=None, time=None, court=None,
                 match_num=None, home_team_id=None, away_team_id=None,
                 home_score=None, away_score=None,
                 home_set1_score=None, away_set1_score=None,
                 home_set2_score=None, away_set2_score=None,
                 home_set3_score=None, away_set3_score=None,
                 winner_team_id=None, home_source=None, away_source=None,
                 work_team_id=None, meta_bracket=None,
                 next_match_num=None, next_loser_match_num=None):
        self.key = key
        self.id = id
        self.week = week
        self.date = date
        self.time = time
        self.court = court
        self.match_num = match_num
        self.home_team_id = home_team_id
        self.away_team_id = away_team_id
        self.home_score = home_score
        self.away_score = away_score
        self.home_set1_score = home_set1_score
        self.away_set1_score = away_set1_score
        self.home_set2_score = home_set2_score
        self.away_set2_score = away_set2_score
        self.home_set3_score = home_set3_score
        self.away_set3_score = away_set3_score
        self.winner_team_id = winner_team_id
        self.home_source = home_source if home_source is not None else ParsedSource('none')
        self.away_source = away_source if away_source is not None else ParsedSource('none')
        self.work_team_id = work_team_id
        self.meta_bracket = meta_bracket
        self.next_match_num = next_match_num
        self.next_loser_match_num = next_loser_match_num
        self.section = None
        self.round = 1

    @property
    def sources(self):
        return (self.home_source, self.away_source)

    def __repr__(self):
        return (f"CombinedMatch(key={self.key}, match_num={self.match_num}, "
                f"section={self.section}, round={self.round})")
