"""
Tests for double elimination section classification.
"""
import random

from conftest import make_combined
from league.playoffs import combine_matches
from league.rounds import assign_rounds
from league.sections import (
    CHAMPIONSHIP,
    LOSERS,
    WINNERS,
    build_match_index,
    classify_sections,
    propagation_limit,
)


def sections_by_number(matches):
    return {match.match_num: match.section for match in matches}


class TestSeedingRules:
    """Tests for the initial classification signals."""

    def test_reset_pair_is_championship_regardless_of_label(self):
        """W5 vs L5 is the reset game even when labelled winners."""
        matches = [
            make_combined(5, 'W4', 'W3'),
            make_combined(6, 'W5', 'L5', bracket='winners'),
            make_combined(7, 'L5', 'W5', bracket='losers'),
        ]
        classify_sections(matches)
        assert matches[1].section == CHAMPIONSHIP
        assert matches[2].section == CHAMPIONSHIP

    def test_bracket_label_is_case_insensitive(self):
        matches = [make_combined(1, 'W9', 'W8', bracket='Losers')]
        classify_sections(matches)
        assert matches[0].section == LOSERS

    def test_loser_reference_means_losers(self):
        matches = [make_combined(1, 'L2', 'W3')]
        classify_sections(matches)
        assert matches[0].section == LOSERS

    def test_direct_reference_means_winners(self):
        matches = [make_combined(1, 'S1', '8')]
        classify_sections(matches)
        assert matches[0].section == WINNERS


class TestPropagation:
    """Tests for section propagation along match references."""

    def test_winner_chain_inherits_winners(self):
        matches = [
            make_combined(1, 'S1', 'S4'),
            make_combined(2, 'S2', 'S3'),
            make_combined(3, 'W1', 'W2'),
        ]
        classify_sections(matches)
        assert matches[2].section == WINNERS

    def test_winners_meets_losers_is_championship(self):
        """A match fed by both halves is the grand final."""
        matches = [
            make_combined(1, 'S1', 'S2'),
            make_combined(2, 'L1', 'S3'),
            make_combined(3, 'W1', 'W2'),
        ]
        classify_sections(matches)
        assert sections_by_number(matches) == {1: WINNERS, 2: LOSERS, 3: CHAMPIONSHIP}

    def test_forward_references_resolve(self):
        """References to later matches settle over several passes."""
        matches = [
            make_combined(1, 'W2', 'W3'),
            make_combined(2, 'W4', 'W5'),
            make_combined(3, 'S1', 'S2'),
            make_combined(4, 'S3', 'S4'),
            make_combined(5, 'S5', 'S6'),
        ]
        classify_sections(matches)
        assert all(match.section == WINNERS for match in matches)

    def test_six_team_bracket(self, six_team_season):
        combined = combine_matches(six_team_season.playoff_matches(), six_team_season.playoff_meta)
        classify_sections(combined)
        assert sections_by_number(combined) == {
            1: WINNERS, 2: WINNERS, 3: WINNERS, 4: WINNERS, 5: WINNERS,
            6: LOSERS, 7: LOSERS, 8: LOSERS, 9: LOSERS,
            10: CHAMPIONSHIP, 11: CHAMPIONSHIP,
        }


class TestFallback:
    """Tests for matches with no usable signal."""

    def test_no_signal_defaults_to_winners(self):
        matches = [make_combined(1, None, None), make_combined(2, 'W40', 'bye')]
        classify_sections(matches)
        assert [match.section for match in matches] == [WINNERS, WINNERS]

    def test_match_without_number(self):
        matches = [make_combined(None, None, None, key='match-1')]
        classify_sections(matches)
        assert matches[0].section == WINNERS

    def test_classification_is_total(self):
        """Random references always end in exactly one section."""
        rng = random.Random(2026)
        tokens = [None, '', 'junk', 'S1', 'S2', '4'] + [f'{kind}{n}' for kind in 'WL' for n in range(1, 15)]
        labels = [None, 'winners', 'losers', 'consolation', 'WINNERS']
        for _ in range(50):
            matches = [
                make_combined(number, rng.choice(tokens), rng.choice(tokens), bracket=rng.choice(labels))
                for number in range(1, rng.randint(1, 14))
            ]
            classify_sections(matches)
            assert all(match.section in (WINNERS, LOSERS, CHAMPIONSHIP) for match in matches)

    def test_empty_input(self):
        matches = []
        classify_sections(matches)
        assert matches == []


class TestIdempotence:
    """Running the pipeline twice gives the same answer."""

    def test_classify_and_round_twice(self, six_team_season):
        combined = combine_matches(six_team_season.playoff_matches(), six_team_season.playoff_meta)
        classify_sections(combined)
        assign_rounds(combined)
        first = [(match.key, match.section, match.round) for match in combined]

        classify_sections(combined)
        assign_rounds(combined)
        assert [(match.key, match.section, match.round) for match in combined] == first


class TestHelpers:
    """Tests for the match index and propagation limit."""

    def test_first_match_number_wins(self):
        first = make_combined(3, 'S1', 'S2', key='match-1')
        second = make_combined(3, 'S3', 'S4', key='match-2')
        assert build_match_index([first, second])[3] is first

    def test_limit_defaults_to_eight(self):
        matches = [make_combined(n) for n in range(1, 4)]
        assert propagation_limit(matches) == 8

    def test_limit_grows_with_bracket(self):
        matches = [make_combined(n) for n in range(1, 21)]
        assert propagation_limit(matches, 8) == 20
