"""
Tests for the Tally Engine

Ties are the interesting part: every proposal sharing the maximum wins,
in ascending index order, through any mix of ties and overtakes.
"""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from delegable_ballot.voting.tally import compute_winning_proposals, map_winner_names


def test_no_proposals_no_winners() -> None:
    assert compute_winning_proposals([]) == []


def test_all_zero_counts_every_proposal_wins() -> None:
    assert compute_winning_proposals([0, 0, 0, 0]) == [0, 1, 2, 3]


def test_single_leader() -> None:
    assert compute_winning_proposals([0, 1, 0]) == [1]


def test_two_way_tie_keeps_both() -> None:
    assert compute_winning_proposals([3, 1, 3]) == [0, 2]


@pytest.mark.parametrize(
    "counts, expected",
    [
        ([1, 1, 2, 2, 0], [2, 3]),  # tie overtaken by a new tie
        ([2, 2, 5, 1, 5, 5], [2, 4, 5]),  # overtake then repeated ties
        ([5, 4, 3, 2, 1], [0]),  # leader never challenged
        ([1, 2, 3, 4, 5], [4]),  # overtaken at every step
        ([0, 0, 7], [2]),  # zero tie reset by the last entry
    ],
)
def test_ties_and_overtakes_in_one_pass(counts: list[int], expected: list[int]) -> None:
    assert compute_winning_proposals(counts) == expected


@given(st.lists(st.integers(min_value=0, max_value=4), min_size=1, max_size=12))
def test_winners_are_exactly_the_maximum_indices(counts: list[int]) -> None:
    top = max(counts)
    expected = [i for i, c in enumerate(counts) if c == top]

    assert compute_winning_proposals(counts) == expected


@given(st.lists(st.integers(min_value=0, max_value=1000), max_size=12))
def test_tally_is_repeatable(counts: list[int]) -> None:
    assert compute_winning_proposals(counts) == compute_winning_proposals(counts)


def test_map_winner_names_preserves_order() -> None:
    assert map_winner_names([0, 2], ["A", "B", "C"]) == ["A", "C"]
    assert map_winner_names([], ["A"]) == []
