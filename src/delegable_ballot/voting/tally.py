"""
Tally Engine - Which proposals hold the most weight

Pure read-side computations over vote counts. Ties are never broken: every
proposal sharing the maximum is a winner.
"""

from collections.abc import Sequence


def compute_winning_proposals(vote_counts: Sequence[int]) -> list[int]:
    """
    Indices of all proposals with the maximum vote count, ascending

    Single pass in ledger order: a count equal to the running maximum joins
    the winners, a strictly greater count replaces them. Zero proposals give
    no winners; all-zero counts make every proposal a winner.

    Args:
        vote_counts: Vote count per proposal, in ledger order

    Returns:
        Ascending list of winning indices

    Example:
        >>> compute_winning_proposals([3, 1, 3])
        [0, 2]
    """
    winners: list[int] = []
    max_count = 0

    for index, count in enumerate(vote_counts):
        if count > max_count:
            max_count = count
            winners = [index]
        elif count == max_count:
            winners.append(index)

    return winners


def map_winner_names(winners: Sequence[int], names: Sequence[str]) -> list[str]:
    """Names of the given winning indices, preserving their order"""
    return [names[index] for index in winners]
