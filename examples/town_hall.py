#!/usr/bin/env python3
"""
Town Hall Ballot - Delegation and Replay Walkthrough

A chairperson puts three proposals to a small town hall. Some residents vote
directly, some delegate (one of them through a chain), one tries to close a
delegation loop and is refused. At the end the ballot is reopened from its
event log and produces the same winners.

Run:
    python examples/town_hall.py
"""

import tempfile
from datetime import datetime, timezone
from pathlib import Path

from delegable_ballot import Ballot
from delegable_ballot.kernel.errors import BallotError
from delegable_ballot.kernel.clock import FixedClock


def print_section(title: str) -> None:
    """Print section header"""
    print(f"\n{'='*70}")
    print(f"  {title}")
    print(f"{'='*70}\n")


def print_tally(ballot: Ballot) -> None:
    for proposal in ballot.proposals():
        print(f"  [{proposal.index}] {proposal.name:<12} {proposal.vote_count} votes")
    print(f"  Winners: {', '.join(ballot.winner_names())}")


def main() -> None:
    print_section("Town Hall Ballot")

    db_path = Path(tempfile.mkdtemp()) / "town_hall.db"
    clock = FixedClock(datetime(2025, 1, 15, 18, 0, 0, tzinfo=timezone.utc))
    ballot = Ballot(db_path, clock=clock)

    ballot.initialize("mayor", ["Park", "Library", "Pool"])
    residents = ["ana", "bo", "cy", "dee", "eli", "fin"]
    ballot.grant_right_batch("mayor", residents)
    print(f"Database: {db_path}")
    print(f"Registered {len(residents)} residents plus the mayor")

    print_section("Delegations")
    ballot.delegate("bo", "cy")
    ballot.delegate("ana", "bo")
    print(f"  ana -> {ballot.get_voter('ana').delegate} (resolved through bo)")
    print(f"  cy now carries weight {ballot.get_voter('cy').weight}")

    try:
        ballot.delegate("cy", "ana")
    except BallotError as e:
        print(f"  Refused: {type(e).__name__}: {e}")

    print_section("Votes")
    ballot.vote("cy", 1)
    ballot.vote("dee", 0)
    ballot.vote("eli", 0)
    ballot.delegate("fin", "dee")
    ballot.vote("mayor", 2)
    print_tally(ballot)

    report = ballot.audit()
    print(
        f"\n  Granted {report.total_granted}, tallied {report.total_tallied}, "
        f"pending {report.total_pending} -> conserved: {report.conserved}"
    )

    print_section("Replay")
    reopened = Ballot(db_path, clock=clock)
    print(f"  Replayed {len(reopened.history())} events")
    print_tally(reopened)
    assert reopened.winning_proposals() == ballot.winning_proposals()


if __name__ == "__main__":
    main()
