"""
Test Helper Functions - Ballot assertions

Custom assertions for the properties every reachable ballot state must have,
so scenario tests can check them after each step.
"""

from delegable_ballot.ballot import Ballot


def assert_weight_conserved(ballot: Ballot) -> None:
    """
    Every granted unit of weight is either tallied or held by a non-voter

    Raises:
        AssertionError: With the three totals if they don't balance
    """
    report = ballot.audit()
    if not report.conserved:
        raise AssertionError(
            f"Weight not conserved: granted {report.total_granted}, "
            f"tallied {report.total_tallied}, pending {report.total_pending}"
        )


def assert_delegation_acyclic(ballot: Ballot) -> None:
    """
    Following delegate links from any voter terminates without revisiting

    Raises:
        AssertionError: Naming the voter whose chain loops
    """
    voters = ballot.voter_registry.voters
    for start in voters:
        seen = {start}
        current = voters[start]["delegate"]
        while current is not None:
            if current in seen:
                raise AssertionError(f"Delegate chain from {start} revisits {current}")
            seen.add(current)
            current = voters.get(current, {}).get("delegate")


def snapshot(ballot: Ballot) -> tuple:
    """Comparable copy of the whole ballot state"""
    voters = {
        voter_id: dict(record) for voter_id, record in ballot.voter_registry.voters.items()
    }
    return (
        ballot.voter_registry.chairperson,
        voters,
        ballot.proposal_ledger.vote_counts(),
        len(ballot.history()),
    )
