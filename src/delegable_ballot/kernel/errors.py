"""
Custom exceptions for the delegable ballot

Every rule violation is its own exception type so callers can tell exactly
which precondition failed. All of them abort the operation before any event
is written, leaving the ballot unchanged.

Fun fact: The first recorded use of secret paper ballots was in South
Australia in 1856 - which is why they're still called "Australian ballots"!
"""


class BallotError(Exception):
    """Base exception for all ballot errors"""

    pass


class EventStoreError(BallotError):
    """Base class for event store errors"""

    pass


class StreamVersionConflict(EventStoreError):
    """
    Raised when stream version doesn't match expected (optimistic locking)

    Another writer appended to the ballot first - reload and retry.
    """

    def __init__(
        self, stream_id: str, expected_version: int, actual_version: int
    ) -> None:
        self.stream_id = stream_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Stream {stream_id} version mismatch: "
            f"expected {expected_version}, got {actual_version}"
        )


class InvariantViolation(BallotError):
    """
    Raised when a structural invariant of the ballot would be violated

    Examples: acyclic delegation forest, bounded delegate chains.
    """

    pass


# Lifecycle Errors


class BallotNotInitialized(BallotError):
    """Raised when a command targets a ballot that was never initialized"""

    def __init__(self) -> None:
        super().__init__("Ballot has not been initialized")


class BallotAlreadyInitialized(BallotError):
    """Raised when initialize is attempted a second time"""

    def __init__(self, chairperson: str) -> None:
        self.chairperson = chairperson
        super().__init__(f"Ballot already initialized by {chairperson}")


class ProposalNameTooLong(BallotError):
    """Raised when a proposal name does not fit the fixed-size identifier"""

    def __init__(self, name: str, size: int, max_size: int) -> None:
        self.name = name
        self.size = size
        self.max_size = max_size
        super().__init__(
            f"Proposal name {name!r} is {size} bytes, maximum is {max_size}"
        )


# Voting Rule Violations


class Unauthorized(BallotError):
    """Raised when a non-chairperson attempts a chairperson-only operation"""

    def __init__(self, actor_id: str | None, operation: str) -> None:
        self.actor_id = actor_id
        self.operation = operation
        super().__init__(f"Only the chairperson can {operation}; caller was {actor_id}")


class AlreadyVoted(BallotError):
    """Raised when an operation requires a voter who has not voted yet"""

    def __init__(self, voter_id: str) -> None:
        self.voter_id = voter_id
        super().__init__(f"Voter {voter_id} already voted")


class AlreadyHasRights(BallotError):
    """Raised when granting rights to an identity with nonzero weight"""

    def __init__(self, voter_id: str, weight: int) -> None:
        self.voter_id = voter_id
        self.weight = weight
        super().__init__(f"Voter {voter_id} already holds weight {weight}")


class NoRight(BallotError):
    """Raised when an identity with zero weight tries to vote"""

    def __init__(self, voter_id: str) -> None:
        self.voter_id = voter_id
        super().__init__(f"Voter {voter_id} has no right to vote")


class SelfDelegation(BallotError):
    """Raised when a voter names themselves as delegate"""

    def __init__(self, voter_id: str) -> None:
        self.voter_id = voter_id
        super().__init__(f"Voter {voter_id} cannot delegate to themselves")


class DelegationCycle(InvariantViolation):
    """Raised when following the delegate chain leads back to the caller"""

    def __init__(self, voter_id: str, target_id: str) -> None:
        self.voter_id = voter_id
        self.target_id = target_id
        super().__init__(
            f"Delegation from {voter_id} to {target_id} would create a cycle"
        )


class DelegationChainCorrupted(InvariantViolation):
    """Raised when a delegate chain is longer than the registry itself"""

    def __init__(self, start_id: str, max_hops: int) -> None:
        self.start_id = start_id
        self.max_hops = max_hops
        super().__init__(
            f"Delegate chain starting at {start_id} exceeded {max_hops} hops"
        )


class InvalidProposal(BallotError):
    """Raised when a vote names a proposal index outside the ledger"""

    def __init__(self, proposal_index: int, proposal_count: int) -> None:
        self.proposal_index = proposal_index
        self.proposal_count = proposal_count
        super().__init__(
            f"Proposal {proposal_index} does not exist "
            f"(ballot has {proposal_count} proposals)"
        )


class InvalidRequest(BallotError):
    """Raised when operation arguments are malformed, e.g. an empty identity"""

    def __init__(self, operation: str, problems: list[str]) -> None:
        self.operation = operation
        self.problems = problems
        super().__init__(f"Invalid {operation} request: {'; '.join(problems)}")


class BatchTooLarge(BallotError):
    """Raised when a batch grant exceeds the policy batch limit"""

    def __init__(self, size: int, max_size: int) -> None:
        self.size = size
        self.max_size = max_size
        super().__init__(f"Batch of {size} grants exceeds limit of {max_size}")
