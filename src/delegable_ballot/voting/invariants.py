"""
Voting Invariants - The rules every ballot command must satisfy

Pure functions over the current projection state. They raise on the first
violated rule and never mutate anything, so a rejected command leaves the
ballot exactly as it was.
"""

from typing import Any, Mapping

from delegable_ballot.kernel.errors import (
    AlreadyHasRights,
    AlreadyVoted,
    BallotAlreadyInitialized,
    BallotNotInitialized,
    BatchTooLarge,
    DelegationChainCorrupted,
    DelegationCycle,
    InvalidProposal,
    NoRight,
    ProposalNameTooLong,
    SelfDelegation,
    Unauthorized,
)
from delegable_ballot.kernel.policy import BallotPolicy
from delegable_ballot.voting.models import DEFAULT_VOTER

VoterRecords = Mapping[str, dict[str, Any]]


# Lifecycle Invariants


def validate_initialized(chairperson: str | None) -> str:
    """Return the chairperson, or raise if the ballot was never initialized"""
    if chairperson is None:
        raise BallotNotInitialized()
    return chairperson


def validate_not_initialized(chairperson: str | None) -> None:
    if chairperson is not None:
        raise BallotAlreadyInitialized(chairperson)


def validate_proposal_names(names: list[str], policy: BallotPolicy) -> None:
    """
    Every name must fit the fixed-size identifier

    Raises:
        ProposalNameTooLong: On the first oversized name
    """
    for name in names:
        size = policy.name_size(name)
        if size > policy.proposal_name_max_bytes:
            raise ProposalNameTooLong(name, size, policy.proposal_name_max_bytes)


# Rights Invariants


def validate_chairperson(actor_id: str | None, chairperson: str, operation: str) -> None:
    if actor_id != chairperson:
        raise Unauthorized(actor_id, operation)


def validate_grantable(voter_id: str, record: Mapping[str, Any]) -> None:
    """
    An identity can receive rights only if it hasn't voted and holds no weight

    Weight that arrived through delegation before an explicit grant counts
    as holding weight, and is never overwritten.
    """
    if record["voted"]:
        raise AlreadyVoted(voter_id)
    if record["weight"] != 0:
        raise AlreadyHasRights(voter_id, record["weight"])


def validate_batch_grant(
    voter_ids: list[str], voters: VoterRecords, policy: BallotPolicy
) -> None:
    """
    Check a batch grant as if its entries were applied one after another

    An identity appearing twice is rejected on its second occurrence, exactly
    as a sequential application would reject it.

    Raises:
        BatchTooLarge: If the batch exceeds the policy limit
        AlreadyVoted / AlreadyHasRights: On the first ineligible entry
    """
    if policy.max_batch_size is not None and len(voter_ids) > policy.max_batch_size:
        raise BatchTooLarge(len(voter_ids), policy.max_batch_size)

    granted: set[str] = set()
    for voter_id in voter_ids:
        if voter_id in granted:
            raise AlreadyHasRights(voter_id, 1)
        validate_grantable(voter_id, voters.get(voter_id, DEFAULT_VOTER))
        granted.add(voter_id)


# Voting Invariants


def validate_can_vote(
    voter_id: str,
    record: Mapping[str, Any],
    proposal_index: int,
    proposal_count: int,
) -> None:
    """
    Direct vote preconditions, checked in order

    Raises:
        NoRight: Voter holds no weight
        AlreadyVoted: Voter already voted or delegated
        InvalidProposal: Index outside [0, proposal_count)
    """
    if record["weight"] == 0:
        raise NoRight(voter_id)
    if record["voted"]:
        raise AlreadyVoted(voter_id)
    if not 0 <= proposal_index < proposal_count:
        raise InvalidProposal(proposal_index, proposal_count)


# Delegation Invariants


def validate_can_delegate(voter_id: str, record: Mapping[str, Any], target_id: str) -> None:
    if record["voted"]:
        raise AlreadyVoted(voter_id)
    if target_id == voter_id:
        raise SelfDelegation(voter_id)


def resolve_delegate(
    voters: VoterRecords,
    voter_id: str,
    target_id: str,
) -> tuple[str, int]:
    """
    Follow the delegate chain from target_id to its end

    The chain is a sequence of registry lookups. Because the delegation
    relation is kept acyclic, the walk ends at the first identity with no
    delegate; it only has to make sure the new edge doesn't lead back to
    voter_id. The walk is capped at one more hop than there are registered
    records, which no acyclic chain can reach.

    Args:
        voters: Current voter records
        voter_id: Who is delegating
        target_id: Requested delegate

    Returns:
        (final delegate identity, number of hops followed)

    Raises:
        DelegationCycle: If the chain returns to voter_id
        DelegationChainCorrupted: If the walk exceeds the cap
    """
    max_hops = len(voters) + 1
    current = target_id
    hops = 0

    while True:
        next_id = voters.get(current, DEFAULT_VOTER)["delegate"]
        if next_id is None:
            return current, hops

        hops += 1
        if hops > max_hops:
            raise DelegationChainCorrupted(target_id, max_hops)

        current = next_id
        if current == voter_id:
            raise DelegationCycle(voter_id, target_id)
