"""
Voting Events - Facts recorded in the ballot ledger

Past-tense, immutable, and complete: each payload carries everything the
projections need, so replaying the log never re-runs the voting rules.
"""

from datetime import datetime

from pydantic import BaseModel


class BallotInitialized(BaseModel):
    """The proposal ledger was created and the chairperson recorded"""

    chairperson: str
    proposal_names: list[str]
    initialized_at: datetime


class VotingRightGranted(BaseModel):
    """
    An identity received weight 1 from the chairperson

    A batch grant records one of these per identity, all in one append.
    """

    voter_id: str
    weight: int
    granted_by: str
    granted_at: datetime


class VoteDelegated(BaseModel):
    """
    A voter handed their weight down the delegate chain

    delegate_id is the resolved end of the chain, not necessarily the
    requested target. When that delegate had already voted, the weight went
    straight to their proposal and credited_proposal names it.
    """

    voter_id: str
    target_id: str
    delegate_id: str
    weight: int
    hops: int
    credited_proposal: int | None
    delegated_at: datetime


class VoteCast(BaseModel):
    """A voter voted directly for a proposal"""

    voter_id: str
    proposal_index: int
    weight: int
    cast_at: datetime


# Event type mappings for handlers

VOTING_EVENT_TYPES = {
    "BallotInitialized": BallotInitialized,
    "VotingRightGranted": VotingRightGranted,
    "VoteDelegated": VoteDelegated,
    "VoteCast": VoteCast,
}
