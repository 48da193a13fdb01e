"""
Voting Commands - Intentions to change the ballot

The caller identity is not part of the command; it travels in the command
envelope's actor_id, supplied by the host.
"""

from typing import Annotated

from pydantic import BaseModel, Field

# Every identity named in a command is a non-empty string
VoterId = Annotated[str, Field(min_length=1)]


class InitializeBallot(BaseModel):
    """
    Create the proposal ledger; the caller becomes the chairperson

    Proposal names are kept in input order; the list may be empty.
    """

    proposal_names: list[str] = Field(default_factory=list)


class GrantRight(BaseModel):
    """Give one identity the right to vote (chairperson only)"""

    voter_id: VoterId


class GrantRightBatch(BaseModel):
    """
    Give several identities the right to vote in one all-or-nothing step

    A single ineligible entry rejects the whole batch.
    """

    voter_ids: list[VoterId] = Field(default_factory=list)


class Delegate(BaseModel):
    """Hand the caller's weight to another participant"""

    to_voter: VoterId


class CastVote(BaseModel):
    """Vote directly for a proposal by its ledger index"""

    proposal_index: int

