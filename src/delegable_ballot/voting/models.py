"""
Voting Domain Models - Proposals, voter records and audit figures

Read-side models returned by the Ballot façade. The projections keep plain
dicts internally; these models are the typed view handed to callers.
"""

from typing import Any

from pydantic import BaseModel, Field

# Every identity has this record until its first write
DEFAULT_VOTER: dict[str, Any] = {
    "weight": 0,
    "voted": False,
    "delegate": None,
    "vote": None,
}


class Proposal(BaseModel):
    """
    One entry of the proposal ledger

    Attributes:
        index: Permanent position in the ledger (the proposal's identifier)
        name: Opaque identifier, never interpreted by the ballot
        vote_count: Accumulated weight, only ever increases
    """

    index: int = Field(ge=0)
    name: str
    vote_count: int = Field(default=0, ge=0)

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "examples": [{"index": 0, "name": "Build the bridge", "vote_count": 3}]
        },
    }


class Voter(BaseModel):
    """
    Voting-rights record of one participant

    Attributes:
        voter_id: Participant identity
        weight: Voting power; 0 means no right to vote
        voted: True once the participant voted directly or delegated
        delegate: Final delegate the weight was handed to (delegation only)
        vote: Proposal index voted for (direct vote only)
    """

    voter_id: str
    weight: int = Field(default=0, ge=0)
    voted: bool = False
    delegate: str | None = None
    vote: int | None = None

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "examples": [
                {
                    "voter_id": "bob",
                    "weight": 1,
                    "voted": True,
                    "delegate": "carol",
                    "vote": None,
                }
            ]
        },
    }

    @property
    def has_right(self) -> bool:
        return self.weight > 0

    @classmethod
    def from_record(cls, voter_id: str, record: dict[str, Any]) -> "Voter":
        return cls(
            voter_id=voter_id,
            weight=record["weight"],
            voted=record["voted"],
            delegate=record["delegate"],
            vote=record["vote"],
        )


class BallotAudit(BaseModel):
    """
    Weight conservation figures

    Every unit of weight the chairperson ever granted sits in exactly one
    place: credited to a proposal, or held by a participant who hasn't voted.
    """

    total_granted: int
    total_tallied: int
    total_pending: int
    voters_registered: int
    voters_voted: int

    @property
    def conserved(self) -> bool:
        return self.total_granted == self.total_tallied + self.total_pending
