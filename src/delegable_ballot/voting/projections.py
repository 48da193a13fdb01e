"""
Voting Projections - Ballot state folded from the event log

The voter registry and the proposal ledger are rebuilt from events on every
start, so they are disposable: the log is the ballot.
"""

from typing import Any

from delegable_ballot.kernel.messages import Event
from delegable_ballot.voting.models import DEFAULT_VOTER


class VoterRegistry:
    """
    Projection: voting-rights record per identity, plus the chairperson

    Identities without a record implicitly hold DEFAULT_VOTER. Records are
    materialized on first write and never pruned.
    """

    def __init__(self) -> None:
        self.chairperson: str | None = None
        self.voters: dict[str, dict[str, Any]] = {}
        self.total_granted = 0
        self.version = 0

    def apply_event(self, event: Event) -> None:
        """Apply an event to update projection state"""
        if event.event_type == "BallotInitialized":
            chairperson = event.payload["chairperson"]
            self.chairperson = chairperson
            self._materialize(chairperson)["weight"] = 1
            self.total_granted += 1

        elif event.event_type == "VotingRightGranted":
            record = self._materialize(event.payload["voter_id"])
            record["weight"] = event.payload["weight"]
            self.total_granted += event.payload["weight"]

        elif event.event_type == "VoteDelegated":
            record = self._materialize(event.payload["voter_id"])
            record["voted"] = True
            record["delegate"] = event.payload["delegate_id"]
            if event.payload["credited_proposal"] is None:
                self._materialize(event.payload["delegate_id"])["weight"] += (
                    event.payload["weight"]
                )

        elif event.event_type == "VoteCast":
            record = self._materialize(event.payload["voter_id"])
            record["voted"] = True
            record["vote"] = event.payload["proposal_index"]

        self.version = event.version

    def _materialize(self, voter_id: str) -> dict[str, Any]:
        if voter_id not in self.voters:
            self.voters[voter_id] = dict(DEFAULT_VOTER)
        return self.voters[voter_id]

    def get(self, voter_id: str) -> dict[str, Any]:
        """Record for voter_id (the shared default if never written - do not mutate)"""
        return self.voters.get(voter_id, DEFAULT_VOTER)

    def pending_weight(self) -> int:
        """Weight held by participants who haven't voted yet"""
        return sum(r["weight"] for r in self.voters.values() if not r["voted"])

    def voted_count(self) -> int:
        return sum(1 for r in self.voters.values() if r["voted"])


class ProposalLedger:
    """
    Projection: ordered proposals with accumulated vote counts

    The list is fixed by BallotInitialized; afterwards only vote counts move.
    """

    def __init__(self) -> None:
        self.proposals: list[dict[str, Any]] = []

    def apply_event(self, event: Event) -> None:
        """Apply an event to update projection state"""
        if event.event_type == "BallotInitialized":
            self.proposals = [
                {"index": index, "name": name, "vote_count": 0}
                for index, name in enumerate(event.payload["proposal_names"])
            ]

        elif event.event_type == "VoteDelegated":
            credited = event.payload["credited_proposal"]
            if credited is not None:
                self.proposals[credited]["vote_count"] += event.payload["weight"]

        elif event.event_type == "VoteCast":
            index = event.payload["proposal_index"]
            self.proposals[index]["vote_count"] += event.payload["weight"]

    def __len__(self) -> int:
        return len(self.proposals)

    def vote_counts(self) -> list[int]:
        return [p["vote_count"] for p in self.proposals]

    def names(self) -> list[str]:
        return [p["name"] for p in self.proposals]

    def total_tallied(self) -> int:
        return sum(self.vote_counts())
