"""
Tests for Voting Projections

Projections are pure folds over events: feeding the same events always
yields the same registry and ledger.
"""

from datetime import datetime, timezone

from delegable_ballot.kernel.messages import Event
from delegable_ballot.kernel.ids import generate_id
from delegable_ballot.voting.models import DEFAULT_VOTER
from delegable_ballot.voting.projections import ProposalLedger, VoterRegistry

NOW = datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


def make_event(version: int, event_type: str, actor_id: str, payload: dict) -> Event:
    return Event(
        event_id=generate_id(),
        stream_id="ballot",
        event_type=event_type,
        occurred_at=NOW,
        command_id=generate_id(),
        actor_id=actor_id,
        payload=payload,
        version=version,
    )


def ballot_events() -> list[Event]:
    at = NOW.isoformat()
    return [
        make_event(1, "BallotInitialized", "chair", {"chairperson": "chair", "proposal_names": ["A", "B"], "initialized_at": at}),
        make_event(2, "VotingRightGranted", "chair", {"voter_id": "x", "weight": 1, "granted_by": "chair", "granted_at": at}),
        make_event(3, "VoteDelegated", "x", {
            "voter_id": "x", "target_id": "chair", "delegate_id": "chair", "weight": 1,
            "hops": 0, "credited_proposal": None, "delegated_at": at,
        }),
        make_event(4, "VoteCast", "chair", {"voter_id": "chair", "proposal_index": 1, "weight": 2, "cast_at": at}),
        make_event(5, "VoteDelegated", "nobody", {
            "voter_id": "nobody", "target_id": "x", "delegate_id": "chair", "weight": 0,
            "hops": 1, "credited_proposal": 1, "delegated_at": at,
        }),
    ]


def test_registry_folds_events() -> None:
    registry = VoterRegistry()
    for event in ballot_events():
        registry.apply_event(event)

    assert registry.chairperson == "chair"
    assert registry.version == 5
    assert registry.total_granted == 2
    assert registry.get("chair") == {"weight": 2, "voted": True, "delegate": None, "vote": 1}
    assert registry.get("x") == {"weight": 1, "voted": True, "delegate": "chair", "vote": None}
    assert registry.get("nobody")["delegate"] == "chair"
    assert registry.pending_weight() == 0
    assert registry.voted_count() == 3


def test_ledger_folds_events() -> None:
    ledger = ProposalLedger()
    for event in ballot_events():
        ledger.apply_event(event)

    assert len(ledger) == 2
    assert ledger.names() == ["A", "B"]
    assert ledger.vote_counts() == [0, 2]
    assert ledger.total_tallied() == 2


def test_untouched_identity_reads_default_without_materializing() -> None:
    registry = VoterRegistry()
    assert registry.get("ghost") == DEFAULT_VOTER
    assert "ghost" not in registry.voters


def test_replay_is_deterministic() -> None:
    events = ballot_events()
    first, second = VoterRegistry(), VoterRegistry()
    for event in events:
        first.apply_event(event)
    for event in events:
        second.apply_event(event)

    assert first.voters == second.voters
