"""
Tests for Voting Handlers - Command→Event Transformation

These tests verify that commands are validated and converted to events,
and that a rejected command produces no events at all.
"""

import pytest

from delegable_ballot.kernel.errors import (
    AlreadyHasRights,
    BallotAlreadyInitialized,
    BallotNotInitialized,
    DelegationCycle,
    Unauthorized,
)
from delegable_ballot.kernel.messages import Event
from delegable_ballot.kernel.ids import generate_id
from delegable_ballot.kernel.clock import FixedClock
from delegable_ballot.voting.commands import (
    CastVote,
    Delegate,
    GrantRight,
    GrantRightBatch,
    InitializeBallot,
)
from delegable_ballot.voting.handlers import VotingCommandHandlers
from delegable_ballot.voting.projections import ProposalLedger, VoterRegistry


def apply(events: list[Event], registry: VoterRegistry, ledger: ProposalLedger) -> None:
    for event in events:
        registry.apply_event(event)
        ledger.apply_event(event)


@pytest.fixture
def started(
    handlers: VotingCommandHandlers,
    voter_registry: VoterRegistry,
    proposal_ledger: ProposalLedger,
) -> tuple[VoterRegistry, ProposalLedger]:
    """Registry and ledger after 'chair' initialized proposals A, B, C"""
    events = handlers.handle_initialize(
        InitializeBallot(proposal_names=["A", "B", "C"]),
        command_id=generate_id(),
        actor_id="chair",
        registry=voter_registry,
    )
    apply(events, voter_registry, proposal_ledger)
    return voter_registry, proposal_ledger


def test_initialize_emits_ballot_initialized(
    handlers: VotingCommandHandlers, voter_registry: VoterRegistry
) -> None:
    events = handlers.handle_initialize(
        InitializeBallot(proposal_names=["A", "B"]),
        command_id=generate_id(),
        actor_id="chair",
        registry=voter_registry,
    )

    assert len(events) == 1
    event = events[0]
    assert event.event_type == "BallotInitialized"
    assert event.stream_id == "ballot"
    assert event.version == 1
    assert event.actor_id == "chair"
    assert event.payload["chairperson"] == "chair"
    assert event.payload["proposal_names"] == ["A", "B"]


def test_initialize_twice_rejected(
    handlers: VotingCommandHandlers, started: tuple[VoterRegistry, ProposalLedger]
) -> None:
    registry, _ = started
    with pytest.raises(BallotAlreadyInitialized):
        handlers.handle_initialize(
            InitializeBallot(proposal_names=["Z"]),
            command_id=generate_id(),
            actor_id="someone",
            registry=registry,
        )


def test_grant_before_initialize_rejected(
    handlers: VotingCommandHandlers, voter_registry: VoterRegistry
) -> None:
    with pytest.raises(BallotNotInitialized):
        handlers.handle_grant_right(
            GrantRight(voter_id="x"),
            command_id=generate_id(),
            actor_id="chair",
            registry=voter_registry,
        )


def test_grant_right_event(
    handlers: VotingCommandHandlers, started: tuple[VoterRegistry, ProposalLedger]
) -> None:
    registry, _ = started
    events = handlers.handle_grant_right(
        GrantRight(voter_id="x"),
        command_id=generate_id(),
        actor_id="chair",
        registry=registry,
    )

    assert [e.event_type for e in events] == ["VotingRightGranted"]
    assert events[0].version == 2
    assert events[0].payload["voter_id"] == "x"
    assert events[0].payload["weight"] == 1
    assert events[0].payload["granted_by"] == "chair"


def test_grant_right_by_non_chair_rejected(
    handlers: VotingCommandHandlers, started: tuple[VoterRegistry, ProposalLedger]
) -> None:
    registry, _ = started
    with pytest.raises(Unauthorized):
        handlers.handle_grant_right(
            GrantRight(voter_id="x"),
            command_id=generate_id(),
            actor_id="x",
            registry=registry,
        )


def test_grant_right_to_chair_rejected(
    handlers: VotingCommandHandlers, started: tuple[VoterRegistry, ProposalLedger]
) -> None:
    """The chairperson already holds weight 1 from initialization"""
    registry, _ = started
    with pytest.raises(AlreadyHasRights):
        handlers.handle_grant_right(
            GrantRight(voter_id="chair"),
            command_id=generate_id(),
            actor_id="chair",
            registry=registry,
        )


def test_batch_grant_events_share_command_and_are_sequential(
    handlers: VotingCommandHandlers, started: tuple[VoterRegistry, ProposalLedger]
) -> None:
    registry, _ = started
    command_id = generate_id()
    events = handlers.handle_grant_right_batch(
        GrantRightBatch(voter_ids=["x", "y", "z"]),
        command_id=command_id,
        actor_id="chair",
        registry=registry,
    )

    assert [e.payload["voter_id"] for e in events] == ["x", "y", "z"]
    assert [e.version for e in events] == [2, 3, 4]
    assert {e.command_id for e in events} == {command_id}


def test_empty_batch_emits_nothing(
    handlers: VotingCommandHandlers, started: tuple[VoterRegistry, ProposalLedger]
) -> None:
    registry, _ = started
    events = handlers.handle_grant_right_batch(
        GrantRightBatch(voter_ids=[]),
        command_id=generate_id(),
        actor_id="chair",
        registry=registry,
    )
    assert events == []


def test_delegate_to_undecided_moves_weight(
    handlers: VotingCommandHandlers, started: tuple[VoterRegistry, ProposalLedger]
) -> None:
    registry, ledger = started
    apply(
        handlers.handle_grant_right_batch(
            GrantRightBatch(voter_ids=["x", "y"]), generate_id(), "chair", registry
        ),
        registry,
        ledger,
    )

    events = handlers.handle_delegate(Delegate(to_voter="y"), generate_id(), "x", registry)

    payload = events[0].payload
    assert events[0].event_type == "VoteDelegated"
    assert payload["delegate_id"] == "y"
    assert payload["weight"] == 1
    assert payload["hops"] == 0
    assert payload["credited_proposal"] is None


def test_delegate_to_voter_who_voted_credits_proposal(
    handlers: VotingCommandHandlers, started: tuple[VoterRegistry, ProposalLedger]
) -> None:
    registry, ledger = started
    apply(
        handlers.handle_grant_right_batch(
            GrantRightBatch(voter_ids=["x", "y"]), generate_id(), "chair", registry
        ),
        registry,
        ledger,
    )
    apply(
        handlers.handle_cast_vote(CastVote(proposal_index=2), generate_id(), "y", registry, ledger),
        registry,
        ledger,
    )

    events = handlers.handle_delegate(Delegate(to_voter="y"), generate_id(), "x", registry)

    assert events[0].payload["credited_proposal"] == 2


def test_delegate_resolves_through_chain(
    handlers: VotingCommandHandlers, started: tuple[VoterRegistry, ProposalLedger]
) -> None:
    registry, ledger = started
    apply(
        handlers.handle_grant_right_batch(
            GrantRightBatch(voter_ids=["x", "y", "z"]), generate_id(), "chair", registry
        ),
        registry,
        ledger,
    )
    apply(handlers.handle_delegate(Delegate(to_voter="z"), generate_id(), "y", registry), registry, ledger)

    events = handlers.handle_delegate(Delegate(to_voter="y"), generate_id(), "x", registry)

    assert events[0].payload["target_id"] == "y"
    assert events[0].payload["delegate_id"] == "z"
    assert events[0].payload["hops"] == 1


def test_delegate_cycle_rejected(
    handlers: VotingCommandHandlers, started: tuple[VoterRegistry, ProposalLedger]
) -> None:
    registry, ledger = started
    apply(handlers.handle_delegate(Delegate(to_voter="y"), generate_id(), "x", registry), registry, ledger)

    with pytest.raises(DelegationCycle):
        handlers.handle_delegate(Delegate(to_voter="x"), generate_id(), "y", registry)


def test_cast_vote_carries_full_weight(
    handlers: VotingCommandHandlers, started: tuple[VoterRegistry, ProposalLedger]
) -> None:
    registry, ledger = started
    apply(handlers.handle_delegate(Delegate(to_voter="chair"), generate_id(), "nobody", registry), registry, ledger)
    apply(
        handlers.handle_grant_right(GrantRight(voter_id="x"), generate_id(), "chair", registry),
        registry,
        ledger,
    )
    apply(handlers.handle_delegate(Delegate(to_voter="chair"), generate_id(), "x", registry), registry, ledger)

    events = handlers.handle_cast_vote(CastVote(proposal_index=0), generate_id(), "chair", registry, ledger)

    assert events[0].event_type == "VoteCast"
    assert events[0].payload["weight"] == 2


def test_events_stamped_by_clock(
    handlers: VotingCommandHandlers,
    clock: FixedClock,
    started: tuple[VoterRegistry, ProposalLedger],
) -> None:
    registry, _ = started
    clock.advance(seconds=90)

    events = handlers.handle_grant_right(GrantRight(voter_id="x"), generate_id(), "chair", registry)

    assert events[0].occurred_at == clock.now()
