"""
Voting Handlers - Command→Event transformation

Handlers are the decision-making layer. They:
1. Read current state (from projections)
2. Validate the voting rules (invariants)
3. Generate events if valid
4. Return events for a single atomic append

A handler never mutates a projection; state changes only when the events it
returns are appended and published.
"""

from datetime import datetime

from delegable_ballot.kernel.clock import Clock
from delegable_ballot.kernel.ids import generate_id
from delegable_ballot.kernel.logging import get_logger
from delegable_ballot.kernel.messages import Event
from delegable_ballot.kernel.metrics import delegation_chain_hops
from delegable_ballot.kernel.policy import BallotPolicy
from delegable_ballot.voting.commands import (
    CastVote,
    Delegate,
    GrantRight,
    GrantRightBatch,
    InitializeBallot,
)
from delegable_ballot.voting.events import (
    BallotInitialized,
    VoteCast,
    VoteDelegated,
    VotingRightGranted,
)
from delegable_ballot.voting.invariants import (
    resolve_delegate,
    validate_batch_grant,
    validate_can_delegate,
    validate_can_vote,
    validate_chairperson,
    validate_grantable,
    validate_initialized,
    validate_not_initialized,
    validate_proposal_names,
)
from delegable_ballot.voting.projections import ProposalLedger, VoterRegistry

logger = get_logger(__name__)

BALLOT_STREAM_ID = "ballot"


class VotingCommandHandlers:
    """
    Command handlers for the voting module

    Every handler takes the projections it reads as parameters and emits
    events numbered after the registry's current stream version.
    """

    def __init__(
        self,
        clock: Clock,
        policy: BallotPolicy,
    ) -> None:
        """
        Args:
            clock: Source of event timestamps
            policy: Ballot limits
        """
        self.clock = clock
        self.policy = policy

    def _events(
        self,
        event_type: str,
        payloads: list[dict],
        command_id: str,
        actor_id: str,
        registry: VoterRegistry,
        now: datetime,
    ) -> list[Event]:
        return [
            Event(
                event_id=generate_id(),
                stream_id=BALLOT_STREAM_ID,
                version=registry.version + offset,
                event_type=event_type,
                command_id=command_id,
                actor_id=actor_id,
                occurred_at=now,
                payload=payload,
            )
            for offset, payload in enumerate(payloads, start=1)
        ]

    def handle_initialize(
        self,
        command: InitializeBallot,
        command_id: str,
        actor_id: str,
        registry: VoterRegistry,
    ) -> list[Event]:
        """
        Handle InitializeBallot command

        Raises:
            BallotAlreadyInitialized: If the ballot already has a chairperson
            ProposalNameTooLong: If any name exceeds the policy size
        """
        validate_not_initialized(registry.chairperson)
        validate_proposal_names(command.proposal_names, self.policy)

        now = self.clock.now()
        payload = BallotInitialized(
            chairperson=actor_id,
            proposal_names=command.proposal_names,
            initialized_at=now,
        ).model_dump(mode="json")

        return self._events(
            "BallotInitialized", [payload], command_id, actor_id, registry, now
        )

    def handle_grant_right(
        self,
        command: GrantRight,
        command_id: str,
        actor_id: str,
        registry: VoterRegistry,
    ) -> list[Event]:
        """
        Handle GrantRight command

        Raises:
            BallotNotInitialized, Unauthorized, AlreadyVoted, AlreadyHasRights
        """
        chairperson = validate_initialized(registry.chairperson)
        validate_chairperson(actor_id, chairperson, "grant voting rights")
        validate_grantable(command.voter_id, registry.get(command.voter_id))

        now = self.clock.now()
        payload = VotingRightGranted(
            voter_id=command.voter_id,
            weight=1,
            granted_by=actor_id,
            granted_at=now,
        ).model_dump(mode="json")

        return self._events(
            "VotingRightGranted", [payload], command_id, actor_id, registry, now
        )

    def handle_grant_right_batch(
        self,
        command: GrantRightBatch,
        command_id: str,
        actor_id: str,
        registry: VoterRegistry,
    ) -> list[Event]:
        """
        Handle GrantRightBatch command

        The whole batch is validated before any event exists, so one
        ineligible identity rejects every grant in it.

        Raises:
            BallotNotInitialized, Unauthorized, BatchTooLarge,
            AlreadyVoted, AlreadyHasRights
        """
        chairperson = validate_initialized(registry.chairperson)
        validate_chairperson(actor_id, chairperson, "grant voting rights")
        validate_batch_grant(command.voter_ids, registry.voters, self.policy)

        now = self.clock.now()
        payloads = [
            VotingRightGranted(
                voter_id=voter_id,
                weight=1,
                granted_by=actor_id,
                granted_at=now,
            ).model_dump(mode="json")
            for voter_id in command.voter_ids
        ]

        return self._events(
            "VotingRightGranted", payloads, command_id, actor_id, registry, now
        )

    def handle_delegate(
        self,
        command: Delegate,
        command_id: str,
        actor_id: str,
        registry: VoterRegistry,
    ) -> list[Event]:
        """
        Handle Delegate command

        Resolves the delegate chain starting at the requested target. If the
        chain ends at someone who already voted, the caller's weight is
        credited to that voter's proposal right away; otherwise it moves to
        the end of the chain.

        Raises:
            BallotNotInitialized, AlreadyVoted, SelfDelegation,
            DelegationCycle, DelegationChainCorrupted
        """
        validate_initialized(registry.chairperson)
        record = registry.get(actor_id)
        validate_can_delegate(actor_id, record, command.to_voter)

        delegate_id, hops = resolve_delegate(registry.voters, actor_id, command.to_voter)
        delegation_chain_hops.observe(hops)

        delegate_record = registry.get(delegate_id)
        credited = delegate_record["vote"] if delegate_record["voted"] else None

        logger.debug(
            "Delegate chain resolved",
            hops=hops,
            credited_directly=credited is not None,
        )

        now = self.clock.now()
        payload = VoteDelegated(
            voter_id=actor_id,
            target_id=command.to_voter,
            delegate_id=delegate_id,
            weight=record["weight"],
            hops=hops,
            credited_proposal=credited,
            delegated_at=now,
        ).model_dump(mode="json")

        return self._events(
            "VoteDelegated", [payload], command_id, actor_id, registry, now
        )

    def handle_cast_vote(
        self,
        command: CastVote,
        command_id: str,
        actor_id: str,
        registry: VoterRegistry,
        ledger: ProposalLedger,
    ) -> list[Event]:
        """
        Handle CastVote command

        Raises:
            BallotNotInitialized, NoRight, AlreadyVoted, InvalidProposal
        """
        validate_initialized(registry.chairperson)
        record = registry.get(actor_id)
        validate_can_vote(actor_id, record, command.proposal_index, len(ledger))

        now = self.clock.now()
        payload = VoteCast(
            voter_id=actor_id,
            proposal_index=command.proposal_index,
            weight=record["weight"],
            cast_at=now,
        ).model_dump(mode="json")

        return self._events("VoteCast", [payload], command_id, actor_id, registry, now)
