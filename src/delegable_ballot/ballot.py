"""
Ballot - Main façade class

This is the primary interface for running a delegable ballot. It hides the
event log, the bus and the projections behind one method per operation.

Example:
    >>> from delegable_ballot import Ballot
    >>> ballot = Ballot("ballot.db")
    >>> ballot.initialize("chair", ["Park", "Library", "Pool"])
    >>> ballot.grant_right_batch("chair", ["alice", "bob"])
    >>> ballot.delegate("alice", "bob")
    >>> ballot.vote("bob", 1)
    >>> ballot.winner_names()
    ['Library']
"""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError

from delegable_ballot.kernel.bus import InProcessBus
from delegable_ballot.kernel.clock import Clock, SystemClock
from delegable_ballot.kernel.errors import InvalidRequest
from delegable_ballot.kernel.event_store import SQLiteEventStore
from delegable_ballot.kernel.ids import generate_id
from delegable_ballot.kernel.logging import get_logger
from delegable_ballot.kernel.messages import Command, Event
from delegable_ballot.kernel.metrics import vote_weight_tallied_total
from delegable_ballot.kernel.policy import BallotPolicy
from delegable_ballot.voting.commands import (
    CastVote,
    Delegate,
    GrantRight,
    GrantRightBatch,
    InitializeBallot,
)
from delegable_ballot.voting.events import VOTING_EVENT_TYPES
from delegable_ballot.voting.handlers import BALLOT_STREAM_ID, VotingCommandHandlers
from delegable_ballot.voting.models import BallotAudit, Proposal, Voter
from delegable_ballot.voting.projections import ProposalLedger, VoterRegistry
from delegable_ballot.voting.tally import compute_winning_proposals, map_winner_names

logger = get_logger(__name__)


class Ballot:
    """
    Delegable ballot façade

    Provides a unified API for:
    - Initializing the proposal ledger (the caller becomes chairperson)
    - Granting voting rights, singly or in an all-or-nothing batch
    - Delegating vote weight and casting votes
    - Tallying winners, with ties preserved

    Every mutating method takes the caller identity first and either records
    all of its events or raises and records nothing.
    """

    def __init__(
        self,
        sqlite_path: str | Path,
        policy: BallotPolicy | None = None,
        clock: Clock | None = None,
    ) -> None:
        """
        Open (or create) a ballot database and replay its event log

        Args:
            sqlite_path: Path to SQLite database
            policy: Ballot limits (uses defaults if None)
            clock: Source of event timestamps (system clock if None)
        """
        self.sqlite_path = Path(sqlite_path)
        self.policy = policy or BallotPolicy()
        self.clock = clock or SystemClock()

        self.event_store = SQLiteEventStore(self.sqlite_path)
        self.handlers = VotingCommandHandlers(self.clock, self.policy)

        self.voter_registry = VoterRegistry()
        self.proposal_ledger = ProposalLedger()

        self.bus = InProcessBus()
        self._register_handlers()

        self._catch_up()

    def _register_handlers(self) -> None:
        """Wire command handlers and projection subscriptions into the bus"""
        handlers, registry = self.handlers, self.voter_registry
        self.bus.register_command_handler(
            InitializeBallot,
            lambda c: handlers.handle_initialize(c.body, c.command_id, c.actor_id, registry),
        )
        self.bus.register_command_handler(
            GrantRight,
            lambda c: handlers.handle_grant_right(c.body, c.command_id, c.actor_id, registry),
        )
        self.bus.register_command_handler(
            GrantRightBatch,
            lambda c: handlers.handle_grant_right_batch(
                c.body, c.command_id, c.actor_id, registry
            ),
        )
        self.bus.register_command_handler(
            Delegate,
            lambda c: handlers.handle_delegate(c.body, c.command_id, c.actor_id, registry),
        )
        self.bus.register_command_handler(
            CastVote,
            lambda c: handlers.handle_cast_vote(
                c.body, c.command_id, c.actor_id, registry, self.proposal_ledger
            ),
        )

        for event_type in VOTING_EVENT_TYPES:
            self.bus.subscribe(event_type, self.voter_registry.apply_event)
            self.bus.subscribe(event_type, self.proposal_ledger.apply_event)

    def _catch_up(self) -> None:
        """Apply events appended since our last known version (by any writer)"""
        events = self.event_store.load_stream(
            BALLOT_STREAM_ID, after_version=self.voter_registry.version
        )
        if events:
            logger.debug("Replaying ballot events", event_count=len(events))
        self.bus.publish(events)

    def _command(
        self, actor_id: str, body_type: type[BaseModel], **fields: Any
    ) -> Command:
        """Build a command, reporting malformed arguments as InvalidRequest"""
        try:
            return Command(
                command_id=generate_id(),
                actor_id=actor_id,
                issued_at=self.clock.now(),
                body=body_type(**fields),
            )
        except ValidationError as e:
            problems = [
                f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
                for error in e.errors()
            ]
            raise InvalidRequest(body_type.__name__, problems) from e

    def _execute(self, command: Command) -> list[Event]:
        """
        Run one command atomically

        Validation happens against the caught-up projections; the resulting
        events are appended in one transaction and only then applied. A rule
        violation or a version conflict leaves both the log and the
        projections untouched.
        """
        self._catch_up()

        events = self.bus.dispatch(command)
        if not events:
            return []

        self.event_store.append(BALLOT_STREAM_ID, self.voter_registry.version, events)
        self.bus.publish(events)

        for event in events:
            if event.event_type == "VoteCast":
                vote_weight_tallied_total.labels(source="direct").inc(
                    event.payload["weight"]
                )
            elif (
                event.event_type == "VoteDelegated"
                and event.payload["credited_proposal"] is not None
            ):
                vote_weight_tallied_total.labels(source="delegation").inc(
                    event.payload["weight"]
                )

        return events

    # Ballot lifecycle

    def initialize(self, chairperson: str, proposal_names: list[str]) -> list[Proposal]:
        """
        Create the proposal ledger; chairperson receives weight 1

        Args:
            chairperson: Caller identity, recorded as the ballot authority
            proposal_names: Ordered proposal names (may be empty)

        Returns:
            The proposals, all with zero votes
        """
        self._execute(
            self._command(chairperson, InitializeBallot, proposal_names=proposal_names)
        )
        return self.proposals()

    # Rights

    def grant_right(self, actor_id: str, voter_id: str) -> Voter:
        """
        Give voter_id the right to vote (weight 1)

        Args:
            actor_id: Caller identity (must be the chairperson)
            voter_id: Identity receiving the right
        """
        self._execute(self._command(actor_id, GrantRight, voter_id=voter_id))
        return self.get_voter(voter_id)

    def grant_right_batch(self, actor_id: str, voter_ids: list[str]) -> list[Voter]:
        """
        Give every identity in voter_ids the right to vote, or none of them

        Args:
            actor_id: Caller identity (must be the chairperson)
            voter_ids: Identities receiving the right, in order
        """
        self._execute(self._command(actor_id, GrantRightBatch, voter_ids=voter_ids))
        return [self.get_voter(voter_id) for voter_id in voter_ids]

    # Voting

    def delegate(self, actor_id: str, to_voter: str) -> Voter:
        """
        Hand the caller's weight to to_voter (or whoever they delegated to)

        Returns:
            The caller's record, with delegate set to the end of the chain
        """
        self._execute(self._command(actor_id, Delegate, to_voter=to_voter))
        return self.get_voter(actor_id)

    def vote(self, actor_id: str, proposal_index: int) -> Voter:
        """
        Vote for a proposal with the caller's full weight

        Returns:
            The caller's record after voting
        """
        self._execute(self._command(actor_id, CastVote, proposal_index=proposal_index))
        return self.get_voter(actor_id)

    # Tally

    def winning_proposals(self) -> list[int]:
        """Indices of every proposal holding the maximum vote count, ascending"""
        self._catch_up()
        return compute_winning_proposals(self.proposal_ledger.vote_counts())

    def winner_names(self) -> list[str]:
        """Names of the winning proposals, in the same order"""
        winners = self.winning_proposals()
        return map_winner_names(winners, self.proposal_ledger.names())

    # Queries

    @property
    def chairperson(self) -> str | None:
        self._catch_up()
        return self.voter_registry.chairperson

    @property
    def is_initialized(self) -> bool:
        return self.chairperson is not None

    def proposals(self) -> list[Proposal]:
        """All proposals in ledger order"""
        self._catch_up()
        return [Proposal(**p) for p in self.proposal_ledger.proposals]

    def get_voter(self, voter_id: str) -> Voter:
        """Record for voter_id; untouched identities read as the default record"""
        self._catch_up()
        return Voter.from_record(voter_id, self.voter_registry.get(voter_id))

    def audit(self) -> BallotAudit:
        """Weight conservation figures for the whole ballot"""
        self._catch_up()
        return BallotAudit(
            total_granted=self.voter_registry.total_granted,
            total_tallied=self.proposal_ledger.total_tallied(),
            total_pending=self.voter_registry.pending_weight(),
            voters_registered=len(self.voter_registry.voters),
            voters_voted=self.voter_registry.voted_count(),
        )

    def history(self) -> list[Event]:
        """The full ballot event log, in order"""
        return self.event_store.load_stream(BALLOT_STREAM_ID)
