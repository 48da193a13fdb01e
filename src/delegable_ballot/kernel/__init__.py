"""
Kernel - Event log infrastructure for the ballot

The append-only ledger, the command and event messages, the bus, and the
ambient concerns (logging, metrics, retries, policy) the voting module
builds upon.

Fun fact: Event sourcing was inspired by accountants - they never erase ledger
entries, they add correcting entries. A ballot box works the same way.
"""

from delegable_ballot.kernel.clock import Clock, FixedClock, SystemClock
from delegable_ballot.kernel.errors import (
    BallotError,
    EventStoreError,
    InvalidRequest,
    InvariantViolation,
    StreamVersionConflict,
)
from delegable_ballot.kernel.ids import generate_id
from delegable_ballot.kernel.messages import Command, Event
from delegable_ballot.kernel.policy import BallotPolicy

__all__ = [
    "generate_id",
    "Clock",
    "SystemClock",
    "FixedClock",
    "Command",
    "Event",
    "BallotPolicy",
    "BallotError",
    "EventStoreError",
    "StreamVersionConflict",
    "InvariantViolation",
    "InvalidRequest",
]
