"""
Pytest configuration and shared fixtures

Every test gets its own temporary SQLite file and a frozen clock, so ballots
replay to identical state and no test sees another test's events.
"""

import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

import pytest

from delegable_ballot.ballot import Ballot
from delegable_ballot.kernel.event_store import SQLiteEventStore
from delegable_ballot.kernel.policy import BallotPolicy
from delegable_ballot.kernel.clock import FixedClock
from delegable_ballot.voting.handlers import VotingCommandHandlers
from delegable_ballot.voting.projections import ProposalLedger, VoterRegistry


@pytest.fixture
def temp_db() -> Iterator[Path]:
    """Provide a temporary database file that's cleaned up after test"""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    yield db_path

    for path in (db_path, Path(f"{db_path}-wal"), Path(f"{db_path}-shm")):
        if path.exists():
            path.unlink()


@pytest.fixture
def event_store(temp_db: Path) -> SQLiteEventStore:
    """Provide a fresh event store for each test"""
    return SQLiteEventStore(temp_db)


@pytest.fixture
def clock() -> FixedClock:
    """Provide a controllable time provider for deterministic tests"""
    return FixedClock(datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def policy() -> BallotPolicy:
    return BallotPolicy()


@pytest.fixture
def handlers(clock: FixedClock, policy: BallotPolicy) -> VotingCommandHandlers:
    return VotingCommandHandlers(clock, policy)


@pytest.fixture
def voter_registry() -> VoterRegistry:
    return VoterRegistry()


@pytest.fixture
def proposal_ledger() -> ProposalLedger:
    return ProposalLedger()


@pytest.fixture
def ballot(temp_db: Path, clock: FixedClock) -> Ballot:
    """
    Provide an initialized ballot

    Chairperson "chair" over proposals A, B, C - the canonical three-way race.
    """
    ballot = Ballot(temp_db, clock=clock)
    ballot.initialize("chair", ["A", "B", "C"])
    return ballot
