"""
Prometheus metrics collection for the delegable ballot.

Provides observability into command processing, the event log, and the flow
of vote weight through delegations and tallies.
"""

from collections.abc import Sequence

from prometheus_client import REGISTRY, Counter, Gauge, Histogram, generate_latest

# ============================================================================
# Event Store Metrics
# ============================================================================

events_appended_total = Counter(
    "ballot_events_appended_total",
    "Total number of events appended to the event store",
    ["event_type"],
)

stream_version_conflicts_total = Counter(
    "ballot_stream_version_conflicts_total",
    "Total number of optimistic locking version conflicts",
)

# ============================================================================
# Command Processing Metrics
# ============================================================================

command_duration_seconds = Histogram(
    "ballot_command_duration_seconds",
    "Duration of command processing in seconds",
    ["command_type"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
)

commands_processed_total = Counter(
    "ballot_commands_processed_total",
    "Total number of commands processed",
    ["command_type", "status"],  # status: success, rejected, failure
)

commands_rejected_total = Counter(
    "ballot_commands_rejected_total",
    "Commands rejected by a voting rule, by error kind",
    ["error_kind"],
)

# ============================================================================
# Voting Metrics
# ============================================================================

vote_weight_tallied_total = Counter(
    "ballot_vote_weight_tallied_total",
    "Total vote weight credited to proposals",
    ["source"],  # source: direct, delegation
)

delegation_chain_hops = Histogram(
    "ballot_delegation_chain_hops",
    "Number of delegate hops followed when resolving a delegation",
    buckets=(0, 1, 2, 3, 5, 8, 13, 21, 50),
)

# ============================================================================
# Ballot State Gauges
# ============================================================================

ballot_weight = Gauge(
    "ballot_weight",
    "Vote weight by where it currently sits",
    ["state"],  # state: granted, tallied, pending
)

ballot_voters = Gauge(
    "ballot_voters",
    "Voter records by status",
    ["status"],  # status: registered, voted
)

proposal_votes = Gauge(
    "ballot_proposal_votes",
    "Accumulated vote count per proposal",
    ["proposal_index"],
)


def record_ballot_state(
    *,
    granted: int,
    tallied: int,
    pending: int,
    registered: int,
    voted: int,
    vote_counts: Sequence[int],
) -> None:
    """Set the ballot gauges from a replayed ballot"""
    ballot_weight.labels(state="granted").set(granted)
    ballot_weight.labels(state="tallied").set(tallied)
    ballot_weight.labels(state="pending").set(pending)
    ballot_voters.labels(status="registered").set(registered)
    ballot_voters.labels(status="voted").set(voted)
    for index, count in enumerate(vote_counts):
        proposal_votes.labels(proposal_index=str(index)).set(count)


def render_metrics() -> bytes:
    """Render all registered metrics in Prometheus text exposition format."""
    return generate_latest(REGISTRY)
