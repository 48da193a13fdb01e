"""
Delegable Ballot CLI

Command-line host for a ballot database. The caller identity of every
operation is passed explicitly with --as.

Usage:
    ballot init --as chair --proposal Park --proposal Library
    ballot grant --as chair alice bob
    ballot delegate --as alice bob
    ballot vote --as bob 1
    ballot winners
    ballot audit
"""

import json
import os
from pathlib import Path
from typing import Callable, NoReturn, Optional, TypeVar

import typer
from typing_extensions import Annotated

from delegable_ballot.ballot import Ballot
from delegable_ballot.kernel.errors import BallotError
from delegable_ballot.kernel.logging import (
    bind_correlation_id,
    configure_logging,
    is_production,
)
from delegable_ballot.kernel.metrics import record_ballot_state, render_metrics

configure_logging(
    json_output=is_production(),
    log_level=os.getenv("BALLOT_LOG_LEVEL", "WARNING"),
)

app = typer.Typer(
    name="ballot",
    help="Delegable Ballot - weighted, delegable single-issue voting",
    add_completion=False,
)


@app.callback()
def main() -> None:
    """Weighted, delegable single-issue voting"""
    bind_correlation_id()


DEFAULT_DB = Path(".ballot.db")

T = TypeVar("T")

DbOption = Annotated[
    Path,
    typer.Option("--db", envvar="BALLOT_DB", help="Database path"),
]
ActorOption = Annotated[
    str,
    typer.Option("--as", help="Caller identity"),
]


def get_ballot(db_path: Path) -> Ballot:
    """Open an existing ballot database"""
    if not db_path.exists():
        typer.echo(f"Error: Database not found: {db_path}", err=True)
        typer.echo(f"Run 'ballot init --db {db_path}' to initialize", err=True)
        raise typer.Exit(1)
    return Ballot(db_path)


def fail(error: BallotError) -> NoReturn:
    typer.echo(f"Error: {type(error).__name__}: {error}", err=True)
    raise typer.Exit(1)


def run_operation(operation: Callable[[], T]) -> T:
    """Run a ballot operation, turning rule violations into exit code 1"""
    try:
        return operation()
    except BallotError as e:
        fail(e)


def remove_database(db_path: Path) -> None:
    """Delete a database file together with its WAL side files"""
    for path in (db_path, Path(f"{db_path}-wal"), Path(f"{db_path}-shm")):
        path.unlink(missing_ok=True)


@app.command()
def init(
    actor: ActorOption,
    proposal: Annotated[
        Optional[list[str]],
        typer.Option("--proposal", "-p", help="Proposal name (repeat, in order)"),
    ] = None,
    db: DbOption = DEFAULT_DB,
) -> None:
    """Create a ballot database; the caller becomes chairperson"""
    if db.exists():
        typer.echo(f"Error: Database already exists: {db}", err=True)
        raise typer.Exit(1)

    ballot = Ballot(db)
    try:
        created = ballot.initialize(actor, proposal or [])
    except BallotError as e:
        # Nothing was recorded; leave no half-made database behind
        remove_database(db)
        fail(e)

    typer.echo(f"✓ Initialized ballot: {db}")
    typer.echo(f"  Chairperson: {actor}")
    for p in created:
        typer.echo(f"  [{p.index}] {p.name}")


@app.command()
def grant(
    voters: Annotated[list[str], typer.Argument(help="Identities to receive voting rights")],
    actor: ActorOption,
    db: DbOption = DEFAULT_DB,
) -> None:
    """Grant voting rights (several identities form one all-or-nothing batch)"""
    ballot = get_ballot(db)

    if len(voters) == 1:
        granted = [run_operation(lambda: ballot.grant_right(actor, voters[0]))]
    else:
        granted = run_operation(lambda: ballot.grant_right_batch(actor, voters))

    for voter in granted:
        typer.echo(f"✓ Granted voting right: {voter.voter_id} (weight {voter.weight})")


@app.command()
def delegate(
    to: Annotated[str, typer.Argument(help="Identity to delegate to")],
    actor: ActorOption,
    db: DbOption = DEFAULT_DB,
) -> None:
    """Delegate the caller's vote weight"""
    ballot = get_ballot(db)
    voter = run_operation(lambda: ballot.delegate(actor, to))

    typer.echo(f"✓ Delegated: {voter.voter_id} -> {voter.delegate}")


@app.command()
def vote(
    proposal_index: Annotated[int, typer.Argument(help="Proposal index")],
    actor: ActorOption,
    db: DbOption = DEFAULT_DB,
) -> None:
    """Vote directly for a proposal"""
    ballot = get_ballot(db)
    voter = run_operation(lambda: ballot.vote(actor, proposal_index))

    typer.echo(f"✓ Voted: {voter.voter_id} -> [{voter.vote}] with weight {voter.weight}")


@app.command()
def winners(db: DbOption = DEFAULT_DB) -> None:
    """Show every proposal tied for the most votes"""
    ballot = get_ballot(db)
    ledger = ballot.proposals()
    winning = ballot.winning_proposals()

    if not winning:
        typer.echo("No proposals")
        return

    typer.echo(f"Winners ({len(winning)}):")
    for index in winning:
        p = ledger[index]
        typer.echo(f"  [{p.index}] {p.name}: {p.vote_count} votes")


@app.command()
def proposals(db: DbOption = DEFAULT_DB) -> None:
    """List proposals with their vote counts"""
    ballot = get_ballot(db)
    ledger = ballot.proposals()

    if not ledger:
        typer.echo("No proposals")
        return

    typer.echo(f"Proposals ({len(ledger)}):")
    for p in ledger:
        typer.echo(f"  [{p.index}] {p.name}: {p.vote_count} votes")


@app.command()
def voter(
    voter_id: Annotated[str, typer.Argument(help="Identity to look up")],
    db: DbOption = DEFAULT_DB,
) -> None:
    """Show one voter record"""
    ballot = get_ballot(db)
    typer.echo(json.dumps(ballot.get_voter(voter_id).model_dump(), indent=2))


@app.command()
def audit(db: DbOption = DEFAULT_DB) -> None:
    """Check that every granted unit of weight is accounted for"""
    ballot = get_ballot(db)
    report = ballot.audit()

    typer.echo(f"Granted: {report.total_granted}")
    typer.echo(f"Tallied: {report.total_tallied}")
    typer.echo(f"Pending: {report.total_pending}")
    typer.echo(f"Voters: {report.voters_voted}/{report.voters_registered} voted")
    if report.conserved:
        typer.echo("✓ Weight conserved")
    else:
        typer.echo("✗ Weight NOT conserved", err=True)
        raise typer.Exit(2)


@app.command()
def history(db: DbOption = DEFAULT_DB) -> None:
    """Print the ballot event log"""
    ballot = get_ballot(db)
    for event in ballot.history():
        typer.echo(
            f"{event.version:>4} {event.event_type:<20} "
            f"{event.actor_id or '-':<12} {json.dumps(event.payload)}"
        )


@app.command()
def metrics(db: DbOption = DEFAULT_DB) -> None:
    """
    Print Prometheus metrics for the ballot

    Gauges describe the replayed ballot. Counters and histograms only cover
    this process, so they read near zero here; they are meant for hosts that
    keep a Ballot open.
    """
    ballot = get_ballot(db)
    report = ballot.audit()
    record_ballot_state(
        granted=report.total_granted,
        tallied=report.total_tallied,
        pending=report.total_pending,
        registered=report.voters_registered,
        voted=report.voters_voted,
        vote_counts=[p.vote_count for p in ballot.proposals()],
    )
    typer.echo(render_metrics().decode("utf-8"), nl=False)


if __name__ == "__main__":
    app()
