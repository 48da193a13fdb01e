"""
Delegable Ballot - Weighted, delegable single-issue voting on an event log

A chairperson opens a ballot over a fixed list of proposals and grants voting
rights. Participants vote directly or delegate their weight down acyclic
delegate chains, and the tally reports every proposal tied for the lead.
Each operation is recorded atomically in an append-only SQLite ledger.

Fun fact: Delegable ("liquid") voting was sketched by Lewis Carroll in 1884,
in a pamphlet on parliamentary representation - well before smart contracts!
"""

from delegable_ballot.ballot import Ballot

__version__ = "0.1.0"
__all__ = ["Ballot", "__version__"]
