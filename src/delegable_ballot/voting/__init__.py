"""
Voting Module - Rights, delegation, votes and the tally

This module implements the ballot's state machine:
- Voting rights granted by the chairperson (singly or in atomic batches)
- Weight delegation along acyclic delegate chains
- Direct votes against the fixed proposal ledger
- Tie-preserving winner computation
"""

from delegable_ballot.voting.models import BallotAudit, Proposal, Voter

__all__ = [
    "Proposal",
    "Voter",
    "BallotAudit",
]
