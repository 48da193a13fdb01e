"""
Ballot messages: commands in, events out

A Command is one validated request from a caller. Its body is the typed
request model (GrantRight, CastVote, ...) and the bus routes on the body's
type. An Event is an immutable entry of the ballot log; the voter registry
and the proposal ledger are folds over the events of one stream.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class Command(BaseModel):
    """A caller's request as dispatched through the bus"""

    command_id: str
    actor_id: str = Field(min_length=1)
    issued_at: datetime
    body: BaseModel

    model_config = {"frozen": True}

    @property
    def command_type(self) -> str:
        return type(self.body).__name__


class Event(BaseModel):
    """
    One entry of the ballot log

    (stream_id, version) is unique, so each stream version can be claimed
    exactly once. All events produced by one command share its command_id.
    """

    event_id: str
    stream_id: str
    version: int = Field(ge=1)
    event_type: str
    command_id: str
    actor_id: str | None = None
    occurred_at: datetime
    payload: dict[str, Any] = Field(default_factory=dict)

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "examples": [
                {
                    "event_id": "01908e9a-3b87-7000-8000-123456789abc",
                    "stream_id": "ballot",
                    "version": 4,
                    "event_type": "VoteCast",
                    "command_id": "01908e9a-3b86-7000-8000-0000000000aa",
                    "actor_id": "alice",
                    "occurred_at": "2025-01-15T10:30:00Z",
                    "payload": {"voter_id": "alice", "proposal_index": 1, "weight": 2},
                }
            ]
        },
    }
