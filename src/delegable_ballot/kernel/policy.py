"""
Ballot Policy - Configurable parameters of a ballot

The policy fixes the limits the ballot enforces at its edges. It is passed to
the command handlers explicitly, never read from globals.
"""

from pydantic import BaseModel, Field


class BallotPolicy(BaseModel):
    """
    Ballot configuration parameters

    The defaults reproduce a classic fixed-size ballot: proposal names are
    opaque 32-byte identifiers and batch grants are unbounded.
    """

    proposal_name_max_bytes: int = Field(
        default=32,
        ge=1,
        description="Maximum size of a proposal name, in UTF-8 encoded bytes",
    )

    max_batch_size: int | None = Field(
        default=None,
        ge=1,
        description="Maximum identities per batch grant (None = unbounded)",
    )

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "description": "Limits enforced by the ballot command handlers"
        },
    }

    def name_size(self, name: str) -> int:
        """Size of a proposal name as stored (UTF-8 bytes)"""
        return len(name.encode("utf-8"))

