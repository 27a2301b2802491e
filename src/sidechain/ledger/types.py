"""sidechain.ledger.types

Typed views of the records the ledger engine hands to the store.

The store itself treats members as opaque and persists whatever JSON it is
given. These models exist for producers that want to build records with
type checking, and for readers (API, CLI) that want attribute access.
Field names match the on-disk JSON exactly; unknown keys are kept.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

Json = Dict[str, Any]

EventType = Literal["Join", "Part"]


class MemberEntry(BaseModel):
    address: str = Field(..., description="Member address (0x-prefixed hex)")
    earnings: Optional[str | int] = Field(default=None, description="Cumulative earnings, usually a decimal string")

    model_config = {"extra": "allow"}


class Block(BaseModel):
    """Side-chain balance snapshot as of a root-chain block number."""

    blockNumber: int = Field(..., gt=0, description="Root-chain block number")
    members: List[MemberEntry] = Field(default_factory=list)
    timestamp: int = Field(default=0, description="Seconds since epoch")
    totalEarnings: str | int | float = Field(default=0, description="Sum of members' earnings")

    model_config = {"extra": "allow"}


class Event(BaseModel):
    """Join/part record replayed after the given root-chain block."""

    blockNumber: int
    transactionIndex: int = Field(default=0, description="Index within block; large for join/part")
    event: EventType
    addressList: List[str] = Field(default_factory=list)

    model_config = {"extra": "allow"}


def to_json(record: Any) -> Any:
    """Plain JSON value for a model, or the record unchanged.

    Explicit None values (including extra keys) are kept as null.
    """
    if isinstance(record, BaseModel):
        return record.model_dump(mode="json")
    return record
