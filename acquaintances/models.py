"""
Pydantic models used as value objects across the verification store.

- `PartyRef` is the composite (id, type) reference to a party owned by the host
  application. It is frozen and hashable, so it can be used in sets and as a key.
- `Page` / `CursorPage` are the paginated result shapes returned when a
  non-zero page size is requested.
"""

from typing import Any, List, Optional, Protocol, Union, runtime_checkable
from pydantic import BaseModel, ConfigDict, Field


class PartyRef(BaseModel):
    """
    Reference to a party (user, organisation, ...) that can send or receive verifications.
    """

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    id: str = Field(..., description="Stable identifier of the party in the host application.", examples=["42"])
    type: str = Field(..., description="Type discriminator (e.g. 'user', 'organisation').", examples=["user"])

    def __str__(self) -> str:
        return f"{self.type}:{self.id}"


@runtime_checkable
class Party(Protocol):
    """
    Capability contract for host objects passed directly to the store.
    """
    party_id: Any
    """Stable identifier of the party."""
    party_type: str
    """Type discriminator shared by all parties of the same kind."""


PartyLike = Union[PartyRef, Party]


def as_party_ref(party: PartyLike) -> PartyRef:
    """Normalise a `PartyRef` or a host object exposing `party_id`/`party_type`."""
    if isinstance(party, PartyRef):
        return party
    if isinstance(party, Party):
        return PartyRef(id=party.party_id, type=party.party_type)
    raise TypeError(f"{party!r} is not a party: expected PartyRef or an object with party_id/party_type")


class Page(BaseModel):
    """
    Offset-based page of results.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    items: List[Any] = Field(..., description="Items on this page.")
    total: int = Field(..., description="Total number of items across all pages.")
    per_page: int = Field(..., description="Requested page size.")
    current_page: int = Field(..., description="1-based page number.")
    last_page: int = Field(..., description="Number of the last page (at least 1).")


class CursorPage(BaseModel):
    """
    Cursor-based page of results.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    items: List[Any]
    """Items on this page."""
    per_page: int
    """Requested page size."""
    next_cursor: Optional[str] = None
    """Opaque token for the next page, None when this is the last page."""
