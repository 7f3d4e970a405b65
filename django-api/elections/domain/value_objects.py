"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from enum import Enum
from typing import Self
from uuid import UUID


@dataclass(frozen=True)
class EventId:
    """Unique identifier for an Event."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class OptionId:
    """Identifier for an Option, unique within its Event."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class VoteId:
    """Unique identifier for a Vote."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


class Role(Enum):
    """Closed set of caller roles asserted by the identity provider."""

    PARTICIPANT = "participant"
    ORGANIZER = "organizer"


class ElectionStatus(Enum):
    """Status derived from the voting window. Never persisted."""

    UPCOMING = "upcoming"
    ACTIVE = "active"
    COMPLETED = "completed"


@dataclass(frozen=True)
class Caller:
    """Authenticated identity as asserted by the identity provider."""

    id: str
    role: Role = Role.PARTICIPANT

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Caller id cannot be empty")

    @property
    def is_organizer(self) -> bool:
        return self.role is Role.ORGANIZER
