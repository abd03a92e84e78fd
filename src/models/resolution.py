"""Resolution result types returned by the entity resolver."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from src.models.contact import Contact
from src.models.property import Property


class EntityKind(str, Enum):
    """Entity kinds the resolver can look up."""
    CONTACT = "contact"
    PROPERTY = "property"

    @property
    def table(self) -> str:
        return "contacts" if self is EntityKind.CONTACT else "properties"


class ResolutionTier(str, Enum):
    """Which strategy produced a match."""
    ID_LOOKUP = "id_lookup"
    EXACT_FIELD = "exact_field"
    EXACT_REFERENCE = "exact_reference"
    FUZZY_RANK = "fuzzy_rank"


Record = Union[Contact, Property]


@dataclass
class Resolved:
    """Exactly one record matched."""

    record: Record
    tier: ResolutionTier
    score: Optional[float] = None


@dataclass
class Ambiguous:
    """Plausible candidates exist but none is a confident winner."""

    query: str
    suggestions: list[str]


@dataclass
class NotFound:
    """No candidate matched."""

    query: str
    suggestions: list[str] = field(default_factory=list)


ResolutionResult = Union[Resolved, Ambiguous, NotFound]
