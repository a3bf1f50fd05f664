"""Data models for theatre seating."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple
import math

from .exceptions import InvalidGroupError, InvalidTableError


def parse_pipe_list(value: object) -> List[str]:
    """Split a pipe separated string into a list.

    Empty values such as ``""`` or ``None`` return an empty list.
    ``pandas`` often provides ``float('nan')`` for missing values which is
    also treated as empty.
    """
    if value is None:
        return []
    if isinstance(value, float) and math.isnan(value):
        return []
    text = str(value).strip()
    if not text or text.lower() == "nan":
        return []
    return [part.strip() for part in text.split("|") if part.strip()]


def parse_bool(value: object, default: bool = False) -> bool:
    """Parse common truthy strings into bool.

    Missing values (``None`` or NaN) fall back to ``default``.
    """
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return default
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if not text:
        return default
    return text in ("true", "yes", "y", "1")


def parse_optional_str(value: object) -> Optional[str]:
    """Return ``None`` for empty or NaN cells, the stripped text otherwise."""
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return None
    text = str(value).strip()
    return text or None


def round_half_up(value: float) -> int:
    """Round to the nearest int with halves going up (62.5 -> 63)."""
    return int(math.floor(value + 0.5))


# ----------------------------- enums -----------------------------
class GroupCategory(Enum):
    """Fixed size classification of a guest group."""

    COUPLE = "couple"
    LARGE_GROUP = "large_group"
    INDIVIDUAL = "individual"


class Rating(Enum):
    """Qualitative efficiency grade shared by arrangements and strategies."""

    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"

    @property
    def rank(self) -> int:
        return _RATING_RANK[self]

    @classmethod
    def from_efficiency(cls, percent: float) -> "Rating":
        if percent >= 85:
            return cls.EXCELLENT
        if percent >= 70:
            return cls.GOOD
        if percent >= 50:
            return cls.FAIR
        return cls.POOR


_RATING_RANK = {
    Rating.EXCELLENT: 4,
    Rating.GOOD: 3,
    Rating.FAIR: 2,
    Rating.POOR: 1,
}


# ----------------------------- inputs -----------------------------
@dataclass(frozen=True)
class Table:
    """Physical table in the venue."""

    id: int
    capacity: int
    section: str = ""
    is_occupied: bool = False
    show_time: Optional[str] = None

    def validate(self) -> None:
        if self.capacity < 1:
            raise InvalidTableError(f"Table {self.id} has capacity {self.capacity}; at least 1 required")

    def serves(self, show_time: str) -> bool:
        """True when the table is not reserved for a different show."""
        return self.show_time is None or not show_time or self.show_time == show_time


@dataclass
class CheckInRecord:
    """One booking as supplied by the check-in desk."""

    index: int
    name: str
    count: int = 1
    show_time: str = ""
    checked_in: bool = True
    seated: bool = False
    allocated: bool = False

    @property
    def waiting(self) -> bool:
        """Checked in but neither seated nor given a table yet."""
        return self.checked_in and not self.seated and not self.allocated


@dataclass
class PartyLink:
    """Bookings that belong to one party and must sit together."""

    party_id: str
    member_indices: List[int]
    guest_names: List[str] = field(default_factory=list)


@dataclass
class GuestGroup:
    """A unit of guests that must be seated together."""

    guest_index: int
    name: str
    count: int
    show_time: str = ""
    is_party: bool = False
    party_members: List[int] = field(default_factory=list)
    party_size: Optional[int] = None

    @property
    def size(self) -> int:
        if self.is_party and self.party_size is not None:
            return self.party_size
        return self.count

    @property
    def member_indices(self) -> List[int]:
        if self.is_party:
            return list(self.party_members)
        return [self.guest_index]

    def validate(self) -> None:
        if self.size < 1:
            raise InvalidGroupError(f"Group {self.name!r} has size {self.size}; at least 1 required")
        if self.is_party and len(self.party_members) < 2:
            raise InvalidGroupError(
                f"Party {self.name!r} has {len(self.party_members)} member(s); at least 2 required"
            )


# ----------------------------- outputs -----------------------------
@dataclass
class Arrangement:
    """One guest group mapped to one to three tables."""

    guest_group: GuestGroup
    table_ids: Tuple[int, ...]
    base_capacity: int
    extra_chairs: int
    efficiency: int
    reason: str
    waste_score: int = 0
    rating: Rating = Rating.POOR
    priority: str = "low"


@dataclass
class SeatingStrategy:
    """A complete alternative plan produced under one prioritisation policy."""

    name: str
    arrangements: List[Arrangement]
    overall_efficiency: Rating
    description: str
    unplaced: List[GuestGroup] = field(default_factory=list)
    mean_efficiency: float = 0.0

    @property
    def is_complete(self) -> bool:
        return not self.unplaced

    @property
    def used_tables(self) -> List[int]:
        return [tid for a in self.arrangements for tid in a.table_ids]


@dataclass
class AllocationStats:
    """Venue wide seat usage summary."""

    total_capacity: int
    occupied_seats: int
    utilisation: int
    tips: List[str] = field(default_factory=list)


@dataclass
class AllocationUpdate:
    """State changes a caller persists after choosing an arrangement."""

    guest_tables: Dict[int, Tuple[int, ...]]
    occupied_tables: Tuple[int, ...]
