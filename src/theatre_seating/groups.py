"""Build seating groups from check-in records and party links."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Set
import logging

from .exceptions import InvalidGroupError
from .models import CheckInRecord, GroupCategory, GuestGroup, PartyLink

logger = logging.getLogger(__name__)

COUPLE_SIZE = 2
LARGE_GROUP_MIN = 5


@dataclass
class GuestComposition:
    """Groups split by category, each bucket in input order."""

    couples: List[GuestGroup] = field(default_factory=list)
    large_groups: List[GuestGroup] = field(default_factory=list)
    individuals: List[GuestGroup] = field(default_factory=list)
    total_guests: int = 0


def classify_group(group: GuestGroup) -> GroupCategory:
    """Couple for exactly two guests, large group from five, individual otherwise."""
    size = group.size
    if size == COUPLE_SIZE:
        return GroupCategory.COUPLE
    if size >= LARGE_GROUP_MIN:
        return GroupCategory.LARGE_GROUP
    return GroupCategory.INDIVIDUAL


def analyze_composition(groups: Iterable[GuestGroup]) -> GuestComposition:
    comp = GuestComposition()
    buckets = {
        GroupCategory.COUPLE: comp.couples,
        GroupCategory.LARGE_GROUP: comp.large_groups,
        GroupCategory.INDIVIDUAL: comp.individuals,
    }
    for g in groups:
        buckets[classify_group(g)].append(g)
        comp.total_guests += g.size
    return comp


def _party_name(members: List[CheckInRecord], link: PartyLink) -> str:
    names = link.guest_names or [m.name for m in members]
    return f"{' & '.join(names)} (Party)"


def build_guest_groups(
    records: Iterable[CheckInRecord],
    party_links: Iterable[PartyLink] | Dict[str, PartyLink] = (),
) -> List[GuestGroup]:
    """Merge parties and return one group per waiting booking.

    Only records that are checked in, unseated and unallocated take part. A
    party becomes one group when all of its members are waiting; otherwise
    its members are seated as individual bookings. Each waiting index ends up
    in exactly one group.
    """
    records = list(records)
    if isinstance(party_links, dict):
        party_links = list(party_links.values())
    else:
        party_links = list(party_links)

    by_index: Dict[int, CheckInRecord] = {}
    for r in records:
        if r.count < 1:
            raise InvalidGroupError(f"Booking {r.index} ({r.name!r}) has count {r.count}; at least 1 required")
        if r.index in by_index:
            raise InvalidGroupError(f"Duplicate booking index {r.index}")
        by_index[r.index] = r

    for link in party_links:
        if len(set(link.member_indices)) < 2:
            raise InvalidGroupError(f"Party {link.party_id!r} needs at least 2 distinct members")

    waiting = {idx for idx, r in by_index.items() if r.waiting}
    consumed: Set[int] = set()
    groups: List[GuestGroup] = []

    # Parties first
    for link in party_links:
        members = list(dict.fromkeys(link.member_indices))
        if not all(idx in waiting and idx not in consumed for idx in members):
            logger.debug("Party %s not fully waiting; members seated individually", link.party_id)
            continue
        member_records = [by_index[idx] for idx in members]
        lead = member_records[0]
        groups.append(
            GuestGroup(
                guest_index=lead.index,
                name=_party_name(member_records, link),
                count=lead.count,
                show_time=lead.show_time,
                is_party=True,
                party_members=members,
                party_size=sum(m.count for m in member_records),
            )
        )
        consumed.update(members)

    # Then everyone else
    for r in records:
        if r.index in waiting and r.index not in consumed:
            groups.append(
                GuestGroup(
                    guest_index=r.index,
                    name=r.name,
                    count=r.count,
                    show_time=r.show_time,
                )
            )
            consumed.add(r.index)

    logger.debug("Built %d group(s) from %d waiting booking(s)", len(groups), len(waiting))
    return groups
