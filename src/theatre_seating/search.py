"""
Best-fit table search for a single guest group.

Candidates are single tables, pairs, and configured strategic triples.
Each carries a waste score:

    waste = empty seats + 2 * extra chairs - adjacency bonus

Adjacency bonus:
    vertical pair:                     3 (+2 more from 7 guests)
    any other adjacent pair:           1
    strategic three-table block:       2

Ranking is strict: fewest extra chairs, then lowest waste, then highest
efficiency. Remaining ties keep enumeration order (singles, pairs, triples;
tables in the order supplied).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from itertools import combinations
from typing import List, Optional, Sequence, Tuple
import logging

from .exceptions import InvalidGroupError
from .models import GuestGroup, Table, round_half_up
from .topology import VenueLayout

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchPolicy:
    """Tunable thresholds and weights for the best-fit search.

    The defaults are the venue's long-standing behaviour; they are empirical
    and carry no meaning beyond that.
    """

    max_extra_single: int = 2
    max_extra_pair: int = 3
    max_extra_triple: int = 4
    pair_min_guests: int = 5
    triple_min_guests: int = 10
    pair_capacity_slack: int = 1
    triple_capacity_slack: int = 2
    extra_chair_weight: int = 2
    vertical_pair_bonus: int = 3
    adjacent_pair_bonus: int = 1
    large_vertical_bonus: int = 2
    large_vertical_min_guests: int = 7
    strategic_triple_bonus: int = 2


DEFAULT_POLICY = SearchPolicy()


@dataclass(frozen=True)
class Candidate:
    """One admissible table choice for a guest count."""

    table_ids: Tuple[int, ...]
    guest_count: int
    base_capacity: int
    extra_chairs: int
    efficiency: int
    waste_score: int
    adjacency: str = ""  # "vertical", "adjacent", "strategic" or ""

    @property
    def empty_seats(self) -> int:
        return max(0, self.base_capacity - self.guest_count)

    @property
    def rank_key(self) -> Tuple[int, int, int]:
        return (self.extra_chairs, self.waste_score, -self.efficiency)


@dataclass
class Suggestion:
    """Best candidate for a group plus non-overlapping alternatives."""

    guest_group: GuestGroup
    best: Optional[Candidate]
    reason: str
    alternatives: List[Candidate] = field(default_factory=list)


# ----------------------------- scoring helpers -----------------------------
def efficiency_percent(guest_count: int, base_capacity: int) -> int:
    """Seat utilisation capped at 100 even when chairs are added."""
    if base_capacity <= 0:
        return 0
    return round_half_up(min(guest_count, base_capacity) / base_capacity * 100)


def _build_candidate(
    tables: Sequence[Table],
    guest_count: int,
    bonus: int,
    adjacency: str,
    policy: SearchPolicy,
) -> Candidate:
    base = sum(t.capacity for t in tables)
    extra = max(0, guest_count - base)
    waste = max(0, base - guest_count) + policy.extra_chair_weight * extra - bonus
    return Candidate(
        table_ids=tuple(t.id for t in tables),
        guest_count=guest_count,
        base_capacity=base,
        extra_chairs=extra,
        efficiency=efficiency_percent(guest_count, base),
        waste_score=waste,
        adjacency=adjacency,
    )


def _pair_bonus(a: Table, b: Table, guest_count: int, layout: Optional[VenueLayout], policy: SearchPolicy) -> Tuple[int, str]:
    if layout is None:
        return 0, ""
    if layout.is_vertical_pair(a.id, b.id):
        bonus = policy.vertical_pair_bonus
        if guest_count >= policy.large_vertical_min_guests:
            bonus += policy.large_vertical_bonus
        return bonus, "vertical"
    if layout.is_adjacent((a.id, b.id)):
        return policy.adjacent_pair_bonus, "adjacent"
    return 0, ""


# ----------------------------- candidate generation -----------------------------
def _single_candidates(free: Sequence[Table], n: int, policy: SearchPolicy) -> List[Candidate]:
    out = []
    for t in free:
        if max(0, n - t.capacity) <= policy.max_extra_single:
            out.append(_build_candidate([t], n, 0, "", policy))
    return out


def _pair_candidates(
    free: Sequence[Table], n: int, layout: Optional[VenueLayout], policy: SearchPolicy
) -> List[Candidate]:
    if n < policy.pair_min_guests:
        return []
    # with adjacency configured, ungrouped tables are only offered on their own
    grouped = layout.grouped_table_ids() if layout is not None and layout.adjacency_groups else None
    out = []
    for a, b in combinations(free, 2):
        if grouped is not None and not (a.id in grouped and b.id in grouped):
            continue
        base = a.capacity + b.capacity
        if max(0, n - base) > policy.max_extra_pair or base < n - policy.pair_capacity_slack:
            continue
        bonus, adjacency = _pair_bonus(a, b, n, layout, policy)
        out.append(_build_candidate([a, b], n, bonus, adjacency, policy))
    return out


def _triple_candidates(
    free: Sequence[Table], n: int, layout: Optional[VenueLayout], policy: SearchPolicy
) -> List[Candidate]:
    if n < policy.triple_min_guests or layout is None:
        return []
    by_id = {t.id: t for t in free}
    order = {t.id: i for i, t in enumerate(free)}
    out = []
    for triple in layout.strategic_triples():
        if not all(tid in by_id for tid in triple):
            continue
        members = sorted((by_id[tid] for tid in triple), key=lambda t: order[t.id])
        base = sum(t.capacity for t in members)
        if max(0, n - base) > policy.max_extra_triple or base < n - policy.triple_capacity_slack:
            continue
        out.append(_build_candidate(members, n, policy.strategic_triple_bonus, "strategic", policy))
    return out


def enumerate_candidates(
    guest_count: int,
    tables: Sequence[Table],
    layout: Optional[VenueLayout] = None,
    policy: SearchPolicy = DEFAULT_POLICY,
) -> List[Candidate]:
    """All admissible candidates, best first.

    Occupied tables are skipped. ``layout`` supplies adjacency; without it
    pairs score no bonus and no triples are generated. When the layout has
    adjacency groups, tables outside every group are never paired.
    """
    if guest_count < 1:
        raise InvalidGroupError(f"Guest count must be at least 1, got {guest_count}")
    free = [t for t in tables if not t.is_occupied]
    candidates = (
        _single_candidates(free, guest_count, policy)
        + _pair_candidates(free, guest_count, layout, policy)
        + _triple_candidates(free, guest_count, layout, policy)
    )
    # sorted() is stable, so equal keys keep enumeration order
    return sorted(candidates, key=lambda c: c.rank_key)


def find_best_fit(
    guest_count: int,
    tables: Sequence[Table],
    layout: Optional[VenueLayout] = None,
    policy: SearchPolicy = DEFAULT_POLICY,
) -> Optional[Candidate]:
    """Least wasteful candidate, or ``None`` when nothing is within tolerance."""
    ranked = enumerate_candidates(guest_count, tables, layout, policy)
    if not ranked:
        logger.debug("No fit for %d guest(s) among %d table(s)", guest_count, len(tables))
        return None
    best = ranked[0]
    logger.debug(
        "Best fit for %d guest(s): tables %s (extra=%d waste=%d eff=%d%%) from %d candidate(s)",
        guest_count, list(best.table_ids), best.extra_chairs, best.waste_score, best.efficiency, len(ranked),
    )
    return best


def describe_candidate(candidate: Candidate) -> str:
    """Human readable reason for a candidate."""
    n = candidate.guest_count
    ids = "+".join(str(tid) for tid in candidate.table_ids)
    empty = candidate.empty_seats
    extra = candidate.extra_chairs

    if extra:
        tail = f"{extra} extra chair{'s' if extra != 1 else ''} needed"
    else:
        tail = f"{empty} empty seat{'s' if empty != 1 else ''}"

    if len(candidate.table_ids) == 1:
        if not extra and not empty:
            return f"Perfect fit: {n} guests at {candidate.base_capacity}-seat table {ids}"
        return f"Single table {ids}: {n} guests, {tail}"
    if candidate.adjacency == "strategic":
        return f"Strategic block {ids}: {n} guests, {tail}"
    if candidate.adjacency == "vertical":
        return f"Vertically adjacent tables {ids}: {n} guests, {tail}"
    if candidate.adjacency == "adjacent":
        return f"Adjacent tables {ids}: {n} guests, {tail}"
    return f"Separate tables {ids}: {n} guests, {tail}"


def suggest_for_group(
    group: GuestGroup,
    tables: Sequence[Table],
    layout: Optional[VenueLayout] = None,
    alternatives: int = 2,
    policy: SearchPolicy = DEFAULT_POLICY,
) -> Suggestion:
    """Best candidate for one group plus up to ``alternatives`` others.

    Alternatives share no table with the best candidate or with each other.
    """
    group.validate()
    eligible = [t for t in tables if t.serves(group.show_time)]
    ranked = enumerate_candidates(group.size, eligible, layout, policy)
    if not ranked:
        return Suggestion(group, None, "No suitable tables available for this group size")

    best = ranked[0]
    taken = set(best.table_ids)
    alts: List[Candidate] = []
    for c in ranked[1:]:
        if len(alts) >= alternatives:
            break
        if taken.intersection(c.table_ids):
            continue
        alts.append(c)
        taken.update(c.table_ids)
    return Suggestion(group, best, describe_candidate(best), alts)
