"""
Strategy planner.

Runs the best-fit search over ordered batches of guest groups and returns
several complete candidate plans, best rated first:

    Optimal Efficiency          every group largest first over all tables
    Couples Front-Row Priority  couples take front tables, rest by best fit
    Large Groups Main Seating   large parties in rows two and three first

No table is used twice within one strategy. Groups that cannot be fitted
are listed as unplaced; planning never aborts on them. Nothing is applied:
the caller picks an arrangement and persists it.
"""
from __future__ import annotations

from statistics import mean
from typing import Iterable, List, Optional, Sequence, Set, Union
import logging

from .exceptions import InvalidTableError, SeatingError
from .groups import analyze_composition, classify_group
from .models import (
    AllocationStats,
    AllocationUpdate,
    Arrangement,
    GroupCategory,
    GuestGroup,
    Rating,
    SeatingStrategy,
    Table,
    round_half_up,
)
from .search import DEFAULT_POLICY, Candidate, SearchPolicy, describe_candidate, efficiency_percent, find_best_fit
from .topology import VenueLayout

logger = logging.getLogger(__name__)

OPTIMAL = "Optimal Efficiency"
COUPLES_FRONT_ROW = "Couples Front-Row Priority"
LARGE_GROUPS_MAIN = "Large Groups Main Seating"

FRONT_SECTIONS = ("front",)
MAIN_SECTIONS = ("second", "third")
FRONT_ROW_REASON = "premium front row position"

_CATEGORY_ORDER = {
    GroupCategory.LARGE_GROUP: 0,
    GroupCategory.INDIVIDUAL: 1,
    GroupCategory.COUPLE: 2,
}

_PRIORITY = {
    GroupCategory.COUPLE: "high",
    GroupCategory.LARGE_GROUP: "medium",
    GroupCategory.INDIVIDUAL: "low",
}


# ----------------------------- helpers -----------------------------
def as_layout(venue: Union[VenueLayout, Iterable[Table]]) -> VenueLayout:
    """Accept a layout as is, or wrap a plain table list with no adjacency."""
    if isinstance(venue, VenueLayout):
        return venue
    tables = list(venue)
    seen: Set[int] = set()
    for t in tables:
        t.validate()
        if t.id in seen:
            raise InvalidTableError(f"Duplicate table id {t.id}")
        seen.add(t.id)
    return VenueLayout(tables)


def order_largest_first(groups: Iterable[GuestGroup]) -> List[GuestGroup]:
    """Large groups, then individuals, then couples; larger first within each."""
    return sorted(groups, key=lambda g: (_CATEGORY_ORDER[classify_group(g)], -g.size))


def arrangement_from_candidate(group: GuestGroup, candidate: Candidate) -> Arrangement:
    return Arrangement(
        guest_group=group,
        table_ids=candidate.table_ids,
        base_capacity=candidate.base_capacity,
        extra_chairs=candidate.extra_chairs,
        efficiency=candidate.efficiency,
        reason=describe_candidate(candidate),
        waste_score=candidate.waste_score,
        rating=Rating.from_efficiency(candidate.efficiency),
        priority=_PRIORITY[classify_group(group)],
    )


def _front_row_arrangement(group: GuestGroup, table: Table) -> Arrangement:
    return Arrangement(
        guest_group=group,
        table_ids=(table.id,),
        base_capacity=table.capacity,
        extra_chairs=0,
        efficiency=efficiency_percent(group.size, table.capacity),
        reason=FRONT_ROW_REASON,
        waste_score=max(0, table.capacity - group.size),
        rating=Rating.EXCELLENT,
        priority="high",
    )


class _Pass:
    """Mutable state of one strategy pass: arrangements so far and used tables."""

    def __init__(self, layout: VenueLayout, policy: SearchPolicy) -> None:
        self.layout = layout
        self.policy = policy
        self.used: Set[int] = set()
        self.arrangements: List[Arrangement] = []

    def free(self, pool: Sequence[Table], group: Optional[GuestGroup] = None) -> List[Table]:
        show = group.show_time if group is not None else ""
        return [t for t in pool if not t.is_occupied and t.id not in self.used and t.serves(show)]

    def add(self, arrangement: Arrangement) -> None:
        overlap = self.used.intersection(arrangement.table_ids)
        if overlap:
            raise SeatingError(f"Tables {sorted(overlap)} are already used in this strategy")
        self.used.update(arrangement.table_ids)
        self.arrangements.append(arrangement)

    def seat(self, groups: Iterable[GuestGroup], pool: Sequence[Table]) -> List[GuestGroup]:
        """Best-fit each group in order; return the ones that did not fit."""
        unplaced = []
        for g in groups:
            best = find_best_fit(g.size, self.free(pool, g), self.layout, self.policy)
            if best is None:
                unplaced.append(g)
                continue
            self.add(arrangement_from_candidate(g, best))
        return unplaced

    def finish(self, name: str, description: str, unplaced: List[GuestGroup]) -> SeatingStrategy:
        avg = mean(a.efficiency for a in self.arrangements) if self.arrangements else 0.0
        strategy = SeatingStrategy(
            name=name,
            arrangements=self.arrangements,
            overall_efficiency=Rating.from_efficiency(avg),
            description=description,
            unplaced=unplaced,
            mean_efficiency=float(avg),
        )
        logger.info(
            "%s: %d arranged, %d unplaced, mean efficiency %.1f%% (%s)",
            name, len(strategy.arrangements), len(unplaced), avg, strategy.overall_efficiency.value,
        )
        for g in unplaced:
            logger.info("%s: no suitable tables for %s (%d guests); needs manual seating", name, g.name, g.size)
        return strategy


# ----------------------------- strategies -----------------------------
def optimal_efficiency_strategy(
    groups: Sequence[GuestGroup], layout: VenueLayout, policy: SearchPolicy = DEFAULT_POLICY
) -> SeatingStrategy:
    p = _Pass(layout, policy)
    unplaced = p.seat(order_largest_first(groups), layout.tables)
    return p.finish(
        OPTIMAL,
        "All groups seated largest first for the tightest table fit",
        unplaced,
    )


def couples_front_row_strategy(
    groups: Sequence[GuestGroup],
    layout: VenueLayout,
    policy: SearchPolicy = DEFAULT_POLICY,
    front_sections: Sequence[str] = FRONT_SECTIONS,
) -> SeatingStrategy:
    comp = analyze_composition(groups)
    p = _Pass(layout, policy)
    front = [t for t in layout.tables_in(*front_sections) if t.capacity >= 2]

    leftover_couples = []
    for couple in comp.couples:
        free_front = p.free(front, couple)
        if not free_front:
            leftover_couples.append(couple)
            continue
        p.add(_front_row_arrangement(couple, free_front[0]))
    seated_front = len(comp.couples) - len(leftover_couples)

    rest = order_largest_first(leftover_couples + comp.large_groups + comp.individuals)
    unplaced = p.seat(rest, layout.tables)
    return p.finish(
        COUPLES_FRONT_ROW,
        f"{seated_front} of {len(comp.couples)} couples given front row tables, "
        "remaining guests distributed by best fit",
        unplaced,
    )


def large_groups_strategy(
    groups: Sequence[GuestGroup],
    layout: VenueLayout,
    policy: SearchPolicy = DEFAULT_POLICY,
    main_sections: Sequence[str] = MAIN_SECTIONS,
) -> SeatingStrategy:
    comp = analyze_composition(groups)
    p = _Pass(layout, policy)
    main = layout.tables_in(*main_sections)

    missed_large = p.seat(order_largest_first(comp.large_groups), main)
    kept_together = len(comp.large_groups) - len(missed_large)

    rest = order_largest_first(missed_large + comp.couples + comp.individuals)
    unplaced = p.seat(rest, layout.tables)
    return p.finish(
        LARGE_GROUPS_MAIN,
        f"{kept_together} of {len(comp.large_groups)} large parties kept together in the main rows, "
        "other guests fill the remaining tables",
        unplaced,
    )


def plan_seating_strategies(
    groups: Iterable[GuestGroup],
    venue: Union[VenueLayout, Iterable[Table]],
    policy: SearchPolicy = DEFAULT_POLICY,
) -> List[SeatingStrategy]:
    """Produce ranked candidate seating plans.

    ``venue`` is a :class:`VenueLayout` (tables plus adjacency) or a plain
    iterable of tables, in which case no pair counts as adjacent. The couples
    strategy is only produced when couples are waiting and the large group
    strategy only when large groups are. Strategies are sorted by overall
    rating, ties keeping the order above.
    """
    groups = list(groups)
    for g in groups:
        g.validate()
    layout = as_layout(venue)
    comp = analyze_composition(groups)

    strategies = [optimal_efficiency_strategy(groups, layout, policy)]
    if comp.couples:
        strategies.append(couples_front_row_strategy(groups, layout, policy))
    if comp.large_groups:
        strategies.append(large_groups_strategy(groups, layout, policy))

    strategies.sort(key=lambda s: -s.overall_efficiency.rank)
    return strategies


# ----------------------------- caller helpers -----------------------------
def allocation_stats(venue: Union[VenueLayout, Iterable[Table]]) -> AllocationStats:
    """Capacity, occupied seats and utilisation with optimisation tips."""
    tables = list(venue.tables) if isinstance(venue, VenueLayout) else list(venue)
    total = sum(t.capacity for t in tables)
    occupied = sum(t.capacity for t in tables if t.is_occupied)
    utilisation = round_half_up(occupied / total * 100) if total else 0

    tips = []
    if utilisation < 60:
        tips.append("Consider combining smaller groups")
    if utilisation > 85:
        tips.append("High utilization - consider larger tables")
    return AllocationStats(total_capacity=total, occupied_seats=occupied, utilisation=utilisation, tips=tips)


def allocation_updates(arrangement: Arrangement) -> AllocationUpdate:
    """Allocation state to persist once a user accepts ``arrangement``.

    Every party member maps to the arrangement's tables.
    """
    tables = tuple(arrangement.table_ids)
    return AllocationUpdate(
        guest_tables={idx: tables for idx in arrangement.guest_group.member_indices},
        occupied_tables=tables,
    )
