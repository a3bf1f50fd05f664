"""Theatre seating package."""
from .models import (
    Arrangement,
    CheckInRecord,
    GroupCategory,
    GuestGroup,
    PartyLink,
    Rating,
    SeatingStrategy,
    Table,
)
from .exceptions import InvalidGroupError, InvalidTableError, LayoutError, SeatingError
from .topology import AdjacencyGroup, AdjacencyKind, VenueLayout, default_theatre_layout, load_layout
from .groups import analyze_composition, build_guest_groups, classify_group
from .search import SearchPolicy, find_best_fit, suggest_for_group
from .planner import allocation_stats, allocation_updates, plan_seating_strategies
from .csv_loader import load_all, load_checkins, load_parties, load_tables

__all__ = [
    "Arrangement",
    "CheckInRecord",
    "GroupCategory",
    "GuestGroup",
    "PartyLink",
    "Rating",
    "SeatingStrategy",
    "Table",
    "SeatingError",
    "InvalidGroupError",
    "InvalidTableError",
    "LayoutError",
    "AdjacencyGroup",
    "AdjacencyKind",
    "VenueLayout",
    "default_theatre_layout",
    "load_layout",
    "analyze_composition",
    "build_guest_groups",
    "classify_group",
    "SearchPolicy",
    "find_best_fit",
    "suggest_for_group",
    "allocation_stats",
    "allocation_updates",
    "plan_seating_strategies",
    "load_all",
    "load_checkins",
    "load_parties",
    "load_tables",
]
