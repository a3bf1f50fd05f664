"""Venue topology: tables plus hand-curated adjacency groups.

Adjacency is configuration, never geometry. Each group names two or more
table ids that staff consider combinable for one party:

    horizontal: neighbours in the same row
    vertical:   stacked tables in consecutive rows
    strategic:  a three-table block usable for very large parties

A set of two or three tables is adjacent when some group contains all of
them. Tables that appear in no group are only ever offered on their own.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from importlib import resources
from pathlib import Path
from typing import IO, Any, Dict, FrozenSet, Iterable, List, Sequence, Tuple
import logging

import networkx as nx
import yaml

from .exceptions import InvalidTableError, LayoutError
from .models import Table

logger = logging.getLogger(__name__)

DEFAULT_LAYOUT_RESOURCE = "theatre.yaml"


class AdjacencyKind(Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    STRATEGIC = "strategic"


@dataclass(frozen=True)
class AdjacencyGroup:
    """Configured set of combinable table ids."""

    table_ids: FrozenSet[int]
    kind: AdjacencyKind = AdjacencyKind.HORIZONTAL

    def contains(self, ids: Iterable[int]) -> bool:
        return set(ids) <= self.table_ids


class VenueLayout:
    """Immutable lookup over a venue's tables and adjacency groups."""

    def __init__(
        self,
        tables: Sequence[Table],
        adjacency_groups: Sequence[AdjacencyGroup] = (),
        name: str = "",
    ) -> None:
        self.name = name
        self._tables: Tuple[Table, ...] = tuple(tables)
        self._by_id: Dict[int, Table] = {}
        for t in self._tables:
            try:
                t.validate()
            except InvalidTableError as exc:
                raise LayoutError(str(exc)) from exc
            if t.id in self._by_id:
                raise LayoutError(f"Duplicate table id {t.id} in layout {name!r}")
            self._by_id[t.id] = t

        groups: List[AdjacencyGroup] = []
        for g in adjacency_groups:
            if len(g.table_ids) < 2:
                raise LayoutError(f"Adjacency group {sorted(g.table_ids)} needs at least 2 tables")
            if g.kind is AdjacencyKind.STRATEGIC and len(g.table_ids) != 3:
                raise LayoutError(f"Strategic group {sorted(g.table_ids)} must name exactly 3 tables")
            unknown = g.table_ids - self._by_id.keys()
            if unknown:
                raise LayoutError(f"Adjacency group references unknown tables: {sorted(unknown)}")
            groups.append(g)
        self._groups: Tuple[AdjacencyGroup, ...] = tuple(groups)

    # ----------------------------- table lookups -----------------------------
    @property
    def tables(self) -> Tuple[Table, ...]:
        return self._tables

    @property
    def table_ids(self) -> List[int]:
        return [t.id for t in self._tables]

    @property
    def adjacency_groups(self) -> Tuple[AdjacencyGroup, ...]:
        return self._groups

    def table(self, table_id: int) -> Table:
        try:
            return self._by_id[table_id]
        except KeyError:
            raise LayoutError(f"Unknown table id {table_id}") from None

    def capacity(self, table_id: int) -> int:
        return self.table(table_id).capacity

    def section(self, table_id: int) -> str:
        return self.table(table_id).section

    def sections(self) -> List[str]:
        """Section names in first-seen order."""
        seen: List[str] = []
        for t in self._tables:
            if t.section not in seen:
                seen.append(t.section)
        return seen

    def tables_in(self, *sections: str) -> List[Table]:
        wanted = set(sections)
        return [t for t in self._tables if t.section in wanted]

    def __len__(self) -> int:
        return len(self._tables)

    def __contains__(self, table_id: object) -> bool:
        return table_id in self._by_id

    # ----------------------------- adjacency -----------------------------
    def is_adjacent(self, ids: Iterable[int]) -> bool:
        """True when 2 or 3 ids are all inside one configured group."""
        wanted = set(ids)
        if len(wanted) < 2:
            return False
        return any(g.contains(wanted) for g in self._groups)

    def is_vertical_pair(self, a: int, b: int) -> bool:
        return a != b and any(
            g.kind is AdjacencyKind.VERTICAL and g.contains((a, b)) for g in self._groups
        )

    def is_strategic_triple(self, ids: Iterable[int]) -> bool:
        wanted = set(ids)
        return len(wanted) == 3 and any(
            g.kind is AdjacencyKind.STRATEGIC and g.contains(wanted) for g in self._groups
        )

    def strategic_triples(self) -> List[Tuple[int, int, int]]:
        """Configured strategic blocks, each as ids in table order."""
        order = {tid: i for i, tid in enumerate(self.table_ids)}
        out = []
        for g in self._groups:
            if g.kind is AdjacencyKind.STRATEGIC:
                out.append(tuple(sorted(g.table_ids, key=order.__getitem__)))
        return out

    def grouped_table_ids(self) -> FrozenSet[int]:
        """Ids named by at least one adjacency group."""
        return frozenset(tid for g in self._groups for tid in g.table_ids)

    def neighbours(self, table_id: int) -> List[int]:
        found = set()
        for g in self._groups:
            if table_id in g.table_ids:
                found |= g.table_ids
        found.discard(table_id)
        return [tid for tid in self.table_ids if tid in found]

    def graph(self) -> nx.Graph:
        """Table graph with one edge per adjacent pair.

        Edge attribute ``kind`` is ``vertical`` when any vertical group covers
        the pair, otherwise the kind of the first group seen.
        """
        G = nx.Graph()
        for t in self._tables:
            G.add_node(t.id, capacity=t.capacity, section=t.section, occupied=t.is_occupied)
        for g in self._groups:
            members = sorted(g.table_ids)
            for i, a in enumerate(members):
                for b in members[i + 1:]:
                    if G.has_edge(a, b):
                        if g.kind is AdjacencyKind.VERTICAL:
                            G.edges[a, b]["kind"] = g.kind.value
                        continue
                    G.add_edge(a, b, kind=g.kind.value)
        return G

    # ----------------------------- copies -----------------------------
    def with_occupancy(self, occupied_ids: Iterable[int]) -> "VenueLayout":
        """Copy of the layout with the given tables marked occupied."""
        occupied = set(occupied_ids)
        unknown = occupied - self._by_id.keys()
        if unknown:
            raise LayoutError(f"Cannot mark unknown tables occupied: {sorted(unknown)}")
        tables = [replace(t, is_occupied=t.is_occupied or t.id in occupied) for t in self._tables]
        return VenueLayout(tables, self._groups, name=self.name)

    def with_tables(self, tables: Sequence[Table]) -> "VenueLayout":
        """Same adjacency over a replacement table list (e.g. from a CSV).

        Groups naming tables absent from ``tables`` are dropped.
        """
        ids = {t.id for t in tables}
        groups = [g for g in self._groups if g.table_ids <= ids]
        dropped = len(self._groups) - len(groups)
        if dropped:
            logger.debug("Dropped %d adjacency group(s) naming missing tables", dropped)
        return VenueLayout(tables, groups, name=self.name)

    def free_tables(self) -> List[Table]:
        return [t for t in self._tables if not t.is_occupied]


# ----------------------------- loading -----------------------------
def layout_from_dict(data: Dict[str, Any]) -> VenueLayout:
    """Build a layout from the parsed YAML structure."""
    if not isinstance(data, dict) or "tables" not in data:
        raise LayoutError("Layout must be a mapping with a 'tables' list")
    tables: List[Table] = []
    for entry in data["tables"] or []:
        try:
            tables.append(
                Table(
                    id=int(entry["id"]),
                    capacity=int(entry["capacity"]),
                    section=str(entry.get("section", "")),
                    is_occupied=bool(entry.get("occupied", False)),
                    show_time=entry.get("show_time"),
                )
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise LayoutError(f"Invalid table entry {entry!r}: {exc}") from exc

    groups: List[AdjacencyGroup] = []
    for entry in data.get("adjacency") or []:
        try:
            kind = AdjacencyKind(entry.get("kind", "horizontal"))
            ids = frozenset(int(tid) for tid in entry["tables"])
        except (KeyError, TypeError, ValueError) as exc:
            raise LayoutError(f"Invalid adjacency entry {entry!r}: {exc}") from exc
        groups.append(AdjacencyGroup(ids, kind))

    return VenueLayout(tables, groups, name=str(data.get("name", "")))


def load_layout(path: Path | str | IO[Any]) -> VenueLayout:
    """Load a venue layout from a YAML file or open stream."""
    if hasattr(path, "read"):
        data = yaml.safe_load(path)
    else:
        with Path(path).open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    layout = layout_from_dict(data)
    logger.debug(
        "Loaded layout %r: %d tables, %d adjacency groups",
        layout.name, len(layout), len(layout.adjacency_groups),
    )
    return layout


def default_theatre_layout() -> VenueLayout:
    """The bundled 13-table theatre layout."""
    resource = resources.files("theatre_seating").joinpath("layouts").joinpath(DEFAULT_LAYOUT_RESOURCE)
    text = resource.read_text(encoding="utf-8")
    return layout_from_dict(yaml.safe_load(text))
