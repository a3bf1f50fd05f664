import pathlib
import sys

import pytest

# Ensure src package is on path
sys.path.append(str(pathlib.Path(__file__).resolve().parents[1] / "src"))

from theatre_seating.exceptions import InvalidGroupError
from theatre_seating.models import GuestGroup, Table
from theatre_seating.search import (
    SearchPolicy,
    describe_candidate,
    efficiency_percent,
    enumerate_candidates,
    find_best_fit,
    suggest_for_group,
)
from theatre_seating.topology import AdjacencyGroup, AdjacencyKind, VenueLayout, default_theatre_layout


def _layout(tables, *groups):
    return VenueLayout(tables, [AdjacencyGroup(frozenset(ids), kind) for ids, kind in groups])


def test_couple_on_matching_table():
    best = find_best_fit(2, [Table(1, 2, "front")])
    assert best.table_ids == (1,)
    assert best.extra_chairs == 0
    assert best.efficiency == 100
    assert best.waste_score == 0


def _vertical_and_side_tables():
    """Tables 4/7 stacked; 20 and 21 each grouped, but not with each other."""
    tables = [Table(4, 4, "second"), Table(7, 4, "third"), Table(20, 4, "back"), Table(21, 4, "back")]
    layout = _layout(
        tables,
        ({4, 7}, AdjacencyKind.VERTICAL),
        ({4, 20}, AdjacencyKind.HORIZONTAL),
        ({7, 21}, AdjacencyKind.HORIZONTAL),
    )
    return tables, layout


def test_vertical_pair_beats_equal_unconnected_pair():
    tables, layout = _vertical_and_side_tables()
    best = find_best_fit(6, tables, layout)
    assert best.table_ids == (4, 7)
    assert best.extra_chairs == 0
    assert best.efficiency == 75
    assert best.waste_score == 2 - 3
    assert best.adjacency == "vertical"

    ranked = enumerate_candidates(6, tables, layout)
    plain = [c for c in ranked if c.table_ids == (20, 21)][0]
    assert plain.extra_chairs == 0 and plain.efficiency == 75
    assert plain.waste_score > best.waste_score
    assert plain.adjacency == ""


def test_ungrouped_tables_are_never_paired_when_layout_has_adjacency():
    tables = [Table(4, 4), Table(7, 4), Table(20, 4), Table(21, 4)]
    layout = _layout(tables, ({4, 7}, AdjacencyKind.VERTICAL))
    free = [Table(20, 4), Table(21, 4)]

    # seven guests: too many for one 4-seater, and 20/21 are in no group
    assert find_best_fit(7, free, layout) is None
    assert all(len(c.table_ids) == 1 for c in enumerate_candidates(6, free, layout))
    ranked = enumerate_candidates(7, tables, layout)
    assert [c.table_ids for c in ranked] == [(4, 7)]

    # a plain table list has no adjacency at all, so any two tables may pair
    assert find_best_fit(7, free).table_ids == (20, 21)


def test_large_vertical_bonus_from_seven_guests():
    tables = [Table(4, 4), Table(7, 4)]
    layout = _layout(tables, ({4, 7}, AdjacencyKind.VERTICAL))
    best = find_best_fit(8, tables, layout)
    assert best.table_ids == (4, 7)
    assert best.waste_score == 0 - 3 - 2


def test_horizontal_pair_bonus():
    tables = [Table(1, 4), Table(2, 4)]
    layout = _layout(tables, ({1, 2}, AdjacencyKind.HORIZONTAL))
    best = find_best_fit(8, tables, layout)
    assert best.adjacency == "adjacent"
    assert best.waste_score == -1


def test_five_guests_on_two_small_tables_needs_one_chair():
    best = find_best_fit(5, [Table(1, 2), Table(10, 2)])
    assert best.table_ids == (1, 10)
    assert best.base_capacity == 4
    assert best.extra_chairs == 1
    assert best.efficiency == 100


def test_twelve_guests_without_strategic_block_has_no_fit():
    tables = [Table(1, 4), Table(2, 4)]
    layout = _layout(tables, ({1, 2}, AdjacencyKind.HORIZONTAL))
    assert find_best_fit(12, tables, layout) is None
    assert enumerate_candidates(12, tables, layout) == []


def test_single_table_tolerates_two_extra_chairs():
    assert find_best_fit(4, [Table(1, 2)]).extra_chairs == 2
    assert find_best_fit(3, [Table(1, 1)]).extra_chairs == 2
    # pairs only start at five guests
    assert find_best_fit(4, [Table(1, 1), Table(2, 1)]) is None


def test_pair_needs_capacity_within_one_of_guests():
    # 4 seats for 6 guests: two extra chairs is within tolerance but 4 < 6 - 1
    assert find_best_fit(6, [Table(1, 2), Table(2, 2)]) is None


def test_fewer_extra_chairs_always_win():
    tables = [Table(1, 3), Table(2, 7)]
    best = find_best_fit(4, tables)
    # the 3-seater needs a chair (waste 2, 100%); the 7-seater has none (waste 3, 57%)
    assert best.table_ids == (2,)
    assert best.extra_chairs == 0
    assert best.efficiency == 57

    ranked = enumerate_candidates(6, default_theatre_layout().tables, default_theatre_layout())
    extras = [c.extra_chairs for c in ranked]
    assert extras == sorted(extras)
    for a, b in zip(ranked, ranked[1:]):
        assert a.rank_key <= b.rank_key


def test_efficiency_bounds():
    assert efficiency_percent(7, 5) == 100
    assert efficiency_percent(1, 8) == 13
    assert efficiency_percent(5, 8) == 63
    for n in range(1, 16):
        for c in enumerate_candidates(n, default_theatre_layout().tables, default_theatre_layout()):
            assert 0 <= c.efficiency <= 100


def test_strategic_triple_for_very_large_party():
    layout = default_theatre_layout()
    best = find_best_fit(14, layout.tables, layout)
    assert best.table_ids == (4, 5, 6)
    assert best.adjacency == "strategic"
    assert best.waste_score == -2
    assert best.efficiency == 100


def test_triples_only_from_ten_guests():
    layout = default_theatre_layout()
    assert all(len(c.table_ids) < 3 for c in enumerate_candidates(9, layout.tables, layout))
    assert any(len(c.table_ids) == 3 for c in enumerate_candidates(12, layout.tables, layout))


def test_occupied_tables_are_skipped():
    best = find_best_fit(2, [Table(1, 2, is_occupied=True), Table(2, 4)])
    assert best.table_ids == (2,)
    assert find_best_fit(2, []) is None


def test_invalid_guest_count():
    with pytest.raises(InvalidGroupError):
        find_best_fit(0, [Table(1, 2)])


def test_policy_thresholds_are_tunable():
    strict = SearchPolicy(max_extra_single=0)
    assert find_best_fit(3, [Table(1, 2)], policy=strict) is None
    assert find_best_fit(3, [Table(1, 2)]) is not None


def test_describe_candidate():
    perfect = find_best_fit(4, [Table(3, 4)])
    assert describe_candidate(perfect) == "Perfect fit: 4 guests at 4-seat table 3"
    roomy = find_best_fit(3, [Table(3, 4)])
    assert describe_candidate(roomy) == "Single table 3: 3 guests, 1 empty seat"
    tight = find_best_fit(5, [Table(1, 2), Table(10, 2)])
    assert describe_candidate(tight) == "Separate tables 1+10: 5 guests, 1 extra chair needed"


def test_suggest_for_group_with_alternatives():
    group = GuestGroup(guest_index=7, name="Dana", count=4, show_time="7pm")
    tables = [Table(1, 4), Table(2, 4), Table(3, 4, show_time="9pm"), Table(4, 6)]
    suggestion = suggest_for_group(group, tables)
    assert suggestion.best.table_ids == (1,)
    assert [c.table_ids for c in suggestion.alternatives] == [(2,), (4,)]
    assert suggestion.reason.startswith("Perfect fit")


def test_suggest_for_group_without_tables():
    group = GuestGroup(guest_index=7, name="Crowd", count=20)
    suggestion = suggest_for_group(group, [Table(1, 2)])
    assert suggestion.best is None
    assert suggestion.alternatives == []
    assert "No suitable tables" in suggestion.reason
