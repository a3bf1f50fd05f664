import itertools
import pathlib
import sys

import pytest

# Ensure src package is on path
sys.path.append(str(pathlib.Path(__file__).resolve().parents[1] / "src"))

from theatre_seating.exceptions import InvalidGroupError
from theatre_seating.groups import analyze_composition, build_guest_groups, classify_group
from theatre_seating.models import CheckInRecord, GroupCategory, GuestGroup, PartyLink


def _covered(groups):
    return sorted(idx for g in groups for idx in g.member_indices)


def test_party_of_three_bookings_becomes_one_group():
    records = [
        CheckInRecord(10, "Ann", 2, "7pm"),
        CheckInRecord(11, "Ben", 1, "7pm"),
        CheckInRecord(12, "Cat", 1, "7pm"),
        CheckInRecord(13, "Dev", 3, "7pm"),
    ]
    groups = build_guest_groups(records, [PartyLink("p1", [10, 11, 12])])

    parties = [g for g in groups if g.is_party]
    assert len(parties) == 1
    party = parties[0]
    assert party.party_size == 4
    assert party.size == 4
    assert len(party.party_members) == 3
    assert party.guest_index == 10
    assert party.show_time == "7pm"
    assert party.name == "Ann & Ben & Cat (Party)"

    singles = [g for g in groups if not g.is_party]
    assert [(g.guest_index, g.count) for g in singles] == [(13, 3)]


def test_party_names_come_from_link_when_given():
    records = [CheckInRecord(1, "A", 1), CheckInRecord(2, "B", 1)]
    groups = build_guest_groups(records, {"x": PartyLink("x", [1, 2], ["Alpha", "Beta"])})
    assert groups[0].name == "Alpha & Beta (Party)"


def test_party_with_missing_member_is_seated_individually():
    records = [
        CheckInRecord(1, "A", 2),
        CheckInRecord(2, "B", 2, seated=True),
        CheckInRecord(3, "C", 1),
    ]
    groups = build_guest_groups(records, [PartyLink("p", [1, 2, 3])])
    assert not any(g.is_party for g in groups)
    assert _covered(groups) == [1, 3]


def test_overlapping_parties_never_duplicate_members():
    records = [CheckInRecord(i, f"G{i}", 1) for i in range(1, 5)]
    links = [PartyLink("a", [1, 2]), PartyLink("b", [2, 3])]
    groups = build_guest_groups(records, links)
    assert _covered(groups) == [1, 2, 3, 4]
    assert [g.party_members for g in groups if g.is_party] == [[1, 2]]


def test_ineligible_records_are_ignored():
    records = [
        CheckInRecord(1, "In", 2),
        CheckInRecord(2, "Not here", 2, checked_in=False),
        CheckInRecord(3, "Seated", 2, seated=True),
        CheckInRecord(4, "Allocated", 2, allocated=True),
    ]
    groups = build_guest_groups(records)
    assert [g.guest_index for g in groups] == [1]


def test_coverage_invariant_over_many_inputs():
    """Each waiting booking lands in exactly one group, party or not."""
    base = [CheckInRecord(i, f"G{i}", 1 + i % 3) for i in range(8)]
    link_options = [
        [],
        [PartyLink("a", [0, 1])],
        [PartyLink("a", [0, 1, 2]), PartyLink("b", [3, 4])],
        [PartyLink("a", [0, 7]), PartyLink("b", [7, 6]), PartyLink("c", [5, 4, 3])],
        [PartyLink("a", [1, 99])],
    ]
    for links, flags in itertools.product(link_options, range(4)):
        records = [
            CheckInRecord(r.index, r.name, r.count, seated=(flags == 1 and r.index % 2 == 0),
                          allocated=(flags == 2 and r.index == 3), checked_in=not (flags == 3 and r.index == 0))
            for r in base
        ]
        waiting = sorted(r.index for r in records if r.waiting)
        groups = build_guest_groups(records, links)
        covered = _covered(groups)
        assert covered == waiting, (links, flags)
        assert len(covered) == len(set(covered))
        for g in groups:
            g.validate()
            if g.is_party:
                assert g.party_size == sum(r.count for r in records if r.index in g.party_members)


@pytest.mark.parametrize(
    "records,links",
    [
        ([CheckInRecord(1, "Zero", 0)], []),
        ([CheckInRecord(1, "A", 1), CheckInRecord(1, "A again", 1)], []),
        ([CheckInRecord(1, "A", 1)], [PartyLink("solo", [1])]),
        ([CheckInRecord(1, "A", 1)], [PartyLink("dupe", [1, 1])]),
    ],
)
def test_invalid_input_rejected(records, links):
    with pytest.raises(InvalidGroupError):
        build_guest_groups(records, links)


@pytest.mark.parametrize(
    "size,category",
    [
        (1, GroupCategory.INDIVIDUAL),
        (2, GroupCategory.COUPLE),
        (3, GroupCategory.INDIVIDUAL),
        (4, GroupCategory.INDIVIDUAL),
        (5, GroupCategory.LARGE_GROUP),
        (12, GroupCategory.LARGE_GROUP),
    ],
)
def test_classify_group(size, category):
    assert classify_group(GuestGroup(guest_index=0, name="x", count=size)) is category


def test_party_classified_by_party_size():
    party = GuestGroup(guest_index=0, name="p", count=1, is_party=True, party_members=[0, 1], party_size=2)
    assert classify_group(party) is GroupCategory.COUPLE


def test_analyze_composition_keeps_input_order():
    groups = [GuestGroup(i, f"g{i}", size) for i, size in enumerate([2, 6, 1, 2, 5, 4])]
    comp = analyze_composition(groups)
    assert [g.guest_index for g in comp.couples] == [0, 3]
    assert [g.guest_index for g in comp.large_groups] == [1, 4]
    assert [g.guest_index for g in comp.individuals] == [2, 5]
    assert comp.total_guests == 20
