"""
Tests for entitlement arithmetic: shape selection, totals, distribution, status.
"""

from types import SimpleNamespace

import pytest

from passgate.domain.entitlement import (
    EntryStatus,
    FlatEntitlement,
    PassListEntitlement,
    SubPass,
    apply_entry,
    classify_status,
    distribute,
    entitlement_for,
    pass_type_label,
    totals,
)


def _flat(total_people, people_entered=0):
    return SimpleNamespace(passes=[], total_people=total_people, people_entered=people_entered, pass_type=None)


def _rich(*passes):
    return SimpleNamespace(
        passes=[SimpleNamespace(pass_type_name=n, people_count=c, people_entered=e) for n, c, e in passes],
        total_people=99,
        people_entered=99,
    )


def test_flat_booking_uses_flat_counters():
    ent = entitlement_for(_flat(4, 1))
    assert isinstance(ent, FlatEntitlement)
    assert (ent.capacity, ent.entered) == (4, 1)


def test_pass_list_ignores_flat_counters():
    """Sub-passes win; the flat columns are not mixed in."""
    ent = entitlement_for(_rich(("VIP", 2, 1), ("General", 3, 0)))
    assert isinstance(ent, PassListEntitlement)
    assert (ent.capacity, ent.entered) == (5, 1)


def test_legacy_default_only_applies_when_capacity_missing():
    assert entitlement_for(_flat(0), legacy_default=1).capacity == 1
    assert entitlement_for(_flat(0)).capacity == 0
    assert entitlement_for(_flat(3), legacy_default=1).capacity == 3


def test_totals_mix_shapes_per_booking():
    ents = [
        entitlement_for(_flat(2, 1)),
        entitlement_for(_rich(("VIP", 2, 2), ("General", 1, 0))),
        entitlement_for(_flat(3, 0)),
    ]
    assert totals(ents) == (8, 3)


def test_totals_empty():
    assert totals([]) == (0, 0)


def test_distribute_fills_in_stored_order():
    passes = (SubPass("VIP", 2, 1), SubPass("General", 3, 0), SubPass("Kids", 2, 0))
    result = distribute(passes, 3)
    assert [p.people_entered for p in result] == [2, 2, 0]


def test_distribute_skips_full_passes():
    passes = (SubPass("VIP", 2, 2), SubPass("General", 3, 1))
    result = distribute(passes, 2)
    assert [p.people_entered for p in result] == [2, 3]


def test_distribute_overflow_lands_on_last_pass():
    """Under override the extra admissions are recorded, not dropped."""
    passes = (SubPass("VIP", 2, 2), SubPass("General", 1, 1))
    result = distribute(passes, 2)
    assert [p.people_entered for p in result] == [2, 3]
    assert PassListEntitlement(passes=result).entered == 5


def test_distribute_over_already_overflowed_pass():
    passes = (SubPass("VIP", 2, 3), SubPass("General", 2, 0))
    result = distribute(passes, 1)
    assert [p.people_entered for p in result] == [3, 1]


def test_distribute_requires_passes():
    with pytest.raises(ValueError):
        distribute((), 1)


def test_apply_entry_flat():
    assert apply_entry(FlatEntitlement(4, 2), 2) == FlatEntitlement(4, 4)


def test_apply_entry_keeps_capacity():
    ent = PassListEntitlement(passes=(SubPass("VIP", 2, 0), SubPass("General", 2, 0)))
    updated = apply_entry(ent, 3)
    assert updated.capacity == 4
    assert updated.entered == 3


@pytest.mark.parametrize(
    "entered,capacity,expected",
    [
        (4, 4, EntryStatus.CHECKED_IN),
        (5, 4, EntryStatus.CHECKED_IN),
        (2, 4, EntryStatus.PARTIALLY_CHECKED_IN),
        # Only reachable with a zero-count admission; kept for the log status enum
        (0, 4, EntryStatus.DENIED),
    ],
)
def test_classify_status(entered, capacity, expected):
    assert classify_status(entered, capacity) is expected


def test_status_values_match_log_strings():
    assert [s.value for s in EntryStatus] == ["Checked-in", "Partially Checked-in", "Denied"]


def test_pass_type_label():
    assert pass_type_label(_rich(("VIP", 1, 0), ("General", 1, 0))) == "VIP, General"
    assert pass_type_label(_flat(1)) == "Unknown"
    booking = _flat(1)
    booking.pass_type = SimpleNamespace(name="General")
    assert pass_type_label(booking) == "General"
