"""
Entitlement arithmetic shared by the pass resolver and the entry accumulator.

A booking is either the legacy flat shape (one capacity, one entered
counter) or the pass-list shape (ordered sub-passes, each with its own
capacity and counter). Callers never branch on the shape themselves; they
go through `entitlement_for` and the `capacity` / `entered` accessors.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, Optional, Union


class EntryStatus(str, Enum):
    CHECKED_IN = "Checked-in"
    PARTIALLY_CHECKED_IN = "Partially Checked-in"
    DENIED = "Denied"


@dataclass(frozen=True)
class SubPass:
    pass_type_name: str
    people_count: int
    people_entered: int = 0

    @property
    def headroom(self) -> int:
        return max(self.people_count - self.people_entered, 0)


@dataclass(frozen=True)
class FlatEntitlement:
    total_people: int
    people_entered: int = 0

    @property
    def capacity(self) -> int:
        return self.total_people

    @property
    def entered(self) -> int:
        return self.people_entered


@dataclass(frozen=True)
class PassListEntitlement:
    passes: tuple[SubPass, ...]

    @property
    def capacity(self) -> int:
        return sum(p.people_count for p in self.passes)

    @property
    def entered(self) -> int:
        return sum(p.people_entered for p in self.passes)


Entitlement = Union[FlatEntitlement, PassListEntitlement]


def entitlement_for(booking, legacy_default: Optional[int] = None) -> Entitlement:
    """Build the entitlement variant for a booking-like object.

    `legacy_default` replaces a missing or zero flat capacity; the resolver
    passes 1 here so that malformed legacy rows still count as one person.
    """
    passes = getattr(booking, "passes", None)
    if passes:
        return PassListEntitlement(
            passes=tuple(
                SubPass(
                    pass_type_name=p.pass_type_name,
                    people_count=p.people_count,
                    people_entered=p.people_entered or 0,
                )
                for p in passes
            )
        )

    capacity = booking.total_people
    if not capacity and legacy_default is not None:
        capacity = legacy_default
    return FlatEntitlement(total_people=capacity or 0, people_entered=booking.people_entered or 0)


def totals(entitlements: Iterable[Entitlement]) -> tuple[int, int]:
    """Sum (capacity, entered) across entitlements of mixed shapes."""
    capacity = 0
    entered = 0
    for ent in entitlements:
        capacity += ent.capacity
        entered += ent.entered
    return capacity, entered


def distribute(passes: tuple[SubPass, ...], count: int) -> tuple[SubPass, ...]:
    """Place `count` admissions across sub-passes in stored order.

    Each sub-pass is filled up to its own capacity before moving on. What
    is left once every sub-pass is full (only possible under an admin
    override) lands on the last sub-pass, so the stored total always
    equals the admitted total.
    """
    if not passes:
        raise ValueError("Cannot distribute entries over an empty pass list")

    remaining = count
    updated = []
    for sub in passes:
        take = min(remaining, sub.headroom)
        updated.append(replace(sub, people_entered=sub.people_entered + take))
        remaining -= take

    if remaining > 0:
        last = updated[-1]
        updated[-1] = replace(last, people_entered=last.people_entered + remaining)

    return tuple(updated)


def apply_entry(entitlement: Entitlement, count: int) -> Entitlement:
    """Return the entitlement after admitting `count` more people."""
    if isinstance(entitlement, PassListEntitlement):
        return PassListEntitlement(passes=distribute(entitlement.passes, count))
    return replace(entitlement, people_entered=entitlement.people_entered + count)


def classify_status(total_entered: int, capacity: int) -> EntryStatus:
    if total_entered >= capacity:
        return EntryStatus.CHECKED_IN
    if total_entered > 0:
        return EntryStatus.PARTIALLY_CHECKED_IN
    return EntryStatus.DENIED


def pass_type_label(booking) -> str:
    """Display name for the pass types a booking covers."""
    passes = getattr(booking, "passes", None)
    if passes:
        return ", ".join(p.pass_type_name for p in passes)
    pass_type = getattr(booking, "pass_type", None)
    return pass_type.name if pass_type is not None else "Unknown"
