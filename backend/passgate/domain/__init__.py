from passgate.domain.entitlement import (
    Entitlement,
    EntryStatus,
    FlatEntitlement,
    PassListEntitlement,
    SubPass,
    apply_entry,
    classify_status,
    distribute,
    entitlement_for,
    totals,
)

__all__ = [
    "Entitlement",
    "EntryStatus",
    "FlatEntitlement",
    "PassListEntitlement",
    "SubPass",
    "apply_entry",
    "classify_status",
    "distribute",
    "entitlement_for",
    "totals",
]
