"""Variable store reconciliation.

The variable store is always rebuilt from the latest extracted identifier
list: matching values carry over, stale names are dropped and new names
start empty.
"""

from collections.abc import Iterable, Mapping


def reconcile(
    extracted: Iterable[str],
    previous: Mapping[str, str | None],
) -> dict[str, str]:
    """Build the variable store for a freshly extracted identifier list.

    Args:
        extracted: Identifiers in display order.
        previous: The store held before the template changed.

    Returns:
        A new mapping whose keys are exactly ``extracted``, in order. Values
        come from ``previous`` where present, otherwise the empty string.
    """
    store: dict[str, str] = {}
    for name in extracted:
        if name not in store:
            store[name] = previous.get(name) or ""
    return store


def clear_values(store: Mapping[str, str]) -> dict[str, str]:
    """Return a copy of ``store`` with every value reset to the empty string."""
    return dict.fromkeys(store, "")
