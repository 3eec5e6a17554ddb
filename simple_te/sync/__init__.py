"""Template/variable synchronization: reconciliation, debouncing, coordination."""

from simple_te.sync.coordinator import SyncCoordinator
from simple_te.sync.debounce import Debouncer
from simple_te.sync.editing import InsertResult, insert_placeholder
from simple_te.sync.models import CoordinatorState, SyncSnapshot, TemplateCommit, ValueCommit
from simple_te.sync.reconciler import clear_values, reconcile

__all__ = [
    "CoordinatorState",
    "Debouncer",
    "InsertResult",
    "SyncCoordinator",
    "SyncSnapshot",
    "TemplateCommit",
    "ValueCommit",
    "clear_values",
    "insert_placeholder",
    "reconcile",
]
