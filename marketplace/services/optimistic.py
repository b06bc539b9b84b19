"""Optimistic update with rollback: snapshot, apply, commit-or-rollback.

Works on any holder exposing a pydantic `state` attribute that is replaced
(never mutated) on every change:

    update = OptimisticUpdate(store, ("favorites", "total_elements"))
    update.apply(favorites=[...], total_elements=4)
    ...
    update.commit_or_rollback(ok)

Rollback restores the snapshotted fields exactly as they were when the update
was created; fields outside the snapshot (e.g. pending sets) are left alone.
"""
import copy
from typing import Any, Dict, Optional, Sequence

from marketplace.core.logging import get_logger

logger = get_logger(__name__)


class OptimisticUpdate:
    def __init__(self, holder: Any, fields: Sequence[str]):
        self._holder = holder
        self.fields = tuple(fields)
        self.snapshot: Dict[str, Any] = {
            name: copy.deepcopy(getattr(holder.state, name)) for name in self.fields
        }
        self.applied = False
        self.settled: Optional[str] = None

    def apply(self, **changes: Any) -> None:
        unknown = set(changes) - set(self.fields)
        if unknown:
            raise ValueError(f"Fields outside the snapshot: {sorted(unknown)}")
        self._holder.state = self._holder.state.model_copy(update=changes)
        self.applied = True

    def commit(self) -> None:
        self.settled = "committed"

    def rollback(self) -> None:
        restored = {name: copy.deepcopy(value) for name, value in self.snapshot.items()}
        self._holder.state = self._holder.state.model_copy(update=restored)
        self.settled = "rolled_back"
        logger.info("Optimistic update rolled back (%s)", ", ".join(self.fields))

    def commit_or_rollback(self, ok: bool) -> None:
        if ok:
            self.commit()
        else:
            self.rollback()
