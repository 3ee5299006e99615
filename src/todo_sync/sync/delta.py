"""Classification of todos into new, modified and deleted since the last sync."""

import logging
from collections.abc import Iterable, Set
from datetime import datetime

from todo_sync.models import DeltaResult, TodoItem, as_utc

logger = logging.getLogger(__name__)


def _changed_since(timestamp: datetime, cutoff: datetime | None) -> bool:
    if cutoff is None:
        return True
    return as_utc(timestamp) > cutoff


def compute_delta(
    items: Iterable[TodoItem],
    last_sync_time: datetime | None,
    ledger_ids: Set[int],
) -> DeltaResult:
    """Work out what changed locally since the last sync.

    An unmapped item created after the cutoff is new. A mapped item modified
    after the cutoff is modified. Every ledger ID that no current item carries
    was deleted. The result depends only on the arguments, which are left
    untouched.

    Args:
        items: Current snapshot of the local store.
        last_sync_time: Cutoff; None means the store has never been synced.
        ledger_ids: Mapped IDs recorded at the end of the previous cycle.

    Returns:
        Delta for this cycle.
    """
    cutoff = as_utc(last_sync_time) if last_sync_time is not None else None

    result = DeltaResult()
    current_ids: set[int] = set()

    for item in items:
        current_ids.add(item.mapped_id)
        if item.is_mapped:
            if _changed_since(item.modified_at, cutoff):
                result.modified_items.append(item)
        elif _changed_since(item.created_at, cutoff):
            result.new_items.append(item)

    result.deleted_ids = sorted(set(ledger_ids) - current_ids)
    return result


class DeltaEngine:
    """Stateless wrapper around compute_delta that logs what it finds."""

    def compute_delta(
        self,
        items: Iterable[TodoItem],
        last_sync_time: datetime | None,
        ledger_ids: Set[int],
    ) -> DeltaResult:
        """Compute the delta for one cycle.

        Args:
            items: Current snapshot of the local store.
            last_sync_time: Cutoff; None means never synced.
            ledger_ids: Mapped IDs recorded by the previous cycle.

        Returns:
            Delta for this cycle.
        """
        snapshot = list(items)
        logger.info(
            f"Detecting changes in {len(snapshot)} todos since "
            f"{last_sync_time.isoformat() if last_sync_time else 'the beginning'} "
            f"against {len(ledger_ids)} known IDs"
        )

        delta = compute_delta(snapshot, last_sync_time, ledger_ids)

        logger.info(
            f"Changes detected: {len(delta.new_items)} new, "
            f"{len(delta.modified_items)} modified, {len(delta.deleted_ids)} deleted"
        )
        for mapped_id in delta.deleted_ids:
            logger.debug(f"Mapped ID {mapped_id} no longer present locally")
        return delta
