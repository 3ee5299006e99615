"""Sync engine pushing local todo changes to a target store."""

import logging
from datetime import datetime, timezone

from todo_sync.config import Config
from todo_sync.exceptions import TodoSyncError
from todo_sync.models import DeltaResult
from todo_sync.stores.base import ItemStore, LocalItemStore
from todo_sync.sync.apply import ApplyLayer, ApplyReport
from todo_sync.sync.delta import DeltaEngine
from todo_sync.sync.ledger import LEDGER_OK, SyncLedger
from todo_sync.sync.mapper import IDMapper

logger = logging.getLogger(__name__)


class SyncResult:
    """Results from a sync operation."""

    def __init__(self) -> None:
        """Initialize sync result."""
        self.entries_added = 0
        self.entries_modified = 0
        self.entries_deleted = 0
        self.entries_skipped = 0
        self.entries_failed = 0
        self.errors: list[str] = []
        self.ledger_partial = False
        self.delta: DeltaResult | None = None

    def add_failure(self, error: str) -> None:
        """Record a failed item or step."""
        self.entries_failed += 1
        self.errors.append(error)

    def add_report(self, report: ApplyReport, counter: str) -> None:
        """Fold an apply batch report into the totals.

        Args:
            report: Batch outcome.
            counter: Attribute counting applied items, e.g. "entries_added".
        """
        setattr(self, counter, getattr(self, counter) + len(report.applied))
        self.entries_skipped += len(report.skipped)
        for key, error in report.failures.items():
            self.add_failure(f"{key}: {error}")

    @property
    def ok(self) -> bool:
        """Whether the cycle finished without failures."""
        return self.entries_failed == 0

    def __str__(self) -> str:
        """String representation of results."""
        return (
            f"Added: {self.entries_added}, "
            f"Modified: {self.entries_modified}, "
            f"Deleted: {self.entries_deleted}, "
            f"Skipped: {self.entries_skipped}, "
            f"Failed: {self.entries_failed}"
        )


class SyncEngine:
    """Runs one synchronization cycle.

    The cycle loads the ledger, snapshots the local store, computes the
    delta, pushes it to the target, binds the IDs the target assigned, then
    saves the local store and the ledger. Nothing is rolled back on failure
    and the ledger is always rewritten once pushing has started.
    """

    def __init__(
        self,
        config: Config,
        local_store: LocalItemStore,
        target_store: ItemStore,
    ) -> None:
        """Initialize sync engine.

        Args:
            config: Application configuration.
            local_store: Store whose changes are synchronized.
            target_store: Store receiving the changes.
        """
        self.config = config
        self.local = local_store
        self.target = target_store
        self.ledger = SyncLedger(config.ledger_path)
        self.delta_engine = DeltaEngine()
        self.apply = ApplyLayer(target_store, config.apply_policy)
        self.mapper = IDMapper(local_store)

    def preview(self, since: datetime | None = None) -> DeltaResult:
        """Compute the pending delta without changing anything.

        Args:
            since: Cutoff override; defaults to the last successful sync.

        Returns:
            Changes the next sync would push.
        """
        cutoff = since if since is not None else self.config.storage.get_last_sync_date()
        loaded = self.ledger.load()
        return self.delta_engine.compute_delta(self.local.list_items(), cutoff, loaded.ids)

    def sync(self, since: datetime | None = None, dry_run: bool = False) -> SyncResult:
        """Push local todo changes to the target store.

        Args:
            since: Cutoff override; defaults to the last successful sync.
            dry_run: If True, only log changes without making them.

        Returns:
            Sync results.
        """
        result = SyncResult()
        started_at = datetime.now(timezone.utc)

        cutoff = since if since is not None else self.config.storage.get_last_sync_date()
        logger.info(f"Syncing todo changes since {cutoff.isoformat() if cutoff else 'the beginning'}")

        try:
            loaded = self.ledger.load()
            result.ledger_partial = loaded.is_partial
            delta = self.delta_engine.compute_delta(self.local.list_items(), cutoff, loaded.ids)
        except TodoSyncError as e:
            logger.error(f"Sync failed before pushing changes: {e}")
            result.add_failure(str(e))
            return result

        result.delta = delta

        if dry_run:
            for item in delta.new_items:
                logger.info(f"[DRY RUN] Would add {item.app_id} ({item.summary!r})")
            for item in delta.modified_items:
                logger.info(f"[DRY RUN] Would update {item.mapped_id} from {item.app_id}")
            for mapped_id in delta.deleted_ids:
                logger.info(f"[DRY RUN] Would delete {mapped_id}")
            return result

        try:
            self._push(delta, result)
        finally:
            self._finish_cycle(result)

        if result.ok:
            self.config.storage.set_last_sync_date(started_at)
        else:
            logger.warning("Sync had failures, keeping the previous cutoff so they are retried")

        logger.info(f"Sync complete: {result}")
        return result

    def _push(self, delta: DeltaResult, result: SyncResult) -> None:
        added = self.apply.add_items(delta.new_items)
        result.add_report(added, "entries_added")

        for app_id in self.mapper.bind_all(added.assigned):
            result.add_failure(f"{app_id}: could not record the assigned ID")

        result.add_report(self.apply.modify_items(delta.modified_items), "entries_modified")
        result.add_report(self.apply.delete_items(delta.deleted_ids), "entries_deleted")

    def _finish_cycle(self, result: SyncResult) -> None:
        """Save both stores, then rewrite the ledger from the local mapped IDs."""
        try:
            for name, store in (("target", self.target), ("local", self.local)):
                try:
                    store.commit()
                except TodoSyncError as e:
                    logger.error(f"Failed to save {name} todos: {e}")
                    result.add_failure(str(e))
        finally:
            current_ids = {item.mapped_id for item in self.local.list_items() if item.is_mapped}
            status = self.ledger.save(current_ids)
            if status != LEDGER_OK:
                result.add_failure(f"Could not write ledger {self.ledger.path}")
