"""Pushing detected changes to the target store."""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from todo_sync.exceptions import TodoSyncError
from todo_sync.models import ApplyPolicy, TodoItem
from todo_sync.stores.base import ItemStore

logger = logging.getLogger(__name__)


@dataclass
class ApplyReport:
    """Outcome of one add, modify or delete batch.

    Keys are app IDs for additions and modifications, mapped IDs (as strings)
    for deletions.
    """

    applied: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failures: dict[str, str] = field(default_factory=dict)
    assigned: list[tuple[str, int]] = field(default_factory=list)
    aborted: bool = False

    @property
    def ok(self) -> bool:
        """Whether every item in the batch was applied or skipped."""
        return not self.failures


class ApplyLayer:
    """Applies a delta to a target store, one item at a time.

    Nothing is rolled back: items applied before a failure stay applied.
    """

    def __init__(self, target: ItemStore, policy: ApplyPolicy = ApplyPolicy.BEST_EFFORT) -> None:
        """Initialize apply layer.

        Args:
            target: Store receiving the changes.
            policy: Failure policy shared by all three operations.
        """
        self.target = target
        self.policy = ApplyPolicy(policy)

    def _attempt(self, report: ApplyReport, key: str, action: Callable[[], None]) -> bool:
        """Run one item's action, recording a failure. Returns False to stop the batch."""
        try:
            action()
        except TodoSyncError as e:
            logger.error(f"Failed to apply {key}: {e}")
            report.failures[key] = str(e)
            if self.policy is ApplyPolicy.ABORT_BATCH:
                report.aborted = True
                return False
        return True

    def add_items(self, items: Iterable[TodoItem]) -> ApplyReport:
        """Add todos to the target store.

        Returns:
            Report whose ``assigned`` lists the (app ID, assigned ID) pairs
            to bind locally.
        """
        report = ApplyReport()
        pending = list(items)

        for item in pending:

            def add(item: TodoItem = item) -> None:
                assigned_id = self.target.add(item)
                report.assigned.append((item.app_id, assigned_id))
                report.applied.append(item.app_id)
                logger.info(f"Added {item.app_id} ({item.summary!r}) as {assigned_id}")

            if not self._attempt(report, item.app_id, add):
                break

        self._log_outcome("add", len(pending), report)
        return report

    def modify_items(self, items: Iterable[TodoItem]) -> ApplyReport:
        """Overwrite the target's copies of modified todos.

        A todo whose mapped ID the target does not know is reported as skipped.
        """
        report = ApplyReport()
        pending = list(items)

        for item in pending:

            def modify(item: TodoItem = item) -> None:
                if self.target.find_by_mapped_id(item.mapped_id) is None:
                    logger.warning(f"No target todo {item.mapped_id} for {item.app_id}, skipping")
                    report.skipped.append(item.app_id)
                    return
                self.target.update(item)
                report.applied.append(item.app_id)
                logger.info(f"Updated {item.mapped_id} from {item.app_id}")

            if not self._attempt(report, item.app_id, modify):
                break

        self._log_outcome("modify", len(pending), report)
        return report

    def delete_items(self, ids: Iterable[int]) -> ApplyReport:
        """Remove target todos whose mapped IDs were deleted locally.

        An ID the target does not know is reported as skipped.
        """
        report = ApplyReport()
        pending = list(ids)

        for mapped_id in pending:
            key = str(mapped_id)

            def delete(mapped_id: int = mapped_id, key: str = key) -> None:
                existing = self.target.find_by_mapped_id(mapped_id)
                if existing is None:
                    logger.debug(f"Target todo {mapped_id} already gone")
                    report.skipped.append(key)
                    return
                self.target.remove(existing)
                report.applied.append(key)
                logger.info(f"Deleted target todo {mapped_id}")

            if not self._attempt(report, key, delete):
                break

        self._log_outcome("delete", len(pending), report)
        return report

    def _log_outcome(self, operation: str, total: int, report: ApplyReport) -> None:
        if report.aborted:
            logger.warning(
                f"{operation} batch aborted after {len(report.applied)} of {total} items"
            )
        elif total:
            logger.info(
                f"{operation} batch: {len(report.applied)} applied, "
                f"{len(report.skipped)} skipped, {len(report.failures)} failed"
            )
