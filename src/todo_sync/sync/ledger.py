"""Persisted record of the mapped IDs known at the end of the last sync.

The remote service cannot report deletions, so the set of mapped IDs present
after each cycle is written to a small binary file. The next cycle compares
it against the current snapshot to infer which items were removed.

File layout: an unsigned 32-bit count followed by that many unsigned 32-bit
IDs, native byte order, no header or checksum.
"""

import logging
import struct
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from todo_sync.models import MAX_MAPPED_ID

logger = logging.getLogger(__name__)

# Native byte order, standard 4-byte size, no alignment padding.
_FIELD = struct.Struct("=I")

LEDGER_OK = 0
LEDGER_OPEN_FAILED = 1
LEDGER_WRITE_FAILED = 2


@dataclass
class LedgerLoadResult:
    """IDs read from a ledger file along with how complete the read was."""

    ids: set[int] = field(default_factory=set)
    declared_count: int = 0
    read_count: int = 0

    @property
    def is_partial(self) -> bool:
        """Whether the file held fewer IDs than its header declared."""
        return self.read_count < self.declared_count

    @property
    def status(self) -> int:
        """0 for a complete read, otherwise the number of IDs actually read."""
        return self.read_count if self.is_partial else LEDGER_OK


def load_ledger(path: Path) -> LedgerLoadResult:
    """Read a ledger file.

    A missing file, or one too short to hold the count, is an empty ledger.
    A body shorter than its declared count yields the IDs that are present.
    Only whole 4-byte fields actually in the file are decoded; the declared
    count is never used to size anything.

    Args:
        path: Ledger file location.

    Returns:
        Load result with the IDs read and the partial-read status.
    """
    try:
        data = path.read_bytes()
    except FileNotFoundError:
        logger.debug(f"No ledger at {path}, starting empty")
        return LedgerLoadResult()
    except OSError as e:
        logger.warning(f"Cannot read ledger {path}: {e}; treating as empty")
        return LedgerLoadResult()

    if len(data) < _FIELD.size:
        logger.warning(f"Ledger {path} has no complete header, treating as empty")
        return LedgerLoadResult()

    (declared,) = _FIELD.unpack_from(data, 0)
    available = (len(data) - _FIELD.size) // _FIELD.size
    to_read = min(declared, available)

    ids: set[int] = set()
    for index in range(to_read):
        (mapped_id,) = _FIELD.unpack_from(data, _FIELD.size * (index + 1))
        ids.add(mapped_id)

    result = LedgerLoadResult(ids=ids, declared_count=declared, read_count=to_read)
    if result.is_partial:
        logger.warning(
            f"Ledger {path} declares {declared} IDs but only {to_read} are present; "
            "deletions may go undetected this cycle"
        )
    return result


def save_ledger(path: Path, ids: Iterable[int]) -> int:
    """Write a ledger file, replacing any previous contents.

    The write is not atomic. A crash part way leaves a truncated file,
    which load_ledger reads as a partial ledger.

    Args:
        path: Ledger file location.
        ids: Mapped IDs to record.

    Returns:
        LEDGER_OK on success, LEDGER_OPEN_FAILED if the file cannot be opened,
        LEDGER_WRITE_FAILED if writing fails after it was opened.

    Raises:
        ValueError: If an ID does not fit in 32 bits.
    """
    ordered = sorted(set(ids))
    for mapped_id in ordered:
        if not 0 <= mapped_id <= MAX_MAPPED_ID:
            raise ValueError(f"Mapped ID {mapped_id} does not fit in the ledger")

    try:
        f = open(path, "wb")
    except OSError as e:
        logger.error(f"Failed to open ledger {path} for writing: {e}")
        return LEDGER_OPEN_FAILED

    try:
        with f:
            f.write(_FIELD.pack(len(ordered)))
            for mapped_id in ordered:
                f.write(_FIELD.pack(mapped_id))
    except OSError as e:
        logger.error(f"Failed to write ledger {path}: {e}")
        return LEDGER_WRITE_FAILED

    logger.debug(f"Saved {len(ordered)} IDs to ledger {path}")
    return LEDGER_OK


class SyncLedger:
    """Ledger bound to a file path."""

    def __init__(self, path: Path) -> None:
        """Initialize ledger.

        Args:
            path: Ledger file location.
        """
        self.path = path

    def load(self) -> LedgerLoadResult:
        """Load the IDs recorded by the previous cycle."""
        return load_ledger(self.path)

    def save(self, ids: Iterable[int]) -> int:
        """Replace the recorded IDs with the current cycle's set."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Cannot create ledger directory {self.path.parent}: {e}")
            return LEDGER_OPEN_FAILED
        return save_ledger(self.path, ids)

    def clear(self) -> None:
        """Forget every recorded ID."""
        self.path.unlink(missing_ok=True)
        logger.info(f"Removed ledger {self.path}")
