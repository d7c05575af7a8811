"""Processed-row ledger.

Records the userPrincipalName of every account created so that a re-run
never creates the same account twice. The pipeline only depends on the
Ledger protocol; FileLedger is the production store.

There is no locking. Two concurrent runs can both see a upn as unprocessed,
so the job must be scheduled one run at a time.
"""

from pathlib import Path
from typing import Protocol

from src.onboarding.logging import get_logger

logger = get_logger(__name__)


class Ledger(Protocol):
    def is_processed(self, identifier: str) -> bool: ...

    def mark_processed(self, identifier: str) -> None: ...


class FileLedger:
    """Plain-text ledger, one identifier per line, append-only."""

    def __init__(self, path: str | Path = "processed.log") -> None:
        self.path = Path(path)

    def is_processed(self, identifier: str) -> bool:
        """True iff identifier is a line of the ledger file.

        A missing or unreadable file counts as empty. Bytes that are not UTF-8
        (a ledger edited by hand in another code page) are replaced, so only
        those lines stop matching.
        """
        try:
            text = self.path.read_text(encoding="utf-8", errors="replace")
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning("ledger_read_failed", path=str(self.path), error=str(e))
            return False
        return identifier in {line.strip() for line in text.splitlines()}

    def mark_processed(self, identifier: str) -> None:
        """Append identifier to the ledger. Write errors are logged, not raised."""
        try:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(identifier + "\n")
        except OSError as e:
            logger.error(
                "ledger_write_failed",
                path=str(self.path),
                identifier=identifier,
                error=str(e),
            )
            return
        logger.debug("ledger_marked", identifier=identifier)


class MemoryLedger:
    """In-process ledger used for dry-runs and tests."""

    def __init__(self, initial: set[str] | None = None) -> None:
        self.entries: list[str] = list(initial or ())

    def is_processed(self, identifier: str) -> bool:
        return identifier in self.entries

    def mark_processed(self, identifier: str) -> None:
        self.entries.append(identifier)
