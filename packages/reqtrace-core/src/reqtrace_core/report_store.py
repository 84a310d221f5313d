"""On-disk report store.

Writes exported reports to the configured destination directory:

- ``latest.<format>`` always holds the most recent run
- ``test-results-<stamp>.<format>`` keeps per-run history when enabled,
  pruned to the newest ``max_history_entries`` runs
"""

from __future__ import annotations

import contextlib
import re
from collections.abc import Mapping
from datetime import UTC, datetime
from pathlib import Path

import structlog

from reqtrace_core.errors import ExportError

logger = structlog.get_logger(__name__)

HISTORY_PREFIX = "test-results-"
LATEST_STEM = "latest"
_HISTORY_FILE = re.compile(rf"^{HISTORY_PREFIX}(\d{{8}}T\d{{12}}Z)\.\w+$")


class ReportStore:
    """Writes run reports and maintains report history.

    Attributes:
        destination: Directory reports are written to
        save_history: Keep per-run timestamped copies
        max_history_entries: Number of runs kept in history

    Example:
        >>> store = ReportStore(Path("test/reports"), max_history_entries=10)
        >>> store.write({"json": "{}", "csv": "..."})
        [PosixPath('test/reports/latest.json'), ...]
    """

    def __init__(
        self,
        destination: Path,
        *,
        save_history: bool = True,
        max_history_entries: int = 50,
    ) -> None:
        self.destination = destination
        self.save_history = save_history
        self.max_history_entries = max_history_entries
        self._log = logger.bind(component="report_store", destination=str(destination))

    def write(
        self,
        exports: Mapping[str, str],
        *,
        timestamp: datetime | None = None,
    ) -> list[Path]:
        """Write every exported document.

        Args:
            exports: Format -> document, as returned by ``export_results``.
            timestamp: Run timestamp used for history file names (default: now).

        Returns:
            Paths written, ``latest`` files first.

        Every document is staged before any ``latest`` file is replaced, so a
        failed write leaves the previous ``latest`` set intact.

        Raises:
            ExportError: If the destination cannot be written.
        """
        stamp = _stamp(timestamp or datetime.now(UTC))
        latest = [self.destination / f"{LATEST_STEM}.{fmt}" for fmt in exports]
        staged = [path.with_name(f".{path.name}.tmp") for path in latest]
        history: list[Path] = []

        try:
            self.destination.mkdir(parents=True, exist_ok=True)
            for tmp, content in zip(staged, exports.values(), strict=True):
                tmp.write_text(content, encoding="utf-8")

            if self.save_history:
                for fmt, content in exports.items():
                    path = self.destination / f"{HISTORY_PREFIX}{stamp}.{fmt}"
                    path.write_text(content, encoding="utf-8")
                    history.append(path)

            # latest.* change only once every document has been written
            for tmp, path in zip(staged, latest, strict=True):
                tmp.replace(path)

            if self.save_history:
                self._prune()
        except OSError as e:
            for tmp in staged:
                with contextlib.suppress(OSError):
                    tmp.unlink(missing_ok=True)
            raise ExportError(
                ",".join(exports),
                "Reports could not be written",
                internal_details=f"{self.destination}: {e}",
            ) from e

        written = latest + history
        self._log.info("reports_written", files=len(written), stamp=stamp)
        return written

    def history(self) -> list[str]:
        """Run stamps present in history, newest first."""
        if not self.destination.is_dir():
            return []
        stamps = {
            m.group(1)
            for p in self.destination.iterdir()
            if (m := _HISTORY_FILE.match(p.name)) is not None
        }
        return sorted(stamps, reverse=True)

    def _prune(self) -> None:
        stale = set(self.history()[self.max_history_entries :])
        if not stale:
            return
        for path in self.destination.iterdir():
            m = _HISTORY_FILE.match(path.name)
            if m is not None and m.group(1) in stale:
                path.unlink()
        self._log.debug("history_pruned", removed_runs=len(stale))


def _stamp(timestamp: datetime) -> str:
    return timestamp.astimezone(UTC).strftime("%Y%m%dT%H%M%S%fZ")
