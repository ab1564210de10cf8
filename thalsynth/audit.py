"""JSONL audit trail of generation and report requests.

One line per tool call.  Generation calls also record the seed, the
strategy that produced the rows and the source / output row counts, so a
synthetic file can be traced back to the request that made it.
"""

from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from pydantic import BaseModel, Field

DEFAULT_AUDIT_PATH = Path("./audit/thalsynth.audit.jsonl")


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class AuditEntry(BaseModel):
    """A single tool invocation."""

    timestamp: str = Field(default_factory=_utc_now)
    tool_name: str
    action: str
    files: list[str] = Field(default_factory=list)
    source_rows: int = 0
    rows_generated: int = 0
    seed: int | None = None
    strategy: str | None = None
    error: str = ""

    @property
    def failed(self) -> bool:
        return bool(self.error)


class AuditLog:
    """Append-only audit file; the parent directory is created on construction."""

    def __init__(self, log_path: str | Path | None = None) -> None:
        self._path = Path(log_path) if log_path is not None else DEFAULT_AUDIT_PATH
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self._path

    def append(self, entry: AuditEntry) -> AuditEntry:
        with self._path.open("a", encoding="utf-8") as fh:
            fh.write(entry.model_dump_json() + "\n")
        return entry

    def record_call(
        self,
        tool_name: str,
        action: str,
        *,
        files: Iterable[str | Path] = (),
        source_rows: int = 0,
        rows_generated: int = 0,
        seed: int | None = None,
        strategy: str | None = None,
        error: str = "",
    ) -> AuditEntry:
        """Stamp and persist one tool call."""
        return self.append(AuditEntry(
            tool_name=tool_name,
            action=action,
            files=[str(f) for f in files],
            source_rows=source_rows,
            rows_generated=rows_generated,
            seed=seed,
            strategy=strategy,
            error=error,
        ))

    def read(self, since: str | None = None, tool_name: str | None = None) -> list[AuditEntry]:
        """Entries in file order, optionally filtered by ISO timestamp and tool."""
        if not self._path.exists():
            return []
        entries = []
        with self._path.open("r", encoding="utf-8") as fh:
            for line in fh:
                if not line.strip():
                    continue
                entry = AuditEntry.model_validate_json(line)
                if since is not None and entry.timestamp < since:
                    continue
                if tool_name is not None and entry.tool_name != tool_name:
                    continue
                entries.append(entry)
        return entries

    def summary(self) -> dict:
        """Call counts per tool, generated rows per strategy and the failure count."""
        entries = self.read()
        rows_by_strategy: Counter[str] = Counter()
        for entry in entries:
            if entry.strategy and not entry.failed:
                rows_by_strategy[entry.strategy] += entry.rows_generated
        return {
            "total_entries": len(entries),
            "entries_by_tool": dict(Counter(e.tool_name for e in entries)),
            "rows_by_strategy": dict(rows_by_strategy),
            "total_rows_generated": sum(rows_by_strategy.values()),
            "errors": sum(1 for e in entries if e.failed),
        }
