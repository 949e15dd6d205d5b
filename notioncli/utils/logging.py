"""Lightweight logging utilities for compiler-style conversion warnings."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List

WARN_CODES = {
    "unsupported-block": "W003",
    "table-parse-warning": "W004",
    "unterminated-fence": "W006",
}


@dataclass(frozen=True)
class WarningEntry:
    """Captured warning with minimal metadata."""

    filename: str
    line: int | None
    element_type: str
    message: str
    code: str

    def format(self) -> str:
        location = f"{self.filename}:{self.line}" if self.line is not None else self.filename
        return f"{location} [{self.code}][{self.element_type}] {self.message}"


class WarningLogger:
    """Collect warnings and optionally append them to a timestamped log file."""

    def __init__(self, root_name: str, *, log_dir: Path | None = None) -> None:
        self.log_path: Path | None = None
        if log_dir is not None:
            sanitized = re.sub(r"[^A-Za-z0-9_-]", "_", root_name) or "notion"
            timestamp = datetime.now().strftime("%Y-%m-%d-%H%M")
            self.log_path = log_dir / f"{sanitized}_{timestamp}.log"
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
        self._warnings: List[WarningEntry] = []

    @property
    def warnings(self) -> list[WarningEntry]:
        return list(self._warnings)

    def warn(
        self,
        *,
        filename: str,
        line: int | None,
        element_type: str,
        message: str,
        code: str,
    ) -> None:
        entry = WarningEntry(
            filename=Path(filename).as_posix() if filename else "<stdin>",
            line=line,
            element_type=element_type,
            message=message,
            code=WARN_CODES.get(code, code),
        )
        self._warnings.append(entry)
        if self.log_path is not None:
            with self.log_path.open("a", encoding="utf-8") as handle:
                handle.write(f"{entry.format()}\n")

    def summary(self) -> str:
        if self.log_path is None:
            return f"Found {len(self._warnings)} warnings."
        return f"Found {len(self._warnings)} warnings. See {self.log_path.name}"

    def has_warnings(self) -> bool:
        return bool(self._warnings)


class NullLogger(WarningLogger):
    """Logger that discards warnings but keeps API compatibility."""

    def __init__(self) -> None:
        super().__init__("null")

    def warn(
        self,
        *,
        filename: str,
        line: int | None,
        element_type: str,
        message: str,
        code: str,
    ) -> None:
        return None


__all__ = ["WarningLogger", "WarningEntry", "NullLogger", "WARN_CODES"]
