from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ErrorRecord

"""Error log buffering.

User-visible failures collected during a run are buffered in memory and
appended as JSON Lines to ``logs/errors-YYYYMMDD-HHMMSS.log`` (UTC) on flush.
The file is only created when there is something to write.
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
    "STAGES",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"
STAGES = ("upload", "instruction", "export")


class ErrorLogBuffer:
    """Failures collected during one dashboard run.

    tablelens records three kinds: an upload that cannot be parsed
    (stage "upload", source = file name), an instruction that cannot be
    resolved (stage "instruction", source = instruction text) and an export
    that cannot be written (stage "export", source = target path). Nothing
    touches disk until flush().
    """

    def __init__(self, logs_dir: Path | None = None) -> None:
        self._records: list[ErrorRecord] = []
        self._logs_dir = logs_dir if logs_dir is not None else LOGS_DIR
        self._file_path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"errors-{stamp}.log"
        return self._file_path

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)

    def record_failure(self, source: str, stage: str, exc: BaseException) -> ErrorRecord:
        """Buffer ``exc`` as an ErrorRecord for ``stage``; returns the record."""
        if stage not in STAGES:
            raise ValueError(f"unknown stage: {stage!r}")
        record = ErrorRecord.from_exception(source, stage, exc)
        self.append(record)
        return record

    def stages(self) -> list[str]:
        """Stages with buffered failures, in first-seen order."""
        return list(dict.fromkeys(r.stage for r in self._records))

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path | None:
        """Append buffered records to the log file.

        Returns:
            Path written to, or None when the buffer was empty
        """
        if not self._records:
            return None
        fp = self.file_path
        fp.parent.mkdir(parents=True, exist_ok=True)
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
