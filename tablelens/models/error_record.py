from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for error logging.

Structured record of a user-visible failure (unreadable upload, failed
instruction resolution, failed export) written as one JSON line. The key set
is fixed; no extra keys are ever serialized.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        source: File name or instruction text the failure relates to
        stage: Pipeline stage that failed (upload, instruction, export)
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Human readable description
    """
    timestamp: str  # ISO8601 UTC
    source: str
    stage: str
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(source: str, stage: str, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord with current UTC timestamp."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            source=source,
            stage=stage,
            error_type=error_type,
            message=message,
        )

    @staticmethod
    def from_exception(source: str, stage: str, exc: BaseException) -> ErrorRecord:
        """Record an exception, deriving error_type from its class name.

        ``ResolutionError`` -> ``RESOLUTION_ERROR``.
        """
        name = type(exc).__name__
        snake = "".join(f"_{c}" if c.isupper() and i else c for i, c in enumerate(name)).upper()
        return ErrorRecord.create(source, stage, snake, str(exc))

    def to_json_line(self) -> str:
        """Serialize ErrorRecord to JSON Lines format."""
        return json.dumps(asdict(self), ensure_ascii=False)
