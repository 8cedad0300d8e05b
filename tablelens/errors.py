from __future__ import annotations

"""Exception taxonomy shared across tablelens.

Only user-visible failures are modelled as exceptions. Numeric and date
anomalies inside the view pipeline never raise; they degrade to defaults.
"""

__all__ = [
    "TablelensError",
    "ConfigError",
    "ParseFailure",
    "ResolutionError",
    "ExportError",
]


class TablelensError(Exception):
    """Base exception for tablelens failures."""


class ConfigError(TablelensError):
    pass


class ParseFailure(TablelensError):
    """Raised when an uploaded file cannot be turned into a Table.

    The previously loaded Table stays in place.
    """


class ResolutionError(TablelensError):
    """Raised when an instruction cannot be resolved into a ChartSelection.

    Attributes:
        details: Optional raw detail (service error text, raw body) for logs
    """

    def __init__(self, message: str, details: str | None = None) -> None:
        super().__init__(message)
        self.details = details


class ExportError(TablelensError):
    pass
