"""Typed domain errors for the flow map pipeline.

Every failure of the batch run surfaces as one of these errors. None of
them is retried: the first error terminates the run and no partial
result is produced.

All errors inherit from FlowMapError and can optionally wrap a root
cause exception for debugging.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class FlowMapError(Exception):
    """Base error for the flow map domain.

    Attributes:
        message: Human-readable error description
        cause: Optional underlying exception that caused this error
    """

    message: str
    cause: Optional[Exception] = field(default=None, repr=False)

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def __post_init__(self) -> None:
        super().__init__(self.message)


@dataclass
class GraphIOError(FlowMapError):
    """Graph source material is unreadable or truncated.

    Attributes:
        file_path: Path to the graph data file if relevant
    """

    file_path: Optional[str] = None


@dataclass
class MalformedRecordError(FlowMapError):
    """Record count, size or content does not match the declared layout.

    Attributes:
        file_path: Path to the graph data file if relevant
        record_index: Index of the offending record, when known
    """

    file_path: Optional[str] = None
    record_index: Optional[int] = None


@dataclass
class InvalidSourceError(FlowMapError):
    """The requested source vertex cannot be used as a root.

    Raised for an out-of-range internal index.

    Attributes:
        source_index: The rejected internal vertex index
    """

    source_index: Optional[int] = None


@dataclass
class SourceNotFoundError(InvalidSourceError):
    """External source identifier is absent from the graph.

    Attributes:
        external_id: The identifier that was looked up
    """

    external_id: Optional[int] = None


@dataclass
class ComputationAborted(FlowMapError):
    """Shortest-path computation stopped by an external cancellation check.

    Attributes:
        iterations: Outer-loop iterations completed before stopping
    """

    iterations: int = 0


@dataclass
class PersistenceError(FlowMapError):
    """The spatial store is unreachable or a write failed.

    The surrounding transaction has been rolled back when this is raised.

    Attributes:
        table: Target table name
    """

    table: str = ""


@dataclass
class RenderingError(FlowMapError):
    """Canvas or document sink failure.

    Attributes:
        output_path: Path where rendering was attempted
        renderer_type: Type of canvas that failed
    """

    output_path: Optional[str] = None
    renderer_type: str = ""


@dataclass
class ConfigurationError(FlowMapError):
    """Invalid or missing configuration.

    Attributes:
        setting_name: Name of the problematic setting
        expected_type: Expected type or format
    """

    setting_name: str = ""
    expected_type: Optional[str] = None
