"""
Tagged Result Types

Every derived metric reports its own confidence alongside its value.
MetricWithStatus carries that tag; DataSource records which input track
(structured property data or transaction history) a figure came from.
"""

import enum
from dataclasses import dataclass
from typing import Dict, Optional, Union


class MetricStatus(str, enum.Enum):
    """Quality of a computed metric."""

    success = "success"
    incomplete = "incomplete"
    warning = "warning"
    error = "error"


@dataclass(frozen=True)
class MetricWithStatus:
    """A computed value (or None) tagged with how much input data backed it."""

    value: Optional[float]
    status: MetricStatus
    message: Optional[str] = None

    @classmethod
    def success(cls, value: Optional[float], message: Optional[str] = None) -> "MetricWithStatus":
        return cls(value, MetricStatus.success, message)

    @classmethod
    def incomplete(cls, value: Optional[float], message: str) -> "MetricWithStatus":
        return cls(value, MetricStatus.incomplete, message)

    @classmethod
    def warning(cls, value: Optional[float], message: str) -> "MetricWithStatus":
        return cls(value, MetricStatus.warning, message)

    @classmethod
    def error(cls, value: Optional[float], message: str) -> "MetricWithStatus":
        return cls(value, MetricStatus.error, message)

    @property
    def is_degraded(self) -> bool:
        return self.status is not MetricStatus.success

    def to_dict(self) -> Dict:
        result = {"value": self.value, "status": self.status.value}
        if self.message is not None:
            result["message"] = self.message
        return result


# =============================================================================
# DATA SOURCE
# =============================================================================


@dataclass(frozen=True)
class Structured:
    """Value taken from the property's structured income/expense records."""

    value: float
    kind: str = "structured"


@dataclass(frozen=True)
class Derived:
    """Value derived from transaction history."""

    value: float
    kind: str = "transactions"


@dataclass(frozen=True)
class Unavailable:
    """Neither track produced a usable value."""

    kind: str = "unavailable"

    @property
    def value(self) -> None:
        return None


DataSource = Union[Structured, Derived, Unavailable]


def resolve_source(
    structured: Optional[float], derived: Optional[float]
) -> DataSource:
    """
    Pick the authoritative value between the two input tracks.

    Structured data wins unless it is absent or exactly zero, in which
    case transaction history is used. The two are never added together.

    Args:
        structured: Sum from structured records, or None if no record exists
        derived: Sum from transactions, or None if no transactions were supplied

    Returns:
        Structured, Derived, or Unavailable
    """
    if structured is not None and structured != 0:
        return Structured(structured)
    if derived is not None and derived != 0:
        return Derived(derived)
    if structured is not None:
        return Structured(structured)
    if derived is not None:
        return Derived(derived)
    return Unavailable()


def value_or_zero(source: DataSource) -> float:
    """Numeric value of a resolved source, zero when unavailable."""
    if isinstance(source, Unavailable):
        return 0.0
    return source.value
