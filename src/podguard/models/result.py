"""
Result data model for podguard.

This module defines ResultMessage, the immutable outcome of evaluating a
single rule, and ResultSet, the keyed collection of messages produced by one
container evaluation. ControllerResult and AuditReport merge container
results into per-workload and per-run reports.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator


class Severity(Enum):
    """Weight assigned to a rule's failure by policy configuration."""

    IGNORE = "ignore"
    WARNING = "warning"
    ERROR = "error"

    @classmethod
    def from_string(cls, value: str) -> Severity:
        """
        Create Severity from string value.

        Args:
            value: String representation (case-insensitive)

        Returns:
            Matching Severity enum value

        Raises:
            ValueError: If value is not a valid severity
        """
        value_lower = str(value).strip().lower()
        for severity in cls:
            if severity.value == value_lower:
                return severity
        raise ValueError(f"Invalid severity: {value}")

    @property
    def is_actionable(self) -> bool:
        """True when a rule with this severity should run."""
        return self != Severity.IGNORE


class Category(Enum):
    """Reporting category of a rule."""

    RESOURCES = "Resources"
    HEALTH_CHECKS = "Health Checks"
    IMAGES = "Images"
    NETWORKING = "Networking"
    SECURITY = "Security"


class Outcome(Enum):
    """Outcome of a single rule evaluation."""

    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class ResultMessage:
    """
    Outcome of one rule evaluated against one container.

    Attributes:
        rule_id: Identifier of the rule that produced the message
        category: Category the rule belongs to
        outcome: Success or failure
        severity: Configured severity of the rule
        message: Human-readable message
    """

    rule_id: str
    category: Category
    outcome: Outcome
    severity: Severity
    message: str

    @property
    def is_success(self) -> bool:
        """True for success messages."""
        return self.outcome == Outcome.SUCCESS

    @property
    def is_failure(self) -> bool:
        """True for failure messages."""
        return self.outcome == Outcome.FAILURE

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.rule_id,
            "message": self.message,
            "type": self.outcome.value,
            "severity": self.severity.value,
            "category": self.category.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ResultMessage:
        """Create from dictionary."""
        return cls(
            rule_id=data["id"],
            category=Category(data["category"]),
            outcome=Outcome(data["type"]),
            severity=Severity.from_string(data["severity"]),
            message=data.get("message", ""),
        )


@dataclass(frozen=True)
class Summary:
    """Success, warning and error counts for a set of results."""

    successes: int = 0
    warnings: int = 0
    errors: int = 0

    @property
    def total(self) -> int:
        """Total number of counted messages."""
        return self.successes + self.warnings + self.errors

    @property
    def score(self) -> int:
        """Percentage of counted messages that are successes."""
        if self.total == 0:
            return 0
        return round(self.successes * 100 / self.total)

    def __add__(self, other: Summary) -> Summary:
        if not isinstance(other, Summary):
            return NotImplemented
        return Summary(
            successes=self.successes + other.successes,
            warnings=self.warnings + other.warnings,
            errors=self.errors + other.errors,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "successes": self.successes,
            "warnings": self.warnings,
            "errors": self.errors,
            "score": self.score,
        }


class ResultSet:
    """
    Messages produced by one container evaluation, keyed by rule ID.

    A rule contributes at most one message. Recording a second message for
    the same rule replaces the first.
    """

    def __init__(self, messages: list[ResultMessage] | None = None) -> None:
        self._results: dict[str, ResultMessage] = {}
        for message in messages or []:
            self.record(message)

    def __len__(self) -> int:
        return len(self._results)

    def __iter__(self) -> Iterator[ResultMessage]:
        return iter(self._results.values())

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._results

    def record(self, message: ResultMessage) -> None:
        """
        Add a message, replacing any existing entry for the same rule.

        Args:
            message: Message to record
        """
        self._results[message.rule_id] = message

    def get(self, rule_id: str) -> ResultMessage | None:
        """Get the message recorded for a rule, if any."""
        return self._results.get(rule_id)

    def rule_ids(self) -> list[str]:
        """Get the IDs of all rules that produced a message."""
        return list(self._results)

    def messages(self) -> list[ResultMessage]:
        """Get all recorded messages."""
        return list(self._results.values())

    def successes(self) -> list[ResultMessage]:
        """Get success messages of any severity."""
        return [m for m in self._results.values() if m.is_success]

    def failures(self) -> list[ResultMessage]:
        """Get failure messages of any severity."""
        return [m for m in self._results.values() if m.is_failure]

    def by_severity(self, severity: Severity) -> list[ResultMessage]:
        """
        Get failure messages with the given severity.

        Args:
            severity: Severity to filter by

        Returns:
            Failure messages whose severity matches
        """
        return [
            m for m in self._results.values()
            if m.is_failure and m.severity == severity
        ]

    def warnings(self) -> list[ResultMessage]:
        """Get failure messages with warning severity."""
        return self.by_severity(Severity.WARNING)

    def errors(self) -> list[ResultMessage]:
        """Get failure messages with error severity."""
        return self.by_severity(Severity.ERROR)

    def summary(self) -> Summary:
        """Compute success, warning and error counts."""
        return Summary(
            successes=len(self.successes()),
            warnings=len(self.warnings()),
            errors=len(self.errors()),
        )

    def to_dict(self) -> dict[str, dict[str, Any]]:
        """Convert to a dictionary keyed by rule ID."""
        return {rule_id: m.to_dict() for rule_id, m in self._results.items()}


@dataclass
class ContainerResult:
    """Results for a single container of a workload."""

    name: str
    results: ResultSet
    is_init_container: bool = False

    def summary(self) -> Summary:
        """Get summary for this container."""
        return self.results.summary()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "is_init_container": self.is_init_container,
            "summary": self.summary().to_dict(),
            "results": self.results.to_dict(),
        }


@dataclass
class ControllerResult:
    """Merged container results for one workload controller."""

    name: str
    kind: str
    namespace: str = ""
    containers: list[ContainerResult] = field(default_factory=list)

    def summary(self) -> Summary:
        """Sum of all container summaries."""
        total = Summary()
        for container in self.containers:
            total = total + container.summary()
        return total

    def messages(self) -> list[ResultMessage]:
        """All messages across containers."""
        return [m for c in self.containers for m in c.results]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "namespace": self.namespace,
            "kind": self.kind,
            "summary": self.summary().to_dict(),
            "containers": [c.to_dict() for c in self.containers],
        }


@dataclass
class AuditReport:
    """Results for every controller evaluated in one run."""

    controllers: list[ControllerResult] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.controllers)

    def __iter__(self) -> Iterator[ControllerResult]:
        return iter(self.controllers)

    def add(self, controller: ControllerResult) -> None:
        """Add a controller result to the report."""
        self.controllers.append(controller)

    def summary(self) -> Summary:
        """Sum of all controller summaries."""
        total = Summary()
        for controller in self.controllers:
            total = total + controller.summary()
        return total

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "summary": self.summary().to_dict(),
            "controllers": [c.to_dict() for c in self.controllers],
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)
