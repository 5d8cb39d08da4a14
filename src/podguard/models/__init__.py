"""
Data models for podguard.

This package provides the core data models used throughout podguard:

- Workload views: Container, PodSpec and their security settings
- Results: ResultMessage, ResultSet and the per-controller report types

Each container evaluation produces one ResultSet; ControllerResult and
AuditReport merge them for reporting.
"""

from podguard.models.result import (
    AuditReport,
    Category,
    ContainerResult,
    ControllerResult,
    Outcome,
    ResultMessage,
    ResultSet,
    Severity,
    Summary,
)
from podguard.models.workload import (
    Capabilities,
    Container,
    ContainerPort,
    PodSecurityContext,
    PodSpec,
    ResourceRequirements,
    SecurityContext,
    WorkloadKind,
)

__all__ = [
    # Result module
    "AuditReport",
    "Category",
    "ContainerResult",
    "ControllerResult",
    "Outcome",
    "ResultMessage",
    "ResultSet",
    "Severity",
    "Summary",
    # Workload module
    "Capabilities",
    "Container",
    "ContainerPort",
    "PodSecurityContext",
    "PodSpec",
    "ResourceRequirements",
    "SecurityContext",
    "WorkloadKind",
]
