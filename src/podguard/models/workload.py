"""
Workload data model for podguard.

Typed views over the parts of a Kubernetes pod template that rules read.
Each view is built from a manifest dictionary (camelCase keys, as found in
YAML) with ``from_dict``. Optional fields keep ``None`` when unset so that
"not set" stays distinguishable from an explicit false or zero.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class WorkloadKind(Enum):
    """Kinds of workload controllers that carry a pod template."""

    DEPLOYMENT = "Deployment"
    STATEFUL_SET = "StatefulSet"
    DAEMON_SET = "DaemonSet"
    JOB = "Job"
    CRON_JOB = "CronJob"
    REPLICATION_CONTROLLER = "ReplicationController"
    REPLICA_SET = "ReplicaSet"
    POD = "Pod"

    @classmethod
    def from_string(cls, value: str) -> WorkloadKind:
        """
        Create WorkloadKind from a manifest ``kind`` value.

        Args:
            value: Kind name (case-insensitive)

        Returns:
            Matching WorkloadKind

        Raises:
            ValueError: If the kind is not supported
        """
        value_lower = str(value).lower()
        for kind in cls:
            if kind.value.lower() == value_lower:
                return kind
        raise ValueError(f"Unsupported workload kind: {value}")


@dataclass(frozen=True)
class ContainerPort:
    """A port declared by a container."""

    container_port: int | None = None
    host_port: int | None = None
    protocol: str = "TCP"
    name: str = ""

    @property
    def binds_host_port(self) -> bool:
        """True when a non-zero host port is bound."""
        return bool(self.host_port)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ContainerPort:
        """Create from dictionary."""
        return cls(
            container_port=data.get("containerPort"),
            host_port=data.get("hostPort"),
            protocol=data.get("protocol") or "TCP",
            name=data.get("name") or "",
        )


@dataclass(frozen=True)
class ResourceRequirements:
    """CPU and memory requests and limits."""

    requests: dict[str, Any] = field(default_factory=dict)
    limits: dict[str, Any] = field(default_factory=dict)

    def has_request(self, resource: str) -> bool:
        """Check whether a non-empty request is set for a resource."""
        return _is_set(self.requests.get(resource))

    def has_limit(self, resource: str) -> bool:
        """Check whether a non-empty limit is set for a resource."""
        return _is_set(self.limits.get(resource))

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> ResourceRequirements:
        """Create from dictionary."""
        data = data or {}
        return cls(
            requests=dict(data.get("requests") or {}),
            limits=dict(data.get("limits") or {}),
        )


@dataclass(frozen=True)
class Capabilities:
    """Linux capabilities added to or dropped from a container."""

    add: tuple[str, ...] = ()
    drop: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Capabilities:
        """Create from dictionary."""
        data = data or {}
        return cls(
            add=tuple(str(c) for c in data.get("add") or []),
            drop=tuple(str(c) for c in data.get("drop") or []),
        )


@dataclass(frozen=True)
class SecurityContext:
    """
    Container-level security settings.

    Every field is optional. ``None`` means the manifest did not set it.
    """

    run_as_non_root: bool | None = None
    run_as_user: int | None = None
    read_only_root_filesystem: bool | None = None
    privileged: bool | None = None
    allow_privilege_escalation: bool | None = None
    capabilities: Capabilities | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> SecurityContext:
        """Create from dictionary."""
        data = data or {}
        capabilities = data.get("capabilities")
        return cls(
            run_as_non_root=data.get("runAsNonRoot"),
            run_as_user=data.get("runAsUser"),
            read_only_root_filesystem=data.get("readOnlyRootFilesystem"),
            privileged=data.get("privileged"),
            allow_privilege_escalation=data.get("allowPrivilegeEscalation"),
            capabilities=(
                Capabilities.from_dict(capabilities)
                if capabilities is not None else None
            ),
        )


@dataclass(frozen=True)
class PodSecurityContext:
    """Pod-level security defaults inherited by containers."""

    run_as_non_root: bool | None = None
    run_as_user: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> PodSecurityContext:
        """Create from dictionary."""
        data = data or {}
        return cls(
            run_as_non_root=data.get("runAsNonRoot"),
            run_as_user=data.get("runAsUser"),
        )


@dataclass(frozen=True)
class Container:
    """
    A container of a pod template.

    Attributes:
        name: Container name
        image: Image reference
        image_pull_policy: Pull policy as written in the manifest
        resources: Requests and limits
        ports: Declared ports
        security_context: Container security settings, if any
        liveness_probe: Liveness probe definition, if any
        readiness_probe: Readiness probe definition, if any
    """

    name: str = ""
    image: str = ""
    image_pull_policy: str = ""
    resources: ResourceRequirements = field(default_factory=ResourceRequirements)
    ports: tuple[ContainerPort, ...] = ()
    security_context: SecurityContext | None = None
    liveness_probe: dict[str, Any] | None = None
    readiness_probe: dict[str, Any] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Container:
        """Create from dictionary."""
        security_context = data.get("securityContext")
        return cls(
            name=data.get("name") or "",
            image=data.get("image") or "",
            image_pull_policy=data.get("imagePullPolicy") or "",
            resources=ResourceRequirements.from_dict(data.get("resources")),
            ports=tuple(
                ContainerPort.from_dict(p) for p in data.get("ports") or []
            ),
            security_context=(
                SecurityContext.from_dict(security_context)
                if security_context is not None else None
            ),
            liveness_probe=data.get("livenessProbe"),
            readiness_probe=data.get("readinessProbe"),
        )


@dataclass(frozen=True)
class PodSpec:
    """The parts of a pod spec that rules read."""

    containers: tuple[Container, ...] = ()
    init_containers: tuple[Container, ...] = ()
    security_context: PodSecurityContext | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> PodSpec:
        """Create from dictionary."""
        data = data or {}
        security_context = data.get("securityContext")
        return cls(
            containers=tuple(
                Container.from_dict(c) for c in data.get("containers") or []
            ),
            init_containers=tuple(
                Container.from_dict(c) for c in data.get("initContainers") or []
            ),
            security_context=(
                PodSecurityContext.from_dict(security_context)
                if security_context is not None else None
            ),
        )


def _is_set(value: Any) -> bool:
    """Quantities of 0 count as set, empty strings do not."""
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    return True
