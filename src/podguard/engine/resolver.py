"""
Effective security settings for podguard.

Kubernetes lets a pod declare security defaults that its containers inherit
unless they override them. This module folds the pod-level and
container-level contexts into the single view the rules read.
"""

from __future__ import annotations

from dataclasses import dataclass

from podguard.models.workload import PodSecurityContext, SecurityContext


@dataclass(frozen=True)
class EffectiveSecuritySettings:
    """
    Security settings in force for one container.

    Attributes:
        runs_as_non_root: True only when the container is guaranteed not
            to run as UID 0
        privileged: Explicit ``privileged`` value, if any
        read_only_root_filesystem: Explicit ``readOnlyRootFilesystem`` value
        allow_privilege_escalation: Explicit ``allowPrivilegeEscalation`` value
        added_capabilities: Capabilities added to the container
        dropped_capabilities: Capabilities dropped from the container
    """

    runs_as_non_root: bool = False
    privileged: bool | None = None
    read_only_root_filesystem: bool | None = None
    allow_privilege_escalation: bool | None = None
    added_capabilities: frozenset[str] = frozenset()
    dropped_capabilities: frozenset[str] = frozenset()


def resolve_runs_as_non_root(
    container_run_as_non_root: bool | None,
    container_run_as_user: int | None,
    pod_run_as_non_root: bool | None,
    pod_run_as_user: int | None,
) -> bool:
    """
    Decide whether a container is guaranteed to run as a non-root user.

    The first setting present wins, in this order: container
    ``runAsNonRoot``, container ``runAsUser``, pod ``runAsNonRoot``, pod
    ``runAsUser``. A ``runAsUser`` of 0 means root. When nothing is set the
    container is treated as root.

    Args:
        container_run_as_non_root: Container ``runAsNonRoot``
        container_run_as_user: Container ``runAsUser``
        pod_run_as_non_root: Pod ``runAsNonRoot``
        pod_run_as_user: Pod ``runAsUser``

    Returns:
        True if the container cannot run as root
    """
    if container_run_as_non_root is not None:
        return bool(container_run_as_non_root)
    if container_run_as_user is not None:
        return container_run_as_user != 0
    if pod_run_as_non_root is not None:
        return bool(pod_run_as_non_root)
    if pod_run_as_user is not None:
        return pod_run_as_user != 0
    return False


def resolve_security_settings(
    pod_context: PodSecurityContext | None,
    container_context: SecurityContext | None,
) -> EffectiveSecuritySettings:
    """
    Build the effective security settings for a container.

    Args:
        pod_context: Pod-level security defaults, if any
        container_context: Container security context, if any

    Returns:
        EffectiveSecuritySettings for the container
    """
    pod = pod_context or PodSecurityContext()
    container = container_context or SecurityContext()

    added: frozenset[str] = frozenset()
    dropped: frozenset[str] = frozenset()
    if container.capabilities is not None:
        added = frozenset(container.capabilities.add)
        dropped = frozenset(container.capabilities.drop)

    return EffectiveSecuritySettings(
        runs_as_non_root=resolve_runs_as_non_root(
            container.run_as_non_root,
            container.run_as_user,
            pod.run_as_non_root,
            pod.run_as_user,
        ),
        privileged=container.privileged,
        read_only_root_filesystem=container.read_only_root_filesystem,
        allow_privilege_escalation=container.allow_privilege_escalation,
        added_capabilities=added,
        dropped_capabilities=dropped,
    )
