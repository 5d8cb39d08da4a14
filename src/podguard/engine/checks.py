"""
Rule predicates for podguard.

Each predicate takes a CheckInput and returns True when the container
satisfies the rule. Predicates are total: missing fields map to a defined
outcome and nothing here raises for well-formed workload views.
"""

from __future__ import annotations

from dataclasses import dataclass

from podguard.config.policy_config import CapabilityReference
from podguard.engine.resolver import EffectiveSecuritySettings
from podguard.models.workload import Container, PodSecurityContext


@dataclass(frozen=True)
class CheckInput:
    """
    Everything a predicate may read about one container.

    Attributes:
        container: Container under evaluation
        pod_security_context: Pod-level security defaults, if any
        settings: Effective security settings for the container
        capabilities: Capability reference lists from the configuration
    """

    container: Container
    pod_security_context: PodSecurityContext | None
    settings: EffectiveSecuritySettings
    capabilities: CapabilityReference


# =============================================================================
# Resources
# =============================================================================


def has_cpu_requests(check: CheckInput) -> bool:
    return check.container.resources.has_request("cpu")


def has_memory_requests(check: CheckInput) -> bool:
    return check.container.resources.has_request("memory")


def has_cpu_limits(check: CheckInput) -> bool:
    return check.container.resources.has_limit("cpu")


def has_memory_limits(check: CheckInput) -> bool:
    return check.container.resources.has_limit("memory")


# =============================================================================
# Health checks
# =============================================================================


def has_liveness_probe(check: CheckInput) -> bool:
    # An empty probe mapping still counts as configured
    return check.container.liveness_probe is not None


def has_readiness_probe(check: CheckInput) -> bool:
    return check.container.readiness_probe is not None


# =============================================================================
# Images
# =============================================================================


def parse_image_reference(image: str) -> tuple[str | None, str | None]:
    """
    Split an image reference into its tag and digest.

    The digest is removed first, then the tag is read from the last path
    segment so that a registry port is never mistaken for a tag.

    Args:
        image: Image reference such as ``registry:5000/app:1.2@sha256:...``

    Returns:
        Tuple of (tag, digest); either may be None
    """
    reference, _, digest = image.strip().partition("@")
    last_segment = reference.rsplit("/", 1)[-1]

    tag = None
    if ":" in last_segment:
        tag = last_segment.rsplit(":", 1)[1]

    return tag, (digest or None)


def has_pinned_tag(check: CheckInput) -> bool:
    """True when the image names a tag other than ``latest`` or a digest."""
    tag, digest = parse_image_reference(check.container.image)
    if tag:
        return tag != "latest"
    return digest is not None


def pulls_always(check: CheckInput) -> bool:
    return check.container.image_pull_policy == "Always"


# =============================================================================
# Networking
# =============================================================================


def has_no_host_port(check: CheckInput) -> bool:
    return not any(port.binds_host_port for port in check.container.ports)


# =============================================================================
# Security
# =============================================================================


def runs_as_non_root(check: CheckInput) -> bool:
    return check.settings.runs_as_non_root


def is_not_privileged(check: CheckInput) -> bool:
    return check.settings.privileged is not True


def has_read_only_root_filesystem(check: CheckInput) -> bool:
    return check.settings.read_only_root_filesystem is True


def disallows_privilege_escalation(check: CheckInput) -> bool:
    """Only an explicit ``allowPrivilegeEscalation: true`` fails."""
    return check.settings.allow_privilege_escalation is not True


def normalize_capability(name: str) -> str:
    """Upper-case a capability name and strip any ``CAP_`` prefix."""
    name = name.strip().upper()
    if name.startswith("CAP_"):
        name = name[len("CAP_"):]
    return name


def _adds_any(check: CheckInput, reference: frozenset[str]) -> bool:
    added = {normalize_capability(c) for c in check.settings.added_capabilities}
    return bool(added & {normalize_capability(c) for c in reference})


def has_no_dangerous_capabilities(check: CheckInput) -> bool:
    return not _adds_any(check, check.capabilities.dangerous)


def has_no_insecure_capabilities(check: CheckInput) -> bool:
    return not _adds_any(check, check.capabilities.insecure)
