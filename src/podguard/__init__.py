"""
podguard - Kubernetes workload best-practice checks

Evaluates the containers of Kubernetes workloads against a configurable
set of rules covering resources, health checks, images, networking and
security context, and reports a severity-ranked result for each.

Quick Start:
    >>> from podguard import create_default_config, evaluate_container
    >>>
    >>> config = create_default_config()
    >>> results = evaluate_container(config, None, {"name": "app", "image": "nginx"})
    >>> print(results.summary())
"""

from __future__ import annotations

__version__ = "0.1.0"

# Models
from podguard.models import (
    AuditReport,
    Category,
    Container,
    ContainerResult,
    ControllerResult,
    Outcome,
    PodSecurityContext,
    PodSpec,
    ResultMessage,
    ResultSet,
    SecurityContext,
    Severity,
    Summary,
    WorkloadKind,
)

# Configuration
from podguard.config import (
    ConfigurationError,
    ExemptionRule,
    PolicyConfig,
    create_default_config,
    load_config_from_env,
)

# Engine
from podguard.engine import (
    ContainerEvaluator,
    ReportMode,
    Rule,
    RuleRegistry,
    default_registry,
    evaluate_container,
    resolve_runs_as_non_root,
)

# Exemptions
from podguard.exemptions import ExemptionMatcher, is_exempt

# Validation
from podguard.validator import (
    ManifestError,
    WorkloadValidator,
    load_manifests,
    validate_workload,
)

__all__ = [
    # Version
    "__version__",
    # Models
    "AuditReport",
    "Category",
    "Container",
    "ContainerResult",
    "ControllerResult",
    "Outcome",
    "PodSecurityContext",
    "PodSpec",
    "ResultMessage",
    "ResultSet",
    "SecurityContext",
    "Severity",
    "Summary",
    "WorkloadKind",
    # Configuration
    "ConfigurationError",
    "ExemptionRule",
    "PolicyConfig",
    "create_default_config",
    "load_config_from_env",
    # Engine
    "ContainerEvaluator",
    "ReportMode",
    "Rule",
    "RuleRegistry",
    "default_registry",
    "evaluate_container",
    "resolve_runs_as_non_root",
    # Exemptions
    "ExemptionMatcher",
    "is_exempt",
    # Validation
    "ManifestError",
    "WorkloadValidator",
    "load_manifests",
    "validate_workload",
]
