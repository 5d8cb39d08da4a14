"""
Rule evaluation engine for podguard.

This package provides the container rules and the machinery that applies
them:

- RuleRegistry: catalogue of rules with categories and report modes
- Effective settings: pod to container inheritance of security fields
- ContainerEvaluator: evaluates one container into a ResultSet
"""

from podguard.engine.checks import CheckInput, parse_image_reference
from podguard.engine.evaluator import ContainerEvaluator, evaluate_container
from podguard.engine.registry import (
    ReportMode,
    Rule,
    RuleRegistry,
    default_registry,
    default_rules,
)
from podguard.engine.resolver import (
    EffectiveSecuritySettings,
    resolve_runs_as_non_root,
    resolve_security_settings,
)

__all__ = [
    # Checks
    "CheckInput",
    "parse_image_reference",
    # Evaluator
    "ContainerEvaluator",
    "evaluate_container",
    # Registry
    "ReportMode",
    "Rule",
    "RuleRegistry",
    "default_registry",
    "default_rules",
    # Resolver
    "EffectiveSecuritySettings",
    "resolve_runs_as_non_root",
    "resolve_security_settings",
]
