"""
Rule registry for podguard.

Provides the catalogue of container rules. Each rule pairs a predicate
with its category, report mode and the messages it produces.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator

from podguard.engine import checks
from podguard.engine.checks import CheckInput
from podguard.models.result import Category
from podguard.models.workload import WorkloadKind


class ReportMode(Enum):
    """Which outcomes a rule reports."""

    FAILURE_ONLY = "failure_only"
    BOTH_OUTCOMES = "both_outcomes"

    @property
    def reports_success(self) -> bool:
        return self == ReportMode.BOTH_OUTCOMES


@dataclass(frozen=True)
class Rule:
    """
    A single container rule.

    Attributes:
        rule_id: Unique identifier, used as the configuration key
        category: Reporting category
        report_mode: Whether successes are reported
        predicate: Returns True when the container satisfies the rule
        success_message: Message recorded when the predicate holds
        failure_message: Message recorded when it does not
        skip_init_containers: Never evaluate against init containers
        excluded_kinds: Workload kinds the rule does not apply to
    """

    rule_id: str
    category: Category
    report_mode: ReportMode
    predicate: Callable[[CheckInput], bool]
    success_message: str
    failure_message: str
    skip_init_containers: bool = False
    excluded_kinds: frozenset[WorkloadKind] = frozenset()

    def applies_to(
        self,
        is_init_container: bool,
        kind: WorkloadKind | None = None,
    ) -> bool:
        """
        Check whether the rule applies to a container context.

        Args:
            is_init_container: Whether the container is an init container
            kind: Kind of the owning workload, if known

        Returns:
            True if the rule should be considered
        """
        if is_init_container and self.skip_init_containers:
            return False
        if kind is not None and kind in self.excluded_kinds:
            return False
        return True

    def message_for(self, passed: bool) -> str:
        """Get the message for an outcome."""
        return self.success_message if passed else self.failure_message


class RuleRegistry:
    """
    Ordered catalogue of rules keyed by rule ID.

    Registration is thread-safe. Lookups do not lock since rules are
    immutable and the registry is not modified during evaluation.
    """

    def __init__(self, rules: list[Rule] | None = None):
        """Initialize the registry."""
        self._rules: dict[str, Rule] = {}
        self._lock = threading.RLock()
        for rule in rules or []:
            self.register(rule)

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(list(self._rules.values()))

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._rules

    def register(self, rule: Rule) -> Rule:
        """
        Register a rule.

        Args:
            rule: Rule to register

        Returns:
            The registered rule

        Raises:
            ValueError: If a rule with the same ID is already registered
        """
        with self._lock:
            if rule.rule_id in self._rules:
                raise ValueError(f"Rule '{rule.rule_id}' is already registered")
            self._rules[rule.rule_id] = rule
            return rule

    def get(self, rule_id: str) -> Rule | None:
        """Get a rule by ID."""
        return self._rules.get(rule_id)

    def rule_ids(self) -> list[str]:
        """Get all registered rule IDs in registration order."""
        return list(self._rules)

    def by_category(self, category: Category) -> list[Rule]:
        """Get rules belonging to a category."""
        return [r for r in self._rules.values() if r.category == category]

    def applicable(
        self,
        is_init_container: bool,
        kind: WorkloadKind | None = None,
    ) -> list[Rule]:
        """
        Get rules that apply to a container context.

        Args:
            is_init_container: Whether the container is an init container
            kind: Kind of the owning workload, if known

        Returns:
            Applicable rules in registration order
        """
        return [
            r for r in self._rules.values()
            if r.applies_to(is_init_container, kind)
        ]


_NO_HEALTH_CHECK_KINDS = frozenset({WorkloadKind.JOB, WorkloadKind.CRON_JOB})


def default_rules() -> list[Rule]:
    """Build the built-in container rules."""
    return [
        # Resources
        Rule(
            rule_id="cpuRequestsMissing",
            category=Category.RESOURCES,
            report_mode=ReportMode.FAILURE_ONLY,
            predicate=checks.has_cpu_requests,
            success_message="CPU requests are set",
            failure_message="CPU requests should be set",
        ),
        Rule(
            rule_id="memoryRequestsMissing",
            category=Category.RESOURCES,
            report_mode=ReportMode.FAILURE_ONLY,
            predicate=checks.has_memory_requests,
            success_message="Memory requests are set",
            failure_message="Memory requests should be set",
        ),
        Rule(
            rule_id="cpuLimitsMissing",
            category=Category.RESOURCES,
            report_mode=ReportMode.FAILURE_ONLY,
            predicate=checks.has_cpu_limits,
            success_message="CPU limits are set",
            failure_message="CPU limits should be set",
        ),
        Rule(
            rule_id="memoryLimitsMissing",
            category=Category.RESOURCES,
            report_mode=ReportMode.FAILURE_ONLY,
            predicate=checks.has_memory_limits,
            success_message="Memory limits are set",
            failure_message="Memory limits should be set",
        ),
        # Health checks
        Rule(
            rule_id="livenessProbeMissing",
            category=Category.HEALTH_CHECKS,
            report_mode=ReportMode.BOTH_OUTCOMES,
            predicate=checks.has_liveness_probe,
            success_message="Liveness probe is configured",
            failure_message="Liveness probe should be configured",
            skip_init_containers=True,
            excluded_kinds=_NO_HEALTH_CHECK_KINDS,
        ),
        Rule(
            rule_id="readinessProbeMissing",
            category=Category.HEALTH_CHECKS,
            report_mode=ReportMode.BOTH_OUTCOMES,
            predicate=checks.has_readiness_probe,
            success_message="Readiness probe is configured",
            failure_message="Readiness probe should be configured",
            skip_init_containers=True,
            excluded_kinds=_NO_HEALTH_CHECK_KINDS,
        ),
        # Images
        Rule(
            rule_id="tagNotSpecified",
            category=Category.IMAGES,
            report_mode=ReportMode.FAILURE_ONLY,
            predicate=checks.has_pinned_tag,
            success_message="Image tag is specified",
            failure_message="Image tag should be specified",
        ),
        Rule(
            rule_id="pullPolicyNotAlways",
            category=Category.IMAGES,
            report_mode=ReportMode.FAILURE_ONLY,
            predicate=checks.pulls_always,
            success_message='Image pull policy is "Always"',
            failure_message='Image pull policy should be "Always"',
        ),
        # Networking
        Rule(
            rule_id="hostPortSet",
            category=Category.NETWORKING,
            report_mode=ReportMode.BOTH_OUTCOMES,
            predicate=checks.has_no_host_port,
            success_message="Host port is not configured",
            failure_message="Host port should not be configured",
        ),
        # Security
        Rule(
            rule_id="runAsRootAllowed",
            category=Category.SECURITY,
            report_mode=ReportMode.BOTH_OUTCOMES,
            predicate=checks.runs_as_non_root,
            success_message="Is not allowed to run as root",
            failure_message="Should not be allowed to run as root",
        ),
        Rule(
            rule_id="runAsPrivileged",
            category=Category.SECURITY,
            report_mode=ReportMode.BOTH_OUTCOMES,
            predicate=checks.is_not_privileged,
            success_message="Not running as privileged",
            failure_message="Should not be running as privileged",
        ),
        Rule(
            rule_id="notReadOnlyRootFileSystem",
            category=Category.SECURITY,
            report_mode=ReportMode.BOTH_OUTCOMES,
            predicate=checks.has_read_only_root_filesystem,
            success_message="Filesystem is read only",
            failure_message="Filesystem should be read only",
        ),
        Rule(
            rule_id="privilegeEscalationAllowed",
            category=Category.SECURITY,
            report_mode=ReportMode.BOTH_OUTCOMES,
            predicate=checks.disallows_privilege_escalation,
            success_message="Privilege escalation not allowed",
            failure_message="Privilege escalation should not be allowed",
        ),
        Rule(
            rule_id="dangerousCapabilities",
            category=Category.SECURITY,
            report_mode=ReportMode.BOTH_OUTCOMES,
            predicate=checks.has_no_dangerous_capabilities,
            success_message="Container does not have any dangerous capabilities",
            failure_message="Container should not have dangerous capabilities",
        ),
        Rule(
            rule_id="insecureCapabilities",
            category=Category.SECURITY,
            report_mode=ReportMode.BOTH_OUTCOMES,
            predicate=checks.has_no_insecure_capabilities,
            success_message="Container does not have any insecure capabilities",
            failure_message="Container should not have insecure capabilities",
        ),
    ]


def default_registry() -> RuleRegistry:
    """
    Build a registry holding the built-in rules.

    Returns:
        New RuleRegistry instance
    """
    return RuleRegistry(default_rules())
