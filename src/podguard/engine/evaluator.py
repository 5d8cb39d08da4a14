"""
Container evaluator for podguard.

Runs every applicable rule of a registry against one container and
collects the outcomes in a ResultSet.
"""

from __future__ import annotations

from typing import Any

from podguard.config.policy_config import ConfigurationError, PolicyConfig
from podguard.engine.checks import CheckInput
from podguard.engine.registry import RuleRegistry, default_registry
from podguard.engine.resolver import resolve_security_settings
from podguard.exemptions.matcher import ExemptionMatcher
from podguard.models.result import Outcome, ResultMessage, ResultSet
from podguard.models.workload import (
    Container,
    PodSecurityContext,
    PodSpec,
    WorkloadKind,
)
from podguard.observability.logging import get_logger

logger = get_logger(__name__)


class ContainerEvaluator:
    """
    Evaluates the rules of a registry against single containers.

    The evaluator holds no per-call state, so one instance may serve
    concurrent evaluations.
    """

    def __init__(self, registry: RuleRegistry | None = None):
        """
        Initialize the evaluator.

        Args:
            registry: Rules to evaluate; the built-in rules when omitted
        """
        self.registry = registry if registry is not None else default_registry()

    def evaluate(
        self,
        config: PolicyConfig,
        pod: PodSecurityContext | PodSpec | None,
        container: Container | dict[str, Any],
        controller_name: str = "",
        kind: WorkloadKind | str | None = WorkloadKind.DEPLOYMENT,
        is_init_container: bool = False,
    ) -> ResultSet:
        """
        Evaluate one container.

        Args:
            config: Policy configuration
            pod: Pod security defaults, or the pod spec carrying them
            container: Container view or manifest dictionary
            controller_name: Name of the owning controller, used for exemptions
            kind: Kind of the owning workload
            is_init_container: Whether the container is an init container

        Returns:
            ResultSet with one message per reported rule

        Raises:
            ConfigurationError: If the configuration is malformed
        """
        if not isinstance(config, PolicyConfig):
            raise ConfigurationError(
                f"Expected PolicyConfig, got {type(config).__name__}"
            )
        config.ensure_valid()

        if isinstance(container, dict):
            container = Container.from_dict(container)
        if isinstance(pod, PodSpec):
            pod = pod.security_context
        if isinstance(kind, str):
            kind = WorkloadKind.from_string(kind)

        logger.evaluation_started(
            controller_name, kind.value if kind else "", container.name
        )

        check = CheckInput(
            container=container,
            pod_security_context=pod,
            settings=resolve_security_settings(pod, container.security_context),
            capabilities=config.capabilities,
        )
        exemptions = ExemptionMatcher(config)
        results = ResultSet()

        for rule in self.registry.applicable(is_init_container, kind):
            if not config.is_enabled(rule.rule_id):
                continue
            severity = config.severity_for(rule.rule_id)

            matched = exemptions.matching_exemptions(rule.rule_id, controller_name)
            if matched:
                logger.rule_exempted(
                    rule.rule_id, controller_name, exemption_count=len(matched)
                )
                continue

            passed = rule.predicate(check)
            if passed and not rule.report_mode.reports_success:
                continue

            results.record(ResultMessage(
                rule_id=rule.rule_id,
                category=rule.category,
                outcome=Outcome.SUCCESS if passed else Outcome.FAILURE,
                severity=severity,
                message=rule.message_for(passed),
            ))

        summary = results.summary()
        logger.evaluation_completed(
            controller_name,
            container.name,
            summary.successes,
            summary.warnings,
            summary.errors,
        )
        return results


def evaluate_container(
    config: PolicyConfig,
    pod: PodSecurityContext | PodSpec | None,
    container: Container | dict[str, Any],
    controller_name: str = "",
    kind: WorkloadKind | str | None = WorkloadKind.DEPLOYMENT,
    is_init_container: bool = False,
) -> ResultSet:
    """
    Evaluate one container against the built-in rules.

    Convenience function for one-off evaluation.

    Args:
        config: Policy configuration
        pod: Pod security defaults, or the pod spec carrying them
        container: Container view or manifest dictionary
        controller_name: Name of the owning controller
        kind: Kind of the owning workload
        is_init_container: Whether the container is an init container

    Returns:
        ResultSet for the container
    """
    evaluator = ContainerEvaluator()
    return evaluator.evaluate(
        config,
        pod,
        container,
        controller_name=controller_name,
        kind=kind,
        is_init_container=is_init_container,
    )
