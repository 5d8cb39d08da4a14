"""
Exemption matcher for podguard.

Decides whether a rule is suppressed for a controller by the exemption
entries of a policy configuration.
"""

from __future__ import annotations

from podguard.config.policy_config import ExemptionRule, PolicyConfig


class ExemptionMatcher:
    """
    Matches rule/controller pairs against configured exemptions.

    An exemption applies when it lists both the rule and the controller.
    Nothing is exempt while the configuration disallows exemptions.
    """

    def __init__(self, config: PolicyConfig):
        """
        Initialize the matcher.

        Args:
            config: Policy configuration holding the exemptions
        """
        self._config = config

    @property
    def exemptions_allowed(self) -> bool:
        """Whether exemptions are honoured at all."""
        return not self._config.disallow_exemptions

    def matching_exemptions(
        self,
        rule_id: str,
        controller_name: str,
    ) -> list[ExemptionRule]:
        """
        Get every exemption entry that covers a rule for a controller.

        Args:
            rule_id: Rule identifier
            controller_name: Name of the owning controller

        Returns:
            Matching entries in configuration order; empty when exemptions
            are disallowed
        """
        if not self.exemptions_allowed:
            return []
        return [
            e for e in self._config.exemptions
            if e.matches(rule_id, controller_name)
        ]

    def is_exempt(self, rule_id: str, controller_name: str) -> bool:
        """
        Check whether a rule is exempt for a controller.

        Args:
            rule_id: Rule identifier
            controller_name: Name of the owning controller

        Returns:
            True if the rule must be skipped
        """
        if not self.exemptions_allowed:
            return False
        return any(
            e.matches(rule_id, controller_name)
            for e in self._config.exemptions
        )


def is_exempt(rule_id: str, controller_name: str, config: PolicyConfig) -> bool:
    """
    Check whether a rule is exempt for a controller.

    Convenience function for one-off matching.

    Args:
        rule_id: Rule identifier
        controller_name: Name of the owning controller
        config: Policy configuration

    Returns:
        True if the rule must be skipped
    """
    return ExemptionMatcher(config).is_exempt(rule_id, controller_name)
