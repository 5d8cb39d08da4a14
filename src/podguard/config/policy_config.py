"""
Policy configuration for podguard.

Holds the rule severity mapping, the exemption list and the flag that
disables exemptions. Configurations are immutable once built and may be
shared across concurrent evaluations.

The file format mirrors the usual YAML layout::

    checks:
      cpuRequestsMissing: warning
      cpuLimitsMissing: error
    exemptions:
      - rules: [cpuLimitsMissing]
        controllerNames: [metrics-agent]
    disallowExemptions: false
    capabilities:
      dangerous: [ALL, SYS_ADMIN, NET_ADMIN]
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

import yaml

from podguard.models.result import Severity

logger = logging.getLogger(__name__)


DEFAULT_DANGEROUS_CAPABILITIES = frozenset({
    "ALL",
    "SYS_ADMIN",
    "NET_ADMIN",
})

DEFAULT_INSECURE_CAPABILITIES = frozenset({
    "CHOWN",
    "DAC_OVERRIDE",
    "FSETID",
    "FOWNER",
    "MKNOD",
    "NET_RAW",
    "SETGID",
    "SETUID",
    "SETFCAP",
    "SETPCAP",
    "NET_BIND_SERVICE",
    "SYS_CHROOT",
    "KILL",
    "AUDIT_WRITE",
})

DEFAULT_CHECKS = {
    "cpuRequestsMissing": Severity.WARNING,
    "cpuLimitsMissing": Severity.WARNING,
    "memoryRequestsMissing": Severity.WARNING,
    "memoryLimitsMissing": Severity.WARNING,
    "livenessProbeMissing": Severity.WARNING,
    "readinessProbeMissing": Severity.WARNING,
    "tagNotSpecified": Severity.ERROR,
    "pullPolicyNotAlways": Severity.IGNORE,
    "hostPortSet": Severity.WARNING,
    "runAsRootAllowed": Severity.WARNING,
    "runAsPrivileged": Severity.ERROR,
    "notReadOnlyRootFileSystem": Severity.WARNING,
    "privilegeEscalationAllowed": Severity.ERROR,
    "dangerousCapabilities": Severity.ERROR,
    "insecureCapabilities": Severity.WARNING,
}


class ConfigurationError(ValueError):
    """Raised when a policy configuration is malformed."""

    def __init__(
        self,
        message: str,
        errors: list[str] | None = None,
        source_path: str | None = None,
    ):
        self.errors = errors or [message]
        self.source_path = source_path
        prefix = f"{source_path}: " if source_path else ""
        super().__init__(f"{prefix}{message}")


@dataclass(frozen=True)
class ExemptionRule:
    """
    Suppresses a set of rules for a set of controllers.

    Attributes:
        rules: Rule IDs the exemption applies to
        controller_names: Controller names the exemption applies to
    """

    rules: frozenset[str] = frozenset()
    controller_names: frozenset[str] = frozenset()

    def matches(self, rule_id: str, controller_name: str) -> bool:
        """Check whether both the rule and the controller are listed."""
        return rule_id in self.rules and controller_name in self.controller_names

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "rules": sorted(self.rules),
            "controllerNames": sorted(self.controller_names),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExemptionRule:
        """Create from dictionary."""
        controller_names = data.get("controllerNames")
        if controller_names is None:
            controller_names = data.get("controller_names")
        return cls(
            rules=frozenset(str(r) for r in data.get("rules") or []),
            controller_names=frozenset(str(n) for n in controller_names or []),
        )


@dataclass(frozen=True)
class CapabilityReference:
    """Reference lists of Linux capabilities considered risky."""

    dangerous: frozenset[str] = DEFAULT_DANGEROUS_CAPABILITIES
    insecure: frozenset[str] = DEFAULT_INSECURE_CAPABILITIES

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "dangerous": sorted(self.dangerous),
            "insecure": sorted(self.insecure),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> CapabilityReference:
        """Create from dictionary, keeping defaults for omitted lists."""
        data = data or {}
        dangerous = data.get("dangerous")
        insecure = data.get("insecure")
        return cls(
            dangerous=(
                frozenset(str(c) for c in dangerous)
                if dangerous is not None else DEFAULT_DANGEROUS_CAPABILITIES
            ),
            insecure=(
                frozenset(str(c) for c in insecure)
                if insecure is not None else DEFAULT_INSECURE_CAPABILITIES
            ),
        )


@dataclass(frozen=True)
class PolicyConfig:
    """
    Rule severities and exemptions for an evaluation run.

    Attributes:
        checks: Rule ID to severity mapping; absent rules never fire
        exemptions: Ordered exemption entries
        disallow_exemptions: Ignore every exemption when true
        capabilities: Capability reference lists used by capability rules
    """

    checks: dict[str, Severity] = field(default_factory=dict)
    exemptions: tuple[ExemptionRule, ...] = ()
    disallow_exemptions: bool = False
    capabilities: CapabilityReference = field(default_factory=CapabilityReference)

    def severity_for(self, rule_id: str) -> Severity | None:
        """
        Get the configured severity for a rule.

        Args:
            rule_id: Rule identifier

        Returns:
            Configured Severity, or None when the rule is not configured
        """
        return self.checks.get(rule_id)

    def is_enabled(self, rule_id: str) -> bool:
        """Check whether a rule is configured with an actionable severity."""
        severity = self.severity_for(rule_id)
        return severity is not None and severity.is_actionable

    def validate(self) -> list[str]:
        """
        Check the structure of the configuration.

        Returns:
            List of validation errors (empty if valid)
        """
        errors: list[str] = []

        if not isinstance(self.checks, dict):
            errors.append("checks must be a mapping of rule IDs to severities")
        else:
            for rule_id, severity in self.checks.items():
                if not isinstance(rule_id, str) or not rule_id:
                    errors.append(f"Invalid rule ID in checks: {rule_id!r}")
                if not isinstance(severity, Severity):
                    errors.append(
                        f"Check {rule_id} has invalid severity: {severity!r}"
                    )

        for i, exemption in enumerate(self.exemptions):
            if not isinstance(exemption, ExemptionRule):
                errors.append(f"Exemption {i} is not an exemption rule")
                continue
            if not exemption.rules:
                errors.append(f"Exemption {i} does not reference any rules")

        if not isinstance(self.capabilities, CapabilityReference):
            errors.append("capabilities must be a capability reference")

        return errors

    def ensure_valid(self) -> None:
        """
        Raise if the configuration is malformed.

        Raises:
            ConfigurationError: If validation finds any error
        """
        errors = self.validate()
        if errors:
            raise ConfigurationError(
                f"Invalid configuration: {'; '.join(errors)}", errors=errors
            )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "checks": {k: v.value for k, v in self.checks.items()},
            "exemptions": [e.to_dict() for e in self.exemptions],
            "disallowExemptions": self.disallow_exemptions,
            "capabilities": self.capabilities.to_dict(),
        }

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any] | None,
        known_rules: Iterable[str] | None = None,
        source_path: str | None = None,
    ) -> PolicyConfig:
        """
        Create from dictionary.

        Args:
            data: Parsed configuration
            known_rules: Rule IDs to validate against; unknown IDs are
                rejected when given
            source_path: File the data came from, used in error messages

        Returns:
            PolicyConfig instance

        Raises:
            ConfigurationError: If the data is malformed
        """
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                "Configuration must be a mapping", source_path=source_path
            )

        errors: list[str] = []
        known = set(known_rules) if known_rules is not None else None

        checks: dict[str, Severity] = {}
        raw_checks = data.get("checks")
        if raw_checks is None:
            raw_checks = {}
        if not isinstance(raw_checks, dict):
            errors.append("checks must be a mapping of rule IDs to severities")
            raw_checks = {}
        for rule_id, value in raw_checks.items():
            if known is not None and rule_id not in known:
                errors.append(f"Unknown rule in checks: {rule_id}")
                continue
            if isinstance(value, Severity):
                checks[rule_id] = value
                continue
            try:
                checks[rule_id] = Severity.from_string(value)
            except ValueError:
                errors.append(f"Check {rule_id} has invalid severity: {value!r}")

        exemptions: list[ExemptionRule] = []
        raw_exemptions = data.get("exemptions")
        if raw_exemptions is None:
            raw_exemptions = []
        if not isinstance(raw_exemptions, list):
            errors.append("exemptions must be a list")
            raw_exemptions = []
        for i, raw in enumerate(raw_exemptions):
            if not isinstance(raw, dict):
                errors.append(f"Exemption {i} must be a mapping")
                continue
            malformed = False
            for key in ("rules", "controllerNames", "controller_names"):
                if raw.get(key) is not None and not isinstance(raw[key], list):
                    errors.append(f"Exemption {i} {key} must be a list")
                    malformed = True
            if malformed:
                continue
            exemption = ExemptionRule.from_dict(raw)
            if not exemption.rules:
                errors.append(f"Exemption {i} does not reference any rules")
            if known is not None:
                for rule_id in sorted(exemption.rules - known):
                    errors.append(f"Exemption {i} references unknown rule: {rule_id}")
            exemptions.append(exemption)

        disallow = data.get("disallowExemptions", data.get("disallow_exemptions", False))
        if not isinstance(disallow, bool):
            errors.append(f"disallowExemptions must be a boolean, got {disallow!r}")
            disallow = False

        raw_capabilities = data.get("capabilities")
        if raw_capabilities is not None and not isinstance(raw_capabilities, dict):
            errors.append("capabilities must be a mapping")
            raw_capabilities = None

        if errors:
            raise ConfigurationError(
                f"Invalid configuration: {'; '.join(errors)}",
                errors=errors,
                source_path=source_path,
            )

        return cls(
            checks=checks,
            exemptions=tuple(exemptions),
            disallow_exemptions=disallow,
            capabilities=CapabilityReference.from_dict(raw_capabilities),
        )

    @classmethod
    def from_yaml(
        cls,
        content: str,
        known_rules: Iterable[str] | None = None,
        source_path: str | None = None,
    ) -> PolicyConfig:
        """
        Parse a YAML document into a configuration.

        Raises:
            ConfigurationError: If the YAML is invalid or malformed
        """
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML: {e}", source_path=source_path)
        return cls.from_dict(data, known_rules=known_rules, source_path=source_path)

    @classmethod
    def from_file(
        cls,
        path: str,
        known_rules: Iterable[str] | None = None,
    ) -> PolicyConfig:
        """
        Load configuration from a YAML or JSON file.

        Raises:
            ConfigurationError: If the file cannot be read or is malformed
        """
        path = os.path.expanduser(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigurationError(f"Cannot read configuration: {e}", source_path=path)

        logger.debug(f"Loading configuration from {path}")
        if path.endswith(".json"):
            try:
                data = json.loads(content)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"Invalid JSON: {e}", source_path=path)
            return cls.from_dict(data, known_rules=known_rules, source_path=path)
        return cls.from_yaml(content, known_rules=known_rules, source_path=path)

    def save(self, path: str) -> None:
        """Save configuration to a YAML or JSON file."""
        path = os.path.expanduser(path)
        Path(path).parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            if path.endswith(".json"):
                json.dump(self.to_dict(), f, indent=2)
            else:
                yaml.safe_dump(self.to_dict(), f, default_flow_style=False)


def create_default_config() -> PolicyConfig:
    """
    Create the stock configuration.

    Returns:
        PolicyConfig with the default severity for every built-in rule
    """
    return PolicyConfig(checks=dict(DEFAULT_CHECKS))


def load_config_from_env(known_rules: Iterable[str] | None = None) -> PolicyConfig:
    """
    Load configuration from environment variables.

    Environment variables:
        PODGUARD_CONFIG_FILE: Path to configuration file
        PODGUARD_DISALLOW_EXEMPTIONS: "true" to ignore all exemptions

    Args:
        known_rules: Rule IDs the configuration file is validated against

    Returns:
        PolicyConfig instance; the default configuration when no file is set
    """
    config_file = os.getenv("PODGUARD_CONFIG_FILE")
    if config_file:
        config = PolicyConfig.from_file(config_file, known_rules=known_rules)
    else:
        config = create_default_config()

    disallow = os.getenv("PODGUARD_DISALLOW_EXEMPTIONS")
    if disallow is not None and disallow.strip().lower() in ("1", "true", "yes"):
        config = PolicyConfig(
            checks=config.checks,
            exemptions=config.exemptions,
            disallow_exemptions=True,
            capabilities=config.capabilities,
        )

    return config
