"""
Configuration management for podguard.

Provides the policy configuration model (rule severities, exemptions and
capability reference lists) and utilities for loading it from files or the
environment.
"""

from podguard.config.policy_config import (
    DEFAULT_CHECKS,
    DEFAULT_DANGEROUS_CAPABILITIES,
    DEFAULT_INSECURE_CAPABILITIES,
    CapabilityReference,
    ConfigurationError,
    ExemptionRule,
    PolicyConfig,
    create_default_config,
    load_config_from_env,
)

__all__ = [
    "DEFAULT_CHECKS",
    "DEFAULT_DANGEROUS_CAPABILITIES",
    "DEFAULT_INSECURE_CAPABILITIES",
    "CapabilityReference",
    "ConfigurationError",
    "ExemptionRule",
    "PolicyConfig",
    "create_default_config",
    "load_config_from_env",
]
