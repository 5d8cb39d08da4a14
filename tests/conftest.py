"""
Pytest configuration and fixtures for podguard tests.

This module provides common fixtures used across unit tests.
"""

from __future__ import annotations

from typing import Any

import pytest

from podguard.config import PolicyConfig, create_default_config
from podguard.engine import ContainerEvaluator, RuleRegistry, default_registry
from podguard.models import Container, PodSecurityContext, Severity


# Configuration fixtures


@pytest.fixture
def default_config() -> PolicyConfig:
    """Return the stock configuration."""
    return create_default_config()


@pytest.fixture
def resource_config() -> PolicyConfig:
    """Return a configuration enabling only the resource checks."""
    return PolicyConfig(checks={
        "cpuRequestsMissing": Severity.WARNING,
        "memoryRequestsMissing": Severity.WARNING,
        "cpuLimitsMissing": Severity.ERROR,
        "memoryLimitsMissing": Severity.ERROR,
    })


@pytest.fixture
def security_config() -> PolicyConfig:
    """Return a configuration enabling the security checks."""
    return PolicyConfig(checks={
        "runAsRootAllowed": Severity.WARNING,
        "runAsPrivileged": Severity.ERROR,
        "notReadOnlyRootFileSystem": Severity.WARNING,
        "privilegeEscalationAllowed": Severity.ERROR,
        "dangerousCapabilities": Severity.ERROR,
        "insecureCapabilities": Severity.WARNING,
    })


# Engine fixtures


@pytest.fixture
def registry() -> RuleRegistry:
    """Return a registry with the built-in rules."""
    return default_registry()


@pytest.fixture
def evaluator(registry: RuleRegistry) -> ContainerEvaluator:
    """Return an evaluator over the built-in rules."""
    return ContainerEvaluator(registry)


# Workload fixtures


@pytest.fixture
def empty_container() -> Container:
    """Return a container with nothing configured."""
    return Container(name="")


@pytest.fixture
def hardened_container_dict() -> dict[str, Any]:
    """Return a container manifest that satisfies every built-in rule."""
    return {
        "name": "app",
        "image": "registry.example.com/app:1.4.2",
        "imagePullPolicy": "Always",
        "resources": {
            "requests": {"cpu": "100m", "memory": "128Mi"},
            "limits": {"cpu": "500m", "memory": "256Mi"},
        },
        "ports": [{"containerPort": 8080}],
        "livenessProbe": {"httpGet": {"path": "/healthz", "port": 8080}},
        "readinessProbe": {"httpGet": {"path": "/ready", "port": 8080}},
        "securityContext": {
            "runAsNonRoot": True,
            "readOnlyRootFilesystem": True,
            "privileged": False,
            "allowPrivilegeEscalation": False,
            "capabilities": {"drop": ["ALL"]},
        },
    }


@pytest.fixture
def hardened_container(hardened_container_dict: dict[str, Any]) -> Container:
    """Return the hardened container as a view."""
    return Container.from_dict(hardened_container_dict)


@pytest.fixture
def non_root_pod() -> PodSecurityContext:
    """Return pod defaults that forbid running as root."""
    return PodSecurityContext(run_as_non_root=True)


@pytest.fixture
def sample_deployment(hardened_container_dict: dict[str, Any]) -> dict[str, Any]:
    """Return a Deployment manifest with one app and one init container."""
    return {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": {"name": "web", "namespace": "shop"},
        "spec": {
            "replicas": 2,
            "template": {
                "metadata": {"labels": {"app": "web"}},
                "spec": {
                    "securityContext": {"runAsNonRoot": True},
                    "initContainers": [
                        {"name": "migrate", "image": "registry.example.com/migrate:2.0"},
                    ],
                    "containers": [hardened_container_dict],
                },
            },
        },
    }


@pytest.fixture
def sample_cronjob() -> dict[str, Any]:
    """Return a CronJob manifest with a bare container."""
    return {
        "apiVersion": "batch/v1",
        "kind": "CronJob",
        "metadata": {"name": "nightly-report"},
        "spec": {
            "schedule": "0 2 * * *",
            "jobTemplate": {
                "spec": {
                    "template": {
                        "spec": {
                            "containers": [
                                {"name": "report", "image": "report:latest"},
                            ],
                        },
                    },
                },
            },
        },
    }
