"""
Workload validation for podguard.

Walks Kubernetes workload manifests (Deployments, StatefulSets, Jobs,
CronJobs, bare Pods and the like), extracts their pod template and
evaluates every container and init container against a policy
configuration.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Iterable

import yaml

from podguard.config.policy_config import PolicyConfig
from podguard.engine.evaluator import ContainerEvaluator
from podguard.engine.registry import RuleRegistry
from podguard.models.result import AuditReport, ContainerResult, ControllerResult
from podguard.models.workload import PodSpec, WorkloadKind
from podguard.observability.logging import get_logger

logger = get_logger(__name__)

MANIFEST_EXTENSIONS = (".yaml", ".yml", ".json")


class ManifestError(ValueError):
    """Raised when workload manifests cannot be read or parsed."""

    def __init__(self, message: str, source_path: str | None = None):
        self.source_path = source_path
        prefix = f"{source_path}: " if source_path else ""
        super().__init__(f"{prefix}{message}")


def extract_pod_spec(manifest: dict[str, Any]) -> dict[str, Any]:
    """
    Find the pod spec inside a workload manifest.

    Args:
        manifest: Workload manifest

    Returns:
        Pod spec dictionary (empty when the manifest has none)
    """
    spec = manifest.get("spec") or {}
    kind = str(manifest.get("kind", ""))

    if kind == WorkloadKind.POD.value:
        return spec
    if kind == WorkloadKind.CRON_JOB.value:
        spec = (spec.get("jobTemplate") or {}).get("spec") or {}

    template = spec.get("template") or {}
    return template.get("spec") or {}


class WorkloadValidator:
    """
    Evaluates every container of a workload against a configuration.

    Example:
        validator = WorkloadValidator(create_default_config())
        result = validator.validate_workload(deployment)
        print(result.summary().score)
    """

    def __init__(
        self,
        config: PolicyConfig,
        registry: RuleRegistry | None = None,
    ):
        """
        Initialize the validator.

        Args:
            config: Policy configuration
            registry: Rules to evaluate; the built-in rules when omitted
        """
        self.config = config
        self.evaluator = ContainerEvaluator(registry)

    def validate_pod_spec(
        self,
        pod_spec: PodSpec | dict[str, Any],
        name: str = "",
        kind: WorkloadKind | str = WorkloadKind.POD,
        namespace: str = "",
    ) -> ControllerResult:
        """
        Evaluate the containers of a pod spec.

        Args:
            pod_spec: Pod spec view or dictionary
            name: Controller name, also used for exemption matching
            kind: Kind of the owning workload
            namespace: Namespace of the owning workload

        Returns:
            ControllerResult with one entry per container
        """
        if isinstance(pod_spec, dict):
            pod_spec = PodSpec.from_dict(pod_spec)
        if isinstance(kind, str):
            kind = WorkloadKind.from_string(kind)

        result = ControllerResult(name=name, kind=kind.value, namespace=namespace)

        for container in pod_spec.containers:
            results = self.evaluator.evaluate(
                self.config,
                pod_spec.security_context,
                container,
                controller_name=name,
                kind=kind,
                is_init_container=False,
            )
            result.containers.append(ContainerResult(container.name, results))

        for container in pod_spec.init_containers:
            results = self.evaluator.evaluate(
                self.config,
                pod_spec.security_context,
                container,
                controller_name=name,
                kind=kind,
                is_init_container=True,
            )
            result.containers.append(
                ContainerResult(container.name, results, is_init_container=True)
            )

        summary = result.summary()
        logger.workload_validated(
            name, kind.value, len(result.containers), summary.warnings, summary.errors
        )
        return result

    def validate_workload(self, manifest: dict[str, Any]) -> ControllerResult:
        """
        Evaluate a workload manifest.

        Args:
            manifest: Workload manifest with ``kind``, ``metadata`` and ``spec``

        Returns:
            ControllerResult for the workload

        Raises:
            ValueError: If the manifest kind is not a supported workload
        """
        kind = WorkloadKind.from_string(manifest.get("kind", ""))
        metadata = manifest.get("metadata") or {}

        return self.validate_pod_spec(
            extract_pod_spec({**manifest, "kind": kind.value}),
            name=metadata.get("name") or "",
            kind=kind,
            namespace=metadata.get("namespace") or "",
        )

    def validate_manifests(self, documents: Iterable[dict[str, Any]]) -> AuditReport:
        """
        Evaluate every supported workload in a list of manifests.

        ``List`` documents are expanded. Documents of other kinds are skipped.

        Args:
            documents: Parsed manifests

        Returns:
            AuditReport with one ControllerResult per workload
        """
        report = AuditReport()

        for document in _expand_lists(documents):
            try:
                WorkloadKind.from_string(document.get("kind", ""))
            except ValueError:
                logger.debug(
                    "Skipping unsupported manifest",
                    kind=document.get("kind"),
                )
                continue
            report.add(self.validate_workload(document))

        return report


def _expand_lists(documents: Iterable[dict[str, Any]]) -> Iterable[dict[str, Any]]:
    for document in documents:
        if not isinstance(document, dict):
            continue
        if document.get("kind") == "List":
            yield from _expand_lists(document.get("items") or [])
        else:
            yield document


def load_manifests(path: str) -> list[dict[str, Any]]:
    """
    Load manifests from a YAML/JSON file or a directory of such files.

    Multi-document YAML files yield one entry per document. Empty documents
    are dropped.

    Args:
        path: File or directory path

    Returns:
        List of parsed manifests

    Raises:
        ManifestError: If a file cannot be read or parsed
    """
    path = os.path.expanduser(path)

    if os.path.isdir(path):
        files = sorted(
            str(p) for p in Path(path).rglob("*")
            if p.is_file() and p.suffix in MANIFEST_EXTENSIONS
        )
    else:
        files = [path]

    documents: list[dict[str, Any]] = []
    for file_path in files:
        documents.extend(_load_file(file_path))
    return documents


def _load_file(path: str) -> list[dict[str, Any]]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            content = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestError(f"Cannot read manifest: {e}", source_path=path)

    try:
        # JSON is a subset of YAML
        parsed = [d for d in yaml.safe_load_all(content) if d is not None]
    except yaml.YAMLError as e:
        raise ManifestError(f"Invalid YAML: {e}", source_path=path)

    for document in parsed:
        if not isinstance(document, dict):
            raise ManifestError(
                f"Expected a mapping, got {type(document).__name__}",
                source_path=path,
            )

    logger.debug("Loaded manifests", path=path, count=len(parsed))
    return parsed


def validate_workload(
    manifest: dict[str, Any],
    config: PolicyConfig,
) -> ControllerResult:
    """
    Convenience function to validate one workload manifest.

    Args:
        manifest: Workload manifest
        config: Policy configuration

    Returns:
        ControllerResult for the workload
    """
    validator = WorkloadValidator(config)
    return validator.validate_workload(manifest)
