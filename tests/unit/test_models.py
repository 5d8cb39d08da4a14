"""
Unit tests for podguard data models.

Tests cover:
- Severity parsing
- ResultMessage serialization
- ResultSet recording, views and summaries
- Controller and audit report aggregation
- Workload views built from manifests
"""

from __future__ import annotations

import json

import pytest

from podguard.models import (
    AuditReport,
    Category,
    Container,
    ContainerResult,
    ControllerResult,
    Outcome,
    PodSpec,
    ResultMessage,
    ResultSet,
    SecurityContext,
    Severity,
    Summary,
    WorkloadKind,
)


def make_message(rule_id="hostPortSet", outcome=Outcome.FAILURE, severity=Severity.WARNING):
    return ResultMessage(
        rule_id=rule_id,
        category=Category.NETWORKING,
        outcome=outcome,
        severity=severity,
        message="Host port should not be configured",
    )


class TestSeverity:
    """Tests for Severity enum."""

    @pytest.mark.parametrize("value,expected", [
        ("ignore", Severity.IGNORE),
        ("warning", Severity.WARNING),
        ("ERROR", Severity.ERROR),
        (" Warning ", Severity.WARNING),
    ])
    def test_from_string(self, value, expected):
        """Test parsing is case-insensitive."""
        assert Severity.from_string(value) == expected

    def test_from_string_invalid(self):
        """Test unknown values raise ValueError."""
        with pytest.raises(ValueError):
            Severity.from_string("critical")

    def test_is_actionable(self):
        """Test only ignore is not actionable."""
        assert not Severity.IGNORE.is_actionable
        assert Severity.WARNING.is_actionable
        assert Severity.ERROR.is_actionable


class TestResultMessage:
    """Tests for ResultMessage."""

    def test_to_dict(self):
        """Test serialization uses the report field names."""
        data = make_message().to_dict()

        assert data == {
            "id": "hostPortSet",
            "message": "Host port should not be configured",
            "type": "failure",
            "severity": "warning",
            "category": "Networking",
        }

    def test_from_dict(self):
        """Test deserialization restores the message."""
        original = make_message(outcome=Outcome.SUCCESS, severity=Severity.ERROR)

        assert ResultMessage.from_dict(original.to_dict()) == original

    def test_immutable(self):
        """Test messages cannot be modified."""
        msg = make_message()

        with pytest.raises(AttributeError):
            msg.message = "changed"


class TestSummary:
    """Tests for Summary."""

    def test_score(self):
        """Test score is the rounded success percentage."""
        assert Summary(successes=2, warnings=1, errors=0).score == 67
        assert Summary(successes=0, warnings=0, errors=0).score == 0
        assert Summary(successes=5).score == 100

    def test_add(self):
        """Test summaries add up field by field."""
        total = Summary(1, 2, 3) + Summary(4, 5, 6)

        assert total == Summary(5, 7, 9)
        assert total.total == 21


class TestResultSet:
    """Tests for ResultSet."""

    def test_record_overwrites_same_rule(self):
        """Test a rule contributes at most one message."""
        results = ResultSet()
        results.record(make_message(severity=Severity.WARNING))
        results.record(make_message(severity=Severity.ERROR))

        assert len(results) == 1
        assert results.get("hostPortSet").severity == Severity.ERROR

    def test_views(self):
        """Test success, failure and severity views."""
        results = ResultSet([
            make_message("a", Outcome.FAILURE, Severity.WARNING),
            make_message("b", Outcome.FAILURE, Severity.ERROR),
            make_message("c", Outcome.SUCCESS, Severity.ERROR),
            make_message("d", Outcome.SUCCESS, Severity.WARNING),
        ])

        assert [m.rule_id for m in results.warnings()] == ["a"]
        assert [m.rule_id for m in results.errors()] == ["b"]
        assert [m.rule_id for m in results.successes()] == ["c", "d"]
        assert [m.rule_id for m in results.failures()] == ["a", "b"]
        assert results.summary() == Summary(successes=2, warnings=1, errors=1)

    def test_mapping_behaviour(self):
        """Test membership, iteration and serialization."""
        results = ResultSet([make_message("a"), make_message("b")])

        assert "a" in results
        assert "z" not in results
        assert results.rule_ids() == ["a", "b"]
        assert [m.rule_id for m in results] == ["a", "b"]
        assert set(results.to_dict()) == {"a", "b"}
        assert results.get("z") is None

    def test_empty(self):
        """Test an empty set has an empty summary."""
        results = ResultSet()

        assert len(results) == 0
        assert results.summary() == Summary()


class TestReports:
    """Tests for controller and audit reports."""

    @pytest.fixture
    def controller(self):
        return ControllerResult(
            name="web",
            kind="Deployment",
            namespace="shop",
            containers=[
                ContainerResult("app", ResultSet([
                    make_message("a", Outcome.FAILURE, Severity.WARNING),
                    make_message("b", Outcome.SUCCESS, Severity.ERROR),
                ])),
                ContainerResult("init", ResultSet([
                    make_message("a", Outcome.FAILURE, Severity.ERROR),
                ]), is_init_container=True),
            ],
        )

    def test_controller_summary(self, controller):
        """Test the controller summary sums its containers."""
        assert controller.summary() == Summary(successes=1, warnings=1, errors=1)
        assert len(controller.messages()) == 3

    def test_controller_to_dict(self, controller):
        """Test controller serialization."""
        data = controller.to_dict()

        assert data["name"] == "web"
        assert data["namespace"] == "shop"
        assert data["kind"] == "Deployment"
        assert data["containers"][1]["is_init_container"] is True
        assert data["summary"]["score"] == 33

    def test_audit_report(self, controller):
        """Test audit report aggregation and JSON output."""
        report = AuditReport()
        report.add(controller)
        report.add(ControllerResult(name="empty", kind="Pod"))

        assert len(report) == 2
        assert report.summary() == Summary(successes=1, warnings=1, errors=1)
        parsed = json.loads(report.to_json())
        assert parsed["summary"]["errors"] == 1
        assert [c["name"] for c in parsed["controllers"]] == ["web", "empty"]


class TestWorkloadViews:
    """Tests for workload views built from manifests."""

    def test_container_from_dict(self, hardened_container_dict):
        """Test container fields are read from camelCase keys."""
        container = Container.from_dict(hardened_container_dict)

        assert container.name == "app"
        assert container.image_pull_policy == "Always"
        assert container.resources.has_request("cpu")
        assert container.resources.has_limit("memory")
        assert container.ports[0].container_port == 8080
        assert not container.ports[0].binds_host_port
        assert container.security_context.read_only_root_filesystem is True
        assert container.security_context.capabilities.drop == ("ALL",)

    def test_unset_fields_stay_none(self):
        """Test unset security fields are distinguishable from false."""
        context = SecurityContext.from_dict({"privileged": False})

        assert context.privileged is False
        assert context.run_as_non_root is None
        assert context.capabilities is None

    def test_zero_quantity_is_set(self):
        """Test a zero quantity counts as set."""
        container = Container.from_dict({"resources": {"limits": {"cpu": 0}}})

        assert container.resources.has_limit("cpu")

    def test_pod_spec_from_dict(self):
        """Test pod spec containers and security defaults."""
        spec = PodSpec.from_dict({
            "securityContext": {"runAsUser": 1000},
            "containers": [{"name": "a"}, {"name": "b"}],
            "initContainers": [{"name": "init"}],
        })

        assert [c.name for c in spec.containers] == ["a", "b"]
        assert spec.init_containers[0].name == "init"
        assert spec.security_context.run_as_user == 1000

    def test_workload_kind_from_string(self):
        """Test kind parsing is case-insensitive."""
        assert WorkloadKind.from_string("statefulset") == WorkloadKind.STATEFUL_SET
        assert WorkloadKind.from_string("CronJob") == WorkloadKind.CRON_JOB

        with pytest.raises(ValueError):
            WorkloadKind.from_string("Service")
