"""
Unit tests for effective security setting resolution.
"""

from __future__ import annotations

import pytest

from podguard.engine import (
    EffectiveSecuritySettings,
    resolve_runs_as_non_root,
    resolve_security_settings,
)
from podguard.models import Capabilities, PodSecurityContext, SecurityContext


class TestResolveRunsAsNonRoot:
    """Tests for root-detection precedence."""

    @pytest.mark.parametrize("args,expected", [
        # Container runAsNonRoot wins over everything
        ((True, 0, False, 0), True),
        ((False, 1000, True, 1000), False),
        # Container runAsUser wins over pod settings
        ((None, 0, True, 1000), False),
        ((None, 1000, False, 0), True),
        # Pod runAsNonRoot wins over pod runAsUser
        ((None, None, True, 0), True),
        ((None, None, False, 1000), False),
        # Pod runAsUser
        ((None, None, None, 1000), True),
        ((None, None, None, 0), False),
        # Nothing set
        ((None, None, None, None), False),
    ])
    def test_precedence(self, args, expected):
        """Test the first present setting decides."""
        assert resolve_runs_as_non_root(*args) is expected


class TestResolveSecuritySettings:
    """Tests for resolve_security_settings."""

    def test_no_contexts(self):
        """Test defaults when nothing is set."""
        settings = resolve_security_settings(None, None)

        assert settings == EffectiveSecuritySettings()
        assert settings.runs_as_non_root is False
        assert settings.privileged is None

    def test_container_fields_copied(self):
        """Test container-only fields pass through unchanged."""
        settings = resolve_security_settings(
            None,
            SecurityContext(
                privileged=True,
                read_only_root_filesystem=False,
                allow_privilege_escalation=True,
                capabilities=Capabilities(add=("NET_ADMIN",), drop=("ALL",)),
            ),
        )

        assert settings.privileged is True
        assert settings.read_only_root_filesystem is False
        assert settings.allow_privilege_escalation is True
        assert settings.added_capabilities == frozenset({"NET_ADMIN"})
        assert settings.dropped_capabilities == frozenset({"ALL"})

    def test_pod_default_inherited(self):
        """Test the pod default applies to a silent container."""
        settings = resolve_security_settings(PodSecurityContext(run_as_user=1000), SecurityContext())

        assert settings.runs_as_non_root is True

    def test_container_root_uid_overrides_pod(self):
        """Test UID 0 on the container fails even with a non-root pod."""
        settings = resolve_security_settings(
            PodSecurityContext(run_as_non_root=True, run_as_user=1000),
            SecurityContext(run_as_user=0),
        )

        assert settings.runs_as_non_root is False
