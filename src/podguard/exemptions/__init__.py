"""
Rule exemptions for podguard.

Exemptions suppress chosen rules for chosen controllers. A configuration
may disallow them globally.
"""

from __future__ import annotations

from podguard.exemptions.matcher import (
    ExemptionMatcher,
    is_exempt,
)

__all__ = [
    "ExemptionMatcher",
    "is_exempt",
]
