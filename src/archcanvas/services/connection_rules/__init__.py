"""
Connection Rule Engine for ArchCanvas.

Table-driven policy deciding which resource categories may be connected.
"""

from .policy import (
    DEFAULT_ALLOWED,
    DEFAULT_DENIED,
    DEFAULT_POLICY,
    ConnectionPolicy,
    policy_from_settings,
)

__all__ = [
    "DEFAULT_ALLOWED",
    "DEFAULT_DENIED",
    "DEFAULT_POLICY",
    "ConnectionPolicy",
    "policy_from_settings",
]
