"""Pluggable decision policies for bot seats."""

from .policy import HeuristicPolicy, PassivePolicy

__all__ = ["HeuristicPolicy", "PassivePolicy"]
