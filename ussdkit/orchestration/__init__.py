"""Orchestration of sessions across screens."""

from ussdkit.orchestration.orchestrator import Orchestrator

__all__ = ["Orchestrator"]
