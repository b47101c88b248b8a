"""Observability helpers shared across the orchestrator."""

from .logging import default_warning_sink, get_logger

__all__ = ["default_warning_sink", "get_logger"]
