"""Utility modules."""

from conv_analytics.utils.logging import audit_logger, setup_logging

__all__ = [
    "audit_logger",
    "setup_logging",
]
