"""Test utilities and helpers for conv_analytics tests."""

from tests.utils.factories import MessageFactory, RecordFactory

__all__ = [
    "MessageFactory",
    "RecordFactory",
]
