"""Conversation analytics: sentiment, mood, keywords and response latency for chat logs."""

__version__ = "0.1.0"
