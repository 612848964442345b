"""Self-hosted memory store for conversational agents."""

__version__ = "1.0.0"
