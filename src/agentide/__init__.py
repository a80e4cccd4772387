"""agentide - terminal IDE with an agentic AI assistant."""

__version__ = "0.3.0"
