"""Interaction state machine and agentic pipeline."""
