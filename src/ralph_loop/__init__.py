"""Loop runner for external AI coding assistants."""

__version__ = "0.1.0"
