"""A4 Page Builder: live template editor engine."""

__version__ = "0.1.0"
