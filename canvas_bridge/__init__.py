"""Canvas OAuth session and course aggregation middleware."""

__version__ = "0.1.0"
