"""Route group exports."""

from . import health, matrix, solve

__all__ = ["health", "matrix", "solve"]
