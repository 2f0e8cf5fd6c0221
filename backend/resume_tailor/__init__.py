"""AI resume tailor backend."""

__version__ = "0.1.0"
