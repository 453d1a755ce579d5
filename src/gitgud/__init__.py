"""GitGud backend: cached, rate-limited GitHub profile roasts."""

__version__ = "1.0.0"
