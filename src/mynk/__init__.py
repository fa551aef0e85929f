"""mynk - keep a directory in step with a server-held copy."""

__version__ = "0.1.0"
