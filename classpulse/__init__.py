"""classpulse: live classroom attention tracking service."""

__version__ = "0.1.0"
