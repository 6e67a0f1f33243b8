"""Quiz, content and gateway services for a learning platform."""

__version__ = "0.1.0"