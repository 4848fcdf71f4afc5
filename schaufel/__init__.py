"""Thread-safe message queue with hooks and metadata, Redis producers and consumers, configuration and logging helpers."""

__version__ = "0.11"