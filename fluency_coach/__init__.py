"""Real-time speech fluency coaching engine."""

__version__ = "0.1.0"
