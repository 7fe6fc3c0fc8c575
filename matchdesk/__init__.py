"""Live match officiating engine for the tournament admin dashboard."""

__version__ = "1.0.0"
