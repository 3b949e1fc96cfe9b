"""AlloSports Hub: sports news publishing API."""

__version__ = "1.0.0"
