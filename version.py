"""Version information for ballot-box anomaly analysis."""

__version__ = "1.0.0"
