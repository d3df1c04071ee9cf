"""Create a GitHub release for a tagged build and attach its artifacts."""

__version__ = "0.3.0"
