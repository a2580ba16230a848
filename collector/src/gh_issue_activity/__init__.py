"""Daily issue and pull request activity for a GitHub repository."""

__version__ = "0.1.0"
