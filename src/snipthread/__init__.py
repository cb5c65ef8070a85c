"""SnipThread - hub-and-spoke context for captured thoughts."""

__version__ = "0.1.0"
