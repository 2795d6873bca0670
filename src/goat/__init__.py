"""The Goat: daily shipped-feature showcase."""

__version__ = "0.1.0"
