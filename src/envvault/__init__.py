"""Password-based encryption of values inside environment files."""

__version__ = "0.1.0"
