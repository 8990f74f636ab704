"""Customer feedback and Google review collection portal."""

__version__ = "0.1.0"
