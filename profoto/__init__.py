"""ProFoto Studio: AI background variations for product photos."""

__version__ = "1.0.0"
