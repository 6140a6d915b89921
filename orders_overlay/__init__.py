"""Star Empires orders overlay: contextual syntax help for the order editor."""

__version__ = "0.1.0"
