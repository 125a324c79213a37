"""Interactive MySQL command line with a brace-based query syntax."""

__version__ = "0.1.0"
__all__ = ["__version__"]