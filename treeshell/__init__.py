"""A command shell that parses lines into a syntax tree and executes them."""

__version__ = "0.1.0"

__all__ = ["__version__"]