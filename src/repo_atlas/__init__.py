"""Index repositories spread across named collection directories."""

__version__ = "0.1.0"
