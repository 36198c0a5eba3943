"""Library management REST backend: auth, book catalog and borrowing on MongoDB."""

__version__ = "0.1.0"
