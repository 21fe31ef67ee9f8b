"""Prime factorization model with TCP and HTTP server and client building blocks."""

__version__ = "1.0.0"