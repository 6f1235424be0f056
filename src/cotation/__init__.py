"""cotation — deadline-bounded USD-BRL quote server and client."""

__version__ = "0.1.0"
